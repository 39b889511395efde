from __future__ import annotations
import os
from typing import BinaryIO
from dataclasses import dataclass

import numpy as np

from .errors import BadMagicError, UnsupportedStorageModeError, ShortReadError
from .layout import MAGIC, FIXED_WIDTH_MODE, GENOTYPE_DATA_OFFSET


@dataclass(frozen=True)
class MatrixHeader:
    """
    The header of a PGEN file

    Attributes
    ----------
    magic : bytes
        The two byte signature at the start of the file
    storage_mode : int
        The storage mode byte. Only fixed-width mode 0x10 is ever accepted.
    variant_count : int
        The number of variants (rows) in the matrix
    sample_count : int
        The number of samples (columns) in the matrix
    file_size : int
        The total length of the file in bytes
    genotype_data_offset : int
        The byte offset of the first genotype in the file
    """

    magic: bytes
    storage_mode: int
    variant_count: int
    sample_count: int
    file_size: int
    genotype_data_offset: int = GENOTYPE_DATA_OFFSET

    @property
    def shape(self) -> tuple[int, int]:
        return (self.variant_count, self.sample_count)


def read_header(handle: BinaryIO) -> MatrixHeader:
    """
    Parse and validate the header of an open PGEN file

    The stream is left positioned at the start of the genotype data.

    Parameters
    ----------
    handle : BinaryIO
        A seekable file object opened in binary mode

    Returns
    -------
    MatrixHeader
        The dimensions and offsets of the matrix

    Raises
    ------
    BadMagicError
        If the first two bytes are not the PGEN signature
    UnsupportedStorageModeError
        If the storage mode is not the fixed-width mode
    ShortReadError
        If the file ends before the variant and sample counts
    """
    handle.seek(0)
    magic = handle.read(len(MAGIC))
    if magic != MAGIC:
        raise BadMagicError(
            f"Invalid PGEN file format: expected magic bytes {MAGIC.hex(' ')} but"
            f" found '{magic.hex(' ')}'"
        )
    mode = handle.read(1)
    if len(mode) != 1:
        raise ShortReadError("The file ends before the storage mode byte")
    if mode[0] != FIXED_WIDTH_MODE:
        raise UnsupportedStorageModeError(
            f"Unsupported storage mode '{mode.hex()}'. Only mode"
            f" {FIXED_WIDTH_MODE:#04x} is supported."
        )
    counts = handle.read(8)
    if len(counts) != 8:
        raise ShortReadError(
            f"Expected 8 bytes of variant and sample counts but only {len(counts)}"
            " were available"
        )
    variant_count, sample_count = np.frombuffer(counts, dtype="<u4", count=2)
    # measure the file and then return to the start of the genotype data
    file_size = handle.seek(0, os.SEEK_END)
    handle.seek(GENOTYPE_DATA_OFFSET)
    return MatrixHeader(
        magic=magic,
        storage_mode=mode[0],
        variant_count=int(variant_count),
        sample_count=int(sample_count),
        file_size=file_size,
    )
