from __future__ import annotations
from enum import IntEnum
from typing import BinaryIO
from logging import Logger
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from haptools.logging import getLogger

from .header import MatrixHeader
from .errors import ShortReadError
from .layout import check_range, start_offset, tile_nbytes


# used when read_tile is not given a logger
DEFAULT_LOG = getLogger("read_tile")


class GenotypeCode(IntEnum):
    HOM_REF = 0
    HET = 1
    HOM_ALT = 2
    MISSING = -1


# the raw two-bit value that denotes a missing genotype
MISSING_BITS = 0b11


@dataclass
class Tile:
    """
    A rectangular sub-region of the genotype matrix

    Attributes
    ----------
    data : npt.NDArray[np.int8]
        The genotypes in an n (samples) x p (variants) array, with -1 for missing
    start_variant : int
        The index of the first variant in the tile
    end_variant : int
        One past the index of the last variant in the tile
    start_sample : int
        The index of the first sample in the tile
    end_sample : int
        One past the index of the last sample in the tile
    """

    data: npt.NDArray[np.int8]
    start_variant: int
    end_variant: int
    start_sample: int
    end_sample: int

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    @property
    def num_missing(self) -> int:
        return int(np.count_nonzero(self.data == GenotypeCode.MISSING))


def decode_genotypes(
    buffer: bytes, num_variants: int, num_samples: int
) -> npt.NDArray[np.int8]:
    """
    Decode a variant-major buffer of genotype bytes into a samples x variants matrix

    Only the low two bits of each byte are significant. The value 3 denotes a missing
    genotype and is decoded as -1.

    Parameters
    ----------
    buffer : bytes
        Exactly num_variants * num_samples bytes, one per genotype
    num_variants : int
        The number of variants in the buffer
    num_samples : int
        The number of samples in the buffer

    Returns
    -------
    npt.NDArray[np.int8]
        An array with shape num_samples x num_variants
    """
    if num_variants * num_samples == 0:
        return np.empty((num_samples, num_variants), dtype=np.int8)
    codes = np.frombuffer(buffer, dtype=np.uint8, count=num_variants * num_samples)
    codes = (codes & MISSING_BITS).astype(np.int8).reshape((num_variants, num_samples))
    codes[codes == MISSING_BITS] = GenotypeCode.MISSING
    # transpose so that samples are rows and variants are columns
    return np.ascontiguousarray(codes.T)


def read_tile(
    handle: BinaryIO,
    header: MatrixHeader,
    start_variant: int,
    end_variant: int,
    start_sample: int,
    end_sample: int,
    log: Logger = None,
) -> Tile:
    """
    Read a tile of genotypes from an open PGEN file

    All ranges are half-open, so an end equal to the number of variants or samples
    includes the last row or column of the matrix.

    The tile is decoded from a single contiguous run of bytes beginning at
    :py:func:`~.layout.start_offset`, even when it is narrower than the matrix.

    Parameters
    ----------
    handle : BinaryIO
        The PGEN file, opened in binary mode
    header : MatrixHeader
        The header parsed from the same file
    start_variant : int
        The first variant to read
    end_variant : int
        One past the last variant to read
    start_sample : int
        The first sample to read
    end_sample : int
        One past the last sample to read
    log : Logger, optional
        A logging instance for recording debug statements

    Returns
    -------
    Tile
        The decoded genotypes

    Raises
    ------
    OutOfBoundsError
        If either range does not fit within the matrix. Nothing is read in this case.
    ShortReadError
        If the file ends before the tile does
    """
    log = log or DEFAULT_LOG
    check_range(start_variant, end_variant, header.variant_count, axis="variant")
    check_range(start_sample, end_sample, header.sample_count, axis="sample")
    num_variants = end_variant - start_variant
    num_samples = end_sample - start_sample
    offset = start_offset(
        start_variant, start_sample, header.sample_count, header.genotype_data_offset
    )
    nbytes = tile_nbytes(start_variant, end_variant, start_sample, end_sample)
    if nbytes and offset + nbytes > header.file_size:
        raise ShortReadError(
            f"A tile of {nbytes} bytes at offset {offset} would extend past the end"
            f" of the file ({header.file_size} bytes)"
        )
    log.debug(
        f"Reading variants [{start_variant}, {end_variant}) and samples"
        f" [{start_sample}, {end_sample}): {nbytes} bytes at offset {offset}"
    )
    if nbytes:
        handle.seek(offset)
        buffer = handle.read(nbytes)
    else:
        buffer = b""
    if len(buffer) < nbytes:
        raise ShortReadError(
            f"Expected {nbytes} bytes at offset {offset} but only {len(buffer)} were"
            " available"
        )
    return Tile(
        data=decode_genotypes(buffer, num_variants, num_samples),
        start_variant=start_variant,
        end_variant=end_variant,
        start_sample=start_sample,
        end_sample=end_sample,
    )
