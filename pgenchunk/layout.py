from __future__ import annotations

from .errors import OutOfBoundsError


MAGIC = b"\x6c\x1b"
# fixed-width, biallelic, unphased
FIXED_WIDTH_MODE = 0x10
# 2 magic bytes + 1 mode byte + 4 (variant count) + 4 (sample count)
GENOTYPE_DATA_OFFSET = 11
# the start of a region is located as if four cells shared each byte, even though
# the decoder consumes one whole byte per cell
# TODO: settle on one packing convention once we can compare against files
# written by plink2 itself
CELLS_PER_OFFSET_UNIT = 4


def check_range(start: int, end: int, count: int, axis: str = "record"):
    """
    Check that [start, end) is a valid half-open range within [0, count)

    Parameters
    ----------
    start : int
        The index of the first item in the range
    end : int
        One past the index of the last item in the range. This may equal count.
    count : int
        The number of items along this axis
    axis : str, optional
        A name for the axis, used in the error message

    Raises
    ------
    OutOfBoundsError
        If the range is reversed, negative, or extends past count
    """
    if not (0 <= start <= end <= count):
        raise OutOfBoundsError(
            f"Requested {axis} range [{start}, {end}) is out of range for a matrix"
            f" with {count} {axis}s"
        )


def start_offset(
    start_variant: int,
    start_sample: int,
    sample_count: int,
    data_offset: int = GENOTYPE_DATA_OFFSET,
) -> int:
    """
    Compute the byte offset at which a tile's genotype data begins

    The cell index is linearized variant-major and then divided by
    :py:data:`CELLS_PER_OFFSET_UNIT`. Note that this does not agree with
    :py:func:`tile_nbytes`, which assumes one byte per cell.

    Parameters
    ----------
    start_variant : int
        The first variant in the tile
    start_sample : int
        The first sample in the tile
    sample_count : int
        The total number of samples in the matrix
    data_offset : int, optional
        The offset of the first genotype byte in the file

    Returns
    -------
    int
        An absolute byte offset into the PGEN file
    """
    cell = start_variant * sample_count + start_sample
    return data_offset + cell // CELLS_PER_OFFSET_UNIT


def tile_nbytes(
    start_variant: int, end_variant: int, start_sample: int, end_sample: int
) -> int:
    """
    Compute the number of bytes that must be read to decode a tile (one per cell)
    """
    return (end_variant - start_variant) * (end_sample - start_sample)
