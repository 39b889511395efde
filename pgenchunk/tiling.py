from __future__ import annotations
from typing import Iterator, NamedTuple


DEFAULT_VARIANT_CHUNK = 32
DEFAULT_SAMPLE_CHUNK = 64


class TileBounds(NamedTuple):
    start_variant: int
    end_variant: int
    start_sample: int
    end_sample: int


def chunk_bounds(count: int, chunk_size: int) -> Iterator[tuple[int, int]]:
    """
    Split [0, count) into consecutive half-open chunks of at most chunk_size items

    The last chunk ends at count, so the final item is never dropped.
    """
    if not isinstance(chunk_size, int) or chunk_size < 1:
        raise ValueError(f"The chunk size must be a positive integer, not {chunk_size}")
    for start in range(0, count, chunk_size):
        yield start, min(start + chunk_size, count)


def iter_tiles(
    variant_count: int,
    sample_count: int,
    variant_chunk: int = DEFAULT_VARIANT_CHUNK,
    sample_chunk: int = DEFAULT_SAMPLE_CHUNK,
) -> Iterator[TileBounds]:
    """
    Generate the bounds of tiles that cover a matrix exactly once

    Variant chunks form the outer loop and sample chunks the inner loop.

    Parameters
    ----------
    variant_count : int
        The number of variants in the matrix
    sample_count : int
        The number of samples in the matrix
    variant_chunk : int, optional
        The maximum number of variants in each tile
    sample_chunk : int, optional
        The maximum number of samples in each tile

    Yields
    ------
    TileBounds
        The half-open variant and sample ranges of the next tile

    Raises
    ------
    ValueError
        If either chunk size is not a positive integer
    """
    # materialize the sample chunks first so both chunk sizes are checked before the
    # first tile is yielded
    sample_chunks = tuple(chunk_bounds(sample_count, sample_chunk))
    for start_variant, end_variant in chunk_bounds(variant_count, variant_chunk):
        for start_sample, end_sample in sample_chunks:
            yield TileBounds(start_variant, end_variant, start_sample, end_sample)
