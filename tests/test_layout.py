import pytest

from pgenchunk.errors import OutOfBoundsError
from pgenchunk.tiling import TileBounds, chunk_bounds, iter_tiles
from pgenchunk.layout import (
    GENOTYPE_DATA_OFFSET,
    check_range,
    start_offset,
    tile_nbytes,
)


def test_check_range():
    # half-open ranges may end at the count
    check_range(0, 4, 4)
    check_range(4, 4, 4)
    check_range(0, 0, 0)
    check_range(2, 3, 4)

    for start, end in ((0, 5), (3, 2), (-1, 2), (5, 5)):
        with pytest.raises(OutOfBoundsError) as info:
            check_range(start, end, 4, axis="variant")
        assert "variant" in str(info.value)


def test_start_offset():
    assert GENOTYPE_DATA_OFFSET == 11
    # cells are numbered variant-major and then divided by four
    assert start_offset(0, 0, 2) == 11
    assert start_offset(0, 1, 2) == 11
    assert start_offset(1, 0, 2) == 11
    assert start_offset(1, 1, 2) == 11
    assert start_offset(2, 0, 2) == 12
    assert start_offset(3, 1, 2) == 12
    assert start_offset(4, 0, 2) == 13
    assert start_offset(10, 3, 1000) == 11 + 10003 // 4
    assert start_offset(1, 0, 8, data_offset=0) == 2


def test_tile_nbytes():
    # one byte per genotype
    assert tile_nbytes(0, 4, 0, 2) == 8
    assert tile_nbytes(1, 3, 0, 2) == 4
    assert tile_nbytes(3, 3, 0, 2) == 0
    assert tile_nbytes(0, 32, 64, 128) == 32 * 64


def test_chunk_bounds():
    assert list(chunk_bounds(10, 4)) == [(0, 4), (4, 8), (8, 10)]
    assert list(chunk_bounds(8, 4)) == [(0, 4), (4, 8)]
    assert list(chunk_bounds(3, 10)) == [(0, 3)]
    assert list(chunk_bounds(0, 10)) == []

    for chunk_size in (0, -1, 1.5, None):
        with pytest.raises(ValueError):
            list(chunk_bounds(10, chunk_size))


def test_iter_tiles():
    assert list(iter_tiles(4, 2, 3, 1)) == [
        TileBounds(0, 3, 0, 1),
        TileBounds(0, 3, 1, 2),
        TileBounds(3, 4, 0, 1),
        TileBounds(3, 4, 1, 2),
    ]
    # the default chunks are 32 variants by 64 samples
    assert list(iter_tiles(64, 64)) == [
        TileBounds(0, 32, 0, 64),
        TileBounds(32, 64, 0, 64),
    ]
    assert list(iter_tiles(0, 5)) == []
    assert list(iter_tiles(5, 0)) == []

    with pytest.raises(ValueError):
        list(iter_tiles(0, 5, variant_chunk=0))
    with pytest.raises(ValueError):
        list(iter_tiles(5, 0, sample_chunk=0))


def test_iter_tiles_covers_matrix():
    variant_count, sample_count = 13, 7
    seen = {}
    for tile in iter_tiles(variant_count, sample_count, 5, 3):
        assert tile.end_variant <= variant_count
        assert tile.end_sample <= sample_count
        for variant in range(tile.start_variant, tile.end_variant):
            for sample in range(tile.start_sample, tile.end_sample):
                seen[(variant, sample)] = seen.get((variant, sample), 0) + 1
    # every cell, including the last row and column, is visited exactly once
    assert len(seen) == variant_count * sample_count
    assert set(seen.values()) == {1}
    assert (variant_count - 1, sample_count - 1) in seen
