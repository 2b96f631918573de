"""Tests for flip-flag extraction and tile instancing."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from tmx_mesher.decoding.gid import (
    FLIPPED_HORIZONTALLY_FLAG, FLIPPED_VERTICALLY_FLAG,
    FlipVariantCache, resolve, split_gid,
)
from tmx_mesher.map.tileset import FlipState, Rect, Tile


@pytest.fixture
def tiles():
    return {
        gid: Tile(gid=gid, source=Rect((gid - 1) * 16, 0, 16, 16), tileset_index=0)
        for gid in range(1, 5)
    }


class TestSplitGid:

    @pytest.mark.parametrize("gid", [0, 1, 17, 0x3FFFFFFF])
    def test_plain_id_has_no_flip(self, gid):
        assert split_gid(gid) == (gid, FlipState.NONE)

    @pytest.mark.parametrize("gid", [1, 17, 0x3FFFFFFF])
    def test_horizontal_flag(self, gid):
        assert split_gid(gid | FLIPPED_HORIZONTALLY_FLAG) == (gid, FlipState.HORIZONTAL)

    @pytest.mark.parametrize("gid", [1, 17, 0x3FFFFFFF])
    def test_vertical_flag(self, gid):
        assert split_gid(gid | FLIPPED_VERTICALLY_FLAG) == (gid, FlipState.VERTICAL)

    def test_both_flags(self):
        raw = 42 | FLIPPED_HORIZONTALLY_FLAG | FLIPPED_VERTICALLY_FLAG
        assert split_gid(raw) == (42, FlipState.BOTH)

    def test_idempotent(self):
        gid, flip = split_gid(7 | FLIPPED_HORIZONTALLY_FLAG)
        assert split_gid(gid) == (7, FlipState.NONE)
        assert flip == FlipState.HORIZONTAL


class TestResolve:

    def test_unknown_gid_is_empty_cell(self, tiles):
        assert resolve(99, tiles) == (None, FlipState.NONE)
        tile, flip = resolve(99 | FLIPPED_VERTICALLY_FLAG, tiles)
        assert tile is None
        assert flip == FlipState.VERTICAL

    def test_zero_is_empty_cell(self, tiles):
        assert resolve(0, tiles, make_unique=True) == (None, FlipState.NONE)

    def test_make_unique_always_clones(self, tiles):
        first, _ = resolve(2, tiles, make_unique=True)
        second, _ = resolve(2, tiles, make_unique=True)
        assert first is not tiles[2]
        assert first is not second
        assert first.same_frame(second)
        assert first.source == second.source

    def test_make_unique_stamps_flip(self, tiles):
        tile, flip = resolve(3 | FLIPPED_HORIZONTALLY_FLAG, tiles, make_unique=True)
        assert tile.flip == FlipState.HORIZONTAL == flip
        assert tiles[3].flip == FlipState.NONE

    def test_shared_returns_canonical_when_flip_matches(self, tiles):
        tile, _ = resolve(1, tiles)
        assert tile is tiles[1]

    def test_shared_clones_on_flip_mismatch(self, tiles):
        tile, _ = resolve(1 | FLIPPED_VERTICALLY_FLAG, tiles)
        assert tile is not tiles[1]
        assert tile.flip == FlipState.VERTICAL
        assert tile.same_frame(tiles[1])

    def test_shared_variants_are_reused(self, tiles):
        variants = FlipVariantCache()
        raw = 4 | FLIPPED_HORIZONTALLY_FLAG
        first, _ = resolve(raw, tiles, variants=variants)
        second, _ = resolve(raw, tiles, variants=variants)
        assert first is second
        assert first is not tiles[4]
        assert len(variants) == 1

    def test_different_flips_are_different_variants(self, tiles):
        variants = FlipVariantCache()
        h, _ = resolve(1 | FLIPPED_HORIZONTALLY_FLAG, tiles, variants=variants)
        v, _ = resolve(1 | FLIPPED_VERTICALLY_FLAG, tiles, variants=variants)
        assert h is not v
        assert {h.flip, v.flip} == {FlipState.HORIZONTAL, FlipState.VERTICAL}


class TestConcurrentVariants:

    def test_one_clone_per_variant_across_threads(self, tiles):
        variants = FlipVariantCache()
        raw = 2 | FLIPPED_HORIZONTALLY_FLAG | FLIPPED_VERTICALLY_FLAG

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(
                lambda _: resolve(raw, tiles, variants=variants)[0], range(200)
            ))

        assert len({id(tile) for tile in results}) == 1
        assert len(variants) == 1
        assert results[0].flip == FlipState.BOTH
