"""Tests for frame layout and tileset parsing."""

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from tmx_mesher.errors import MalformedNumber, StructuralMismatch
from tmx_mesher.map.tileset import (
    FrameLayout, Rect, TileSet, frame_layout, iter_frames, parse_color_key,
)


class TestFrameLayout:

    def test_plain_grid(self):
        assert frame_layout(256, 256, 32, 32) == FrameLayout(8, 8)

    def test_margin_and_spacing(self):
        # (256 - 2*2 + 1) // (30 + 1) = 253 // 31 = 8
        layout = frame_layout(256, 128, 30, 30, margin=2, spacing=1)
        assert layout == FrameLayout(8, 4)
        assert layout.count == 32

    def test_frames_match_hand_computed_grid(self):
        layout = frame_layout(256, 128, 30, 30, margin=2, spacing=1)
        frames = dict(iter_frames(layout, 30, 30, margin=2, spacing=1))

        xs = [frames[col].x for col in range(8)]
        assert xs == [2, 33, 64, 95, 126, 157, 188, 219]
        assert frames[8] == Rect(2, 33, 30, 30)
        assert frames[31] == Rect(219, 95, 30, 30)
        # Last frame ends inside the right margin, a ninth would not
        assert frames[7].x + 30 <= 256 - 2
        assert 2 + 8 * 31 + 30 > 256 - 2

    def test_partial_frames_are_dropped(self):
        assert frame_layout(100, 40, 32, 32) == FrameLayout(3, 1)

    def test_texture_smaller_than_margins(self):
        assert frame_layout(10, 10, 32, 32, margin=8) == FrameLayout(0, 0)

    def test_zero_tile_size_fails(self):
        with pytest.raises(StructuralMismatch):
            frame_layout(64, 64, 0, 32)


class TestColorKey:

    @pytest.mark.parametrize("text", ["ff00ff", "#ff00ff", "FF00FF"])
    def test_parse(self, text):
        assert parse_color_key(text) == (255, 0, 255)

    @pytest.mark.parametrize("text", ["ff00f", "gg0000", ""])
    def test_invalid(self, text):
        with pytest.raises(MalformedNumber):
            parse_color_key(text)


class TestTileSetFromXml:

    def parse(self, xml, provider=None, first_gid=1, index=0):
        return TileSet.from_xml(ET.fromstring(xml), first_gid, index,
                                Path("."), provider)

    def test_tiles_get_contiguous_gids(self, texture_provider):
        tileset = self.parse(
            '<tileset name="t" tilewidth="32" tileheight="32">'
            '<image source="terrain.png"/></tileset>',
            texture_provider, first_gid=10, index=3,
        )
        assert sorted(tileset.tiles) == [10, 11, 12, 13]
        assert tileset.last_gid == 13
        assert tileset.tiles[13].source == Rect(32, 32, 32, 32)
        assert all(t.tileset_index == 3 for t in tileset.tiles.values())

    def test_image_size_attributes_win(self):
        tileset = self.parse(
            '<tileset name="t" tilewidth="16" tileheight="16">'
            '<image source="x.png" width="64" height="16"/></tileset>'
        )
        assert len(tileset.tiles) == 4
        assert (tileset.texture_width, tileset.texture_height) == (64, 16)

    def test_tile_properties_keyed_by_gid(self, texture_provider):
        tileset = self.parse(
            '<tileset name="t" tilewidth="32" tileheight="32">'
            '<image source="terrain.png"/>'
            '<tile id="2"><properties>'
            '<property name="Kind" value="lava"/>'
            '</properties></tile></tileset>',
            texture_provider, first_gid=5,
        )
        assert tileset.tiles[7].properties.get_string("kind") == "lava"
        assert len(tileset.tiles[5].properties) == 0

    def test_spacing_margin_and_color_key(self):
        tileset = self.parse(
            '<tileset name="t" tilewidth="30" tileheight="30" spacing="1" margin="2">'
            '<image source="x.png" width="256" height="128" trans="ff00ff"/>'
            '</tileset>'
        )
        assert tileset.color_key == (255, 0, 255)
        assert len(tileset.tiles) == 32
        assert tileset.tiles[2].source == Rect(33, 2, 30, 30)

    def test_unknown_texture_size_gives_no_tiles(self, texture_provider, caplog):
        tileset = self.parse(
            '<tileset name="t" tilewidth="32" tileheight="32">'
            '<image source="missing.png"/></tileset>',
            texture_provider,
        )
        assert tileset.tiles == {}
        assert "missing.png" in caplog.text

    def test_missing_tile_width_fails(self):
        with pytest.raises(StructuralMismatch):
            self.parse('<tileset name="t" tileheight="32"/>')

    def test_bad_spacing_fails(self):
        with pytest.raises(MalformedNumber):
            self.parse('<tileset name="t" tilewidth="32" tileheight="32" spacing="a"/>')


class TestZeroTileSize:

    @pytest.mark.parametrize("width,height", [(0, 32), (32, 0), (-4, 32)])
    def test_frame_layout_rejects_empty_frames(self, width, height):
        with pytest.raises(StructuralMismatch):
            frame_layout(64, 64, width, height, spacing=1)

    def test_frame_layout_rejects_negative_spacing(self):
        with pytest.raises(StructuralMismatch):
            frame_layout(64, 64, 32, 32, spacing=-1)

    @pytest.mark.parametrize("attrs", [
        'tilewidth="0" tileheight="32" spacing="1"',
        'tilewidth="32" tileheight="0"',
    ])
    def test_tileset_rejects_zero_tile_size(self, attrs):
        with pytest.raises(StructuralMismatch):
            TileSet.from_xml(ET.fromstring(
                f'<tileset name="t" {attrs}>'
                '<image source="x.png" width="64" height="64"/></tileset>'
            ), 1, 0, Path("."))


class TestTexturePath:

    def test_inline_tileset_uses_image_as_written(self):
        tileset = TileSet(first_gid=1, name="t", tile_width=8, tile_height=8,
                          image="./art/tiles.png")
        assert tileset.texture_path == "art/tiles.png"

    def test_external_tileset_is_relative_to_tsx(self):
        tileset = TileSet.from_xml(ET.fromstring(
            '<tileset name="t" tilewidth="32" tileheight="32">'
            '<image source="../shared/tiles.png" width="64" height="32"/></tileset>'
        ), 1, 0, Path("."), source="sets/a/set.tsx")
        assert tileset.image == "../shared/tiles.png"
        assert tileset.texture_path == "sets/shared/tiles.png"

    def test_no_image(self):
        assert TileSet(first_gid=1, name="t", tile_width=8, tile_height=8).texture_path == ""
