"""Tests for the command line summary."""

import pytest

from tmx_mesher.__main__ import build_parser, main

MAP = """<map version="1.4" orientation="orthogonal" width="2" height="1"
     tilewidth="32" tileheight="32">
  <tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32">
    <image source="terrain.png" width="64" height="32"/>
  </tileset>
  <layer name="Ground" width="2" height="1">
    <data encoding="csv">1,2</data>
  </layer>
  <objectgroup name="Walls">
    <object name="crate" x="0" y="0" width="32" height="32"/>
    <object name="fence" x="0" y="0"><polyline points="0,0 64,0"/></object>
  </objectgroup>
</map>
"""


@pytest.fixture
def map_file(tmp_path):
    path = tmp_path / "level.tmx"
    path.write_text(MAP)
    return path


def test_parser_defaults():
    args = build_parser().parse_args(["level.tmx"])
    assert args.collider_layer == []
    assert args.collider_width == 1.0
    assert not args.shared_tiles


def test_summary(map_file, capsys):
    assert main([str(map_file), "--collider-layer", "Walls"]) == 0
    out = capsys.readouterr().out
    assert "Map Size (2, 1)" in out
    assert "Ground (depth 1): 8 vertices, 4 triangles, 1 texture group(s)" in out
    assert "  - terrain.png: 2 tiles" in out
    assert "BoxCollider: crate" in out
    assert "MeshCollider: fence" in out
    assert "Total: 2" in out


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.tmx")]) == 1
    assert "not found" in capsys.readouterr().out


def test_invalid_map(tmp_path, capsys):
    path = tmp_path / "bad.tmx"
    path.write_text(MAP.replace('encoding="csv"', 'encoding="yaml"'))
    assert main([str(path), "--shared-tiles"]) == 1
    assert "UnsupportedFormat" in capsys.readouterr().out
