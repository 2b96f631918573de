"""
Layer mesh building: one vertex/UV/index buffer per tile layer

=============================================================================
QUAD LAYOUT
=============================================================================

Every non-empty cell (x, y) becomes a quad of 4 vertices on the z=0 plane.
Document rows grow downward, so row y sits at -y:

    v2 (x, -y) ------- v0 (x+1, -y)
       |            /  |
       |         /     |
       |      /        |
    v3 (x, -y-1) ----- v1 (x+1, -y-1)

    triangles: (v0, v1, v2) and (v2, v1, v3)

The quad is scaled by source size / nominal tile size of the owning
tileset, so a frame twice as wide as the tileset's tiles spans two units.

=============================================================================
UV MAPPING
=============================================================================

Image rows grow downward, texture V grows upward, so V is flipped:

    u = source.x / texture_width
    v = 1 - source.y / texture_height

    v0 -> (u + du, v)       du = tile_width  / texture_width
    v1 -> (u + du, v - dv)  dv = tile_height / texture_height
    v2 -> (u, v)
    v3 -> (u, v - dv)

=============================================================================
TEXTURE GROUPS
=============================================================================

A layer can mix tiles from several tilesets (several textures). Quads are
emitted grouped by texture, in order of first appearance, so each texture
owns ONE contiguous vertex range and ONE contiguous index range: the host
splits the buffer into one draw call (material) per group.

Inside a group, cells keep the grid order (x outer, y inner).

Groups are named by TileSet.texture_path, the image path relative to the
map file: "a/tiles.png" and "b/tiles.png" are two textures.

Flip state does not change the geometry here; the host applies mirroring
from Tile.flip if it wants to.

=============================================================================
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..map.layers import TileLayer
from ..map.tileset import TileSet

VERTICES_PER_TILE = 4
INDICES_PER_TILE = 6

# Triangle pattern of one quad, offset by the quad's first vertex
QUAD_INDICES = np.array([0, 1, 2, 2, 1, 3], dtype=np.uint32)


@dataclass(frozen=True)
class TextureGroup:
    """Vertex and index range drawn with one texture."""
    vertex_start: int
    vertex_count: int
    index_start: int
    index_count: int

    @property
    def tile_count(self) -> int:
        return self.vertex_count // VERTICES_PER_TILE


@dataclass
class LayerMesh:
    """
    Render buffers for one tile layer.

    vertices : (N, 3) float32
    uvs      : (N, 2) float32
    indices  : (M,)   uint32, M = 6 * tiles, N = 4 * tiles
    texture_groups : texture path (relative to the map) -> TextureGroup,
                     in emission order
    """
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float32))
    uvs: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float32))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))
    texture_groups: Dict[str, TextureGroup] = field(default_factory=OrderedDict)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def submesh(self, texture: str) -> np.ndarray:
        """Index slice drawn with one texture (KeyError if unknown)."""
        group = self.texture_groups[texture]
        return self.indices[group.index_start:group.index_start + group.index_count]


def _tile_quad(x: int, y: int, tile, tileset: TileSet):
    """Positions and UVs of one cell, as two (4, n) lists."""
    sx = tile.source.width / tileset.tile_width
    sy = tile.source.height / tileset.tile_height
    positions = [
        (sx * (x + 1), sy * -y, 0.0),
        (sx * (x + 1), sy * (-y - 1), 0.0),
        (sx * x, sy * -y, 0.0),
        (sx * x, sy * (-y - 1), 0.0),
    ]

    du = tileset.tile_width / tileset.texture_width
    dv = tileset.tile_height / tileset.texture_height
    u = tile.source.x / tileset.texture_width
    v = 1.0 - tile.source.y / tileset.texture_height
    uvs = [
        (u + du, v),
        (u + du, v - dv),
        (u, v),
        (u, v - dv),
    ]
    return positions, uvs


def build_layer_mesh(layer: TileLayer, tilesets: Sequence[TileSet]) -> LayerMesh:
    """
    Build the render buffers of a resolved tile layer.

    Parameters:
    -----------
    layer : TileLayer
        Layer with its grid already resolved
    tilesets : sequence of TileSet
        The map's tileset table; Tile.tileset_index points into it

    Returns:
    --------
    LayerMesh : empty buffers if the layer has no tiles
    """
    if layer.tiles is None:
        return LayerMesh()

    # -----------------------------------------------------------------
    # PASS 1: bucket quads per texture, grid order kept inside buckets
    # -----------------------------------------------------------------
    buckets: Dict[str, List] = OrderedDict()
    for x, y, tile in layer.tiles.occupied():
        tileset = tilesets[tile.tileset_index]
        buckets.setdefault(tileset.texture_path, []).append(_tile_quad(x, y, tile, tileset))

    tile_total = sum(len(quads) for quads in buckets.values())
    if tile_total == 0:
        return LayerMesh()

    # -----------------------------------------------------------------
    # PASS 2: fill pre-sized arrays, running vertex counter for indices
    # -----------------------------------------------------------------
    vertices = np.empty((tile_total * VERTICES_PER_TILE, 3), dtype=np.float32)
    uvs = np.empty((tile_total * VERTICES_PER_TILE, 2), dtype=np.float32)
    indices = np.empty(tile_total * INDICES_PER_TILE, dtype=np.uint32)
    groups: Dict[str, TextureGroup] = OrderedDict()

    vertex_count = 0
    for texture, quads in buckets.items():
        group_vertex_start = vertex_count
        for positions, quad_uvs in quads:
            tile_number = vertex_count // VERTICES_PER_TILE
            vertices[vertex_count:vertex_count + 4] = positions
            uvs[vertex_count:vertex_count + 4] = quad_uvs
            i = tile_number * INDICES_PER_TILE
            indices[i:i + INDICES_PER_TILE] = QUAD_INDICES + vertex_count
            vertex_count += VERTICES_PER_TILE

        group_tiles = (vertex_count - group_vertex_start) // VERTICES_PER_TILE
        groups[texture] = TextureGroup(
            vertex_start=group_vertex_start,
            vertex_count=vertex_count - group_vertex_start,
            index_start=group_vertex_start // VERTICES_PER_TILE * INDICES_PER_TILE,
            index_count=group_tiles * INDICES_PER_TILE,
        )

    return LayerMesh(vertices=vertices, uvs=uvs, indices=indices, texture_groups=groups)
