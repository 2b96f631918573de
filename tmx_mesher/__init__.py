"""
TMX Mesher - Tiled maps to tile grids, render meshes and colliders

Requirements:
    pip install numpy pillow
"""

from .config import ColliderSettings, LoadOptions
from .errors import (
    TmxError, UnsupportedFormat, StructuralMismatch, MalformedNumber,
    DecompressionFailure, TruncatedData, InsufficientGeometry,
    UnresolvedTileReference,
)
from .map import (
    FlipState, LayerKind, Map, MapObject, MapObjectType, ObjectLayer,
    PropertyCollection, Tile, TileLayer, TileSet,
)
from .decoding import decode, resolve, split_gid
from .geometry import LayerMesh, build_collider, build_layer_mesh, generate_colliders

__version__ = "1.0.0"
__all__ = [
    "ColliderSettings",
    "LoadOptions",
    "TmxError",
    "UnsupportedFormat",
    "StructuralMismatch",
    "MalformedNumber",
    "DecompressionFailure",
    "TruncatedData",
    "InsufficientGeometry",
    "UnresolvedTileReference",
    "FlipState",
    "LayerKind",
    "Map",
    "MapObject",
    "MapObjectType",
    "ObjectLayer",
    "PropertyCollection",
    "Tile",
    "TileLayer",
    "TileSet",
    "decode",
    "resolve",
    "split_gid",
    "LayerMesh",
    "build_collider",
    "build_layer_mesh",
    "generate_colliders",
]
