"""Load options and per-layer collider settings"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoadOptions:
    """
    Options controlling how a TMX document becomes a Map.

    make_unique:
        Clone every resolved tile so no two grid cells share a Tile
        instance. When off, cells share the canonical tile and only
        flipped cells get a (cached) private variant.
    scale_objects:
        Convert object bounds and points from pixels to tile units, the
        same unit the layer meshes use (1 tile = 1 unit).
    strict_references:
        Raise UnresolvedTileReference for GIDs that belong to no tileset
        instead of leaving the cell empty.
    """
    make_unique: bool = True
    scale_objects: bool = True
    strict_references: bool = False


@dataclass(frozen=True)
class ColliderSettings:
    """
    How to turn the objects of one object layer into colliders.

    Example:
        ColliderSettings("Walls", z_depth=0.0, width=0.5, inner=False)
    """
    layer_name: str
    z_depth: float = 0.0     # Z position of the collider plane
    width: float = 1.0       # Half-thickness of extruded ribbons
    inner: bool = False      # Face normals toward the inside of the shape
