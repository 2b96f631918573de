"""
Collider geometry for map objects

=============================================================================
SHAPES
=============================================================================

    MapObjectType   Collider          Geometry
    -------------   --------          --------
    BOX             BoxCollider       center + size, no triangles
    ELLIPSE         CapsuleCollider   center + radius + height, axis = Z
    POLYGON         MeshCollider      extruded ribbon, closed loop
    POLYLINE        MeshCollider      extruded ribbon, open

Positions use the layer-mesh convention: document Y grows down, world Y
grows up, so every y is negated.

=============================================================================
RIBBON EXTRUSION
=============================================================================

Each segment (first -> second point) becomes a wall between the planes
z_depth - width (front) and z_depth + width (back):

    outer:  [first_front, first_back, second_front, second_back]
    inner:  [first_back, first_front, second_back, second_front]

    triangles (k = segment number):
        (4k + 3, 4k + 2, 4k)
        (4k,     4k + 1, 4k + 3)

Swapping front/back inside each pair keeps the same corner positions but
reverses the winding of every triangle: outer walls face away from the
shape, inner walls face into it (for colliders that keep things INSIDE an
area).

A segment needs two points: fewer is InsufficientGeometry.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np

from ..config import ColliderSettings
from ..errors import InsufficientGeometry
from ..map.layers import LayerKind
from ..map.objects import MapObject, MapObjectType

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Collider axis indices (X, Y, Z); capsules run along the depth axis
AXIS_Z = 2

# Triangle pattern of one extruded segment
SEGMENT_TRIANGLES = np.array([3, 2, 0, 0, 1, 3], dtype=np.uint32)


@dataclass(frozen=True)
class BoxCollider:
    name: str
    center: Vec3
    size: Vec3


@dataclass(frozen=True)
class CapsuleCollider:
    name: str
    center: Vec3
    radius: float
    height: float
    direction: int = AXIS_Z


@dataclass
class MeshCollider:
    """Triangulated collider: vertices (N, 3) float32, triangles (M,) uint32."""
    name: str
    mesh_name: str
    vertices: np.ndarray
    triangles: np.ndarray
    closed: bool

    @property
    def segment_count(self) -> int:
        return len(self.vertices) // 4

    def face_normals(self) -> np.ndarray:
        """Unnormalized cross-product normal of every triangle, (M/3, 3)."""
        tris = self.vertices[self.triangles.reshape(-1, 3)]
        return np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])


Collider = Union[BoxCollider, CapsuleCollider, MeshCollider]


# =============================================================================
# PRIMITIVES
# =============================================================================

def box_collider(obj: MapObject, z_depth: float = 0.0,
                 collider_width: float = 1.0) -> BoxCollider:
    cx, cy = obj.bounds.center
    return BoxCollider(
        name=obj.name,
        center=(cx, -cy, z_depth),
        size=(obj.bounds.width, obj.bounds.height, collider_width),
    )


def ellipse_collider(obj: MapObject, z_depth: float = 0.0,
                     collider_width: float = 1.0) -> CapsuleCollider:
    """
    Capsule standing in for a Tiled ellipse.

    radius is half the bounds width; bounds are in tile units when the
    map was loaded with scale_objects (the default).
    """
    cx, cy = obj.bounds.center
    return CapsuleCollider(
        name=obj.name,
        center=(cx, -cy, z_depth),
        radius=obj.bounds.width / 2,
        height=obj.bounds.height * collider_width,
        direction=AXIS_Z,
    )


# =============================================================================
# EXTRUDED RIBBONS
# =============================================================================

def _extrude(obj: MapObject, closed: bool, z_depth: float,
             collider_width: float, inner: bool) -> MeshCollider:
    points = obj.points or []
    if len(points) < 2:
        raise InsufficientGeometry(
            f"{obj.kind.value} object {obj.name!r} needs at least 2 points, "
            f"has {len(points)}"
        )

    cx, cy = obj.bounds.center
    world = [(cx + px, -cy - py) for px, py in points]
    segments = list(zip(world, world[1:]))
    if closed:
        # Connect last point with first point
        segments.append((world[-1], world[0]))

    front = z_depth - collider_width
    back = z_depth + collider_width
    vertices = np.empty((len(segments) * 4, 3), dtype=np.float32)
    triangles = np.empty(len(segments) * 6, dtype=np.uint32)

    for k, ((x1, y1), (x2, y2)) in enumerate(segments):
        first_front = (x1, y1, front)
        first_back = (x1, y1, back)
        second_front = (x2, y2, front)
        second_back = (x2, y2, back)
        if inner:
            quad = [first_back, first_front, second_back, second_front]
        else:
            quad = [first_front, first_back, second_front, second_back]
        vertices[k * 4:k * 4 + 4] = quad
        triangles[k * 6:k * 6 + 6] = SEGMENT_TRIANGLES + k * 4

    return MeshCollider(
        name=obj.name,
        mesh_name=f"Collider_{obj.name}",
        vertices=vertices,
        triangles=triangles,
        closed=closed,
    )


def polygon_collider(obj: MapObject, z_depth: float = 0.0,
                     collider_width: float = 1.0,
                     inner: bool = False) -> MeshCollider:
    return _extrude(obj, True, z_depth, collider_width, inner)


def polyline_collider(obj: MapObject, z_depth: float = 0.0,
                      collider_width: float = 1.0,
                      inner: bool = False) -> MeshCollider:
    return _extrude(obj, False, z_depth, collider_width, inner)


# =============================================================================
# DISPATCH
# =============================================================================

def build_collider(obj: MapObject,
                   settings: ColliderSettings = ColliderSettings("")) -> Collider:
    """Build the collider matching the object's kind."""
    if obj.kind is MapObjectType.ELLIPSE:
        return ellipse_collider(obj, settings.z_depth, settings.width)
    if obj.kind is MapObjectType.POLYGON:
        return polygon_collider(obj, settings.z_depth, settings.width, settings.inner)
    if obj.kind is MapObjectType.POLYLINE:
        return polyline_collider(obj, settings.z_depth, settings.width, settings.inner)
    return box_collider(obj, settings.z_depth, settings.width)


def generate_colliders(tmx_map, settings: Sequence[ColliderSettings]) -> List[Collider]:
    """
    Build colliders for every object of the configured object layers.

    A missing layer is logged and skipped. An object that cannot be
    extruded is logged and skipped; the rest of the layer still gets
    its colliders.
    """
    colliders: List[Collider] = []
    for layer_settings in settings:
        layer = tmx_map.get_layer(layer_settings.layer_name)
        if layer is None or layer.kind is not LayerKind.OBJECT:
            logger.error("There's no object layer %r in tile map",
                         layer_settings.layer_name)
            continue

        for obj in layer.objects:
            try:
                colliders.append(build_collider(obj, layer_settings))
            except InsufficientGeometry as e:
                logger.warning("Skipping collider: %s",
                               e.with_context(layer=layer.name))
    return colliders
