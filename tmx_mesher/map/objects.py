"""
Map objects: boxes, ellipses, polygons and polylines placed on object layers

=============================================================================
OBJECT KINDS
=============================================================================

Tiled decides the shape of an object from its child elements:

    <object x="10" y="20" width="32" height="16"/>              Box
    <object x="10" y="20" width="32" height="16"><ellipse/>     Ellipse
    <object x="10" y="20"><polygon points="0,0 32,0 32,32"/>    Polygon
    <object x="10" y="20"><polyline points="0,0 32,0"/>         Polyline
    <object gid="5" x="10" y="20" width="32" height="32"/>      Tile object

Tile objects keep the Box kind and carry the raw gid.

Polygon and polyline points are offsets from the object position, in
pixels. A polygon is closed (last point connects back to the first), a
polyline is not.

=============================================================================
UNITS
=============================================================================

Layer meshes use one unit per tile. scale() converts an object's bounds
and points from pixels to the same unit, so colliders line up with the
rendered tiles.

=============================================================================
"""

import enum
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..decoding.gid import split_gid
from ..errors import MalformedNumber
from .attributes import float_attr, int_attr
from .properties import PropertyCollection
from .tileset import FlipState, Rect

Point = Tuple[float, float]


class MapObjectType(enum.Enum):
    BOX = "box"
    ELLIPSE = "ellipse"
    POLYGON = "polygon"
    POLYLINE = "polyline"


def parse_points(text: str) -> List[Point]:
    """
    Parse a Tiled points attribute: "x1,y1 x2,y2 ...".

    Example:
        parse_points("0,0 32,0 32,32") -> [(0.0, 0.0), (32.0, 0.0), (32.0, 32.0)]
    """
    points = []
    for pair in text.split():
        coords = pair.split(',')
        if len(coords) != 2:
            raise MalformedNumber(f"invalid point {pair!r}")
        try:
            points.append((float(coords[0]), float(coords[1])))
        except ValueError:
            raise MalformedNumber(f"invalid point {pair!r}") from None
    return points


@dataclass
class MapObject:
    """
    Object in an object layer.

    bounds is in pixels as loaded, or in tile units after scale().
    """
    name: str = "Object"                             # Object name
    type: str = ""                                   # Free-form type tag
    bounds: Rect = field(default_factory=Rect)       # Position and size
    kind: MapObjectType = MapObjectType.BOX          # Shape
    points: Optional[List[Point]] = None             # Polygon/polyline only
    gid: Optional[int] = None                        # Raw GID (tile objects)
    properties: PropertyCollection = field(default_factory=PropertyCollection)

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'MapObject':
        """Parse object from XML element."""
        obj = cls(
            name=elem.get('name') or "Object",
            type=elem.get('type', ''),
            bounds=Rect(
                float_attr(elem, 'x', 0.0),
                float_attr(elem, 'y', 0.0),
                float_attr(elem, 'width', 0.0),
                float_attr(elem, 'height', 0.0),
            ),
            properties=PropertyCollection.of_parent(elem),
        )

        # -----------------------------------------------------------------
        # SHAPE DETECTION (first match wins, gid before shapes)
        # -----------------------------------------------------------------
        if elem.get('gid'):
            obj.gid = int_attr(elem, 'gid')
        elif elem.find('ellipse') is not None:
            obj.kind = MapObjectType.ELLIPSE
        elif elem.find('polygon') is not None:
            obj.kind = MapObjectType.POLYGON
            obj.points = parse_points(elem.find('polygon').get('points', ''))
        elif elem.find('polyline') is not None:
            obj.kind = MapObjectType.POLYLINE
            obj.points = parse_points(elem.find('polyline').get('points', ''))

        return obj

    @property
    def tile_gid(self) -> Optional[int]:
        """Canonical GID of a tile object (flip bits stripped)."""
        if self.gid is None:
            return None
        return split_gid(self.gid)[0]

    @property
    def flip(self) -> FlipState:
        if self.gid is None:
            return FlipState.NONE
        return split_gid(self.gid)[1]

    def scale(self, tile_width: float, tile_height: float):
        """Convert bounds and points from pixels to tile units (in place)."""
        b = self.bounds
        self.bounds = Rect(
            b.x / tile_width, b.y / tile_height,
            b.width / tile_width, b.height / tile_height,
        )
        if self.points is not None:
            self.points = [(x / tile_width, y / tile_height) for x, y in self.points]
