"""Document model: map, tilesets, layers, objects and properties"""

from .properties import Property, PropertyCollection
from .tileset import FlipState, FrameLayout, Rect, Tile, TileSet, frame_layout
from .objects import MapObject, MapObjectType
from .layers import Layer, LayerKind, ObjectLayer, TileGrid, TileLayer
from .document import LAYER_DEPTH_SPACING, Map, Orientation

__all__ = [
    "Property", "PropertyCollection",
    "FlipState", "FrameLayout", "Rect", "Tile", "TileSet", "frame_layout",
    "MapObject", "MapObjectType",
    "Layer", "LayerKind", "ObjectLayer", "TileGrid", "TileLayer",
    "LAYER_DEPTH_SPACING", "Map", "Orientation",
]
