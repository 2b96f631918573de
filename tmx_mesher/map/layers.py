"""
Tile layers and object layers

Both layer kinds share name/size/depth/visibility and are told apart by
their `kind` tag (LayerKind.TILE or LayerKind.OBJECT), so code that walks
Map.layers dispatches on the tag:

    for layer in tmx_map.layers:
        if layer.kind is LayerKind.TILE:
            mesh = build_layer_mesh(layer, tmx_map.tilesets)
        elif layer.kind is LayerKind.OBJECT:
            ...
"""

import enum
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..config import LoadOptions
from ..decoding.gid import FlipVariantCache, resolve, split_gid
from ..decoding.tile_data import decode
from ..errors import StructuralMismatch, TmxError, UnresolvedTileReference
from .attributes import float_attr, int_attr
from .objects import MapObject
from .properties import PropertyCollection
from .tileset import Tile


class LayerKind(enum.Enum):
    TILE = "layer"
    OBJECT = "objectgroup"


class TileGrid:
    """
    2-D grid of (possibly empty) Tile references, addressed as grid[x, y].

    Storage is column-major: cells of column x are contiguous, and
    iteration walks x in [0, width), then y in [0, height).
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._cells = np.empty((width, height), dtype=object)

    def __getitem__(self, xy: Tuple[int, int]) -> Optional[Tile]:
        return self._cells[xy]

    def __setitem__(self, xy: Tuple[int, int], tile: Optional[Tile]):
        self._cells[xy] = tile

    def __iter__(self) -> Iterator[Tuple[int, int, Optional[Tile]]]:
        for x in range(self.width):
            for y in range(self.height):
                yield x, y, self._cells[x, y]

    def occupied(self) -> Iterator[Tuple[int, int, Tile]]:
        """Iterate (x, y, tile) over non-empty cells only."""
        for x, y, tile in self:
            if tile is not None:
                yield x, y, tile

    def count(self) -> int:
        return sum(1 for _ in self.occupied())


@dataclass
class TileLayer:
    """
    Tile layer: raw IDs as decoded plus the resolved grid.

    data is row-major (index = y * width + x) exactly as stored in the
    document; tiles is the column-major grid of Tile references.
    """
    kind: ClassVar[LayerKind] = LayerKind.TILE

    name: str                                        # Layer name
    width: int                                       # Width in tiles
    height: int                                      # Height in tiles
    depth: float = 0.0                               # Z ordering (see Map)
    visible: bool = True
    opacity: float = 1.0
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    data: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))
    tiles: Optional[TileGrid] = None

    @classmethod
    def from_xml(cls, elem: ET.Element, tiles: Mapping[int, Tile],
                 options: LoadOptions = LoadOptions(),
                 variants: Optional[FlipVariantCache] = None) -> 'TileLayer':
        """
        Parse a <layer>, decode its data and resolve every cell.

        Errors raised while decoding carry the layer name.
        """
        name = elem.get('name', '')
        try:
            layer = cls(
                name=name,
                width=int_attr(elem, 'width'),
                height=int_attr(elem, 'height'),
                visible=elem.get('visible', '1') == '1',
                opacity=float_attr(elem, 'opacity', 1.0),
                properties=PropertyCollection.of_parent(elem),
            )

            data_elem = elem.find('data')
            if data_elem is None:
                raise StructuralMismatch("<layer> has no <data> element")

            encoding = data_elem.get('encoding')
            if encoding:
                payload = data_elem.text or ''
            else:
                payload = [t.get('gid', '') for t in data_elem.findall('tile')]

            layer.data = decode(
                payload, layer.width, layer.height,
                encoding, data_elem.get('compression'),
                layer_name=name,
            )
            layer.resolve(tiles, options, variants)
        except TmxError as e:
            raise e.with_context(layer=name)
        return layer

    def resolve(self, tiles: Mapping[int, Tile],
                options: LoadOptions = LoadOptions(),
                variants: Optional[FlipVariantCache] = None) -> TileGrid:
        """
        Fill the tile grid from the raw IDs.

        Raw data is left-to-right, top-to-bottom; each cell is resolved on
        its own.
        """
        grid = TileGrid(self.width, self.height)
        for x in range(self.width):
            for y in range(self.height):
                index = y * self.width + x
                raw_id = int(self.data[index])
                tile, _ = resolve(raw_id, tiles, options.make_unique, variants)
                if tile is None and options.strict_references and split_gid(raw_id)[0]:
                    raise UnresolvedTileReference(
                        f"gid {raw_id} belongs to no tileset",
                        layer=self.name, index=index,
                    )
                grid[x, y] = tile
        self.tiles = grid
        return grid

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        """Tile at column x, row y (None when empty or out of bounds)."""
        if self.tiles is None or not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self.tiles[x, y]


@dataclass
class ObjectLayer:
    """Object layer: an ordered list of map objects."""
    kind: ClassVar[LayerKind] = LayerKind.OBJECT

    name: str
    width: int = 0
    height: int = 0
    depth: float = 0.0
    visible: bool = True
    opacity: float = 1.0
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    objects: List[MapObject] = field(default_factory=list)

    @classmethod
    def from_xml(cls, elem: ET.Element, tile_width: int, tile_height: int,
                 options: LoadOptions = LoadOptions()) -> 'ObjectLayer':
        name = elem.get('name', '')
        try:
            layer = cls(
                name=name,
                width=int_attr(elem, 'width', 0),
                height=int_attr(elem, 'height', 0),
                visible=elem.get('visible', '1') == '1',
                opacity=float_attr(elem, 'opacity', 1.0),
                properties=PropertyCollection.of_parent(elem),
            )
            for obj_elem in elem.findall('object'):
                obj = MapObject.from_xml(obj_elem)
                if options.scale_objects:
                    obj.scale(tile_width, tile_height)
                layer.objects.append(obj)
        except TmxError as e:
            raise e.with_context(layer=name)
        return layer


Layer = Union[TileLayer, ObjectLayer]
