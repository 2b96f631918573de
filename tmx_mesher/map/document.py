"""
The Map aggregate: everything loaded from one TMX document

=============================================================================
LOAD ORDER
=============================================================================

    <map>  ──► attributes (size, tile size, orientation)
      │
      ├─ <properties>   ──► Map.properties
      ├─ <tileset>*     ──► TileSet (frame layout) ──► Map.tiles (GID -> Tile)
      └─ <layer> / <objectgroup>, in document order
             ├─ layer        ──► decode ──► resolve ──► TileLayer
             └─ objectgroup  ──► ObjectLayer

Tilesets must all be loaded before the first layer: a tile layer resolves
its GIDs against the flattened Map.tiles table.

=============================================================================
LAYER DEPTH AND NAMES
=============================================================================

Layers are stacked in document order, back to front:

    depth = 1.0 - LAYER_DEPTH_SPACING * i

Tiled does not require unique layer names, but lookups by name do. A
repeated name gets the smallest numeric suffix (starting at 2) that makes
it unique: "Walls", "Walls2", "Walls3", ...

=============================================================================
"""

import enum
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..config import LoadOptions
from ..decoding.gid import FlipVariantCache
from ..errors import StructuralMismatch, UnsupportedFormat
from ..textures import PillowTextureProvider, TextureProvider
from .attributes import int_attr, size_attr
from .layers import Layer, LayerKind, ObjectLayer, TileLayer
from .objects import MapObject
from .properties import PropertyCollection
from .tileset import Tile, TileSet

logger = logging.getLogger(__name__)

LAYER_DEPTH_SPACING = 1.0

MapObjectFinder = Callable[[ObjectLayer, MapObject], bool]


class Orientation(enum.Enum):
    ORTHOGONAL = "orthogonal"
    ISOMETRIC = "isometric"

    @classmethod
    def parse(cls, tag: Optional[str]) -> 'Orientation':
        try:
            return cls((tag or "orthogonal").lower())
        except ValueError:
            raise UnsupportedFormat(f"unsupported map orientation: {tag!r}") from None


@dataclass
class Map:
    """
    Complete Tiled map - the root object of this package.

    ==========================================================================
    USAGE
    ==========================================================================

    Loading:
        tmx_map = Map.load("level1.tmx")
        print(tmx_map)

    Geometry:
        mesh = tmx_map.build_layer_mesh("Ground")
        colliders = generate_colliders(tmx_map, [ColliderSettings("Walls")])

    ==========================================================================
    """
    version: str = "1.0"                             # TMX format version
    orientation: Orientation = Orientation.ORTHOGONAL
    width: int = 0                                   # Map width in tiles
    height: int = 0                                  # Map height in tiles
    tile_width: int = 0                              # Tile width in pixels
    tile_height: int = 0                             # Tile height in pixels
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    tilesets: List[TileSet] = field(default_factory=list)
    tiles: Dict[int, Tile] = field(default_factory=dict)
    layers: List[Layer] = field(default_factory=list)
    base_path: Path = field(default_factory=Path)

    # -------------------------------------------------------------------
    # LOADING
    # -------------------------------------------------------------------

    @classmethod
    def load(cls, filepath: Union[str, Path],
             options: LoadOptions = LoadOptions(),
             texture_provider: Optional[TextureProvider] = None) -> 'Map':
        """
        Load a TMX file from disk.

        Raises:
        -------
        FileNotFoundError : If the TMX file doesn't exist
        xml.etree.ElementTree.ParseError : If the XML is malformed
        TmxError : If the document content is invalid
        """
        filepath = Path(filepath)
        root = ET.parse(filepath).getroot()
        return cls.from_element(root, filepath.parent, options, texture_provider)

    @classmethod
    def from_string(cls, text: str, base_path: Union[str, Path] = ".",
                    options: LoadOptions = LoadOptions(),
                    texture_provider: Optional[TextureProvider] = None) -> 'Map':
        """Load a map from TMX text; relative paths resolve against base_path."""
        root = ET.fromstring(text)
        return cls.from_element(root, Path(base_path), options, texture_provider)

    @classmethod
    def from_element(cls, root: ET.Element, base_path: Path,
                     options: LoadOptions = LoadOptions(),
                     texture_provider: Optional[TextureProvider] = None) -> 'Map':
        """Build a map from a parsed <map> element."""
        if root.tag != 'map':
            raise StructuralMismatch(f"expected <map> root element, found <{root.tag}>")
        if texture_provider is None:
            texture_provider = PillowTextureProvider()

        tmx_map = cls(
            version=root.get('version', '1.0'),
            orientation=Orientation.parse(root.get('orientation')),
            width=int_attr(root, 'width'),
            height=int_attr(root, 'height'),
            tile_width=size_attr(root, 'tilewidth'),
            tile_height=size_attr(root, 'tileheight'),
            properties=PropertyCollection.of_parent(root),
            base_path=Path(base_path),
        )

        for tileset_elem in root.findall('tileset'):
            tmx_map._add_tileset(tileset_elem, texture_provider)

        variants = None if options.make_unique else FlipVariantCache()
        for elem in root:
            if elem.tag == LayerKind.TILE.value:
                layer = TileLayer.from_xml(elem, tmx_map.tiles, options, variants)
            elif elem.tag == LayerKind.OBJECT.value:
                layer = ObjectLayer.from_xml(
                    elem, tmx_map.tile_width, tmx_map.tile_height, options
                )
            else:
                if elem.tag not in ('tileset', 'properties'):
                    logger.debug("Skipping unsupported element <%s>", elem.tag)
                continue
            tmx_map._add_layer(layer)

        return tmx_map

    def _add_tileset(self, elem: ET.Element, texture_provider: TextureProvider):
        first_gid = int_attr(elem, 'firstgid')
        index = len(self.tilesets)
        source = elem.get('source')

        if source:
            # ---------------------------------------------------------
            # EXTERNAL TILESET (TSX)
            # ---------------------------------------------------------
            # Image paths inside a TSX are relative to the TSX itself
            tsx_path = self.base_path / source
            try:
                tsx_root = ET.parse(tsx_path).getroot()
            except FileNotFoundError:
                logger.warning("External tileset not found: %s", tsx_path)
                tileset = TileSet(
                    first_gid=first_gid,
                    name=Path(source).stem,
                    tile_width=self.tile_width,
                    tile_height=self.tile_height,
                    source=source,
                )
            else:
                tileset = TileSet.from_xml(
                    tsx_root, first_gid, index, tsx_path.parent,
                    texture_provider, source=source,
                )
        else:
            tileset = TileSet.from_xml(elem, first_gid, index, self.base_path,
                                       texture_provider)

        overlap = self.tiles.keys() & tileset.tiles.keys()
        if overlap:
            owner = self.get_tileset_for_gid(min(overlap))
            owner_name = owner.name if owner is not None else "?"
            raise StructuralMismatch(
                f"tileset {tileset.name!r} reuses global ids of "
                f"{owner_name!r} (from {min(overlap)})"
            )

        self.tilesets.append(tileset)
        self.tiles.update(tileset.tiles)

    def _add_layer(self, layer: Layer):
        layer.depth = 1.0 - LAYER_DEPTH_SPACING * len(self.layers)

        taken = {existing.name for existing in self.layers}
        if layer.name in taken:
            duplicate = 2
            while f"{layer.name}{duplicate}" in taken:
                duplicate += 1
            new_name = f"{layer.name}{duplicate}"
            logger.warning("Renaming layer %r to %r to make a unique name",
                           layer.name, new_name)
            layer.name = new_name

        self.layers.append(layer)

    # -------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------

    def get_layer(self, name: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def tile_layers(self) -> List[TileLayer]:
        return [l for l in self.layers if l.kind is LayerKind.TILE]

    def object_layers(self) -> List[ObjectLayer]:
        return [l for l in self.layers if l.kind is LayerKind.OBJECT]

    def get_all_objects(self) -> Iterator[MapObject]:
        for layer in self.object_layers():
            yield from layer.objects

    def find_object(self, finder: MapObjectFinder) -> Optional[MapObject]:
        """
        First object for which finder(layer, obj) is true, or None.

        Example:
            goal = tmx_map.find_object(lambda layer, obj: obj.name == "goal")
        """
        for obj in self.find_objects(finder):
            return obj
        return None

    def find_objects(self, finder: MapObjectFinder) -> Iterator[MapObject]:
        for layer in self.object_layers():
            for obj in layer.objects:
                if finder(layer, obj):
                    yield obj

    def get_tileset_for_gid(self, gid: int) -> Optional[TileSet]:
        """
        Find which tileset owns a GID.

        A GID belongs to the tileset with the largest first_gid <= gid,
        as long as it falls inside that tileset's frame range.
        """
        best = None
        for tileset in self.tilesets:
            if tileset.first_gid <= gid and (best is None or tileset.first_gid > best.first_gid):
                best = tileset
        if best is not None and best.contains(gid):
            return best
        return None

    def world_point_to_tile_index(self, x: float, y: float) -> Tuple[int, int]:
        """
        Convert a pixel position into (column, row) tile indices.

        Points on the right/bottom edge belong to the last column/row.
        """
        map_w = self.width * self.tile_width
        map_h = self.height * self.tile_height
        if x < 0 or y < 0 or x > map_w or y > map_h:
            raise ValueError(f"point ({x}, {y}) is outside the map")

        col = int(x // self.tile_width)
        row = int(y // self.tile_height)
        if x == map_w:
            col -= 1
        if y == map_h:
            row -= 1
        return col, row

    # -------------------------------------------------------------------
    # GEOMETRY SHORTCUTS
    # -------------------------------------------------------------------

    def build_layer_mesh(self, name: str):
        """Mesh of one tile layer (KeyError if there is no such tile layer)."""
        from ..geometry.layer_mesh import build_layer_mesh

        layer = self.get_layer(name)
        if layer is None or layer.kind is not LayerKind.TILE:
            raise KeyError(f"no tile layer named {name!r}")
        return build_layer_mesh(layer, self.tilesets)

    def build_layer_meshes(self) -> list:
        """[(layer, mesh), ...] for every tile layer, in document order."""
        from ..geometry.layer_mesh import build_layer_mesh

        return [(layer, build_layer_mesh(layer, self.tilesets))
                for layer in self.tile_layers()]

    def __str__(self) -> str:
        return (f"Map Size ({self.width}, {self.height})\n"
                f"Tile Size ({self.tile_width}, {self.tile_height})\n"
                f"Orientation: {self.orientation.value}\n"
                f"Tiled Version: {self.version}")
