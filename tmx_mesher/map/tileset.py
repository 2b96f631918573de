"""
Tilesets, tiles and frame layout

=============================================================================
WHAT IS A TILESET?
=============================================================================

A tileset is one source image cut into a grid of equally sized FRAMES.
Every frame becomes a Tile with a global ID (GID):

    Tileset A (firstgid=1):   frames 0..63  -> GIDs 1..64
    Tileset B (firstgid=65):  frames 0..15  -> GIDs 65..80

    GID = firstgid + row * frames_per_row + col

GIDs of one tileset form a contiguous range starting at firstgid.

=============================================================================
FRAME LAYOUT
=============================================================================

margin = pixels around the EDGE of the whole image
spacing = pixels BETWEEN frames

    +--+===+-+===+-+===+--+
    |  | 0 | | 1 | | 2 |  |  <- margin
    +--+===+-+===+-+===+--+
    |  | 3 | | 4 | | 5 |  |
    +--+===+-+===+-+===+--+
              ^
              spacing

How many frames fit on a row? n frames take n*tile + (n-1)*spacing pixels
inside the margins, so the largest n with

    n * tile + (n - 1) * spacing <= texture - 2 * margin

is

    frames_per_row = (texture - 2*margin + spacing) // (tile + spacing)

Integer division only, no float rounding anywhere. The same formula gives
frames_per_column with heights.

Frame (row, col) covers the source rectangle

    x = margin + col * (tilewidth + spacing)
    y = margin + row * (tileheight + spacing)

=============================================================================
TILE IDENTITY AND FLIPPING
=============================================================================

A Tile is compared by identity, not by value. Two tiles cut from the same
frame but with different flip states are different tiles: they must never
end up in one rendering batch as if they were the same thing.

=============================================================================
"""

import enum
import logging
import posixpath
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterator, NamedTuple, Optional, Tuple

from ..errors import MalformedNumber, StructuralMismatch
from ..textures import TextureProvider, texture_size
from .attributes import int_attr, size_attr, str_attr
from .properties import PropertyCollection

logger = logging.getLogger(__name__)


# =============================================================================
# SMALL VALUE TYPES
# =============================================================================

@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle (x, y is the top-left corner, y grows down)."""
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


class FlipState(enum.IntFlag):
    """Mirroring applied to a tile's source rectangle."""
    NONE = 0
    HORIZONTAL = 1
    VERTICAL = 2
    BOTH = HORIZONTAL | VERTICAL


class FrameLayout(NamedTuple):
    frames_per_row: int
    frames_per_column: int

    @property
    def count(self) -> int:
        return self.frames_per_row * self.frames_per_column


def frame_layout(texture_width: int, texture_height: int,
                 tile_width: int, tile_height: int,
                 margin: int = 0, spacing: int = 0) -> FrameLayout:
    """
    Count how many frames fit in a texture.

    Example:
        frame_layout(256, 256, 32, 32)             -> (8, 8)
        frame_layout(256, 256, 30, 30, 2, 1)       -> (8, 8)
        frame_layout(10, 10, 32, 32)               -> (0, 0)
    """
    if tile_width <= 0 or tile_height <= 0 or spacing < 0:
        raise StructuralMismatch(
            f"tile size {tile_width}x{tile_height} with spacing {spacing} "
            "cannot be laid out"
        )
    per_row = (texture_width - 2 * margin + spacing) // (tile_width + spacing)
    per_column = (texture_height - 2 * margin + spacing) // (tile_height + spacing)
    # Textures smaller than their margins hold nothing
    return FrameLayout(max(0, per_row), max(0, per_column))


def iter_frames(layout: FrameLayout, tile_width: int, tile_height: int,
                margin: int = 0, spacing: int = 0) -> Iterator[Tuple[int, Rect]]:
    """
    Yield (local_index, source_rect) for every frame, row by row.

    local_index = row * frames_per_row + col
    """
    for row in range(layout.frames_per_column):
        for col in range(layout.frames_per_row):
            source = Rect(
                margin + col * (tile_width + spacing),
                margin + row * (tile_height + spacing),
                tile_width,
                tile_height,
            )
            yield row * layout.frames_per_row + col, source


def parse_color_key(text: str) -> Tuple[int, int, int]:
    """
    Parse a 'trans' color ("ff00ff" or "#ff00ff") into (r, g, b).
    """
    digits = text[1:] if text.startswith('#') else text
    if len(digits) != 6:
        raise MalformedNumber(f"transparent color must have 6 hex digits: {text!r}")
    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        raise MalformedNumber(f"invalid transparent color: {text!r}") from None


# =============================================================================
# TILE
# =============================================================================

@dataclass(eq=False)
class Tile:
    """
    One placeable frame of a tileset.

    tileset_index points into Map.tilesets instead of holding the TileSet
    itself: the map owns tilesets, tiles only look them up.

    flip is fixed once, when a clone is made for a cell that needs a
    different orientation (see decoding.gid).
    """
    gid: int                                     # Canonical global ID
    source: Rect                                 # Frame inside the texture
    tileset_index: int                           # Index into Map.tilesets
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    flip: FlipState = FlipState.NONE

    def clone(self, flip: Optional[FlipState] = None) -> 'Tile':
        """New Tile identity with the same frame, optionally re-flipped."""
        return replace(self, flip=self.flip if flip is None else flip)

    def same_frame(self, other: 'Tile') -> bool:
        """True if both tiles are cut from the same frame of the same tileset."""
        return (self.tileset_index == other.tileset_index
                and self.gid == other.gid
                and self.source == other.source)

    def __repr__(self) -> str:
        return f"Tile(gid={self.gid}, flip={self.flip!r})"


# =============================================================================
# TILESET
# =============================================================================

@dataclass
class TileSet:
    """
    Tileset: a texture cut into frames plus per-frame properties.

    tiles maps GID -> canonical Tile and is filled by build_tiles() once
    the texture size is known.
    """
    first_gid: int                               # First global ID
    name: str                                    # Tileset name
    tile_width: int                              # Frame width in pixels
    tile_height: int                             # Frame height in pixels
    spacing: int = 0                             # Pixels between frames
    margin: int = 0                              # Pixels around the edge
    image: str = ""                              # Source image (as written)
    image_dir: str = ""                          # TSX directory, relative to the map
    color_key: Optional[Tuple[int, int, int]] = None   # Transparent color
    texture_width: int = 0                       # Texture size in pixels
    texture_height: int = 0
    source: Optional[str] = None                 # TSX file (if external)
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    # GID -> properties, only for frames listed as <tile> in the document
    tile_properties: Dict[int, PropertyCollection] = field(default_factory=dict)
    tiles: Dict[int, Tile] = field(default_factory=dict)

    @classmethod
    def from_xml(cls, elem: ET.Element, first_gid: int, index: int,
                 base_path: Path,
                 texture_provider: Optional[TextureProvider] = None,
                 source: Optional[str] = None) -> 'TileSet':
        """
        Parse a tileset and lay out its frames.

        Parameters:
        -----------
        elem : ET.Element
            The <tileset> element (from the TMX, or the root of a TSX)
        first_gid : int
            First global ID, always taken from the TMX
        index : int
            Position of this tileset in Map.tilesets
        base_path : Path
            Directory image paths are relative to (the TSX directory for
            external tilesets)
        texture_provider : callable, optional
            Path -> (width, height), used when <image> has no size
        """
        tileset = cls(
            first_gid=first_gid,
            name=elem.get('name', ''),
            tile_width=size_attr(elem, 'tilewidth'),
            tile_height=size_attr(elem, 'tileheight'),
            spacing=int_attr(elem, 'spacing', 0),
            margin=int_attr(elem, 'margin', 0),
            source=source,
            image_dir=posixpath.dirname(source) if source else "",
            properties=PropertyCollection.of_parent(elem),
        )

        # Per-tile properties, keyed by GID (local id + firstgid)
        for tile_elem in elem.findall('tile'):
            gid = first_gid + int_attr(tile_elem, 'id')
            tileset.tile_properties[gid] = PropertyCollection.of_parent(tile_elem)

        img_elem = elem.find('image')
        if img_elem is None:
            logger.warning("Tileset %r has no image, no tiles created", tileset.name)
            return tileset

        tileset.image = str_attr(img_elem, 'source')
        trans = img_elem.get('trans')
        if trans:
            tileset.color_key = parse_color_key(trans)

        size = texture_size(
            tileset.image, base_path,
            int_attr(img_elem, 'width', None),
            int_attr(img_elem, 'height', None),
            texture_provider,
        )
        if size is not None:
            tileset.texture_width, tileset.texture_height = size
            tileset.build_tiles(index)

        logger.info("Loaded tileset %r: %d tiles", tileset.name, len(tileset.tiles))
        return tileset

    @property
    def layout(self) -> FrameLayout:
        return frame_layout(
            self.texture_width, self.texture_height,
            self.tile_width, self.tile_height,
            self.margin, self.spacing,
        )

    @property
    def texture_path(self) -> str:
        """
        Image path relative to the map file.

        Two external tilesets can both name "tiles.png" from different
        directories; this path tells those textures apart.
        """
        if not self.image:
            return ""
        return posixpath.normpath(posixpath.join(self.image_dir, self.image))

    @property
    def last_gid(self) -> int:
        """Last global ID of this tileset (first_gid - 1 if it has no frames)."""
        return self.first_gid + self.layout.count - 1

    def build_tiles(self, index: int) -> Dict[int, Tile]:
        """
        Create one canonical Tile per frame.

        Frames without a <tile> entry get an empty PropertyCollection.
        """
        self.tiles = {}
        for local_index, source in iter_frames(
                self.layout, self.tile_width, self.tile_height,
                self.margin, self.spacing):
            gid = self.first_gid + local_index
            self.tiles[gid] = Tile(
                gid=gid,
                source=source,
                tileset_index=index,
                properties=self.tile_properties.get(gid, PropertyCollection()),
            )
        return self.tiles

    def contains(self, gid: int) -> bool:
        return self.first_gid <= gid <= self.last_gid
