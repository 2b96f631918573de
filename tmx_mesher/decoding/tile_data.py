"""
Tile-data decoding: turn a layer's <data> payload into raw GIDs

=============================================================================
DATA ENCODINGS
=============================================================================

TMX stores the grid of a tile layer in one of three encodings:

1. XML node list (encoding absent):
       <data>
           <tile gid="1"/><tile gid="2"/><tile/>...
       </data>
   Exactly one <tile> per cell. A <tile/> without gid is an empty cell.

2. CSV:
       <data encoding="csv">
       1,2,3,
       4,5,6
       </data>
   Line i, token j is cell (row=i, col=j).

3. Base64, optionally compressed:
       <data encoding="base64" compression="zlib">
           eJxjZGBgYAJiZiBmAQAAQAAH
       </data>
   base64 -> [gzip|zlib inflate] -> little-endian uint32, one per cell.

=============================================================================
OUTPUT
=============================================================================

Always a flat numpy uint32 array of width*height raw IDs, row-major
(index = y * width + x). Raw IDs still carry the flip flags in their two
high bits; decoding.gid strips them.

decode() touches nothing but its arguments, so layers can be decoded in
parallel.

=============================================================================
"""

import base64
import binascii
import enum
import gzip
import zlib
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import (
    DecompressionFailure, MalformedNumber, StructuralMismatch,
    TruncatedData, UnsupportedFormat,
)

UINT32_MAX = 0xFFFFFFFF


class Encoding(enum.Enum):
    NONE = ""
    CSV = "csv"
    BASE64 = "base64"

    @classmethod
    def parse(cls, tag: Optional[str]) -> 'Encoding':
        try:
            return cls(tag or "")
        except ValueError:
            raise UnsupportedFormat(f"unknown tile data encoding: {tag!r}") from None


class Compression(enum.Enum):
    NONE = ""
    GZIP = "gzip"
    ZLIB = "zlib"

    @classmethod
    def parse(cls, tag: Optional[str]) -> 'Compression':
        try:
            return cls(tag or "")
        except ValueError:
            raise UnsupportedFormat(f"unknown tile data compression: {tag!r}") from None


def decode(payload: Union[str, Sequence[str]], width: int, height: int,
           encoding: Union[Encoding, str, None] = Encoding.NONE,
           compression: Union[Compression, str, None] = Compression.NONE,
           layer_name: Optional[str] = None) -> np.ndarray:
    """
    Decode a tile payload into width*height raw GIDs.

    Parameters:
    -----------
    payload : str or sequence of str
        Text of the <data> element (csv/base64), or the gid attribute of
        every <tile> child in document order (encoding NONE)
    width, height : int
        Layer size in tiles
    encoding, compression : enum member or tag string
        Tag strings are parsed ("" / None mean no encoding/compression)
    layer_name : str, optional
        Only used to give errors context

    Returns:
    --------
    np.ndarray : uint32 array of length width*height

    Raises:
    -------
    UnsupportedFormat, StructuralMismatch, MalformedNumber,
    DecompressionFailure, TruncatedData
    TypeError : str payload given for the node-list encoding
    """
    if not isinstance(encoding, Encoding):
        encoding = Encoding.parse(encoding)
    if not isinstance(compression, Compression):
        compression = Compression.parse(compression)

    try:
        if encoding is Encoding.CSV:
            return _decode_csv(payload, width, height)
        if encoding is Encoding.BASE64:
            return _decode_base64(payload, width, height, compression)
        if isinstance(payload, str):
            raise TypeError("node-list tile data takes one gid token per <tile>, "
                            "not the <data> text")
        return _decode_nodes(payload, width, height)
    except (StructuralMismatch, MalformedNumber,
            DecompressionFailure, TruncatedData) as e:
        raise e.with_context(layer=layer_name)


def _parse_gid(token: str, index: int) -> int:
    try:
        value = int(token)
    except ValueError:
        raise MalformedNumber(f"invalid tile id {token!r}", index=index) from None
    if not 0 <= value <= UINT32_MAX:
        raise MalformedNumber(f"tile id out of uint32 range: {token!r}", index=index)
    return value


def _decode_nodes(tokens: Sequence[str], width: int, height: int) -> np.ndarray:
    """One token per cell; a missing gid ("" or None) is an empty cell."""
    count = width * height
    if len(tokens) != count:
        raise StructuralMismatch(
            f"expected {count} tile nodes, found {len(tokens)}"
        )
    data = np.zeros(count, dtype=np.uint32)
    for i, token in enumerate(tokens):
        if token:
            data[i] = _parse_gid(token, i)
    return data


def _decode_csv(text: str, width: int, height: int) -> np.ndarray:
    """
    Row-per-line CSV. Blank lines and empty tokens (trailing commas) are
    skipped; short rows leave their remaining cells empty.
    """
    data = np.zeros(width * height, dtype=np.uint32)
    rows = [line for line in text.splitlines() if line.strip()]
    if len(rows) > height:
        raise StructuralMismatch(f"expected at most {height} CSV rows, found {len(rows)}")

    for y, line in enumerate(rows):
        tokens = [t for t in line.split(',') if t.strip()]
        if len(tokens) > width:
            raise StructuralMismatch(
                f"CSV row {y} has {len(tokens)} values, layer width is {width}",
                index=y * width + width,
            )
        for x, token in enumerate(tokens):
            index = y * width + x
            data[index] = _parse_gid(token.strip(), index)
    return data


def _decode_base64(text: str, width: int, height: int,
                   compression: Compression) -> np.ndarray:
    try:
        raw = base64.b64decode(text.strip(), validate=False)
    except (binascii.Error, ValueError) as e:
        raise DecompressionFailure(f"invalid base64 tile data: {e}") from e

    # -----------------------------------------------------------------
    # DECOMPRESSION (if compressed)
    # -----------------------------------------------------------------
    try:
        if compression is Compression.ZLIB:
            raw = zlib.decompress(raw)
        elif compression is Compression.GZIP:
            raw = gzip.decompress(raw)
    except (zlib.error, OSError, EOFError) as e:
        raise DecompressionFailure(
            f"corrupt {compression.value} tile data: {e}"
        ) from e

    # -----------------------------------------------------------------
    # BYTES -> UINT32 (little-endian, 4 bytes per tile)
    # -----------------------------------------------------------------
    count = width * height
    needed = count * 4
    if len(raw) < needed:
        raise TruncatedData(
            f"tile data holds {len(raw) // 4} ids, layer needs {count}",
            index=len(raw) // 4,
        )
    # Extra trailing bytes are ignored; astype makes a writable native copy
    return np.frombuffer(raw, dtype='<u4', count=count).astype(np.uint32)
