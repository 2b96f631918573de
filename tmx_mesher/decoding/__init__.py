"""Tile data decoding and GID resolution"""

from .tile_data import Compression, Encoding, decode
from .gid import (
    FLIPPED_HORIZONTALLY_FLAG, FLIPPED_VERTICALLY_FLAG,
    FlipVariantCache, resolve, split_gid,
)

__all__ = [
    "Compression", "Encoding", "decode",
    "FLIPPED_HORIZONTALLY_FLAG", "FLIPPED_VERTICALLY_FLAG",
    "FlipVariantCache", "resolve", "split_gid",
]
