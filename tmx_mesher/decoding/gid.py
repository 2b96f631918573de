"""
GID resolution: raw 32-bit IDs -> Tile instances with flip state

=============================================================================
FLIP FLAGS
=============================================================================

The two highest bits of a raw ID say how the tile is mirrored:

    bit 31 (0x80000000)  horizontal flip
    bit 30 (0x40000000)  vertical flip
    bits 0..29           canonical GID

    raw = 0x80000005  ->  GID 5, flipped horizontally
    raw = 0xC0000005  ->  GID 5, flipped both ways

=============================================================================
INSTANCING POLICY
=============================================================================

make_unique=True:
    Every non-empty cell gets its own clone, stamped with its flip state.
    No two cells share a Tile, so per-cell state never leaks.

make_unique=False:
    Cells share the canonical Tile when its flip state already matches.
    Otherwise the cell needs a flipped variant. A flipped tile is NOT the
    same tile as the unflipped one, even with an identical source rect.

    Variants live in a FlipVariantCache: the first request for (gid, flip)
    clones the canonical tile, later requests reuse that clone. Cloning is
    done under a lock per canonical tile, so two threads resolving
    different layers never create duplicate variants.

GIDs that no tileset owns resolve to None (empty cell). Sparse maps with
stale references are common, and one bad cell should not sink the load.

=============================================================================
"""

import threading
from collections import defaultdict
from typing import Dict, Mapping, Optional, Tuple

from ..map.tileset import FlipState, Tile

FLIPPED_HORIZONTALLY_FLAG = 0x80000000
FLIPPED_VERTICALLY_FLAG = 0x40000000
GID_MASK = ~(FLIPPED_HORIZONTALLY_FLAG | FLIPPED_VERTICALLY_FLAG) & 0xFFFFFFFF


def split_gid(raw_id: int) -> Tuple[int, FlipState]:
    """Separate a raw ID into (canonical gid, flip state)."""
    raw_id = int(raw_id)
    flip = FlipState.NONE
    if raw_id & FLIPPED_HORIZONTALLY_FLAG:
        flip |= FlipState.HORIZONTAL
    if raw_id & FLIPPED_VERTICALLY_FLAG:
        flip |= FlipState.VERTICAL
    return raw_id & GID_MASK, flip


class FlipVariantCache:
    """
    Copy-on-first-touch store of flipped tile variants.

    One canonical Tile -> at most one clone per flip state.
    """

    def __init__(self):
        self._variants: Dict[Tuple[int, FlipState], Tile] = {}
        self._locks: Dict[int, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, tile: Tile) -> threading.Lock:
        with self._locks_guard:
            return self._locks[id(tile)]

    def get(self, tile: Tile, flip: FlipState) -> Tile:
        if tile.flip == flip:
            return tile
        key = (id(tile), flip)
        variant = self._variants.get(key)
        if variant is None:
            with self._lock_for(tile):
                variant = self._variants.get(key)
                if variant is None:
                    variant = tile.clone(flip)
                    self._variants[key] = variant
        return variant

    def __len__(self) -> int:
        return len(self._variants)


def resolve(raw_id: int, tiles: Mapping[int, Tile], make_unique: bool = False,
            variants: Optional[FlipVariantCache] = None
            ) -> Tuple[Optional[Tile], FlipState]:
    """
    Resolve one raw ID to a Tile.

    Parameters:
    -----------
    raw_id : int
        ID straight from the decoder, flip bits included
    tiles : Mapping[int, Tile]
        Canonical tiles of the map, keyed by GID
    make_unique : bool
        Clone every resolved tile (see module docs)
    variants : FlipVariantCache, optional
        Shared store for flipped variants when make_unique is False.
        Without it, every mismatching lookup makes a fresh clone.

    Returns:
    --------
    (Tile or None, FlipState)
    """
    gid, flip = split_gid(raw_id)
    tile = tiles.get(gid)
    if tile is None:
        return None, flip

    if make_unique:
        return tile.clone(flip), flip
    if tile.flip == flip:
        return tile, flip
    if variants is not None:
        return variants.get(tile, flip), flip
    return tile.clone(flip), flip
