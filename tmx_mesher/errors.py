"""
Typed failures raised while loading a TMX document or building geometry

=============================================================================
FAILURE TAXONOMY
=============================================================================

    TmxError
    ├── UnsupportedFormat        unknown encoding / compression / orientation
    ├── StructuralMismatch       wrong tile-node count, missing attribute, ...
    ├── MalformedNumber          unparsable numeric token or attribute
    ├── DecompressionFailure     corrupt base64 / gzip / zlib stream
    ├── TruncatedData            binary stream shorter than width*height
    ├── InsufficientGeometry     polygon/polyline with fewer than 2 points
    └── UnresolvedTileReference  GID not found in any tileset (strict mode)

Every error can carry the name of the layer being processed and the flat
cell index where the problem was found. Both show up in str(error):

    MalformedNumber: invalid tile id 'x1' (layer='Ground', index=12)

None of these are retried: inputs are deterministic, a retry would fail the
same way.

=============================================================================
"""

from typing import Optional


class TmxError(Exception):
    """Base class for every failure raised by tmx_mesher."""

    def __init__(self, message: str, layer: Optional[str] = None,
                 index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.layer = layer
        self.index = index

    def with_context(self, layer: Optional[str] = None,
                     index: Optional[int] = None) -> 'TmxError':
        """Fill in missing context and return self (for re-raising)."""
        if self.layer is None:
            self.layer = layer
        if self.index is None:
            self.index = index
        return self

    def __str__(self) -> str:
        context = []
        if self.layer is not None:
            context.append(f"layer={self.layer!r}")
        if self.index is not None:
            context.append(f"index={self.index}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class UnsupportedFormat(TmxError):
    """Unknown encoding, compression or orientation tag."""


class StructuralMismatch(TmxError):
    """The document shape does not match what its attributes declare."""


class MalformedNumber(TmxError):
    """A numeric token or attribute could not be parsed."""


class DecompressionFailure(TmxError):
    """A base64, gzip or zlib stream is corrupt."""


class TruncatedData(TmxError):
    """A binary tile stream holds fewer IDs than the layer needs."""


class InsufficientGeometry(TmxError):
    """A polygon or polyline object has too few points to extrude."""


class UnresolvedTileReference(TmxError):
    """A GID does not belong to any tileset (raised only in strict mode)."""
