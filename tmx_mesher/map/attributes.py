"""Typed reads of XML attributes, raising tmx_mesher errors"""

import xml.etree.ElementTree as ET
from typing import Optional

from ..errors import MalformedNumber, StructuralMismatch

_REQUIRED = object()


def _raw(elem: ET.Element, name: str, default):
    value = elem.get(name)
    if value is None or value == '':
        if default is _REQUIRED:
            raise StructuralMismatch(
                f"<{elem.tag}> is missing required attribute '{name}'"
            )
        return None
    return value


def int_attr(elem: ET.Element, name: str, default=_REQUIRED) -> Optional[int]:
    """
    Read an integer attribute.

    Missing attribute -> default (StructuralMismatch if no default given).
    Unparsable value  -> MalformedNumber.
    """
    value = _raw(elem, name, default)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        # Tiled writes "32.0" for some sizes in older versions
        try:
            as_float = float(value)
        except ValueError:
            raise MalformedNumber(
                f"<{elem.tag}> attribute '{name}' is not an integer: {value!r}"
            ) from None
        if not as_float.is_integer():
            raise MalformedNumber(
                f"<{elem.tag}> attribute '{name}' is not an integer: {value!r}"
            )
        return int(as_float)


def size_attr(elem: ET.Element, name: str) -> int:
    """Read a required pixel size; zero or negative is StructuralMismatch."""
    value = int_attr(elem, name)
    if value <= 0:
        raise StructuralMismatch(
            f"<{elem.tag}> attribute '{name}' must be positive, got {value}"
        )
    return value


def float_attr(elem: ET.Element, name: str, default=_REQUIRED) -> Optional[float]:
    """Read a float attribute (same rules as int_attr)."""
    value = _raw(elem, name, default)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise MalformedNumber(
            f"<{elem.tag}> attribute '{name}' is not a number: {value!r}"
        ) from None


def str_attr(elem: ET.Element, name: str, default=_REQUIRED) -> Optional[str]:
    """Read a string attribute; empty counts as missing."""
    value = _raw(elem, name, default)
    if value is None:
        return default
    return value
