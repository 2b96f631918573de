"""
Custom properties attached to maps, layers, tiles and objects

=============================================================================
PROPERTY LOOKUP
=============================================================================

Tiled lets designers attach key/value pairs to almost anything:

    <properties>
        <property name="Solid" type="bool" value="true"/>
        <property name="damage" type="int" value="10"/>
        <property name="description">A wooden
    door</property>
    </properties>

Keys are looked up CASE-INSENSITIVELY: "Solid", "solid" and "SOLID" are
the same property. Values are kept as the raw string from the document;
the typed accessors parse on read and fall back to a safe default:

    get_string  -> ""
    get_bool    -> False
    get_int     -> 0
    get_float   -> 0.0

A missing key and an unparsable value both give the default. Game code can
ask for properties without guarding every lookup.

=============================================================================
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional


@dataclass(frozen=True)
class Property:
    """
    One custom property.

    raw_value is exactly what the document holds; value converts it using
    the declared type (string when absent).
    """
    name: str                    # Property name as written (original case)
    raw_value: str = ""          # Unparsed value
    type: str = "string"         # Declared Tiled type

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Property':
        """
        Parse property from XML element.

        Multi-line string values are stored as element text instead of
        the value attribute.
        """
        value = elem.get('value')
        if value is None:
            value = elem.text or ''
        return cls(
            name=elem.get('name', ''),
            raw_value=value,
            type=elem.get('type', 'string'),
        )

    @property
    def value(self) -> Any:
        """Value converted to the declared type (raw string if it won't parse)."""
        if self.type == 'int':
            return _parse_int(self.raw_value, self.raw_value)
        if self.type == 'float':
            return _parse_float(self.raw_value, self.raw_value)
        if self.type == 'bool':
            return _parse_bool(self.raw_value, False)
        return self.raw_value


def _parse_bool(text: str, default: bool) -> bool:
    text = text.strip().lower()
    if text == 'true':
        return True
    if text == 'false':
        return False
    return default


def _parse_int(text: str, default):
    try:
        return int(text.strip())
    except ValueError:
        return default


def _parse_float(text: str, default):
    try:
        return float(text.strip())
    except ValueError:
        return default


class PropertyCollection(Mapping[str, Property]):
    """
    Read-only mapping of lower-cased property name -> Property.

    Behaves like a dict for iteration and membership, plus typed getters.
    """

    def __init__(self, properties: Optional[Dict[str, Property]] = None):
        self._items: Dict[str, Property] = {}
        for prop in (properties or {}).values():
            self._items[prop.name.lower()] = prop

    @classmethod
    def from_xml(cls, elem: Optional[ET.Element]) -> 'PropertyCollection':
        """
        Build a collection from a <properties> element.

        Accepts None (no <properties> child) and returns an empty collection.
        Later duplicates override earlier ones.
        """
        collection = cls()
        if elem is not None:
            for prop_elem in elem.findall('property'):
                prop = Property.from_xml(prop_elem)
                collection._items[prop.name.lower()] = prop
        return collection

    @classmethod
    def of_parent(cls, parent: ET.Element) -> 'PropertyCollection':
        """Collection for the <properties> child of an element."""
        return cls.from_xml(parent.find('properties'))

    # Mapping protocol --------------------------------------------------

    def __getitem__(self, key: str) -> Property:
        return self._items[key.lower()]

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        pairs = ', '.join(f"{k}={p.raw_value!r}" for k, p in self._items.items())
        return f"PropertyCollection({pairs})"

    # Typed accessors ---------------------------------------------------

    def _raw(self, key: str) -> Optional[str]:
        prop = self._items.get(key.lower())
        return None if prop is None else prop.raw_value

    def get_string(self, key: str, default: str = "") -> str:
        raw = self._raw(key)
        return default if raw is None else raw

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._raw(key)
        return default if raw is None else _parse_bool(raw, default)

    def get_int(self, key: str, default: int = 0) -> int:
        raw = self._raw(key)
        return default if raw is None else _parse_int(raw, default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        raw = self._raw(key)
        return default if raw is None else _parse_float(raw, default)
