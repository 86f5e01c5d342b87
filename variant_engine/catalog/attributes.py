"""Attribute catalog registry.

The remote catalog partitions variant attributes into three types, each
with its own list of values:

    1 - Size Chữ (text sizes: S, M, L, ...)
    3 - Màu (colors: Đỏ, Đen, ...)
    4 - Size Số (number sizes: 28, 29, ...)

This module keeps those lists as typed registries with total lookups.
Value records use the format:

    ID | Name | Code
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Self

import structlog

from variant_engine.domain.exceptions import LookupMissError
from variant_engine.domain.models import AttributeLine, AttributeValue

logger = structlog.get_logger()


class AttributeType(str, Enum):
    """Attribute types a product can vary by."""

    TEXT_SIZE = "text-size"
    COLOR = "color"
    NUMBER_SIZE = "number-size"

    @property
    def attribute_id(self) -> int:
        """Attribute id in the remote catalog."""
        return _ATTRIBUTE_IDS[self]

    @property
    def display_name(self) -> str:
        """Attribute name in the remote catalog."""
        return _ATTRIBUTE_NAMES[self]


_ATTRIBUTE_IDS = {
    AttributeType.TEXT_SIZE: 1,
    AttributeType.COLOR: 3,
    AttributeType.NUMBER_SIZE: 4,
}

_ATTRIBUTE_NAMES = {
    AttributeType.TEXT_SIZE: "Size Chữ",
    AttributeType.COLOR: "Màu",
    AttributeType.NUMBER_SIZE: "Size Số",
}

# Lines emitted from flat variant text follow this order
TYPE_ORDER = (AttributeType.TEXT_SIZE, AttributeType.COLOR, AttributeType.NUMBER_SIZE)


class AttributeCatalog:
    """Registry of attribute values, partitioned by attribute type.

    Lookups never raise: they return None for unknown names. Text-size
    and color names match case-insensitively, number sizes match exactly.

    Example usage:
        catalog = AttributeCatalog.default()
        red = catalog.by_color("đỏ")
        line, misses = catalog.line_for(AttributeType.TEXT_SIZE, ["S", "M"])
    """

    # Embedded snapshot of the remote attribute lists for offline use
    EMBEDDED_ATTRIBUTES = '''
# text-size
1 | S | S
2 | M | M
3 | L | L
4 | XL | XL
5 | XXL | XXL
31 | XS | XS
32 | XXXL | XXXL
160 | Freesize | Freesize
# color
6 | Trắng | trang
7 | Đen | den
8 | Đỏ | do
9 | Vàng | vang
10 | Cam | cam
11 | Xám | xam
12 | Hồng | hong
13 | Xanh Dương | xanhduong
14 | Xanh Lá | xanhla
15 | Tím | tim
16 | Nâu | nau
17 | Kem | kem
18 | Be | be
33 | Xanh Đen | xanhden
34 | Xanh Rêu | xanhreu
35 | Hồng Phấn | hongphan
36 | Đô | do
37 | Bạc | bac
38 | Nude | nude
39 | Trắng Kem | trangkem
40 | Xám Tiêu | xamtieu
41 | Sọc | soc
42 | Caro | caro
# number-size
80 | 1 | 1
81 | 2 | 2
82 | 3 | 3
83 | 4 | 4
84 | 5 | 5
85 | 6 | 6
86 | 27 | 27
87 | 28 | 28
88 | 29 | 29
89 | 30 | 30
90 | 31 | 31
91 | 32 | 32
92 | 33 | 33
93 | 34 | 34
94 | 35 | 35
95 | 36 | 36
96 | 37 | 37
97 | 38 | 38
98 | 39 | 39
99 | 40 | 40
100 | 41 | 41
101 | 42 | 42
'''.strip()

    def __init__(
        self,
        text_sizes: Iterable[AttributeValue] = (),
        colors: Iterable[AttributeValue] = (),
        number_sizes: Iterable[AttributeValue] = (),
    ) -> None:
        """Initialize catalog from attribute values.

        Args:
            text_sizes: Values of the text-size attribute.
            colors: Values of the color attribute.
            number_sizes: Values of the number-size attribute.
        """
        self._values: dict[AttributeType, list[AttributeValue]] = {}
        self._index: dict[AttributeType, dict[str, AttributeValue]] = {}
        for attribute_type, values in (
            (AttributeType.TEXT_SIZE, text_sizes),
            (AttributeType.COLOR, colors),
            (AttributeType.NUMBER_SIZE, number_sizes),
        ):
            self._register(attribute_type, values)

    @classmethod
    def default(cls) -> Self:
        """Build the catalog from the embedded attribute snapshot.

        Returns:
            Catalog with the embedded values.
        """
        return cls.parse(cls.EMBEDDED_ATTRIBUTES.splitlines())

    @classmethod
    def parse(cls, lines: Iterable[str]) -> Self:
        """Build a catalog from "ID | Name | Code" lines.

        Sections start with a "# <attribute-type>" header. Blank lines and
        malformed rows are ignored.

        Args:
            lines: Lines in the embedded format.

        Returns:
            Parsed catalog.
        """
        sections: dict[AttributeType, list[AttributeValue]] = {t: [] for t in AttributeType}
        current: AttributeType | None = None

        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            if line.startswith("#"):
                try:
                    current = AttributeType(line.lstrip("#").strip())
                except ValueError:
                    current = None
                continue
            if current is None:
                continue

            parts = [p.strip() for p in line.split("|")]
            if len(parts) < 2:
                continue
            try:
                value_id = int(parts[0])
            except ValueError:
                continue

            sections[current].append(
                AttributeValue(
                    id=value_id,
                    name=parts[1],
                    code=parts[2] if len(parts) > 2 else "",
                    sequence=len(sections[current]) + 1,
                )
            )

        return cls(
            text_sizes=sections[AttributeType.TEXT_SIZE],
            colors=sections[AttributeType.COLOR],
            number_sizes=sections[AttributeType.NUMBER_SIZE],
        )

    @classmethod
    def from_records(
        cls,
        size_text: Iterable[dict[str, Any]] = (),
        color: Iterable[dict[str, Any]] = (),
        size_number: Iterable[dict[str, Any]] = (),
    ) -> Self:
        """Build a catalog from remote-style records.

        Args:
            size_text: Records with Id, Name, Code, Sequence keys.
            color: Color records.
            size_number: Number-size records.

        Returns:
            Catalog with the given values.
        """
        return cls(
            text_sizes=[AttributeValue.from_record(r) for r in size_text],
            colors=[AttributeValue.from_record(r) for r in color],
            number_sizes=[AttributeValue.from_record(r) for r in size_number],
        )

    def _register(
        self,
        attribute_type: AttributeType,
        values: Iterable[AttributeValue],
    ) -> None:
        bound = [
            v.in_line(attribute_type.attribute_id, attribute_type.display_name)
            for v in values
        ]
        index: dict[str, AttributeValue] = {}
        for value in bound:
            # First registration of a name wins
            index.setdefault(self._key(attribute_type, value.name), value)
        self._values[attribute_type] = bound
        self._index[attribute_type] = index

    @staticmethod
    def _key(attribute_type: AttributeType, name: str) -> str:
        name = name.strip()
        if attribute_type is AttributeType.NUMBER_SIZE:
            return name
        return name.casefold()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def lookup(self, attribute_type: AttributeType, name: str) -> AttributeValue | None:
        """Find a value by name within one attribute type.

        Args:
            attribute_type: Attribute type to search.
            name: Value name.

        Returns:
            AttributeValue if known, None otherwise.
        """
        if not name:
            return None
        return self._index[attribute_type].get(self._key(attribute_type, name))

    def by_color(self, name: str) -> AttributeValue | None:
        """Find a color by name (case-insensitive)."""
        return self.lookup(AttributeType.COLOR, name)

    def by_text_size(self, name: str) -> AttributeValue | None:
        """Find a text size by name (case-insensitive)."""
        return self.lookup(AttributeType.TEXT_SIZE, name)

    def by_number_size(self, name: str) -> AttributeValue | None:
        """Find a number size by exact name."""
        return self.lookup(AttributeType.NUMBER_SIZE, name)

    def require(self, attribute_type: AttributeType, name: str) -> AttributeValue:
        """Find a value by name, raising when it is unknown.

        Args:
            attribute_type: Attribute type to search.
            name: Value name.

        Returns:
            The matching AttributeValue.

        Raises:
            LookupMissError: If the name is not in the catalog.
        """
        value = self.lookup(attribute_type, name)
        if value is None:
            raise LookupMissError(name, attribute_type.value)
        return value

    def classify(self, token: str) -> AttributeType | None:
        """Get the attribute type a token belongs to.

        Text sizes are checked first, then colors, then number sizes.

        Args:
            token: Raw value name.

        Returns:
            AttributeType of the first registry that knows the token.
        """
        for attribute_type in TYPE_ORDER:
            if self.lookup(attribute_type, token) is not None:
                return attribute_type
        return None

    def values(self, attribute_type: AttributeType) -> list[AttributeValue]:
        """Get all values of an attribute type in catalog order."""
        return list(self._values[attribute_type])

    def names(self, attribute_type: AttributeType) -> list[str]:
        """Get all value names of an attribute type in catalog order."""
        return [v.name for v in self._values[attribute_type]]

    def line_for(
        self,
        attribute_type: AttributeType,
        names: Iterable[str],
    ) -> tuple[AttributeLine | None, list[str]]:
        """Build an attribute line from value names.

        Unknown names are skipped and reported rather than fabricated.

        Args:
            attribute_type: Attribute type of the line.
            names: Value names in the desired order.

        Returns:
            Tuple of (line or None when nothing resolved, unresolved names).
        """
        resolved: list[AttributeValue] = []
        misses: list[str] = []
        for name in names:
            value = self.lookup(attribute_type, name)
            if value is None:
                misses.append(name)
                logger.warning(
                    "Attribute value not in catalog",
                    value=name,
                    attribute_type=attribute_type.value,
                )
                continue
            if value not in resolved:
                resolved.append(value)

        if not resolved:
            return None, misses

        line = AttributeLine(
            attribute_id=attribute_type.attribute_id,
            attribute_name=attribute_type.display_name,
            values=tuple(resolved),
        )
        return line, misses
