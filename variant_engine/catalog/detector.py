"""Attribute detection and variant text parsing.

Turns human-written variant descriptions into attribute tokens and
attribute lines. Two text formats are understood:

    grouped: "(S | M) (31 | 30) (Đỏ | Đen)"   one group per attribute line
    flat:    "M, L, Đen, 28"                    each token classified alone
"""

import re
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from variant_engine.catalog.attributes import TYPE_ORDER, AttributeCatalog, AttributeType
from variant_engine.domain.models import AttributeLine

logger = structlog.get_logger()

_GROUP_PATTERN = re.compile(r"\(([^)]+)\)")
_FRAGMENT_SPLIT = re.compile(r"[,|()/]")
_DIGITS = re.compile(r"^\d+$")
_SHORT_LETTERS = re.compile(r"^[A-Za-z]{1,4}$")


@dataclass
class DetectedAttributes:
    """Attribute tokens found in a piece of text, by type."""

    colors: list[str] = field(default_factory=list)
    size_text: list[str] = field(default_factory=list)
    size_number: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check whether nothing was detected."""
        return not (self.colors or self.size_text or self.size_number)

    def tokens(self, attribute_type: AttributeType) -> list[str]:
        """Get the detected tokens of one attribute type."""
        if attribute_type is AttributeType.COLOR:
            return self.colors
        if attribute_type is AttributeType.TEXT_SIZE:
            return self.size_text
        return self.size_number


class AttributeDetector(Protocol):
    """Classifies free text into attribute tokens.

    Implementations must be pure and total: unrecognized text returns
    empty lists instead of raising.
    """

    def detect(self, text: str) -> DetectedAttributes:
        """Detect attribute tokens in text."""
        ...


class CatalogAttributeDetector:
    """AttributeDetector backed by an AttributeCatalog.

    Example usage:
        detector = CatalogAttributeDetector(AttributeCatalog.default())
        detector.detect("S, Đỏ")   # size_text=["S"], colors=["Đỏ"]
    """

    def __init__(self, catalog: AttributeCatalog | None = None) -> None:
        """Initialize detector.

        Args:
            catalog: Catalog to classify against (embedded one if omitted).
        """
        self.catalog = catalog or AttributeCatalog.default()

    def detect(self, text: str) -> DetectedAttributes:
        """Detect attribute tokens in text.

        The whole text is tried first, then each fragment between commas,
        pipes, slashes and parentheses, then the words of fragments that
        did not resolve. Detected tokens use the catalog's canonical names.

        Args:
            text: Free text such as "S, Đỏ" or "Áo thun Đen".

        Returns:
            Detected tokens; empty when nothing is recognized.
        """
        detected = DetectedAttributes()
        if not text or not text.strip():
            return detected

        stripped = text.strip()
        if self._collect(stripped, detected):
            return detected

        for fragment in _FRAGMENT_SPLIT.split(stripped):
            fragment = fragment.strip()
            if not fragment:
                continue
            if self._collect(fragment, detected):
                continue
            for word in fragment.split():
                self._collect(word, detected)

        return detected

    def detected_type(self, text: str) -> AttributeType | None:
        """Get the single attribute type of a token.

        Text sizes win over number sizes, which win over colors.

        Args:
            text: Raw token.

        Returns:
            Detected type, or None when the token is unknown.
        """
        detected = self.detect(text)
        if detected.size_text:
            return AttributeType.TEXT_SIZE
        if detected.size_number:
            return AttributeType.NUMBER_SIZE
        if detected.colors:
            return AttributeType.COLOR
        return None

    def _collect(self, token: str, detected: DetectedAttributes) -> bool:
        attribute_type = self.catalog.classify(token)
        if attribute_type is None:
            return False
        value = self.catalog.lookup(attribute_type, token)
        bucket = detected.tokens(attribute_type)
        if value is not None and value.name not in bucket:
            bucket.append(value.name)
        return True


# ============================================================================
# Variant Text Parsing
# ============================================================================


@dataclass
class ParsedVariantText:
    """Attribute lines parsed from variant text, plus unresolved values."""

    lines: list[AttributeLine] = field(default_factory=list)
    misses: list[str] = field(default_factory=list)


def infer_group_type(values: list[str]) -> AttributeType:
    """Infer the attribute type of a parenthesised value group.

    All digits means number sizes, all short Latin letters (at most four)
    means text sizes, anything else is a color group.

    Args:
        values: Values of one group.

    Returns:
        Inferred attribute type.
    """
    if all(_DIGITS.match(v) for v in values):
        return AttributeType.NUMBER_SIZE
    if all(_SHORT_LETTERS.match(v) for v in values):
        return AttributeType.TEXT_SIZE
    return AttributeType.COLOR


def parse_variant_string(
    text: str | None,
    catalog: AttributeCatalog,
) -> ParsedVariantText:
    """Parse variant text into attribute lines.

    Values missing from the catalog are skipped and reported in
    ``misses``; they never produce a fabricated attribute value.

    Args:
        text: Variant text in grouped or flat format.
        catalog: Catalog used to resolve value names.

    Returns:
        Parsed lines and unresolved values.
    """
    parsed = ParsedVariantText()
    if not text or not text.strip():
        return parsed

    trimmed = text.strip()
    groups = _GROUP_PATTERN.findall(trimmed)

    if groups:
        for group in groups:
            values = [v.strip() for v in group.split("|") if v.strip()]
            if not values:
                continue
            line, misses = catalog.line_for(infer_group_type(values), values)
            parsed.misses.extend(misses)
            if line is not None:
                parsed.lines.append(line)
        return parsed

    buckets: dict[AttributeType, list[str]] = {t: [] for t in TYPE_ORDER}
    for part in trimmed.split(","):
        part = part.strip()
        if not part:
            continue
        attribute_type = catalog.classify(part)
        if attribute_type is None:
            logger.warning("Unrecognized variant token", token=part)
            parsed.misses.append(part)
            continue
        buckets[attribute_type].append(part)

    for attribute_type in TYPE_ORDER:
        if not buckets[attribute_type]:
            continue
        line, misses = catalog.line_for(attribute_type, buckets[attribute_type])
        parsed.misses.extend(misses)
        if line is not None:
            parsed.lines.append(line)

    return parsed


def format_variant_for_display(text: str | None) -> str:
    """Flatten variant text for list display.

    "(A B) (C D)" loses its parentheses and "A, B, C" loses its commas;
    values end up separated by single spaces.

    Args:
        text: Stored variant text.

    Returns:
        Display string, empty for blank input.
    """
    if not text or not text.strip():
        return ""

    trimmed = text.strip()
    if "(" in trimmed and ")" in trimmed:
        return re.sub(r"\s+", " ", re.sub(r"[()]", "", trimmed)).strip()

    return " ".join(v.strip() for v in trimmed.split(",") if v.strip())
