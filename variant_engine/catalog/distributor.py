"""Quantity distribution across detected variants.

A purchase line such as "S, M, Đỏ, Đen" x 10 names values of several
attribute types. Tokens are grouped by type; when more than one type is
present, the groups are crossed into combined labels ("S, Đỏ", ...),
otherwise each distinct value is its own label. Every label receives
floor(total / labels); any remainder is dropped and logged.
"""

import itertools
from collections.abc import Sequence

import structlog

from variant_engine.catalog.attributes import TYPE_ORDER, AttributeType
from variant_engine.catalog.detector import AttributeDetector, CatalogAttributeDetector
from variant_engine.domain.exceptions import InvalidQuantityError
from variant_engine.domain.models import PerVariant

logger = structlog.get_logger()

# Detection precedence when a token could belong to several types
_CLASSIFY_ORDER = (AttributeType.TEXT_SIZE, AttributeType.NUMBER_SIZE, AttributeType.COLOR)


def split_variant_tokens(text: str | None) -> list[str]:
    """Split a comma-separated variant description into tokens."""
    if not text:
        return []
    return [token.strip() for token in text.split(",") if token.strip()]


def undistributed(total_quantity: int, allocations: Sequence[PerVariant]) -> int:
    """Get the units a distribution left unassigned.

    Args:
        total_quantity: Quantity that was distributed.
        allocations: Result of QuantityDistributor.distribute.

    Returns:
        Units not assigned to any label.
    """
    return total_quantity - sum(a.quantity for a in allocations)


class QuantityDistributor:
    """Splits a purchased quantity across the variants a text names.

    Example usage:
        distributor = QuantityDistributor()
        distributor.distribute(10, ["Đỏ", "Đen"])
        # [PerVariant("Đỏ", 5), PerVariant("Đen", 5)]
    """

    def __init__(self, detector: AttributeDetector | None = None) -> None:
        """Initialize distributor.

        Args:
            detector: Token classifier (catalog-backed one if omitted).
        """
        self.detector = detector or CatalogAttributeDetector()

    def classify(self, token: str) -> AttributeType | None:
        """Get the single detected type of a raw token.

        Args:
            token: Raw variant token.

        Returns:
            Detected type, or None for unknown tokens.
        """
        detected = self.detector.detect(token)
        for attribute_type in _CLASSIFY_ORDER:
            if detected.tokens(attribute_type):
                return attribute_type
        return None

    def canonical_name(self, token: str, attribute_type: AttributeType) -> str:
        """Get the catalog spelling of a classified token.

        "đỏ" and "Đỏ" name the same value and both come back as "Đỏ".
        """
        names = self.detector.detect(token).tokens(attribute_type)
        return names[0] if names else token

    def distribute(self, total_quantity: int, tokens: Sequence[str]) -> list[PerVariant]:
        """Split a quantity across the variant labels the tokens describe.

        Args:
            total_quantity: Units purchased.
            tokens: Raw variant tokens.

        Returns:
            One allocation per label. Without tokens, or when no token is
            recognized, a single unexpanded line carries the full quantity.

        Raises:
            InvalidQuantityError: If total_quantity is negative.
        """
        if total_quantity < 0:
            raise InvalidQuantityError(total_quantity)

        cleaned = [t.strip() for t in tokens if t and t.strip()]
        if not cleaned:
            return [PerVariant(label="", quantity=total_quantity)]

        by_type: dict[AttributeType, list[str]] = {t: [] for t in TYPE_ORDER}
        unknown: list[str] = []
        for token in cleaned:
            attribute_type = self.classify(token)
            if attribute_type is None:
                unknown.append(token)
                continue
            name = self.canonical_name(token, attribute_type)
            if name not in by_type[attribute_type]:
                by_type[attribute_type].append(name)

        present = [t for t in TYPE_ORDER if by_type[t]]
        if not present:
            logger.info("No variant tokens recognized", tokens=cleaned)
            return [PerVariant(label=", ".join(cleaned), quantity=total_quantity)]

        if unknown:
            logger.warning("Ignoring unrecognized variant tokens", tokens=unknown)

        if len(present) > 1:
            labels = [
                ", ".join(combo)
                for combo in itertools.product(*(by_type[t] for t in present))
            ]
        else:
            labels = list(by_type[present[0]])

        per_variant = total_quantity // len(labels)
        remainder = total_quantity - per_variant * len(labels)
        if remainder:
            logger.warning(
                "Quantity remainder dropped",
                total_quantity=total_quantity,
                label_count=len(labels),
                per_variant=per_variant,
                remainder=remainder,
            )

        return [PerVariant(label=label, quantity=per_variant) for label in labels]
