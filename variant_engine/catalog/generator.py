"""Variant generator.

Expands attribute lines into the full Cartesian set of concrete variants,
each with a unique product code and a display name.

Code rules:
    - numeric value codes are appended verbatim ("28")
    - other value codes contribute their first letter, upper-cased ("den" -> "D")
    - a code already in use gets "1", "11", "111", ... appended until free

Example:
    base "NTEST", values S / den / 28  ->  "NTESTSD28", "NTEST (S, Đen, 28)"
"""

import itertools
import math
import re
from collections.abc import Iterable, Iterator, Sequence

import structlog

from variant_engine.domain.exceptions import CollisionExhaustionError, StructuralError
from variant_engine.domain.models import (
    AttributeLine,
    AttributeValue,
    GeneratedVariant,
    ProductData,
)

logger = structlog.get_logger()


# ============================================================================
# Constants
# ============================================================================

DEFAULT_BASE_CODE = "PRODUCT"
DEFAULT_PRODUCT_NAME = "Product"
DEFAULT_MAX_SUFFIX_RETRIES = 50
COLLISION_SUFFIX_CHAR = "1"

_NUMERIC_CODE = re.compile(r"^[0-9]+$")

Combination = tuple[AttributeValue, ...]


# ============================================================================
# Combinations
# ============================================================================


def _bind_line(line: AttributeLine) -> list[AttributeValue]:
    return [
        value if value.attribute_id else value.in_line(line.attribute_id, line.attribute_name)
        for value in line.values
    ]


def iter_combinations(lines: Sequence[AttributeLine]) -> Iterator[Combination]:
    """Iterate the Cartesian product of attribute line values.

    Tuples hold one value per line, in line order; the first line varies
    slowest. Each call returns a fresh iterator.

    Args:
        lines: Attribute lines in significance order.

    Returns:
        Iterator of value tuples (empty when there are no lines).

    Raises:
        StructuralError: If any line has no values.
    """
    for index, line in enumerate(lines):
        if not line.values:
            raise StructuralError(
                f"attribute line '{line.attribute_name}' has no values",
                line_index=index,
            )
    if not lines:
        return iter(())
    return itertools.product(*(_bind_line(line) for line in lines))


def generate_combinations(lines: Sequence[AttributeLine]) -> list[Combination]:
    """Materialize all value combinations of the attribute lines.

    Args:
        lines: Attribute lines in significance order.

    Returns:
        List of value tuples.

    Raises:
        StructuralError: If any line has no values.
    """
    return list(iter_combinations(lines))


def combination_count(lines: Sequence[AttributeLine]) -> int:
    """Get the number of combinations the lines expand to."""
    if not lines:
        return 0
    return math.prod(len(line.values) for line in lines)


# ============================================================================
# Codes and Names
# ============================================================================


class CodeAssigner:
    """Assigns collision-free product codes derived from a base code.

    The used-code set belongs to the caller: it is mutated in place so
    that every code handed out is remembered for the rest of the run.
    Seed it with the codes that already exist for the base product.

    Example usage:
        assigner = CodeAssigner("N497", used_codes={"N497D28"})
        assigner.assign((black, size_28))   # "N497D281"
    """

    def __init__(
        self,
        base_code: str,
        used_codes: set[str] | None = None,
        max_retries: int = DEFAULT_MAX_SUFFIX_RETRIES,
    ) -> None:
        """Initialize assigner.

        Args:
            base_code: Code every variant code starts with.
            used_codes: Codes that must not be handed out (mutated).
            max_retries: Maximum suffix lengths to try per code.
        """
        self.base_code = base_code
        self.max_retries = max_retries
        self._used = used_codes if used_codes is not None else set()

    @property
    def used_codes(self) -> frozenset[str]:
        """Snapshot of the codes known to be taken."""
        return frozenset(self._used)

    @staticmethod
    def code_fragment(value: AttributeValue) -> str:
        """Get the code fragment one attribute value contributes.

        Args:
            value: Attribute value.

        Returns:
            The numeric code verbatim, otherwise the upper-cased first
            character of the code (or of the name when there is no code).
        """
        raw = value.code or value.name
        if not raw:
            return ""
        if _NUMERIC_CODE.match(raw):
            return raw
        return raw[0].upper()

    def candidate(self, combination: Iterable[AttributeValue]) -> str:
        """Build the unsuffixed code for a combination."""
        return self.base_code + "".join(self.code_fragment(v) for v in combination)

    def assign(self, combination: Iterable[AttributeValue]) -> str:
        """Assign a unique code to a combination and mark it as used.

        Args:
            combination: Attribute values in line order.

        Returns:
            Code unique against the seeded and previously assigned codes.

        Raises:
            CollisionExhaustionError: If every suffix up to max_retries is taken.
        """
        candidate = self.candidate(combination)
        code = candidate
        retries = 0

        while code in self._used:
            retries += 1
            if retries > self.max_retries:
                raise CollisionExhaustionError(self.base_code, candidate, self.max_retries)
            code = candidate + COLLISION_SUFFIX_CHAR * retries

        if retries:
            logger.debug(
                "Resolved code collision",
                base_code=self.base_code,
                candidate=candidate,
                code=code,
                retries=retries,
            )

        self._used.add(code)
        return code


def compose_name(base_name: str, combination: Iterable[AttributeValue]) -> str:
    """Build a variant display name.

    Args:
        base_name: Base product name.
        combination: Attribute values in line order.

    Returns:
        Name like "Shirt (S, Đen)".
    """
    return f"{base_name} ({', '.join(v.name for v in combination)})"


def variant_suffix(variant: GeneratedVariant, base_code: str) -> str:
    """Get the variant-specific part of a variant's code.

    Args:
        variant: Generated variant.
        base_code: Base product code.

    Returns:
        Code without the base prefix, or the whole code if it does not
        start with the base code.
    """
    if base_code and variant.default_code.startswith(base_code):
        suffix = variant.default_code[len(base_code):]
        return suffix or variant.default_code
    return variant.default_code


def has_collision_suffix(variant: GeneratedVariant, base_code: str) -> bool:
    """Check whether a variant's code needed a collision suffix.

    Args:
        variant: Generated variant.
        base_code: Base product code the variant was synthesized from.

    Returns:
        True if the code differs from the unsuffixed candidate.
    """
    candidate = CodeAssigner(base_code).candidate(variant.attribute_values)
    return variant.default_code != candidate


# ============================================================================
# Synthesizer
# ============================================================================


class VariantSynthesizer:
    """Expands a base product and its attribute lines into variants.

    Synthesis is pure: the used-code set lives only for one call. Two
    concurrent calls over the same base product can pick the same code,
    so callers serialize synthesis per base product.

    Example usage:
        synthesizer = VariantSynthesizer()
        variants = synthesizer.synthesize(product, [size_line, color_line])
        for variant in variants:
            print(variant.default_code, variant.name)
    """

    def __init__(self, max_retries: int = DEFAULT_MAX_SUFFIX_RETRIES) -> None:
        """Initialize synthesizer.

        Args:
            max_retries: Collision suffix bound passed to CodeAssigner.
        """
        self.max_retries = max_retries

    def synthesize(
        self,
        product: ProductData,
        lines: Sequence[AttributeLine],
        existing_codes: Iterable[str] | None = None,
    ) -> list[GeneratedVariant]:
        """Generate every variant of a product.

        Args:
            product: Base product.
            lines: Attribute lines; empty means the product has no variation.
            existing_codes: Codes already taken for this base product.

        Returns:
            One unpersisted variant per combination, in combination order.

        Raises:
            StructuralError: If any line has no values.
            CollisionExhaustionError: If a variant cannot get a free code.
        """
        if not lines:
            return []

        combinations = generate_combinations(lines)
        base_code = product.default_code or DEFAULT_BASE_CODE
        base_name = product.name or DEFAULT_PRODUCT_NAME
        assigner = CodeAssigner(base_code, set(existing_codes or ()), self.max_retries)

        variants = []
        for combination in combinations:
            name = compose_name(base_name, combination)
            variants.append(
                GeneratedVariant(
                    id=0,
                    name=name,
                    name_get=name,
                    default_code=assigner.assign(combination),
                    attribute_values=combination,
                    active=True,
                    product_template_id=product.id or 0,
                    price_variant=product.list_price or 0,
                )
            )

        logger.info(
            "Synthesized variants",
            base_code=base_code,
            line_count=len(lines),
            variant_count=len(variants),
        )
        return variants
