"""Variant planning application service.

Plans the variant set of a base product against what the local store
already holds: synthesis seeded with the codes in use, parsing of
human-written variant text, comparison with stored variants, and
splitting of purchased quantities across variants.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from variant_engine.application.ports import LocalStore
from variant_engine.catalog.attributes import AttributeCatalog
from variant_engine.catalog.detector import (
    AttributeDetector,
    CatalogAttributeDetector,
    parse_variant_string,
)
from variant_engine.catalog.distributor import QuantityDistributor, split_variant_tokens
from variant_engine.catalog.generator import VariantSynthesizer
from variant_engine.domain.models import (
    AttributeLine,
    GeneratedVariant,
    LocalVariant,
    PerVariant,
    ProductData,
    VariantDiff,
)
from variant_engine.infrastructure.config import settings
from variant_engine.reconciliation.engine import ReconciliationEngine

logger = structlog.get_logger()


@dataclass
class VariantPlan:
    """Variants planned from variant text.

    Attributes:
        variants: Synthesized variants.
        warnings: Values of the text that are not in the catalog.
    """

    variants: list[GeneratedVariant] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class VariantPlanningService:
    """Service planning variant sets for base products.

    Example usage:
        service = VariantPlanningService(store)
        plan = await service.plan_from_text(product, "(S | M) (Đỏ | Đen)")
        diff = await service.compare_with_store(product, lines)
    """

    def __init__(
        self,
        store: LocalStore,
        synthesizer: VariantSynthesizer | None = None,
        catalog: AttributeCatalog | None = None,
        detector: AttributeDetector | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Local product store.
            synthesizer: Variant synthesizer.
            catalog: Attribute catalog (embedded one if omitted).
            detector: Attribute detector used for quantity distribution.
        """
        self.store = store
        self.synthesizer = synthesizer or VariantSynthesizer(settings.max_code_suffix_retries)
        self.catalog = catalog or AttributeCatalog.default()
        self.distributor = QuantityDistributor(detector or CatalogAttributeDetector(self.catalog))
        self.engine = ReconciliationEngine()

    async def plan_variants(
        self,
        product: ProductData,
        lines: Sequence[AttributeLine],
    ) -> list[GeneratedVariant]:
        """Synthesize variants that do not reuse any stored code.

        Args:
            product: Base product.
            lines: Attribute lines.

        Returns:
            Unpersisted variants.
        """
        used_codes = await self.store.read_codes_by_base_code(product.default_code)
        used_codes.add(product.default_code)
        return self.synthesizer.synthesize(product, lines, used_codes)

    async def plan_from_text(self, product: ProductData, variant_text: str | None) -> VariantPlan:
        """Plan variants from human-written variant text.

        Args:
            product: Base product.
            variant_text: Grouped "(S | M) (Đỏ)" or flat "S, Đỏ" text.

        Returns:
            Planned variants and unresolved values.
        """
        parsed = parse_variant_string(variant_text, self.catalog)
        variants = await self.plan_variants(product, parsed.lines)
        if parsed.misses:
            logger.warning(
                "Variant text has unknown values",
                code=product.default_code,
                values=parsed.misses,
            )
        return VariantPlan(variants=variants, warnings=list(parsed.misses))

    async def compare_with_store(
        self,
        product: ProductData,
        lines: Sequence[AttributeLine],
    ) -> VariantDiff:
        """Diff the variants lines call for against stored variants.

        Stored variants are identified by the attribute values their
        variant text names, so their codes may differ freely.

        Args:
            product: Base product.
            lines: Attribute lines describing the expected set.

        Returns:
            Matches, missing expected variants, and extra stored variants.
        """
        expected = self.synthesizer.synthesize(product, lines)
        stored = await self.store.read_variants_by_base_code(product.default_code)
        actual = [self._as_generated(variant) for variant in stored]
        return self.engine.diff(expected, actual)

    def distribute_order(self, total_quantity: int, variant_text: str | None) -> list[PerVariant]:
        """Split a purchased quantity across the variants a text names."""
        return self.distributor.distribute(total_quantity, split_variant_tokens(variant_text))

    def _as_generated(self, variant: LocalVariant) -> GeneratedVariant:
        parsed = parse_variant_string(variant.variant, self.catalog)
        if parsed.misses:
            logger.warning(
                "Stored variant has unknown values",
                code=variant.product_code,
                values=parsed.misses,
            )
        values = tuple(value for line in parsed.lines for value in line.values)
        return GeneratedVariant(
            id=variant.id,
            name=variant.product_name,
            name_get=variant.product_name,
            default_code=variant.product_code,
            attribute_values=values,
            price_variant=variant.selling_price,
        )
