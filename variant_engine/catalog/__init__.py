"""Variant Catalog.

Provides the attribute registry, attribute detection, variant synthesis,
and quantity distribution for products that expand into variants.
"""

from variant_engine.catalog.attributes import AttributeCatalog, AttributeType
from variant_engine.catalog.detector import (
    AttributeDetector,
    CatalogAttributeDetector,
    DetectedAttributes,
    ParsedVariantText,
    format_variant_for_display,
    parse_variant_string,
)
from variant_engine.catalog.distributor import QuantityDistributor, undistributed
from variant_engine.catalog.generator import (
    CodeAssigner,
    VariantSynthesizer,
    compose_name,
    generate_combinations,
    iter_combinations,
)

__all__ = [
    # Attributes
    "AttributeCatalog",
    "AttributeType",
    # Detection
    "AttributeDetector",
    "CatalogAttributeDetector",
    "DetectedAttributes",
    "ParsedVariantText",
    "format_variant_for_display",
    "parse_variant_string",
    # Generator
    "CodeAssigner",
    "VariantSynthesizer",
    "compose_name",
    "generate_combinations",
    "iter_combinations",
    # Distribution
    "QuantityDistributor",
    "undistributed",
]
