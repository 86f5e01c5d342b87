"""Domain layer for the variant engine.

Contains the value objects and exceptions shared by the catalog,
reconciliation, and application layers.
"""

from variant_engine.domain.exceptions import (
    CollisionExhaustionError,
    DomainError,
    InvalidQuantityError,
    LookupMissError,
    ParentProductNotFoundError,
    PerItemUpdateError,
    RemoteTemplateNotFoundError,
    StructuralError,
    SyncError,
)
from variant_engine.domain.models import (
    AttributeLine,
    AttributeValue,
    GeneratedVariant,
    LocalVariant,
    PerVariant,
    ProductData,
    RemoteVariant,
    SyncResult,
    VariantDiff,
    VariantRef,
)

__all__ = [
    # Exceptions
    "CollisionExhaustionError",
    "DomainError",
    "InvalidQuantityError",
    "LookupMissError",
    "ParentProductNotFoundError",
    "PerItemUpdateError",
    "RemoteTemplateNotFoundError",
    "StructuralError",
    "SyncError",
    # Models
    "AttributeLine",
    "AttributeValue",
    "GeneratedVariant",
    "LocalVariant",
    "PerVariant",
    "ProductData",
    "RemoteVariant",
    "SyncResult",
    "VariantDiff",
    "VariantRef",
]
