"""Value objects for the variant engine.

Attribute values and lines describe how a base product varies; generated,
remote, and local variants are the three shapes a variant takes while it
is synthesized, mirrored from the remote catalog, and stored locally.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Self


# ============================================================================
# Attributes
# ============================================================================


@dataclass(frozen=True)
class AttributeValue:
    """One value of an attribute type (e.g. "Đỏ" of "Màu").

    Attributes:
        id: Catalog identifier of the value.
        name: Display name.
        code: Short code used to build product codes.
        sequence: Catalog ordering, if any.
        attribute_id: Identifier of the owning attribute type.
        attribute_name: Name of the owning attribute type.
    """

    id: int
    name: str
    code: str = ""
    sequence: int | None = None
    attribute_id: int = 0
    attribute_name: str = ""

    @classmethod
    def from_record(
        cls,
        data: dict[str, Any],
        attribute_id: int = 0,
        attribute_name: str = "",
    ) -> Self:
        """Create from a catalog record.

        Args:
            data: Record with Id, Name, Code and Sequence keys.
            attribute_id: Owning attribute type id.
            attribute_name: Owning attribute type name.

        Returns:
            AttributeValue instance.
        """
        return cls(
            id=int(data["Id"]),
            name=data["Name"],
            code=data.get("Code") or "",
            sequence=data.get("Sequence"),
            attribute_id=data.get("AttributeId", attribute_id),
            attribute_name=data.get("AttributeName", attribute_name),
        )

    def in_line(self, attribute_id: int, attribute_name: str) -> Self:
        """Return a copy bound to the given attribute type."""
        return replace(self, attribute_id=attribute_id, attribute_name=attribute_name)


@dataclass(frozen=True)
class AttributeLine:
    """The selected values of one attribute type for a product.

    Value order is significant: it drives combination order, code
    concatenation order, and name order.

    Attributes:
        attribute_id: Attribute type identifier.
        attribute_name: Attribute type name.
        values: Ordered selected values.
    """

    attribute_id: int
    attribute_name: str
    values: tuple[AttributeValue, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)


# ============================================================================
# Variants
# ============================================================================


@dataclass(frozen=True)
class ProductData:
    """Base product a variant set is synthesized from."""

    id: int
    name: str
    default_code: str
    list_price: float = 0


@dataclass
class GeneratedVariant:
    """A concrete variant produced by synthesis.

    Attributes:
        id: Persisted identifier (0 until persisted).
        name: Display name.
        name_get: Normalized display name (same as name here).
        default_code: Unique product code.
        attribute_values: One value per attribute line, in line order.
        active: Whether the variant is sellable.
        product_template_id: Base product identifier.
        price_variant: Selling price copied from the base product.
    """

    id: int
    name: str
    name_get: str
    default_code: str
    attribute_values: tuple[AttributeValue, ...] = ()
    active: bool = True
    product_template_id: int = 0
    price_variant: float = 0

    @property
    def variant_text(self) -> str:
        """Comma-joined attribute value names, e.g. "S, Đỏ"."""
        return ", ".join(value.name for value in self.attribute_values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "name_get": self.name_get,
            "default_code": self.default_code,
            "attribute_values": [
                {
                    "id": value.id,
                    "name": value.name,
                    "code": value.code,
                    "attribute_id": value.attribute_id,
                    "attribute_name": value.attribute_name,
                }
                for value in self.attribute_values
            ],
            "active": self.active,
            "product_template_id": self.product_template_id,
            "price_variant": self.price_variant,
        }


@dataclass(frozen=True)
class RemoteVariant:
    """Read-only projection of a variant in the remote catalog."""

    id: int
    default_code: str
    list_price: float = 0
    qty_available: float = 0
    virtual_available: float = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Self:
        """Create from remote catalog response data.

        Args:
            data: Variant object from the remote API.

        Returns:
            RemoteVariant instance.
        """
        return cls(
            id=int(data["Id"]),
            default_code=data.get("DefaultCode") or "",
            list_price=data.get("ListPrice") or 0,
            qty_available=data.get("QtyAvailable") or 0,
            virtual_available=data.get("VirtualAvailable") or 0,
        )


@dataclass
class LocalVariant:
    """A product row held by the local store.

    The same shape serves parent products (base_product_code is None or
    equal to product_code) and their variants.
    """

    id: int
    product_code: str
    base_product_code: str | None = None
    product_name: str = ""
    variant: str | None = None
    selling_price: float = 0
    stock_quantity: float = 0
    virtual_available: float = 0
    remote_variant_id: int | None = None
    remote_template_id: int | None = None


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class VariantRef:
    """Code and name of a variant, as reported by a diff."""

    code: str
    name: str


@dataclass
class VariantDiff:
    """Outcome of diffing an expected variant set against an actual one."""

    matches: list[VariantRef] = field(default_factory=list)
    missing: list[VariantRef] = field(default_factory=list)
    extra: list[VariantRef] = field(default_factory=list)

    @property
    def is_in_sync(self) -> bool:
        """Check whether both sides hold exactly the same variants."""
        return not self.missing and not self.extra


@dataclass
class SyncResult:
    """Summary of one sync-by-code run.

    Attributes:
        updated: Local variants whose fields were rewritten.
        skipped: Failed writes, or 1 for an explicit nothing-to-do run.
        errors: One message per failed write.
        missing_in_local: Remote codes with no local counterpart.
        missing_in_tpos: Local codes with no remote counterpart.
        unchanged: Matched variants that already held the remote values.
    """

    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    missing_in_local: list[str] = field(default_factory=list)
    missing_in_tpos: list[str] = field(default_factory=list)
    unchanged: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "missing_in_local": list(self.missing_in_local),
            "missing_in_tpos": list(self.missing_in_tpos),
            "unchanged": self.unchanged,
        }


@dataclass(frozen=True)
class PerVariant:
    """Quantity assigned to one variant label by the distributor."""

    label: str
    quantity: int
