"""Variant signatures.

A signature is the sorted, comma-joined list of a variant's attribute
value ids. Two variants with equal signatures are the same variant,
whatever their codes or names.
"""

from collections.abc import Iterable

from variant_engine.domain.models import AttributeValue, GeneratedVariant


def signature_of(values: Iterable[AttributeValue]) -> str:
    """Compute the signature of a set of attribute values."""
    return ",".join(str(value_id) for value_id in sorted(v.id for v in values))


def signature(variant: GeneratedVariant) -> str:
    """Compute a variant's signature.

    Args:
        variant: Variant to identify.

    Returns:
        Signature string; empty for variants without attribute values.
    """
    return signature_of(variant.attribute_values or ())
