"""Variant reconciliation.

Signature-based identity matching and code-based remote sync.
"""

from variant_engine.reconciliation.engine import (
    ReconciliationEngine,
    VariantWriter,
    normalize_code,
    remote_fields,
)
from variant_engine.reconciliation.signature import signature, signature_of

__all__ = [
    "ReconciliationEngine",
    "VariantWriter",
    "normalize_code",
    "remote_fields",
    "signature",
    "signature_of",
]
