"""Variant reconciliation engine.

Two independent comparisons:

- diff: one-to-one match of expected vs actual variants by signature
- sync_by_code: copy price and stock from remote variants onto local
  variants with the same normalized code, reporting codes present on
  only one side
"""

from collections.abc import Sequence
from typing import Any, Protocol

import structlog

from variant_engine.domain.exceptions import DomainError
from variant_engine.domain.models import (
    GeneratedVariant,
    LocalVariant,
    RemoteVariant,
    SyncResult,
    VariantDiff,
    VariantRef,
)
from variant_engine.reconciliation.signature import signature

logger = structlog.get_logger()


def normalize_code(code: str | None) -> str:
    """Normalize a product code for comparison.

    Brackets are removed, whitespace trimmed, letters upper-cased.
    """
    if not code:
        return ""
    return code.replace("[", "").replace("]", "").strip().upper()


def remote_fields(remote: RemoteVariant) -> dict[str, Any]:
    """Get the local fields a remote variant is authoritative for."""
    return {
        "selling_price": remote.list_price,
        "stock_quantity": remote.qty_available,
        "virtual_available": remote.virtual_available,
        "remote_variant_id": remote.id,
    }


def _ref(variant: GeneratedVariant) -> VariantRef:
    return VariantRef(code=variant.default_code, name=variant.name or variant.name_get)


class VariantWriter(Protocol):
    """Persists field updates for one local variant."""

    async def update_variant(self, variant_id: int, fields: dict[str, Any]) -> None:
        """Write fields to a local variant."""
        ...


class ReconciliationEngine:
    """Compares variant sets and mirrors remote fields locally.

    Example usage:
        engine = ReconciliationEngine()
        report = engine.diff(expected, actual)
        result = await engine.sync_by_code(local, remote, store)
    """

    def diff(
        self,
        expected: Sequence[GeneratedVariant],
        actual: Sequence[GeneratedVariant],
    ) -> VariantDiff:
        """Match expected variants to actual variants by signature.

        Each actual variant matches at most one expected variant. Actual
        variants without attribute values take no part in the match.

        Args:
            expected: Variants that should exist.
            actual: Variants that do exist.

        Returns:
            Matches and missing (by expected code), extra (by actual code).
        """
        remaining: dict[str, list[GeneratedVariant]] = {}
        for variant in actual:
            sig = signature(variant)
            if sig:
                remaining.setdefault(sig, []).append(variant)

        result = VariantDiff()
        for variant in expected:
            sig = signature(variant)
            candidates = remaining.get(sig) if sig else None
            if candidates:
                result.matches.append(_ref(variant))
                candidates.pop(0)
            else:
                result.missing.append(_ref(variant))

        for leftovers in remaining.values():
            result.extra.extend(_ref(v) for v in leftovers)
        return result

    async def sync_by_code(
        self,
        local_variants: Sequence[LocalVariant],
        remote_variants: Sequence[RemoteVariant],
        writer: VariantWriter,
    ) -> SyncResult:
        """Mirror remote price and stock onto local variants by code.

        Writes happen one variant at a time. A failed write is recorded in
        the result and the run moves on to the next variant. Variants that
        already hold the remote values are left untouched.

        Args:
            local_variants: Variants held locally.
            remote_variants: Authoritative remote variants.
            writer: Store receiving the per-variant updates.

        Returns:
            Counts, per-item errors, and one-sided codes.
        """
        result = SyncResult()
        if not local_variants:
            result.skipped = 1
            return result

        remote_by_code: dict[str, RemoteVariant] = {}
        for remote in remote_variants:
            remote_by_code.setdefault(normalize_code(remote.default_code), remote)
        local_codes = {normalize_code(v.product_code) for v in local_variants}

        for remote in remote_variants:
            if normalize_code(remote.default_code) not in local_codes:
                result.missing_in_local.append(remote.default_code)

        for local in local_variants:
            remote = remote_by_code.get(normalize_code(local.product_code))
            if remote is None:
                result.missing_in_tpos.append(local.product_code)
                continue

            fields = remote_fields(remote)
            if all(getattr(local, name) == value for name, value in fields.items()):
                result.unchanged += 1
                continue

            try:
                await writer.update_variant(local.id, fields)
            except Exception as e:
                self._record_failure(result, local, e)
                continue

            result.updated += 1

        logger.info(
            "Variant sync finished",
            updated=result.updated,
            unchanged=result.unchanged,
            skipped=result.skipped,
            missing_in_local=len(result.missing_in_local),
            missing_in_tpos=len(result.missing_in_tpos),
        )
        return result

    @staticmethod
    def _record_failure(result: SyncResult, local: LocalVariant, error: Exception) -> None:
        if isinstance(error, DomainError):
            reason = error.details.get("reason", error.message)
        else:
            reason = str(error)
        message = f"Failed to update {local.product_code}: {reason}"
        logger.warning(
            "Variant update failed",
            variant_id=local.id,
            product_code=local.product_code,
            error=message,
        )
        result.errors.append(message)
        result.skipped += 1
