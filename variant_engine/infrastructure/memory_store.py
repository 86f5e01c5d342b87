"""In-memory local store.

Dict-backed store with the same interface as VariantRepository, used by
tests and tooling that run without a database.
"""

from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Any

from variant_engine.domain.exceptions import PerItemUpdateError
from variant_engine.domain.models import LocalVariant

_WRITABLE_FIELDS = {f.name for f in dataclass_fields(LocalVariant)} - {"id"}


class InMemoryVariantStore:
    """Local store keeping products in a dict.

    Codes listed in ``fail_codes`` make their updates fail, which lets
    callers exercise per-item failure handling.
    """

    def __init__(
        self,
        records: list[LocalVariant] | None = None,
        fail_codes: set[str] | None = None,
    ) -> None:
        self._records: dict[int, LocalVariant] = {}
        self.fail_codes = set(fail_codes or ())
        self.updates: list[tuple[int, dict[str, Any]]] = []
        for record in records or []:
            self.add(record)

    def add(self, record: LocalVariant) -> LocalVariant:
        """Store a product, replacing any row with the same id."""
        self._records[record.id] = replace(record)
        return self._records[record.id]

    def get(self, variant_id: int) -> LocalVariant | None:
        """Get a stored row by id."""
        return self._records.get(variant_id)

    async def read_product_by_code(self, code: str) -> LocalVariant | None:
        for record in self._records.values():
            if record.product_code == code:
                return replace(record)
        return None

    async def read_variants_by_base_code(self, code: str) -> list[LocalVariant]:
        return [
            replace(record)
            for record in sorted(self._records.values(), key=lambda r: r.id)
            if record.base_product_code == code and record.product_code != code
        ]

    async def read_codes_by_base_code(self, code: str) -> set[str]:
        return {
            record.product_code
            for record in self._records.values()
            if record.base_product_code == code or record.product_code == code
        }

    async def update_variant(self, variant_id: int, fields: dict[str, Any]) -> None:
        record = self._records.get(variant_id)
        if record is None:
            raise PerItemUpdateError(str(variant_id), "row not found")
        if record.product_code in self.fail_codes:
            raise PerItemUpdateError(record.product_code, "write rejected by store")

        unknown = set(fields) - _WRITABLE_FIELDS
        if unknown:
            raise PerItemUpdateError(record.product_code, f"unknown fields {sorted(unknown)}")

        self._records[variant_id] = replace(record, **fields)
        self.updates.append((variant_id, dict(fields)))
