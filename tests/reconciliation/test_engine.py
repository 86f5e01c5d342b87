"""Tests for the reconciliation engine."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from variant_engine.domain.exceptions import PerItemUpdateError
from variant_engine.domain.models import (
    AttributeValue,
    GeneratedVariant,
    LocalVariant,
    RemoteVariant,
)
from variant_engine.infrastructure.memory_store import InMemoryVariantStore
from variant_engine.reconciliation.engine import (
    ReconciliationEngine,
    normalize_code,
    remote_fields,
)


def _variant(code: str, *value_ids: int) -> GeneratedVariant:
    return GeneratedVariant(
        id=0,
        name=f"Jean ({code})",
        name_get=f"Jean ({code})",
        default_code=code,
        attribute_values=tuple(AttributeValue(id=i, name=str(i)) for i in value_ids),
    )


def _local(variant_id: int, code: str, **fields: Any) -> LocalVariant:
    return LocalVariant(id=variant_id, product_code=code, base_product_code="N497", **fields)


@pytest.fixture
def engine() -> ReconciliationEngine:
    """Reconciliation engine."""
    return ReconciliationEngine()


class TestNormalizeCode:
    """Tests for normalize_code."""

    def test_strips_brackets_and_whitespace(self) -> None:
        assert normalize_code(" [n497d28] ") == "N497D28"

    def test_empty(self) -> None:
        assert normalize_code(None) == ""
        assert normalize_code("") == ""


class TestDiff:
    """Tests for signature diff."""

    def test_matches_by_signature_not_code(self, engine: ReconciliationEngine) -> None:
        """Variants with the same values match whatever their codes."""
        expected = [_variant("N497D28", 7, 87), _variant("N497D30", 7, 89)]
        actual = [_variant("OLD1", 87, 7), _variant("OLD2", 89, 7)]

        result = engine.diff(expected, actual)

        assert [m.code for m in result.matches] == ["N497D28", "N497D30"]
        assert result.missing == []
        assert result.extra == []
        assert result.is_in_sync

    def test_missing_and_extra(self, engine: ReconciliationEngine) -> None:
        """Unmatched expected variants are missing, unmatched actual ones extra."""
        expected = [_variant("A", 1, 6), _variant("B", 2, 6)]
        actual = [_variant("X", 1, 6), _variant("Y", 3, 6)]

        result = engine.diff(expected, actual)

        assert [m.code for m in result.matches] == ["A"]
        assert [m.code for m in result.missing] == ["B"]
        assert [m.code for m in result.extra] == ["Y"]
        assert result.missing[0].name == "Jean (B)"
        assert not result.is_in_sync

    def test_every_variant_reported_once(self, engine: ReconciliationEngine) -> None:
        """matches + missing covers expected, matches + extra covers actual."""
        expected = [_variant("A", 1), _variant("B", 2), _variant("C", 3)]
        actual = [_variant("X", 2), _variant("Y", 4), _variant("Z", 5)]

        result = engine.diff(expected, actual)

        assert len(result.matches) + len(result.missing) == len(expected)
        assert len(result.matches) + len(result.extra) == len(actual)

    def test_duplicate_actual_signatures(self, engine: ReconciliationEngine) -> None:
        """Each actual variant matches at most one expected variant."""
        expected = [_variant("A", 1)]
        actual = [_variant("X", 1), _variant("X2", 1)]

        result = engine.diff(expected, actual)

        assert [m.code for m in result.matches] == ["A"]
        assert [m.code for m in result.extra] == ["X2"]

    def test_empty_sides(self, engine: ReconciliationEngine) -> None:
        """An empty side makes everything missing or extra."""
        assert [m.code for m in engine.diff([_variant("A", 1)], []).missing] == ["A"]
        assert [m.code for m in engine.diff([], [_variant("X", 1)]).extra] == ["X"]


class TestSyncByCode:
    """Tests for sync_by_code."""

    @pytest.mark.asyncio
    async def test_updates_matched_and_reports_one_sided(
        self,
        engine: ReconciliationEngine,
    ) -> None:
        """Matched codes are updated, unmatched ones reported per side."""
        store = InMemoryVariantStore([_local(1, "N497D28"), _local(2, "N497D30")])
        remote = [
            RemoteVariant(id=501, default_code="N497D28", list_price=320000, qty_available=4),
            RemoteVariant(id=502, default_code="N497X99", list_price=320000),
        ]

        result = await engine.sync_by_code(
            await store.read_variants_by_base_code("N497"), remote, store
        )

        assert result.updated == 1
        assert result.skipped == 0
        assert result.errors == []
        assert result.missing_in_tpos == ["N497D30"]
        assert result.missing_in_local == ["N497X99"]

        updated = store.get(1)
        assert updated.selling_price == 320000
        assert updated.stock_quantity == 4
        assert updated.virtual_available == 0
        assert updated.remote_variant_id == 501

    @pytest.mark.asyncio
    async def test_unmatched_local_is_not_an_error(self, engine: ReconciliationEngine) -> None:
        """Local variants absent remotely are only listed, never failed."""
        writer = AsyncMock()
        local = [_local(1, "N497D28"), _local(2, "N497D30"), _local(3, "N497D32")]
        remote = [RemoteVariant(id=501, default_code="N497D28", list_price=1)]

        result = await engine.sync_by_code(local, remote, writer)

        assert result.missing_in_tpos == ["N497D30", "N497D32"]
        assert result.errors == []
        assert result.skipped == 0
        assert result.updated == 1
        writer.update_variant.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_codes_compare_normalized(self, engine: ReconciliationEngine) -> None:
        """Brackets, case and whitespace do not prevent a match."""
        store = InMemoryVariantStore([_local(1, "n497d28 ")])
        remote = [RemoteVariant(id=501, default_code="[N497D28]", list_price=1)]

        result = await engine.sync_by_code([store.get(1)], remote, store)

        assert result.updated == 1
        assert result.missing_in_local == []
        assert result.missing_in_tpos == []

    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, engine: ReconciliationEngine) -> None:
        """Re-syncing identical data writes nothing."""
        store = InMemoryVariantStore([_local(1, "N497D28"), _local(2, "N497D30")])
        remote = [
            RemoteVariant(id=501, default_code="N497D28", list_price=10, qty_available=2),
            RemoteVariant(id=502, default_code="N497D30", list_price=10, virtual_available=5),
        ]

        first = await engine.sync_by_code(
            await store.read_variants_by_base_code("N497"), remote, store
        )
        second = await engine.sync_by_code(
            await store.read_variants_by_base_code("N497"), remote, store
        )

        assert first.updated == 2
        assert second.updated == 0
        assert second.unchanged == 2
        assert len(store.updates) == 2

    @pytest.mark.asyncio
    async def test_failed_write_does_not_stop_run(self, engine: ReconciliationEngine) -> None:
        """A per-item failure is recorded and the next variant still syncs."""
        store = InMemoryVariantStore(
            [_local(1, "N497D28"), _local(2, "N497D30")],
            fail_codes={"N497D28"},
        )
        remote = [
            RemoteVariant(id=501, default_code="N497D28", list_price=10),
            RemoteVariant(id=502, default_code="N497D30", list_price=10),
        ]

        result = await engine.sync_by_code(
            await store.read_variants_by_base_code("N497"), remote, store
        )

        assert result.updated == 1
        assert result.skipped == 1
        assert result.errors == ["Failed to update N497D28: write rejected by store"]
        assert store.get(2).remote_variant_id == 502

    @pytest.mark.asyncio
    async def test_unexpected_writer_error(self, engine: ReconciliationEngine) -> None:
        """Non-domain errors from the writer are recorded too."""
        writer = AsyncMock()
        writer.update_variant.side_effect = [RuntimeError("connection reset"), None]
        local = [_local(1, "A"), _local(2, "B")]
        remote = [
            RemoteVariant(id=1, default_code="A", list_price=5),
            RemoteVariant(id=2, default_code="B", list_price=5),
        ]

        result = await engine.sync_by_code(local, remote, writer)

        assert result.updated == 1
        assert result.errors == ["Failed to update A: connection reset"]
        assert writer.update_variant.await_count == 2

    @pytest.mark.asyncio
    async def test_writes_remote_fields(self, engine: ReconciliationEngine) -> None:
        """The writer receives every remote-authoritative field."""
        writer = AsyncMock()
        remote = RemoteVariant(
            id=77, default_code="A", list_price=9, qty_available=3, virtual_available=1
        )

        await engine.sync_by_code([_local(5, "A")], [remote], writer)

        writer.update_variant.assert_awaited_once_with(5, remote_fields(remote))
        assert remote_fields(remote) == {
            "selling_price": 9,
            "stock_quantity": 3,
            "virtual_available": 1,
            "remote_variant_id": 77,
        }

    @pytest.mark.asyncio
    async def test_nothing_to_sync(self, engine: ReconciliationEngine) -> None:
        """No local variants is an explicit nothing-to-do result."""
        writer = AsyncMock()
        remote = [RemoteVariant(id=1, default_code="A")]

        result = await engine.sync_by_code([], remote, writer)

        assert result.skipped == 1
        assert result.updated == 0
        assert result.missing_in_local == []
        writer.update_variant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_result_to_dict(self, engine: ReconciliationEngine) -> None:
        """Results serialize with all counters."""
        result = await engine.sync_by_code([_local(1, "A")], [], AsyncMock())
        assert result.to_dict() == {
            "updated": 0,
            "skipped": 0,
            "errors": [],
            "missing_in_local": [],
            "missing_in_tpos": ["A"],
            "unchanged": 0,
        }


class TestPerItemUpdateError:
    """Tests for the per-item error carried into results."""

    def test_reason_in_details(self) -> None:
        error = PerItemUpdateError("N497D28", "locked")
        assert error.details == {"code": "N497D28", "reason": "locked"}
        assert error.message == "Failed to update N497D28: locked"
