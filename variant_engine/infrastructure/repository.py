"""Product repository for database operations.

SQLAlchemy implementation of the local store used by variant planning
and remote sync.
"""

from typing import Any

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from variant_engine.domain.exceptions import PerItemUpdateError
from variant_engine.domain.models import LocalVariant
from variant_engine.infrastructure.models import VariantRecord


class VariantRepository:
    """Repository for product and variant rows.

    Example usage:
        _, session_factory = create_session_factory()
        async with session_factory() as session:
            repo = VariantRepository(session)
            variants = await repo.read_variants_by_base_code("N497")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save_all(self, records: list[VariantRecord]) -> list[VariantRecord]:
        """Save multiple rows to database.

        Args:
            records: Rows to save.

        Returns:
            Saved rows.
        """
        self.session.add_all(records)
        await self.session.flush()
        return records

    async def read_product_by_code(self, code: str) -> LocalVariant | None:
        """Get a product by its code.

        Args:
            code: Product code.

        Returns:
            Product if found, None otherwise.
        """
        result = await self.session.execute(
            select(VariantRecord).where(VariantRecord.product_code == code)
        )
        record = result.scalar_one_or_none()
        return record.to_local() if record else None

    async def read_variants_by_base_code(self, code: str) -> list[LocalVariant]:
        """Get the variants of a parent product.

        Args:
            code: Parent product code.

        Returns:
            Variants ordered by id, excluding the parent row itself.
        """
        result = await self.session.execute(
            select(VariantRecord)
            .where(
                and_(
                    VariantRecord.base_product_code == code,
                    VariantRecord.product_code != code,
                )
            )
            .order_by(VariantRecord.id)
        )
        return [record.to_local() for record in result.scalars().all()]

    async def read_codes_by_base_code(self, code: str) -> set[str]:
        """Get every code taken under a parent product, parent included.

        Args:
            code: Parent product code.

        Returns:
            Set of product codes.
        """
        result = await self.session.execute(
            select(VariantRecord.product_code).where(
                (VariantRecord.base_product_code == code)
                | (VariantRecord.product_code == code)
            )
        )
        return set(result.scalars().all())

    async def update_variant(self, variant_id: int, fields: dict[str, Any]) -> None:
        """Write fields to one row.

        Args:
            variant_id: Row id.
            fields: Column values to set.

        Raises:
            PerItemUpdateError: If the row is missing or the write fails.
        """
        try:
            # A failed write rolls back only its own savepoint
            async with self.session.begin_nested():
                result = await self.session.execute(
                    update(VariantRecord)
                    .where(VariantRecord.id == variant_id)
                    .values(**fields)
                )
        except SQLAlchemyError as e:
            raise PerItemUpdateError(str(variant_id), str(e)) from e

        if result.rowcount == 0:
            raise PerItemUpdateError(str(variant_id), "row not found")

