"""SQLAlchemy models for locally stored products.

Parent products and their variants share one table; a variant points at
its parent through base_product_code.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from variant_engine.domain.models import LocalVariant
from variant_engine.infrastructure.database import Base


class VariantRecord(Base):
    """Product row, either a parent product or one of its variants.

    Attributes:
        id: Row identifier.
        product_code: Unique product code (e.g., "N497D28").
        base_product_code: Code of the parent product.
        product_name: Display name.
        variant: Variant text (e.g., "Đen, 28").
        selling_price: Selling price mirrored from the remote catalog.
        stock_quantity: On-hand quantity mirrored from the remote catalog.
        virtual_available: Forecast quantity mirrored from the remote catalog.
        remote_variant_id: Remote id of this variant.
        remote_template_id: Remote template id (parent products).
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    base_product_code: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    product_name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    variant: Mapped[str | None] = mapped_column(String(500), nullable=True)
    selling_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    stock_quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    virtual_available: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    remote_variant_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    remote_template_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<VariantRecord(id={self.id}, product_code={self.product_code})>"

    def to_local(self) -> LocalVariant:
        """Convert to the domain representation.

        Returns:
            LocalVariant with this row's values.
        """
        return LocalVariant(
            id=self.id,
            product_code=self.product_code,
            base_product_code=self.base_product_code,
            product_name=self.product_name,
            variant=self.variant,
            selling_price=self.selling_price,
            stock_quantity=self.stock_quantity,
            virtual_available=self.virtual_available,
            remote_variant_id=self.remote_variant_id,
            remote_template_id=self.remote_template_id,
        )
