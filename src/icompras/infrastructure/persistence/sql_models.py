"""SQLAlchemy table mappings for orders and their line items.

These rows are a storage shape only; repositories translate them to and
from the domain aggregate.  ``OrderRow.items`` cascades every operation to
its line items and deletes rows removed from the collection.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    note: Mapped[str | None] = mapped_column(Text)
    total: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    tracking_code: Mapped[str | None] = mapped_column(String(255))
    invoice_url: Mapped[str | None] = mapped_column(Text)

    # Payment block (opaque)
    payment_method: Mapped[str | None] = mapped_column(String(30))
    pix_key: Mapped[str | None] = mapped_column(String(255))
    card_number: Mapped[str | None] = mapped_column(String(255))
    authorization_code: Mapped[str | None] = mapped_column(String(255))
    payment_line: Mapped[str | None] = mapped_column(String(255))
    payment_key: Mapped[str | None] = mapped_column(String(255))

    items: Mapped[list[LineItemRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="LineItemRow.position",
    )


class LineItemRow(Base):
    __tablename__ = "line_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)

    order: Mapped[OrderRow] = relationship(back_populates="items")
