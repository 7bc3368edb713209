"""SQLAlchemy-backed implementation of OrderRepository.

Each public method runs in its own transaction.  ``save`` reconciles the
stored item rows against the items the order currently owns: owned items
are inserted or updated, and rows no longer owned are dropped from the
relationship, which the ``delete-orphan`` cascade turns into deletes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timezone

import structlog
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from icompras.domain.exceptions import PersistenceError
from icompras.domain.model.order import (
    LineItem,
    Order,
    OrderStatus,
    PaymentData,
    PaymentMethod,
)
from icompras.domain.model.value_objects import Money, Quantity
from icompras.domain.repository.order_repository import OrderRepository
from icompras.infrastructure.persistence.sql_models import Base, LineItemRow, OrderRow

logger = structlog.get_logger(__name__)


class SqlOrderRepository(OrderRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlOrderRepository:
        """Connect to *url* and create the tables if they are missing."""
        try:
            engine = create_engine(url, echo=echo)
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot open order database: {exc}") from exc
        return cls(engine)

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        with self._unit_of_work() as session:
            row = session.get(OrderRow, order_id)
            return None if row is None else self._to_domain(row)

    def list_all(self) -> list[Order]:
        return self._list(select(OrderRow))

    def list_by_customer(self, customer_id: int) -> list[Order]:
        return self._list(select(OrderRow).where(OrderRow.customer_id == customer_id))

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return self._list(select(OrderRow).where(OrderRow.status == status.value))

    def save(self, order: Order) -> Order:
        with self._unit_of_work() as session:
            row = session.get(OrderRow, order.id) if order.id is not None else None
            if row is None:
                row = OrderRow(id=order.id)
                session.add(row)
            self._copy_scalars(order, row)

            stored = {item_row.id: item_row for item_row in row.items}
            owned_rows: list[LineItemRow] = []
            for position, item in enumerate(order.items):
                item_row = stored.pop(item.id, None) if item.id is not None else None
                if item_row is None:
                    item_row = LineItemRow()
                item_row.position = position
                item_row.product_id = item.product_id
                item_row.quantity = item.quantity.value
                item_row.unit_price = item.unit_price.amount
                owned_rows.append(item_row)

            # Rows left in ``stored`` are orphans; delete-orphan removes them.
            row.items = owned_rows
            session.flush()
            order_id = row.id
            item_ids = [item_row.id for item_row in owned_rows]

        # Committed; only now do the domain objects learn their identifiers.
        order.id = order_id
        for item, item_id in zip(order.items, item_ids):
            item.id = item_id

        if stored:
            logger.info(
                "orphan_line_items_deleted",
                order_id=order.id,
                item_ids=sorted(stored),
            )
        return order

    def delete_by_id(self, order_id: int) -> None:
        with self._unit_of_work() as session:
            row = session.get(OrderRow, order_id)
            if row is not None:
                session.delete(row)

    def exists_by_id(self, order_id: int) -> bool:
        with self._unit_of_work() as session:
            found = session.scalar(select(OrderRow.id).where(OrderRow.id == order_id))
            return found is not None

    # --- Helpers ---------------------------------------------------------------

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session]:
        """One transaction: commit on success, roll back on any error."""
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("order_storage_failed", error=str(exc))
            raise PersistenceError(f"Order storage failure: {exc}") from exc

    def _list(self, stmt) -> list[Order]:
        stmt = stmt.options(selectinload(OrderRow.items)).order_by(OrderRow.id)
        with self._unit_of_work() as session:
            return [self._to_domain(row) for row in session.scalars(stmt)]

    @staticmethod
    def _copy_scalars(order: Order, row: OrderRow) -> None:
        row.customer_id = order.customer_id
        row.created_at = order.created_at
        row.status = order.status.value
        row.note = order.note
        row.total = order.total.amount
        row.tracking_code = order.tracking_code
        row.invoice_url = order.invoice_url
        row.payment_key = order.payment_key

        payment = order.payment
        row.payment_method = payment.method.value if payment else None
        row.pix_key = payment.pix_key if payment else None
        row.card_number = payment.card_number if payment else None
        row.authorization_code = payment.authorization_code if payment else None
        row.payment_line = payment.payment_line if payment else None

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite hands back naive datetimes; values are always stored in UTC.
            created_at = created_at.replace(tzinfo=timezone.utc)

        payment = None
        if row.payment_method is not None:
            payment = PaymentData(
                method=PaymentMethod(row.payment_method),
                pix_key=row.pix_key,
                card_number=row.card_number,
                authorization_code=row.authorization_code,
                payment_line=row.payment_line,
            )

        order = Order(
            id=row.id,
            customer_id=row.customer_id,
            status=OrderStatus(row.status),
            total=Money.of(row.total),
            created_at=created_at,
            note=row.note,
            tracking_code=row.tracking_code,
            invoice_url=row.invoice_url,
            payment=payment,
            payment_key=row.payment_key,
        )
        for item_row in row.items:
            order.add_item(
                LineItem(
                    id=item_row.id,
                    product_id=item_row.product_id,
                    quantity=Quantity(item_row.quantity),
                    unit_price=Money.of(item_row.unit_price),
                )
            )
        return order
