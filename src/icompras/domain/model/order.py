"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items.  The link between
an order and its items is bidirectional: the order lists its items and
each item points back at its owner.  Only ``add_item``, ``remove_item`` and
``clear_items`` may change that link, which keeps both sides consistent.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from icompras.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PLACED = "PLACED"
    PAID = "PAID"
    PAYMENT_ERROR = "PAYMENT_ERROR"
    PREPARED = "PREPARED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


INITIAL_STATUS = OrderStatus.PLACED


class PaymentMethod(Enum):
    PIX = "PIX"
    CARD = "CARD"
    BANK_SLIP = "BANK_SLIP"


@dataclass(frozen=True)
class PaymentData:
    """Payment details carried through untouched.

    Only the method is meaningful to this service; the remaining fields
    belong to whichever provider handles the method.
    """

    method: PaymentMethod
    pix_key: str | None = None
    card_number: str | None = None
    authorization_code: str | None = None
    payment_line: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class LineItem:
    """One product line within an order.

    Line items compare by identity: two lines with the same product,
    quantity and price are still different lines.
    """

    product_id: int
    quantity: Quantity
    unit_price: Money
    id: int | None = None
    _order: Order | None = field(default=None, init=False, repr=False)

    @property
    def order(self) -> Order | None:
        """The owning order, or None while the item is detached."""
        return self._order

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


def calculate_total(items: Iterable[LineItem]) -> Money:
    """Sum of ``unit_price * quantity``, floored at zero, rounded half-up."""
    raw = sum(
        (item.unit_price.amount * item.quantity.value for item in items),
        Decimal("0"),
    )
    return Money(abs(raw)).quantized()


@dataclass(eq=False)
class Order:
    """Aggregate root for purchase orders.

    Use ``Order.place()`` for new orders.  The ``__init__`` stays simple so
    repositories can reconstitute stored orders as they were saved; stored
    items are then attached with ``add_item``.
    """

    id: int | None
    customer_id: int
    status: OrderStatus = INITIAL_STATUS
    total: Money = field(default_factory=Money.zero)
    created_at: datetime = field(default_factory=_utcnow)
    note: str | None = None
    tracking_code: str | None = None
    invoice_url: str | None = None
    payment: PaymentData | None = None
    payment_key: str | None = None
    _items: list[LineItem] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.created_at is None:
            self.created_at = _utcnow()

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        customer_id: int,
        items: Iterable[LineItem],
        *,
        payment: PaymentData | None = None,
        note: str | None = None,
        tracking_code: str | None = None,
        invoice_url: str | None = None,
        payment_key: str | None = None,
    ) -> Order:
        """Create a new order in its initial state.

        The status is always ``PLACED`` and the timestamp is always the
        moment of creation; callers cannot choose either.
        """
        items = list(items)
        order = Order(
            id=None,
            customer_id=customer_id,
            status=INITIAL_STATUS,
            total=calculate_total(items),
            created_at=_utcnow(),
            note=note,
            tracking_code=tracking_code,
            invoice_url=invoice_url,
            payment=payment,
            payment_key=payment_key,
        )
        for item in items:
            order.add_item(item)
        return order

    # --- Item ownership -------------------------------------------------------

    @property
    def items(self) -> tuple[LineItem, ...]:
        """Current items in insertion order (read-only view)."""
        return tuple(self._items)

    def add_item(self, item: LineItem) -> None:
        """Append *item* and point it back at this order.

        An item that already belongs to an order (this one included) is
        detached from it first, so it is never owned twice.
        """
        if item.order is not None:
            item.order.remove_item(item)
        self._items.append(item)
        item._order = self

    def remove_item(self, item: LineItem) -> None:
        """Detach *item* from this order.

        Removal is by identity.  An item that is not listed here is left
        in place, except that a stale back-reference to this order is
        still cleared.
        """
        index = self._index_of(item)
        if index is not None:
            del self._items[index]
        if item.order is self:
            item._order = None

    def clear_items(self) -> list[LineItem]:
        """Detach every item and empty the sequence.

        Returns the detached items; any of them not re-attached before the
        next save is an orphan and is deleted by the repository.
        """
        detached = list(self._items)
        for item in detached:
            item._order = None
        self._items.clear()
        return detached

    # --- Computed properties --------------------------------------------------

    @property
    def items_total(self) -> Money:
        """Total derived from the current items (``total`` may differ after an update)."""
        return calculate_total(self._items)

    # --- Internal helpers -----------------------------------------------------

    def _index_of(self, item: LineItem) -> int | None:
        for index, candidate in enumerate(self._items):
            if candidate is item:
                return index
        return None
