"""Data Transfer Objects: plain containers that cross layer boundaries.

Input specs arrive from the request boundary already decoded; output DTOs
carry orders back out without exposing the aggregate itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from icompras.domain.exceptions import ValidationError
from icompras.domain.model.order import (
    LineItem,
    Order,
    OrderStatus,
    PaymentData,
    PaymentMethod,
)
from icompras.domain.model.value_objects import Money, Quantity


def parse_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown order status '{value}' (expected one of: {allowed})")


# --- Input ---------------------------------------------------------------------


@dataclass(frozen=True)
class LineItemSpec:
    """Input: one requested line (product reference, quantity, unit price)."""

    product_id: int
    quantity: int
    unit_price: str | Decimal

    def to_line_item(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            quantity=Quantity(self.quantity),
            unit_price=Money.of(self.unit_price),
        )


@dataclass(frozen=True)
class PaymentSpec:
    """Input: payment block, copied verbatim onto the order."""

    method: str
    pix_key: str | None = None
    card_number: str | None = None
    authorization_code: str | None = None
    payment_line: str | None = None

    def to_payment_data(self) -> PaymentData:
        try:
            method = PaymentMethod(self.method.strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown payment method '{self.method}'")
        return PaymentData(
            method=method,
            pix_key=self.pix_key,
            card_number=self.card_number,
            authorization_code=self.authorization_code,
            payment_line=self.payment_line,
        )


@dataclass(frozen=True)
class NewOrderSpec:
    """Input: a new order.  Any status or timestamp the client sent is dropped."""

    customer_id: int
    items: list[LineItemSpec]
    payment: PaymentSpec | None = None
    note: str | None = None
    tracking_code: str | None = None
    invoice_url: str | None = None
    payment_key: str | None = None


@dataclass(frozen=True)
class OrderReplacementSpec:
    """Input: the complete new state of an existing order."""

    customer_id: int
    status: str
    total: str | Decimal
    items: list[LineItemSpec] = field(default_factory=list)
    payment: PaymentSpec | None = None
    note: str | None = None
    tracking_code: str | None = None
    invoice_url: str | None = None
    payment_key: str | None = None


# --- Output --------------------------------------------------------------------


@dataclass(frozen=True)
class LineItemDTO:
    """Output: a single line item as displayed to the user."""

    id: int | None
    product_id: int
    quantity: int
    unit_price: str  # formatted, e.g. "50.00"
    subtotal: str


@dataclass(frozen=True)
class PaymentDTO:
    method: str
    pix_key: str | None
    card_number: str | None
    authorization_code: str | None
    payment_line: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: int
    status: str
    items: list[LineItemDTO]
    total: str
    created_at: str
    note: str | None = None
    tracking_code: str | None = None
    invoice_url: str | None = None
    payment: PaymentDTO | None = None
    payment_key: str | None = None


def to_dto(order: Order) -> OrderDTO:
    payment = None
    if order.payment is not None:
        payment = PaymentDTO(
            method=order.payment.method.value,
            pix_key=order.payment.pix_key,
            card_number=order.payment.card_number,
            authorization_code=order.payment.authorization_code,
            payment_line=order.payment.payment_line,
        )
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_id=order.customer_id,
        status=order.status.value,
        items=[
            LineItemDTO(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                subtotal=str(item.subtotal),
            )
            for item in order.items
        ],
        total=str(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        note=order.note,
        tracking_code=order.tracking_code,
        invoice_url=order.invoice_url,
        payment=payment,
        payment_key=order.payment_key,
    )
