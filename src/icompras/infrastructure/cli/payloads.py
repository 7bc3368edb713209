"""Request payloads accepted by the CLI, decoded and validated with pydantic.

Validation of required fields and numeric bounds happens here, before any
handler runs.  Amounts carry at most two fraction digits.  A status or timestamp sent with a new order is accepted and
ignored: new orders always start as PLACED, stamped with the current time.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from icompras.application.dto import (
    LineItemSpec,
    NewOrderSpec,
    OrderReplacementSpec,
    PaymentSpec,
)
from icompras.domain.model.order import OrderStatus, PaymentMethod


class LineItemPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    product_id: int
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0, decimal_places=2)

    def to_spec(self) -> LineItemSpec:
        return LineItemSpec(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class PaymentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    method: PaymentMethod
    pix_key: str | None = None
    card_number: str | None = None
    authorization_code: str | None = None
    payment_line: str | None = None

    def to_spec(self) -> PaymentSpec:
        return PaymentSpec(
            method=self.method.value,
            pix_key=self.pix_key,
            card_number=self.card_number,
            authorization_code=self.authorization_code,
            payment_line=self.payment_line,
        )


class _OrderFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer_id: int
    payment: PaymentPayload | None = None
    note: str | None = None
    tracking_code: str | None = None
    invoice_url: str | None = None
    payment_key: str | None = None


class NewOrderPayload(_OrderFields):
    """Body of ``order create``: at least one item is required."""

    items: list[LineItemPayload] = Field(min_length=1)

    def to_spec(self) -> NewOrderSpec:
        return NewOrderSpec(
            customer_id=self.customer_id,
            items=[item.to_spec() for item in self.items],
            payment=self.payment.to_spec() if self.payment else None,
            note=self.note,
            tracking_code=self.tracking_code,
            invoice_url=self.invoice_url,
            payment_key=self.payment_key,
        )


class OrderReplacementPayload(_OrderFields):
    """Body of ``order update``: the full new state, items may be empty."""

    status: OrderStatus
    total: Decimal = Field(ge=0, decimal_places=2)
    items: list[LineItemPayload] = Field(default_factory=list)

    def to_spec(self) -> OrderReplacementSpec:
        return OrderReplacementSpec(
            customer_id=self.customer_id,
            status=self.status.value,
            total=self.total,
            items=[item.to_spec() for item in self.items],
            payment=self.payment.to_spec() if self.payment else None,
            note=self.note,
            tracking_code=self.tracking_code,
            invoice_url=self.invoice_url,
            payment_key=self.payment_key,
        )
