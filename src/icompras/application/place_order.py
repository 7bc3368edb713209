"""Application service: Place Order use case.

Turns a decoded request into a brand-new aggregate and stores the whole
graph (order plus items) in a single repository call.
"""

from __future__ import annotations

import structlog

from icompras.application.dto import NewOrderSpec, OrderDTO, to_dto
from icompras.domain.model.order import Order
from icompras.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class PlaceOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, spec: NewOrderSpec) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Build a LineItem for every requested line, fields copied verbatim.
        2. Let ``Order.place`` force the initial status, stamp the creation
           time, compute the total and attach every item.
        3. Persist the aggregate and return a DTO with all IDs filled in.
        """
        line_items = [item_spec.to_line_item() for item_spec in spec.items]
        payment = spec.payment.to_payment_data() if spec.payment else None

        order = Order.place(
            customer_id=spec.customer_id,
            items=line_items,
            payment=payment,
            note=spec.note,
            tracking_code=spec.tracking_code,
            invoice_url=spec.invoice_url,
            payment_key=spec.payment_key,
        )
        saved = self._order_repo.save(order)

        logger.info(
            "order_placed",
            order_id=saved.id,
            customer_id=saved.customer_id,
            item_count=len(saved.items),
            total=str(saved.total),
        )
        return to_dto(saved)
