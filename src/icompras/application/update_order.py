"""Application service: Update Order use case (full replacement).

The update is a complete overwrite, not a patch: every scalar field takes
the replacement's value and the item set is rebuilt from scratch.  Items
that were owned before but are not part of the replacement become orphans
and are deleted by the repository during the same save.
"""

from __future__ import annotations

import structlog

from icompras.application.dto import OrderDTO, OrderReplacementSpec, parse_status, to_dto
from icompras.domain.exceptions import EntityNotFoundError
from icompras.domain.model.value_objects import Money
from icompras.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class UpdateOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, spec: OrderReplacementSpec) -> OrderDTO:
        # Decoded before loading; a rejected payload leaves the order untouched.
        status = parse_status(spec.status)
        total = Money.of(spec.total)
        payment = spec.payment.to_payment_data() if spec.payment else None
        new_items = [item_spec.to_line_item() for item_spec in spec.items]

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.customer_id = spec.customer_id
        order.note = spec.note
        order.status = status
        order.total = total
        order.tracking_code = spec.tracking_code
        order.invoice_url = spec.invoice_url
        order.payment = payment
        order.payment_key = spec.payment_key

        orphaned = order.clear_items()
        for item in new_items:
            order.add_item(item)

        saved = self._order_repo.save(order)

        logger.info(
            "order_updated",
            order_id=saved.id,
            status=saved.status.value,
            item_count=len(saved.items),
            orphaned=len(orphaned),
        )
        return to_dto(saved)
