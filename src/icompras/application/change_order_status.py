"""Application service: Change Order Status use case.

Touches the status field only.  There is no transition graph: any status
may be replaced by any other.
"""

from __future__ import annotations

import structlog

from icompras.application.dto import OrderDTO, parse_status, to_dto
from icompras.domain.exceptions import EntityNotFoundError
from icompras.domain.model.order import OrderStatus
from icompras.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class ChangeOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, new_status: str | OrderStatus) -> OrderDTO:
        status = parse_status(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        previous = order.status
        order.status = status
        saved = self._order_repo.save(order)

        logger.info(
            "order_status_changed",
            order_id=order_id,
            previous=previous.value,
            status=status.value,
        )
        return to_dto(saved)
