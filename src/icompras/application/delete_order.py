"""Application service: Delete Order use case."""

from __future__ import annotations

import structlog

from icompras.domain.exceptions import EntityNotFoundError
from icompras.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class DeleteOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> None:
        """Delete an order; the repository removes its items with it."""
        if not self._order_repo.exists_by_id(order_id):
            raise EntityNotFoundError(f"Order #{order_id} not found")

        self._order_repo.delete_by_id(order_id)
        logger.info("order_deleted", order_id=order_id)
