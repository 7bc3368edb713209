"""Application service: List Orders use case (query).

Filters by customer or by status; with neither, every order is returned.
"""

from __future__ import annotations

from icompras.application.dto import OrderDTO, parse_status, to_dto
from icompras.domain.exceptions import ValidationError
from icompras.domain.model.order import OrderStatus
from icompras.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        customer_id: int | None = None,
        status: str | OrderStatus | None = None,
    ) -> list[OrderDTO]:
        if customer_id is not None and status is not None:
            raise ValidationError("Filter by customer or by status, not both")

        if customer_id is not None:
            orders = self._order_repo.list_by_customer(customer_id)
        elif status is not None:
            orders = self._order_repo.list_by_status(parse_status(status))
        else:
            orders = self._order_repo.list_all()
        return [to_dto(order) for order in orders]
