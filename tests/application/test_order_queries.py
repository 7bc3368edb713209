"""Integration tests for the ShowOrder and ListOrders queries."""

import pytest

from icompras.application.change_order_status import ChangeOrderStatusHandler
from icompras.application.dto import LineItemSpec, NewOrderSpec
from icompras.application.list_orders import ListOrdersHandler
from icompras.application.place_order import PlaceOrderHandler
from icompras.application.show_order import ShowOrderHandler
from icompras.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import FakeOrderRepository


def _setup() -> FakeOrderRepository:
    repo = FakeOrderRepository()
    place = PlaceOrderHandler(repo)
    for customer_id in (1, 1, 2):
        place.handle(
            NewOrderSpec(
                customer_id=customer_id,
                items=[LineItemSpec(product_id=10, quantity=1, unit_price="5.00")],
            )
        )
    ChangeOrderStatusHandler(repo).handle(3, "PAID")
    return repo


class TestShowOrder:

    def test_returns_dto(self):
        repo = _setup()
        dto = ShowOrderHandler(repo).handle(2)
        assert dto.id == 2
        assert dto.total == "5.00"
        assert dto.created_at.endswith("UTC")

    def test_missing_order(self):
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(FakeOrderRepository()).handle(1)


class TestListOrders:

    def test_lists_everything(self):
        assert [dto.id for dto in ListOrdersHandler(_setup()).handle()] == [1, 2, 3]

    def test_filters_by_customer(self):
        dtos = ListOrdersHandler(_setup()).handle(customer_id=1)
        assert [dto.id for dto in dtos] == [1, 2]

    def test_filters_by_status(self):
        dtos = ListOrdersHandler(_setup()).handle(status="PAID")
        assert [dto.id for dto in dtos] == [3]

    def test_both_filters_rejected(self):
        with pytest.raises(ValidationError, match="not both"):
            ListOrdersHandler(_setup()).handle(customer_id=1, status="PAID")
