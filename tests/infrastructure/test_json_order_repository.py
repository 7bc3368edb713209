"""Tests for the JSON-file repository."""

import json

import pytest

from icompras.domain.exceptions import PersistenceError
from icompras.domain.model.order import LineItem, Order, OrderStatus
from icompras.domain.model.value_objects import Money, Quantity
from icompras.infrastructure.persistence import json_order_repository
from icompras.infrastructure.persistence.json_order_repository import JsonOrderRepository


def _item(product_id: int, qty: int = 1, price: str = "50.00") -> LineItem:
    return LineItem(product_id=product_id, quantity=Quantity(qty), unit_price=Money.of(price))


def _placed(customer_id: int = 100) -> Order:
    return Order.place(customer_id=customer_id, items=[_item(10, 2), _item(20, 1)])


@pytest.fixture
def path(tmp_path):
    return tmp_path / "store" / "orders.json"


@pytest.fixture
def repo(path):
    return JsonOrderRepository(path)


class TestJsonOrderRepository:

    def test_creates_empty_store(self, repo, path):
        assert json.loads(path.read_text()) == {
            "next_order_id": 1,
            "next_item_id": 1,
            "orders": [],
        }

    def test_round_trip(self, repo):
        saved = repo.save(_placed())
        loaded = repo.get_by_id(saved.id)

        assert loaded.id == 1
        assert loaded.total == Money.of("150.00")
        assert loaded.created_at == saved.created_at
        assert [(i.id, i.product_id) for i in loaded.items] == [(1, 10), (2, 20)]
        assert all(item.order is loaded for item in loaded.items)

    def test_replacement_drops_orphans_and_allocates_new_ids(self, repo, path):
        order = repo.save(_placed())
        order.clear_items()
        order.add_item(_item(30, 3, "30.00"))
        repo.save(order)

        raw = json.loads(path.read_text())
        assert [i["id"] for i in raw["orders"][0]["items"]] == [3]
        assert raw["next_item_id"] == 4

    def test_item_ids_from_other_orders_are_not_reused(self, repo):
        first = repo.save(_placed(customer_id=1))
        second = repo.save(Order.place(customer_id=2, items=[]))

        stolen = first.items[0]
        second.add_item(stolen)
        repo.save(second)

        assert stolen.id == 3
        assert [i.id for i in repo.get_by_id(first.id).items] == [1, 2]

    def test_filters(self, repo):
        repo.save(_placed(customer_id=1))
        other = repo.save(_placed(customer_id=2))
        other.status = OrderStatus.CANCELLED
        repo.save(other)

        assert [o.id for o in repo.list_all()] == [1, 2]
        assert [o.id for o in repo.list_by_customer(1)] == [1]
        assert [o.id for o in repo.list_by_status(OrderStatus.CANCELLED)] == [2]

    def test_delete_removes_order_and_items(self, repo, path):
        order = repo.save(_placed())
        repo.delete_by_id(order.id)

        assert not repo.exists_by_id(order.id)
        assert json.loads(path.read_text())["orders"] == []

    def test_ids_are_never_reused_after_delete(self, repo):
        order = repo.save(_placed())
        repo.delete_by_id(order.id)
        assert repo.save(_placed()).id == 2

    def test_no_temporary_files_left_behind(self, repo, path):
        repo.save(_placed())
        assert [p.name for p in path.parent.iterdir()] == ["orders.json"]

    def test_corrupt_file_raises_persistence_error(self, repo, path):
        path.write_text("{not json")
        with pytest.raises(PersistenceError, match="Cannot read order store"):
            repo.list_all()

    def test_failed_write_assigns_no_ids(self, repo, path, monkeypatch):
        def refuse(*args):
            raise OSError("disk full")

        monkeypatch.setattr(json_order_repository.os, "replace", refuse)
        order = _placed()

        with pytest.raises(PersistenceError, match="Cannot write order store"):
            repo.save(order)

        assert order.id is None
        assert [item.id for item in order.items] == [None, None]
        assert json.loads(path.read_text())["orders"] == []
