"""JSON-file-backed implementation of OrderRepository.

The whole store is one JSON document holding the orders and the ID
counters.  Every write replaces the file atomically (temporary file plus
``os.replace``), so readers see either the old aggregate or the new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import structlog

from icompras.domain.exceptions import PersistenceError
from icompras.domain.model.order import (
    LineItem,
    Order,
    OrderStatus,
    PaymentData,
    PaymentMethod,
)
from icompras.domain.model.value_objects import Money, Quantity
from icompras.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

_EMPTY_DOCUMENT = {"next_order_id": 1, "next_item_id": 1, "orders": []}


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        raw = self._find_raw(self._load()["orders"], order_id)
        return None if raw is None else self._to_domain(raw)

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._load()["orders"]]

    def list_by_customer(self, customer_id: int) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._load()["orders"]
            if raw["customer_id"] == customer_id
        ]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._load()["orders"]
            if raw["status"] == status.value
        ]

    def save(self, order: Order) -> Order:
        document = self._load()
        orders = document["orders"]

        order_id = order.id if order.id is not None else document["next_order_id"]
        document["next_order_id"] = max(document["next_order_id"], order_id + 1)

        previous = self._find_raw(orders, order_id)
        previous_ids = {i["id"] for i in previous["items"]} if previous else set()

        # Item IDs are only kept for items already stored under this order.
        item_ids = []
        for item in order.items:
            if item.id in previous_ids:
                item_ids.append(item.id)
            else:
                item_ids.append(document["next_item_id"])
                document["next_item_id"] += 1
        orphaned = previous_ids - set(item_ids)

        # Upsert: replace if exists, otherwise append
        raw = self._to_raw(order, order_id, item_ids)
        if previous is None:
            orders.append(raw)
        else:
            orders[orders.index(previous)] = raw

        self._persist(document)

        order.id = order_id
        for item, item_id in zip(order.items, item_ids):
            item.id = item_id

        if orphaned:
            logger.info(
                "orphan_line_items_deleted",
                order_id=order.id,
                item_ids=sorted(orphaned),
            )
        return order

    def delete_by_id(self, order_id: int) -> None:
        document = self._load()
        remaining = [raw for raw in document["orders"] if raw["id"] != order_id]
        if len(remaining) != len(document["orders"]):
            document["orders"] = remaining
            self._persist(document)

    def exists_by_id(self, order_id: int) -> bool:
        return self._find_raw(self._load()["orders"], order_id) is not None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order, order_id: int, item_ids: list[int]) -> dict:
        payment = None
        if order.payment is not None:
            payment = {
                "method": order.payment.method.value,
                "pix_key": order.payment.pix_key,
                "card_number": order.payment.card_number,
                "authorization_code": order.payment.authorization_code,
                "payment_line": order.payment.payment_line,
            }
        return {
            "id": order_id,
            "customer_id": order.customer_id,
            "created_at": order.created_at.isoformat(),
            "status": order.status.value,
            "note": order.note,
            "total": str(order.total.amount),
            "tracking_code": order.tracking_code,
            "invoice_url": order.invoice_url,
            "payment": payment,
            "payment_key": order.payment_key,
            "items": [
                {
                    "id": item_id,
                    "product_id": item.product_id,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                }
                for item, item_id in zip(order.items, item_ids)
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        payment = None
        if raw.get("payment"):
            p = raw["payment"]
            payment = PaymentData(
                method=PaymentMethod(p["method"]),
                pix_key=p.get("pix_key"),
                card_number=p.get("card_number"),
                authorization_code=p.get("authorization_code"),
                payment_line=p.get("payment_line"),
            )
        order = Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            status=OrderStatus(raw["status"]),
            total=Money(Decimal(raw["total"])),
            created_at=datetime.fromisoformat(raw["created_at"]),
            note=raw.get("note"),
            tracking_code=raw.get("tracking_code"),
            invoice_url=raw.get("invoice_url"),
            payment=payment,
            payment_key=raw.get("payment_key"),
        )
        for i in raw["items"]:
            order.add_item(
                LineItem(
                    id=i["id"],
                    product_id=i["product_id"],
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money(Decimal(i["unit_price"])),
                )
            )
        return order

    @staticmethod
    def _find_raw(orders: list[dict], order_id: int) -> dict | None:
        for raw in orders:
            if raw["id"] == order_id:
                return raw
        return None

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(
                f"Cannot read order store {self._file_path}: {exc}"
            ) from exc

    def _persist(self, document: dict) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=".orders-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(document, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(
                f"Cannot write order store {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist(dict(_EMPTY_DOCUMENT))
