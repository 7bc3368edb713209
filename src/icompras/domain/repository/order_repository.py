"""Abstract repository for the Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (SQL, JSON file, in-memory)
live in the infrastructure layer and the tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from icompras.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):
    """Persistence port for whole order aggregates.

    Every method is one atomic unit of work against the store.  Failures of
    the store itself surface as ``PersistenceError``.
    """

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order with all its items, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every stored order."""

    @abstractmethod
    def list_by_customer(self, customer_id: int) -> list[Order]:
        """Return the orders placed by one customer."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return the orders currently in *status*."""

    @abstractmethod
    def save(self, order: Order) -> Order:
        """Persist the order and its current items in one atomic step.

        Items the order owns are inserted or updated; items previously
        stored for this order but no longer owned by it are deleted.
        Identifiers are assigned to the order and to every new item.
        """

    @abstractmethod
    def delete_by_id(self, order_id: int) -> None:
        """Delete an order together with all of its items."""

    @abstractmethod
    def exists_by_id(self, order_id: int) -> bool:
        """True if an order with this ID is stored."""
