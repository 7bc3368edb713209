"""CLI commands for the Order aggregate."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import IO

import click
import pydantic
import structlog

from icompras.application.change_order_status import ChangeOrderStatusHandler
from icompras.application.delete_order import DeleteOrderHandler
from icompras.application.dto import OrderDTO
from icompras.application.list_orders import ListOrdersHandler
from icompras.application.place_order import PlaceOrderHandler
from icompras.application.show_order import ShowOrderHandler
from icompras.application.update_order import UpdateOrderHandler
from icompras.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
)
from icompras.domain.model.order import OrderStatus
from icompras.infrastructure.bootstrap import order_repository
from icompras.infrastructure.cli.payloads import (
    NewOrderPayload,
    OrderReplacementPayload,
)

logger = structlog.get_logger(__name__)

STATUS_CHOICE = click.Choice([s.value for s in OrderStatus], case_sensitive=False)


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Translate domain failures into CLI errors."""
    try:
        yield
    except EntityNotFoundError as exc:
        raise click.ClickException(f"Not found: {exc}")
    except PersistenceError as exc:
        logger.error("order_command_failed", error=str(exc), cause=repr(exc.__cause__))
        raise click.ClickException(f"Server error: {exc}")
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _decode(model: type[pydantic.BaseModel], stream: IO[str]):
    """Parse a JSON payload, reporting every invalid field at once."""
    try:
        return model.model_validate_json(stream.read())
    except UnicodeDecodeError as exc:
        raise click.BadParameter(f"not valid UTF-8 ({exc.reason})", param_hint="'--payload'")
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
            for error in exc.errors()
        )
        raise click.BadParameter(problems, param_hint="'--payload'")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.payment is not None:
        click.echo(f"Payment:  {dto.payment.method}")
    if dto.tracking_code:
        click.echo(f"Tracking: {dto.tracking_code}")
    if dto.invoice_url:
        click.echo(f"Invoice:  {dto.invoice_url}")
    if dto.note:
        click.echo(f"Note:     {dto.note}")
    click.echo()

    click.echo(f"  {'Item':<6} {'Product':<10} {'Qty':>5} {'Price':>12} {'Subtotal':>12}")
    click.echo(f"  {'-'*49}")
    for item in dto.items:
        click.echo(
            f"  {item.id!s:<6} {item.product_id:<10} {item.quantity:>5} "
            f"{item.unit_price:>12} {item.subtotal:>12}"
        )
    click.echo(f"  {'-'*49}")
    click.echo(f"  {'Order Total':<23} {dto.total:>26}")


@click.command("create")
@click.option(
    "--payload",
    required=True,
    type=click.File("r", encoding="utf-8"),
    help="JSON file with the new order ('-' for stdin).",
)
def order_create(payload: IO[str]) -> None:
    """Place a new order (status PLACED, total computed from items)."""
    spec = _decode(NewOrderPayload, payload).to_spec()

    with _reported_errors():
        handler = PlaceOrderHandler(order_repo=order_repository())
        dto = handler.handle(spec)

    click.echo(f"Order #{dto.id} created")
    _display_order(dto)


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to replace.")
@click.option(
    "--payload",
    required=True,
    type=click.File("r", encoding="utf-8"),
    help="JSON file with the complete new order ('-' for stdin).",
)
def order_update(order_id: int, payload: IO[str]) -> None:
    """Replace an order, including its whole item list."""
    spec = _decode(OrderReplacementPayload, payload).to_spec()

    with _reported_errors():
        handler = UpdateOrderHandler(order_repo=order_repository())
        dto = handler.handle(order_id, spec)

    click.echo(f"Order #{dto.id} updated")
    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", "new_status", required=True, type=STATUS_CHOICE, help="New status.")
def order_status(order_id: int, new_status: str) -> None:
    """Change only the status of an order."""
    with _reported_errors():
        handler = ChangeOrderStatusHandler(order_repo=order_repository())
        dto = handler.handle(order_id, new_status)

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
def order_delete(order_id: int) -> None:
    """Delete an order and all of its items."""
    with _reported_errors():
        handler = DeleteOrderHandler(order_repo=order_repository())
        handler.handle(order_id)

    click.echo(f"Order #{order_id} deleted.")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    with _reported_errors():
        handler = ShowOrderHandler(order_repo=order_repository())
        dto = handler.handle(order_id)

    _display_order(dto)


@click.command("list")
@click.option("--customer", "customer_id", type=int, default=None, help="Only this customer's orders.")
@click.option("--status", "status", type=STATUS_CHOICE, default=None, help="Only orders in this status.")
def order_list(customer_id: int | None, status: str | None) -> None:
    """List orders, optionally filtered by customer or status."""
    with _reported_errors():
        handler = ListOrdersHandler(order_repo=order_repository())
        dtos = handler.handle(customer_id=customer_id, status=status)

    if not dtos:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<10} {'Status':<14} {'Items':>5} {'Total':>12}  Created")
    click.echo("-" * 70)
    for dto in dtos:
        click.echo(
            f"{dto.id:<6} {dto.customer_id:<10} {dto.status:<14} "
            f"{len(dto.items):>5} {dto.total:>12}  {dto.created_at}"
        )
