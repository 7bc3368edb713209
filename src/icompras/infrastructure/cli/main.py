from __future__ import annotations

import click

from icompras.infrastructure.cli.order_commands import (
    order_create,
    order_delete,
    order_list,
    order_show,
    order_status,
    order_update,
)
from icompras.infrastructure.config import get_settings
from icompras.infrastructure.logging import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override ICOMPRAS_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """icompras order service."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level, json=settings.log_json)


@cli.group()
def order() -> None:
    """Manage orders."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_update)
