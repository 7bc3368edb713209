"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from icompras.domain.repository.order_repository import OrderRepository
from icompras.infrastructure.config import Settings, get_settings
from icompras.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from icompras.infrastructure.persistence.sql_order_repository import (
    SqlOrderRepository,
)


def order_repository(settings: Settings | None = None) -> OrderRepository:
    """Build the repository selected by ``ICOMPRAS_STORAGE``."""
    settings = settings or get_settings()

    if settings.storage == "json":
        return JsonOrderRepository(settings.orders_file)

    if settings.database_url is None:
        # Default SQLite file lives in the data directory.
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return SqlOrderRepository.from_url(
        settings.resolved_database_url, echo=settings.sql_echo
    )
