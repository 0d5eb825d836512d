"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. Nothing here runs at
import time: the CLI and the HTTP app each build one ``Services`` per
process and own it.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.application.add_product import AddProductHandler
from orderdesk.application.list_orders import ListOrdersHandler
from orderdesk.application.list_products import ListProductsHandler
from orderdesk.application.place_order import PlaceOrderHandler
from orderdesk.application.restock_product import RestockProductHandler
from orderdesk.application.retire_product import RetireProductHandler
from orderdesk.application.retry_policy import RetryPolicy
from orderdesk.application.show_order import ShowOrderHandler
from orderdesk.application.show_product import ShowProductHandler
from orderdesk.application.update_product import UpdateProductHandler
from orderdesk.config import Settings
from orderdesk.domain.repository.transactional_store import TransactionalStore
from orderdesk.infrastructure.persistence.sql_store import (
    SqlTransactionalStore,
    create_store_engine,
)


@dataclass(frozen=True)
class Services:
    store: TransactionalStore
    place_order: PlaceOrderHandler
    show_order: ShowOrderHandler
    list_orders: ListOrdersHandler
    add_product: AddProductHandler
    update_product: UpdateProductHandler
    restock_product: RestockProductHandler
    retire_product: RetireProductHandler
    list_products: ListProductsHandler
    show_product: ShowProductHandler


def sql_store(settings: Settings) -> SqlTransactionalStore:
    path = settings.sqlite_path
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_store_engine(
        settings.database_url, sqlite_busy_timeout=settings.sqlite_busy_timeout
    )
    return SqlTransactionalStore(engine)


def build_services(store: TransactionalStore, settings: Settings) -> Services:
    retry_policy = RetryPolicy(
        max_attempts=settings.order_max_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )
    return Services(
        store=store,
        place_order=PlaceOrderHandler(
            store, retry_policy=retry_policy, timeout=settings.order_timeout
        ),
        show_order=ShowOrderHandler(store),
        list_orders=ListOrdersHandler(store),
        add_product=AddProductHandler(store),
        update_product=UpdateProductHandler(store),
        restock_product=RestockProductHandler(store),
        retire_product=RetireProductHandler(store),
        list_products=ListProductsHandler(store),
        show_product=ShowProductHandler(store),
    )
