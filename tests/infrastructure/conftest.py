"""Shared fixtures: a real SQLite-backed store in a temporary directory."""

from __future__ import annotations

import pytest

from orderdesk.config import Settings
from orderdesk.infrastructure.bootstrap import build_services
from orderdesk.infrastructure.logging_config import configure_logging
from orderdesk.infrastructure.persistence.sql_store import (
    SqlTransactionalStore,
    create_store_engine,
)
from tests.fakes import make_product


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    configure_logging("WARNING")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'orderdesk.db'}",
        retry_base_delay=0.001,
        retry_max_delay=0.01,
        order_timeout=None,
        sqlite_busy_timeout=5.0,
    )


@pytest.fixture
def store(settings):
    store = SqlTransactionalStore(
        create_store_engine(
            settings.database_url, sqlite_busy_timeout=settings.sqlite_busy_timeout
        )
    )
    store.create_schema()
    yield store
    store.dispose()


@pytest.fixture
def services(store, settings):
    return build_services(store, settings)


@pytest.fixture
def add_product(store):
    """Insert a committed product and return it."""

    def _add(**kwargs):
        product = make_product(**kwargs)
        with store.session() as session:
            session.products.add(product)
            session.commit()
        return product

    return _add
