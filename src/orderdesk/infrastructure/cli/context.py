"""Per-process CLI state: settings plus lazily built services."""

from __future__ import annotations

import click

from orderdesk.config import Settings
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.identity import Identity
from orderdesk.infrastructure.bootstrap import Services, build_services, sql_store
from orderdesk.infrastructure.persistence.sql_store import SqlTransactionalStore


class AppContext:

    def __init__(self, settings: Settings, services: Services | None = None) -> None:
        self.settings = settings
        self._services = services
        self._store: SqlTransactionalStore | None = None

    @property
    def store(self) -> SqlTransactionalStore:
        if self._store is None:
            self._store = sql_store(self.settings)
        return self._store

    @property
    def services(self) -> Services:
        if self._services is None:
            self._services = build_services(self.store, self.settings)
        return self._services


def identity_from_options(user: str, role: str) -> Identity:
    try:
        return Identity.of(user, role)
    except DomainException as exc:
        raise click.BadParameter(str(exc), param_hint="--user/--role")
