"""Abstract transactional store.

A ``StoreSession`` is one transaction: the repositories it exposes read
and write under it, and nothing they write is visible to other sessions
until ``commit()``. ``abort()`` discards everything.

Implementations must raise ``WriteConflictError`` for failures caused by
a concurrently committing transaction (from any call, commit included)
and let every other failure propagate unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.product_repository import ProductRepository


class StoreSession(ABC):

    @property
    @abstractmethod
    def products(self) -> ProductRepository:
        """Products, read and written under this session."""

    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        """Orders, read and written under this session."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True until the session has been committed or aborted."""

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this session durable and visible."""

    @abstractmethod
    def abort(self) -> None:
        """Discard every write of this session. Safe to call twice."""


class TransactionalStore(ABC):

    @abstractmethod
    def begin(self, readonly: bool = False) -> StoreSession:
        """Open a new session.

        A ``readonly`` session only looks things up and must not wait on,
        or hold up, sessions that write.
        """

    @contextmanager
    def session(self) -> Iterator[StoreSession]:
        """Yield a fresh session and guarantee it is ended.

        The body is expected to call ``commit()``. If it raises (for any
        reason, interrupts included) or returns without committing, the
        session is aborted.
        """
        session = self.begin()
        try:
            yield session
        finally:
            if session.is_active:
                session.abort()

    @contextmanager
    def reader(self) -> Iterator[StoreSession]:
        """Yield a session for lookups; it is always discarded."""
        session = self.begin(readonly=True)
        try:
            yield session
        finally:
            session.abort()
