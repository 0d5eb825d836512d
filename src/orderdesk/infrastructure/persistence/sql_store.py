"""SQLAlchemy-backed implementation of TransactionalStore.

One ``SqlStoreSession`` wraps one ORM ``Session`` and therefore one
database transaction. Errors caused by concurrent writers are translated
to ``WriteConflictError`` at this boundary; everything else propagates.
"""

from __future__ import annotations

import structlog
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from orderdesk.domain.repository.transactional_store import (
    StoreSession,
    TransactionalStore,
)
from orderdesk.infrastructure.persistence.conflicts import translate_conflicts
from orderdesk.infrastructure.persistence.sql_order_repository import (
    SqlOrderRepository,
)
from orderdesk.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from orderdesk.infrastructure.persistence.tables import Base

logger = structlog.get_logger(__name__)

# Connection execution option marking lookup-only transactions.
READONLY_OPTION = "orderdesk_readonly"


class SqlStoreSession(StoreSession):

    def __init__(self, session: Session) -> None:
        self._session = session
        self._active = True
        self._products = SqlProductRepository(session)
        self._orders = SqlOrderRepository(session)

    @property
    def products(self) -> SqlProductRepository:
        return self._products

    @property
    def orders(self) -> SqlOrderRepository:
        return self._orders

    @property
    def is_active(self) -> bool:
        return self._active

    def commit(self) -> None:
        if not self._active:
            raise RuntimeError("Session already ended")
        with translate_conflicts():
            self._session.commit()
        self._active = False
        self._session.close()

    def abort(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self._session.rollback()
        finally:
            self._session.close()


class SqlTransactionalStore(TransactionalStore):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._reader_factory = sessionmaker(
            bind=engine.execution_options(**{READONLY_OPTION: True}),
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def begin(self, readonly: bool = False) -> SqlStoreSession:
        factory = self._reader_factory if readonly else self._session_factory
        return SqlStoreSession(factory())

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)
        logger.info("schema_created", url=self._engine.url.render_as_string())

    def dispose(self) -> None:
        self._engine.dispose()


def create_store_engine(
    url: str, sqlite_busy_timeout: float = 5.0, echo: bool = False
) -> Engine:
    """Build an engine suited to the transactional store.

    SQLite connections start writing transactions with ``BEGIN IMMEDIATE``:
    writers then queue on the database lock at transaction start instead
    of deadlocking when upgrading a read lock, and a writer that waits
    longer than the busy timeout surfaces as a write conflict. Read-only
    sessions use a deferred ``BEGIN`` and never take the write lock.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": sqlite_busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record) -> None:
        # Let the "begin" listener below own transaction start.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn) -> None:
        if conn.get_execution_options().get(READONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine
