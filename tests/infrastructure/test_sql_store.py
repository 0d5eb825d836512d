"""Integration tests for the SQLAlchemy store against a real SQLite file."""

from __future__ import annotations

import sqlite3
import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError, OperationalError

from orderdesk.application.dto import OrderItemSpec
from orderdesk.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
    WriteConflictError,
)
from orderdesk.domain.model.identity import Identity, Role
from orderdesk.domain.model.pagination import OrderFilters, PageRequest
from orderdesk.domain.model.value_objects import MAX_QUANTITY, new_identifier
from orderdesk.infrastructure.persistence.conflicts import (
    is_write_conflict,
    translate_conflicts,
)
from orderdesk.infrastructure.persistence.sql_store import (
    SqlTransactionalStore,
    create_store_engine,
)
from orderdesk.infrastructure.persistence.tables import OrderRow, ProductRow

ALICE = Identity("alice")
BOB = Identity("bob")


def _stock(store: SqlTransactionalStore, product_id: str) -> int:
    with store.reader() as session:
        return session.products.get_by_id(product_id).stock


def _order_count(store: SqlTransactionalStore) -> int:
    with store.engine.connect() as conn:
        return len(conn.execute(select(OrderRow.id)).all())


class TestPlacementAgainstSqlite:

    def test_scenario(self, services, store, add_product):
        laptop = add_product(name="Laptop", price="100.00", stock=10)

        dto = services.place_order.handle(ALICE, [OrderItemSpec(laptop.id, 3)])
        assert dto.total == Decimal("300.00")
        assert _stock(store, laptop.id) == 7

        with pytest.raises(InsufficientStockError, match="Available: 7, Requested: 10"):
            services.place_order.handle(ALICE, [OrderItemSpec(laptop.id, 10)])
        assert _stock(store, laptop.id) == 7
        assert _order_count(store) == 1

    def test_order_round_trips(self, services, add_product):
        widget = add_product(name="Widget", price="15.00")
        gadget = add_product(name="Gadget", price="25.00")
        placed = services.place_order.handle(
            ALICE,
            [OrderItemSpec(widget.id, 3), OrderItemSpec(gadget.id, 5)],
            "fragile",
        )

        loaded = services.show_order.handle(ALICE, placed.id)
        assert loaded == placed
        assert [i.product_name for i in loaded.items] == ["Widget", "Gadget"]
        assert loaded.created_at.tzinfo is not None

    def test_failure_on_second_item_rolls_back_first(self, services, store, add_product):
        plenty = add_product(name="Plenty", stock=10)
        scarce = add_product(name="Scarce", stock=1)

        with pytest.raises(InsufficientStockError):
            services.place_order.handle(
                ALICE, [OrderItemSpec(plenty.id, 2), OrderItemSpec(scarce.id, 5)]
            )
        assert _stock(store, plenty.id) == 10
        assert _order_count(store) == 0

    def test_unknown_product_rolls_back(self, services, store, add_product):
        widget = add_product(stock=10)
        with pytest.raises(EntityNotFoundError):
            services.place_order.handle(
                ALICE, [OrderItemSpec(widget.id, 2), OrderItemSpec(new_identifier(), 1)]
            )
        assert _stock(store, widget.id) == 10

    def test_oversized_quantity_is_a_validation_error(self, services, store, add_product):
        widget = add_product(stock=10)
        with pytest.raises(ValidationError):
            services.place_order.handle(ALICE, [OrderItemSpec(widget.id, 10**30)])
        with pytest.raises(InsufficientStockError):
            services.place_order.handle(ALICE, [OrderItemSpec(widget.id, MAX_QUANTITY)])
        assert _stock(store, widget.id) == 10

    def test_sub_cent_price_is_stored_as_charged(self, services, store):
        dto = services.add_product.handle(
            Identity("root", Role.ADMIN),
            "Eraser",
            "A soft pink eraser",
            "2.675",
            5,
            "office",
        )
        with store.reader() as session:
            stored = session.products.get_by_id(dto.id)
        assert stored.price.amount == dto.price == Decimal("2.68")

        order = services.place_order.handle(ALICE, [OrderItemSpec(dto.id, 2)])
        assert order.total == Decimal("5.36")

    def test_foreign_order_is_not_found(self, services, add_product):
        widget = add_product()
        placed = services.place_order.handle(ALICE, [OrderItemSpec(widget.id, 1)])
        with pytest.raises(EntityNotFoundError, match="Order not found"):
            services.show_order.handle(BOB, placed.id)


class TestConcurrentPlacement:

    def test_last_unit_is_sold_once(self, services, store, add_product):
        widget = add_product(stock=1)
        barrier = threading.Barrier(2)
        outcomes: list[object] = []
        lock = threading.Lock()

        def buyer(identity: Identity) -> None:
            barrier.wait()
            try:
                result = services.place_order.handle(identity, [OrderItemSpec(widget.id, 1)])
            except Exception as exc:  # collected and asserted below
                result = exc
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=buyer, args=(i,)) for i in (ALICE, BOB)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        errors = [o for o in outcomes if isinstance(o, Exception)]
        assert len(outcomes) == 2
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientStockError)
        assert _stock(store, widget.id) == 0
        assert _order_count(store) == 1

    def test_many_buyers_never_oversell(self, services, store, add_product):
        widget = add_product(stock=5)
        barrier = threading.Barrier(8)
        placed: list[str] = []
        lock = threading.Lock()

        def buyer(n: int) -> None:
            barrier.wait()
            try:
                dto = services.place_order.handle(
                    Identity(f"user-{n}"), [OrderItemSpec(widget.id, 1)]
                )
            except InsufficientStockError:
                return
            with lock:
                placed.append(dto.id)

        threads = [threading.Thread(target=buyer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert len(placed) == 5
        assert _stock(store, widget.id) == 0


class TestSessionSemantics:

    def test_abort_discards_writes(self, store, add_product):
        widget = add_product(stock=10)
        session = store.begin()
        assert session.products.decrement_stock(widget.id, 4)
        session.abort()
        session.abort()
        assert not session.is_active
        assert _stock(store, widget.id) == 10

    def test_session_context_aborts_without_commit(self, store, add_product):
        widget = add_product(stock=10)
        with store.session() as session:
            session.products.decrement_stock(widget.id, 4)
        assert not session.is_active
        assert _stock(store, widget.id) == 10

    def test_uncommitted_writes_are_invisible(self, store, settings, add_product):
        widget = add_product(stock=10)
        outsider = create_engine(settings.database_url)
        try:
            with store.session() as session:
                session.products.decrement_stock(widget.id, 4)
                assert session.products.get_by_id(widget.id).stock == 6
                with outsider.connect() as conn:
                    seen = conn.execute(
                        select(ProductRow.stock).where(ProductRow.id == widget.id)
                    ).scalar_one()
                assert seen == 10
                session.commit()
        finally:
            outsider.dispose()
        assert _stock(store, widget.id) == 6

    def test_commit_twice_rejected(self, store):
        session = store.begin()
        session.commit()
        with pytest.raises(RuntimeError):
            session.commit()

    def test_conditional_decrement_refuses_overdraw(self, store, add_product):
        widget = add_product(stock=2)
        with store.session() as session:
            assert not session.products.decrement_stock(widget.id, 3)
            assert session.products.decrement_stock(widget.id, 2)
            session.commit()
        assert _stock(store, widget.id) == 0

    def test_stock_constraint_enforced_by_database(self, store, add_product):
        widget = add_product(stock=1)
        with pytest.raises(IntegrityError):
            with store.session() as session:
                session.products.increment_stock(widget.id, -5)

    def test_busy_database_surfaces_as_write_conflict(self, settings, store, add_product):
        widget = add_product(stock=10)
        impatient = SqlTransactionalStore(
            create_store_engine(settings.database_url, sqlite_busy_timeout=0.05)
        )
        try:
            with store.session() as holder:
                holder.products.decrement_stock(widget.id, 1)
                with pytest.raises(WriteConflictError) as info:
                    with impatient.session() as waiter:
                        waiter.products.decrement_stock(widget.id, 1)
            assert "SQL" not in str(info.value)
        finally:
            impatient.dispose()

    def test_readers_are_not_blocked_by_an_open_writer(self, settings, store, add_product):
        widget = add_product(stock=10)
        impatient = SqlTransactionalStore(
            create_store_engine(settings.database_url, sqlite_busy_timeout=0.2)
        )
        try:
            with store.session() as holder:
                assert holder.products.decrement_stock(widget.id, 4)
                with impatient.reader() as reader:
                    assert reader.products.get_by_id(widget.id).stock == 10
                    page = reader.orders.list_for_owner(
                        ALICE.user_id, PageRequest(), OrderFilters()
                    )
                assert page.total_size == 0
        finally:
            impatient.dispose()


class TestSqlOrderListing:

    def test_paging_and_filters(self, services, store, add_product):
        cheap = add_product(name="Cheap", price="5.00", stock=100)
        pricey = add_product(name="Pricey", price="50.00", stock=100)
        for product in (cheap, pricey, cheap):
            services.place_order.handle(ALICE, [OrderItemSpec(product.id, 1)])
        services.place_order.handle(BOB, [OrderItemSpec(pricey.id, 1)])

        with store.reader() as session:
            first = session.orders.list_for_owner(
                ALICE.user_id, PageRequest(page=1, page_size=2), OrderFilters()
            )
            expensive = session.orders.list_for_owner(
                ALICE.user_id, PageRequest(), OrderFilters(min_total=Decimal("10"))
            )

        assert first.total_size == 3
        assert first.total_pages == 2
        assert len(first.items) == 2
        assert first.items[0].created_at >= first.items[1].created_at
        assert [o.total.amount for o in expensive.items] == [Decimal("50.00")]


class TestSqlProductListing:

    def test_only_active_products_are_paged(self, services, store, add_product):
        kept = [add_product(name=f"Tool {n}", category="tools") for n in range(3)]
        add_product(name="Novel", category="books")
        services.retire_product.handle(Identity("root", Role.ADMIN), kept[0].id)

        with store.reader() as session:
            first = session.products.list_active(
                PageRequest(page=1, page_size=1), "tools"
            )
            everything = session.products.list_active(PageRequest())

        assert first.total_size == 2
        assert first.total_pages == 2
        assert first.items[0].id in {kept[1].id, kept[2].id}
        assert everything.total_size == 3


class TestConflictClassification:

    def test_locked_database_is_a_conflict(self):
        exc = OperationalError("UPDATE", {}, sqlite3.OperationalError("database is locked"))
        assert is_write_conflict(exc)

    def test_other_operational_errors_are_not(self):
        exc = OperationalError("SELECT", {}, sqlite3.OperationalError("no such table: x"))
        assert not is_write_conflict(exc)

    def test_translate_conflicts(self):
        with pytest.raises(WriteConflictError) as info:
            with translate_conflicts():
                raise OperationalError(
                    "UPDATE", {}, sqlite3.OperationalError("database is locked")
                )
        assert str(info.value) == "The data was modified by a concurrent transaction"
        assert isinstance(info.value.__cause__, OperationalError)

    def test_translate_passes_other_errors_through(self):
        with pytest.raises(OperationalError):
            with translate_conflicts():
                raise OperationalError("SELECT", {}, sqlite3.OperationalError("disk I/O"))
