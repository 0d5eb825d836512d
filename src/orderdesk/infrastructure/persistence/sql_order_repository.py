"""SQLAlchemy implementation of OrderRepository, bound to one session."""

from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from orderdesk.domain.model.order import Order, OrderLineItem, OrderStatus
from orderdesk.domain.model.pagination import OrderFilters, Page, PageRequest
from orderdesk.domain.model.value_objects import Money, Quantity, new_identifier
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.infrastructure.persistence.conflicts import translate_conflicts
from orderdesk.infrastructure.persistence.sql_product_repository import as_utc
from orderdesk.infrastructure.persistence.tables import OrderLineItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> str:
        if order.id is None:
            order.id = new_identifier()
        with translate_conflicts():
            self._session.add(self._to_row(order))
            self._session.flush()
        return order.id

    def get_by_id(self, order_id: str, owner_id: str | None) -> Order | None:
        stmt = select(OrderRow).where(OrderRow.id == order_id)
        if owner_id is not None:
            stmt = stmt.where(OrderRow.user_id == owner_id)
        with translate_conflicts():
            row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_for_owner(
        self,
        owner_id: str,
        page: PageRequest,
        filters: OrderFilters,
    ) -> Page[Order]:
        base = self._apply_filters(
            select(OrderRow).where(OrderRow.user_id == owner_id), filters
        )
        count_stmt = select(func.count()).select_from(base.subquery())
        page_stmt = (
            base.order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .offset(page.offset)
            .limit(page.page_size)
        )
        with translate_conflicts():
            total = self._session.execute(count_stmt).scalar_one()
            rows = self._session.execute(page_stmt).scalars().all()
        return Page(
            items=[self._to_domain(row) for row in rows],
            page_number=page.page,
            page_size=page.page_size,
            total_size=total,
        )

    # --- Query helpers --------------------------------------------------------

    @staticmethod
    def _apply_filters(stmt: Select, filters: OrderFilters) -> Select:
        if filters.status is not None:
            stmt = stmt.where(OrderRow.status == filters.status.value)
        if filters.min_total is not None:
            stmt = stmt.where(OrderRow.total_price >= filters.min_total)
        if filters.max_total is not None:
            stmt = stmt.where(OrderRow.total_price <= filters.max_total)
        if filters.created_from is not None:
            stmt = stmt.where(OrderRow.created_at >= as_utc(filters.created_from))
        if filters.created_to is not None:
            stmt = stmt.where(OrderRow.created_at <= as_utc(filters.created_to))
        return stmt

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            id=order.id,
            user_id=order.user_id,
            status=order.status.value,
            description=order.description,
            total_price=order.total.amount,
            created_at=order.created_at,
            line_items=[
                OrderLineItemRow(
                    position=position,
                    product_id=item.product_id,
                    name=item.product_name,
                    unit_price=item.unit_price.amount,
                    quantity=item.quantity.value,
                )
                for position, item in enumerate(order.items)
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        items = [
            OrderLineItem(
                product_id=i.product_id,
                product_name=i.name,
                quantity=Quantity(i.quantity),
                unit_price=Money.of(i.unit_price).rounded(),
            )
            for i in row.line_items
        ]
        return Order(
            id=row.id,
            user_id=row.user_id,
            items=items,
            status=OrderStatus(row.status),
            description=row.description or "",
            created_at=as_utc(row.created_at),
        )
