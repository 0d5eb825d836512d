"""SQLAlchemy implementation of ProductRepository, bound to one session."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from orderdesk.domain.model.pagination import Page, PageRequest
from orderdesk.domain.model.product import Product, ProductStatus
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.product_repository import ProductRepository
from orderdesk.infrastructure.persistence.conflicts import translate_conflicts
from orderdesk.infrastructure.persistence.tables import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        # populate_existing: stock may have been changed by a bulk UPDATE
        # earlier in this session, behind the identity map's back.
        stmt = (
            select(ProductRow)
            .where(ProductRow.id == product_id)
            .execution_options(populate_existing=True)
        )
        with translate_conflicts():
            row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_active(
        self, page: PageRequest, category: str | None = None
    ) -> Page[Product]:
        base = select(ProductRow).where(ProductRow.status == ProductStatus.ACTIVE.value)
        if category is not None:
            base = base.where(ProductRow.category == category)
        count_stmt = select(func.count()).select_from(base.subquery())
        page_stmt = (
            base.order_by(ProductRow.created_at.desc(), ProductRow.id)
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

    def add(self, product: Product) -> None:
        with translate_conflicts():
            self._session.add(self._to_row(product))
            self._session.flush()

    def save(self, product: Product) -> None:
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product.id)
            .values(
                name=product.name,
                description=product.description,
                price=product.price.amount,
                category=product.category,
                status=product.status.value,
                updated_at=product.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        with translate_conflicts():
            self._session.execute(stmt)

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(ProductRow)
            .where(
                ProductRow.id == product_id,
                ProductRow.status == ProductStatus.ACTIVE.value,
                ProductRow.stock >= quantity,
            )
            .values(stock=ProductRow.stock - quantity, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        with translate_conflicts():
            result = self._session.execute(stmt)
        return result.rowcount == 1

    def increment_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(stock=ProductRow.stock + quantity, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        with translate_conflicts():
            result = self._session.execute(stmt)
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(product: Product) -> ProductRow:
        return ProductRow(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price.amount,
            stock=product.stock,
            category=product.category,
            owner_id=product.owner_id,
            status=product.status.value,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            description=row.description,
            price=Money.of(row.price).rounded(),
            stock=row.stock,
            category=row.category,
            owner_id=row.owner_id,
            status=ProductStatus(row.status),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
