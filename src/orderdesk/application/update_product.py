"""Application service: Update Product use case."""

from __future__ import annotations

from decimal import Decimal

from orderdesk.application.dto import ProductDTO, product_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.identity import Identity, require_admin
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.transactional_store import TransactionalStore


class UpdateProductHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(
        self,
        identity: Identity | None,
        product_id: str,
        name: str | None = None,
        description: str | None = None,
        price: str | Decimal | None = None,
        category: str | None = None,
    ) -> ProductDTO:
        """Edit a product's catalog fields.

        This does NOT affect any existing orders: they captured a name
        and price snapshot at creation time.
        """
        require_admin(identity)
        if name is None and description is None and price is None and category is None:
            raise ValidationError("Nothing to update")

        with self._store.session() as session:
            product = session.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            product.update_details(
                name=name,
                description=description,
                price=Money.of(price) if price is not None else None,
                category=category,
            )
            session.products.save(product)
            session.commit()

        return product_to_dto(product)
