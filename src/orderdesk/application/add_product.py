"""Application service: Add Product use case."""

from __future__ import annotations

from decimal import Decimal

from orderdesk.application.dto import ProductDTO, product_to_dto
from orderdesk.domain.model.identity import Identity, require_admin
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money, new_identifier
from orderdesk.domain.repository.transactional_store import TransactionalStore


class AddProductHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(
        self,
        identity: Identity | None,
        name: str,
        description: str,
        price: str | Decimal,
        stock: int,
        category: str,
    ) -> ProductDTO:
        """Add a new product to the catalog (administrators only)."""
        identity = require_admin(identity)

        product = Product.create(
            id=new_identifier(),
            name=name,
            description=description,
            price=Money.of(price),
            stock=stock,
            category=category,
            owner_id=identity.user_id,
        )

        with self._store.session() as session:
            session.products.add(product)
            session.commit()

        return product_to_dto(product)
