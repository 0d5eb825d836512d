"""Application service: Restock Product use case.

The increment is applied as a single relative write inside a
transaction, so a restock racing an order placement never loses either
update.
"""

from __future__ import annotations

from orderdesk.application.dto import ProductDTO, product_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.identity import Identity, require_admin
from orderdesk.domain.model.value_objects import MAX_QUANTITY
from orderdesk.domain.repository.transactional_store import TransactionalStore


class RestockProductHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(
        self, identity: Identity | None, product_id: str, quantity: int
    ) -> ProductDTO:
        require_admin(identity)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(
                "Restock quantity must be positive",
                ["quantity: must be a positive integer"],
            )
        if quantity > MAX_QUANTITY:
            raise ValidationError(
                "Restock quantity is too large",
                [f"quantity: cannot exceed {MAX_QUANTITY}"],
            )

        with self._store.session() as session:
            if not session.products.increment_stock(product_id, quantity):
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            product = session.products.get_by_id(product_id)
            session.commit()

        return product_to_dto(product)  # type: ignore[arg-type]
