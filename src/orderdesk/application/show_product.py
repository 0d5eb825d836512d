"""Application service: Show Product use case (query).

Retired products are no longer part of the catalog and read as missing.
"""

from __future__ import annotations

from orderdesk.application.dto import ProductDTO, product_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.value_objects import is_identifier
from orderdesk.domain.repository.transactional_store import TransactionalStore


class ShowProductHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(self, product_id: str) -> ProductDTO:
        product = None
        if is_identifier(product_id):
            with self._store.reader() as session:
                product = session.products.get_by_id(product_id)

        if product is None or not product.is_active:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product_to_dto(product)
