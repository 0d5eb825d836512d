"""Application service: List Products use case (query)."""

from __future__ import annotations

from orderdesk.application.dto import ProductPageDTO, product_page_to_dto
from orderdesk.domain.model.pagination import PageRequest
from orderdesk.domain.repository.transactional_store import TransactionalStore


class ListProductsHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(
        self, page: PageRequest | None = None, category: str | None = None
    ) -> ProductPageDTO:
        if category is not None:
            category = category.strip().lower() or None
        with self._store.reader() as session:
            result = session.products.list_active(page or PageRequest(), category)
        return product_page_to_dto(result)
