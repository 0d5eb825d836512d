"""Application service: List Orders use case (query)."""

from __future__ import annotations

from orderdesk.application.dto import OrderPageDTO, order_page_to_dto
from orderdesk.domain.model.identity import Identity, require_identity
from orderdesk.domain.model.pagination import OrderFilters, PageRequest
from orderdesk.domain.repository.transactional_store import TransactionalStore


class ListOrdersHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(
        self,
        identity: Identity | None,
        page: PageRequest | None = None,
        filters: OrderFilters | None = None,
    ) -> OrderPageDTO:
        """Return one page of the caller's own order history."""
        identity = require_identity(identity)
        with self._store.reader() as session:
            result = session.orders.list_for_owner(
                identity.user_id, page or PageRequest(), filters or OrderFilters()
            )
        return order_page_to_dto(result)
