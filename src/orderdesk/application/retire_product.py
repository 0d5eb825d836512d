"""Application service: Retire Product use case.

Retired products stay in the database (orders reference them) but can
no longer be ordered.
"""

from __future__ import annotations

from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.identity import Identity, require_admin
from orderdesk.domain.repository.transactional_store import TransactionalStore


class RetireProductHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(self, identity: Identity | None, product_id: str) -> None:
        require_admin(identity)
        with self._store.session() as session:
            product = session.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            product.retire()
            session.products.save(product)
            session.commit()
