"""Application service: Show Order use case (query).

Another user's order is indistinguishable from a missing one: malformed
ids, unknown ids and foreign ids all raise the same error.
"""

from __future__ import annotations

from orderdesk.application.dto import OrderDTO, order_to_dto
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.identity import Identity, require_identity
from orderdesk.domain.model.value_objects import is_identifier
from orderdesk.domain.repository.transactional_store import TransactionalStore

ORDER_NOT_FOUND = "Order not found"


class ShowOrderHandler:

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def handle(self, identity: Identity | None, order_id: str) -> OrderDTO:
        identity = require_identity(identity)
        if not is_identifier(order_id):
            raise EntityNotFoundError(ORDER_NOT_FOUND)

        owner_id = None if identity.is_admin else identity.user_id
        with self._store.reader() as session:
            order = session.orders.get_by_id(order_id, owner_id=owner_id)

        if order is None:
            raise EntityNotFoundError(ORDER_NOT_FOUND)
        return order_to_dto(order)
