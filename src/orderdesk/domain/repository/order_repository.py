"""Abstract repository for Order aggregate.

Orders are append-only here: placement inserts, lookups read. Every read
takes the owner as a query predicate so results are scoped at the data
access layer, not filtered after the fact.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.order import Order
from orderdesk.domain.model.pagination import OrderFilters, Page, PageRequest


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> str:
        """Insert a new order, assign its id and return it."""

    @abstractmethod
    def get_by_id(self, order_id: str, owner_id: str | None) -> Order | None:
        """Return an order by id.

        When ``owner_id`` is given, an order belonging to someone else is
        reported exactly like a missing one (None).
        """

    @abstractmethod
    def list_for_owner(
        self,
        owner_id: str,
        page: PageRequest,
        filters: OrderFilters,
    ) -> Page[Order]:
        """Return one page of the owner's orders, newest first."""
