"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations are bound to a store session;
their writes become visible only when that session commits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.pagination import Page, PageRequest
from orderdesk.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return the current state of a product, or None if not found."""

    @abstractmethod
    def list_active(
        self, page: PageRequest, category: str | None = None
    ) -> Page[Product]:
        """Return one page of active products, optionally within one category."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Persist a new product."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist catalog edits to an existing product (not its stock)."""

    @abstractmethod
    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Conditionally decrement stock.

        Applies ``stock -= quantity`` only if the product exists, is active
        and has ``stock >= quantity``. Returns True if the write happened.
        """

    @abstractmethod
    def increment_stock(self, product_id: str, quantity: int) -> bool:
        """Apply ``stock += quantity``. Returns False if no such product."""
