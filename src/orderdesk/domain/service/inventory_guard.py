"""Domain service: Inventory Guard.

Reserves stock for one line item inside the caller's transaction. The
check and the decrement are a single conditional write ("decrement iff
stock >= quantity"), so two racing sessions cannot both pass a stale
check; the store's conflict detection covers whatever remains.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from orderdesk.domain.exceptions import EntityNotFoundError, InsufficientStockError
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.transactional_store import StoreSession

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReservedProduct:
    """Authoritative product data read under the reserving session."""

    product_id: str
    name: str
    unit_price: Money


class InventoryGuard:

    def reserve(
        self, session: StoreSession, product_id: str, quantity: int
    ) -> ReservedProduct:
        """Decrement stock for *product_id* by *quantity* under *session*.

        Raises EntityNotFoundError if the product does not exist or is
        retired, InsufficientStockError if it has fewer than *quantity*
        units. Nothing is written in either case.
        """
        products = session.products

        if products.decrement_stock(product_id, quantity):
            product = products.get_by_id(product_id)
            if product is None:  # pragma: no cover - same-session read
                raise EntityNotFoundError(f"Product not found: {product_id}")
            logger.debug(
                "stock_reserved",
                product_id=product_id,
                quantity=quantity,
                remaining=product.stock,
            )
            return ReservedProduct(
                product_id=product.id, name=product.name, unit_price=product.price
            )

        # The conditional write matched nothing: work out why.
        product = products.get_by_id(product_id)
        if product is None or not product.is_active:
            raise EntityNotFoundError(f"Product not found: {product_id}")

        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            available=product.stock,
            requested=quantity,
        )
