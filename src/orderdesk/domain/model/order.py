"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items. Line items are
embedded snapshots: product name and unit price are copied from the
catalog at placement time and never change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the name and price snapshot of a product at order time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return (self.unit_price * self.quantity.value).rounded()


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
MAX_DESCRIPTION_LENGTH = 500


def compute_total(items: list[OrderLineItem]) -> Money:
    result = Money.zero()
    for item in items:
        result = result + item.line_total
    return result.rounded()


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.place()`` factory for new orders; it enforces all
    business rules. The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    user_id: str
    items: list[OrderLineItem]
    status: OrderStatus = OrderStatus.PENDING
    description: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        user_id: str,
        items: list[OrderLineItem],
        description: str = "",
        expected_total: Money | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants.

        ``expected_total`` is the running total kept by the caller; it must
        agree with the total recomputed from the line items.
        """
        if not user_id:
            raise ValidationError("Order owner is required")

        if not items:
            raise ValidationError("Order must contain at least one product")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        description = (description or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

        order = Order(
            id=None,
            user_id=user_id,
            items=list(items),
            status=OrderStatus.PENDING,
            description=description,
        )

        if expected_total is not None and expected_total.rounded() != order.total:
            raise ValueError(
                f"Running total {expected_total} disagrees with line items {order.total}"
            )

        return order

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return compute_total(self.items)
