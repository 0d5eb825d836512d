"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, stock is replenished, products are retired from the catalog.
Stock *decrements* never go through this object: they are applied as a
conditional write by the inventory guard, inside the ordering transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import MAX_QUANTITY, Money

NAME_MIN, NAME_MAX = 3, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 2000


class ProductStatus(Enum):
    ACTIVE = "active"
    RETIRED = "retired"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Product:
    """A product in the catalog.

    Use ``Product.create()`` for new products; it enforces all field
    rules. The ``__init__`` is intentionally simple so the repository can
    reconstitute persisted products without re-validating.
    Prices are settled to whole cents (half-up) whenever they are set.
    """

    id: str
    name: str
    description: str
    price: Money
    stock: int
    category: str
    owner_id: str
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def create(
        id: str,
        name: str,
        description: str,
        price: Money,
        stock: int,
        category: str,
        owner_id: str,
    ) -> Product:
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise ValidationError("Stock must be a non-negative integer")
        if stock > MAX_QUANTITY:
            raise ValidationError(f"Stock cannot exceed {MAX_QUANTITY}")
        return Product(
            id=id,
            name=_clean_name(name),
            description=_clean_description(description),
            price=price.rounded(),
            stock=stock,
            category=_clean_category(category),
            owner_id=owner_id,
        )

    @property
    def is_active(self) -> bool:
        return self.status is ProductStatus.ACTIVE

    def update_details(
        self,
        name: str | None = None,
        description: str | None = None,
        price: Money | None = None,
        category: str | None = None,
    ) -> None:
        """Edit catalog fields.

        This does NOT affect any existing orders because orders
        capture a name and price snapshot at creation time.
        """
        if name is not None:
            self.name = _clean_name(name)
        if description is not None:
            self.description = _clean_description(description)
        if price is not None:
            self.price = price.rounded()
        if category is not None:
            self.category = _clean_category(category)
        self.updated_at = _utcnow()

    def retire(self) -> None:
        if self.status is ProductStatus.RETIRED:
            raise ValidationError(f"Product '{self.name}' is already retired")
        self.status = ProductStatus.RETIRED
        self.updated_at = _utcnow()


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not NAME_MIN <= len(name) <= NAME_MAX:
        raise ValidationError(
            f"Product name must be between {NAME_MIN} and {NAME_MAX} characters"
        )
    return name


def _clean_description(description: str) -> str:
    description = (description or "").strip()
    if not DESCRIPTION_MIN <= len(description) <= DESCRIPTION_MAX:
        raise ValidationError(
            f"Product description must be between {DESCRIPTION_MIN} and "
            f"{DESCRIPTION_MAX} characters"
        )
    return description


def _clean_category(category: str) -> str:
    category = (category or "").strip().lower()
    if not category:
        raise ValidationError("Product category is required")
    return category
