"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP adapters and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from orderdesk.domain.model.order import Order
from orderdesk.domain.model.pagination import Page
from orderdesk.domain.model.product import Product


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product id + quantity).

    Deliberately has no price or name: those always come from the store.
    """

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class OrderDTO:
    id: str
    user_id: str
    status: str
    description: str
    items: list[OrderLineItemDTO]
    total: Decimal
    created_at: datetime


@dataclass(frozen=True)
class OrderPageDTO:
    items: list[OrderDTO]
    page_number: int
    page_size: int
    total_pages: int
    total_size: int


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    description: str
    price: Decimal
    stock: int
    category: str
    status: str


@dataclass(frozen=True)
class ProductPageDTO:
    items: list[ProductDTO]
    page_number: int
    page_size: int
    total_pages: int
    total_size: int


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        description=order.description,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=item.unit_price.amount,
                line_total=item.line_total.amount,
            )
            for item in order.items
        ],
        total=order.total.amount,
        created_at=order.created_at,
    )


def order_page_to_dto(page: Page[Order]) -> OrderPageDTO:
    return OrderPageDTO(
        items=[order_to_dto(order) for order in page.items],
        page_number=page.page_number,
        page_size=page.page_size,
        total_pages=page.total_pages,
        total_size=page.total_size,
    )


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price.amount,
        stock=product.stock,
        category=product.category,
        status=product.status.value,
    )


def product_page_to_dto(page: Page[Product]) -> ProductPageDTO:
    return ProductPageDTO(
        items=[product_to_dto(product) for product in page.items],
        page_number=page.page_number,
        page_size=page.page_size,
        total_pages=page.total_pages,
        total_size=page.total_size,
    )
