"""Pydantic request schemas and JSON response bodies for the HTTP API.

Request models are external contracts: field names follow the public
camelCase wire format and unknown fields are ignored, so a client that
sends ``price`` or ``name`` for an order item simply has them dropped.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from orderdesk.application.dto import OrderDTO, OrderPageDTO, ProductDTO, ProductPageDTO


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemRequest(_Request):
    product_id: str = Field(alias="productId")
    quantity: StrictInt


class PlaceOrderRequest(_Request):
    products: list[OrderItemRequest] = Field(default_factory=list)
    description: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "products": [
                        {
                            "productId": "6f1c2b8e-4b7a-4c1e-9a63-1f0d2a7c9e10",
                            "quantity": 2,
                        }
                    ],
                    "description": "Leave at the front desk",
                }
            ]
        },
    )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class CreateProductRequest(_Request):
    name: str
    description: str
    price: Decimal
    stock: StrictInt = 0
    category: str


class UpdateProductRequest(_Request):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None


class RestockRequest(_Request):
    quantity: StrictInt


# ---------------------------------------------------------------------------
# Response bodies
# ---------------------------------------------------------------------------
def order_body(dto: OrderDTO) -> dict[str, Any]:
    return {
        "id": dto.id,
        "userId": dto.user_id,
        "products": [
            {
                "productId": item.product_id,
                "name": item.product_name,
                "price": float(item.unit_price),
                "quantity": item.quantity,
            }
            for item in dto.items
        ],
        "totalPrice": float(dto.total),
        "status": dto.status,
        "description": dto.description,
        "createdAt": dto.created_at.isoformat(),
    }


def product_body(dto: ProductDTO) -> dict[str, Any]:
    return {
        "id": dto.id,
        "name": dto.name,
        "description": dto.description,
        "price": float(dto.price),
        "stock": dto.stock,
        "category": dto.category,
        "status": dto.status,
    }


def success(message: str, data: Any = None) -> dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def _page_body(
    message: str, items: list[dict[str, Any]], page: OrderPageDTO | ProductPageDTO
) -> dict[str, Any]:
    body = success(message, items)
    body.update(
        pageNumber=page.page_number,
        pageSize=page.page_size,
        totalPages=page.total_pages,
        totalSize=page.total_size,
    )
    return body


def order_page_body(page: OrderPageDTO) -> dict[str, Any]:
    return _page_body(
        "Orders retrieved successfully", [order_body(dto) for dto in page.items], page
    )


def product_page_body(page: ProductPageDTO) -> dict[str, Any]:
    return _page_body(
        "Products retrieved successfully",
        [product_body(dto) for dto in page.items],
        page,
    )
