"""FastAPI routes for orders and the product catalog.

Endpoints are plain ``def`` functions: FastAPI runs them in its threadpool,
so every request gets its own thread and its own store session.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Header, Query, Request

from orderdesk.application.dto import OrderItemSpec
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.identity import Identity
from orderdesk.domain.model.order import OrderStatus
from orderdesk.domain.model.pagination import DEFAULT_PAGE_SIZE, OrderFilters, PageRequest
from orderdesk.infrastructure.api.schemas import (
    CreateProductRequest,
    PlaceOrderRequest,
    RestockRequest,
    UpdateProductRequest,
    order_body,
    order_page_body,
    product_body,
    product_page_body,
    success,
)
from orderdesk.infrastructure.bootstrap import Services


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_services(request: Request) -> Services:
    return request.app.state.services


def current_identity(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Identity:
    """Identity forwarded by the upstream authentication layer."""
    return Identity.of(x_user_id, x_user_role)


def _parse_status(raw: str | None) -> OrderStatus | None:
    if raw is None:
        return None
    try:
        return OrderStatus(raw.lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError("Invalid filters", [f"status: must be one of {allowed}"])


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
def place_order(
    body: PlaceOrderRequest,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    specs = [
        OrderItemSpec(product_id=item.product_id, quantity=item.quantity)
        for item in body.products
    ]
    dto = services.place_order.handle(identity, specs, body.description)
    return success("Order placed successfully", order_body(dto))


@order_router.get("")
def list_orders(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    status: str | None = Query(default=None),
    min_total: Decimal | None = Query(default=None, alias="minTotal"),
    max_total: Decimal | None = Query(default=None, alias="maxTotal"),
    created_from: datetime | None = Query(default=None, alias="from"),
    created_to: datetime | None = Query(default=None, alias="to"),
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    filters = OrderFilters(
        status=_parse_status(status),
        min_total=min_total,
        max_total=max_total,
        created_from=created_from,
        created_to=created_to,
    )
    result = services.list_orders.handle(
        identity, PageRequest(page=page, page_size=limit), filters
    )
    return order_page_body(result)


@order_router.get("/{order_id}")
def get_order(
    order_id: str,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    dto = services.show_order.handle(identity, order_id)
    return success("Order retrieved successfully", order_body(dto))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
def list_products(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    category: str | None = Query(default=None),
    services: Services = Depends(get_services),
):
    result = services.list_products.handle(
        PageRequest(page=page, page_size=limit), category
    )
    return product_page_body(result)


@product_router.get("/{product_id}")
def get_product(product_id: str, services: Services = Depends(get_services)):
    dto = services.show_product.handle(product_id)
    return success("Product retrieved successfully", product_body(dto))


@product_router.post("", status_code=201)
def add_product(
    body: CreateProductRequest,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    dto = services.add_product.handle(
        identity, body.name, body.description, body.price, body.stock, body.category
    )
    return success("Product created successfully", product_body(dto))


@product_router.patch("/{product_id}")
def update_product(
    product_id: str,
    body: UpdateProductRequest,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    dto = services.update_product.handle(
        identity,
        product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        category=body.category,
    )
    return success("Product updated successfully", product_body(dto))


@product_router.post("/{product_id}/restock")
def restock_product(
    product_id: str,
    body: RestockRequest,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    dto = services.restock_product.handle(identity, product_id, body.quantity)
    return success("Product restocked successfully", product_body(dto))


@product_router.delete("/{product_id}")
def retire_product(
    product_id: str,
    identity: Identity = Depends(current_identity),
    services: Services = Depends(get_services),
):
    services.retire_product.handle(identity, product_id)
    return success("Product retired successfully")
