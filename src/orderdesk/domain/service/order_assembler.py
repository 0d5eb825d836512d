"""Domain service: Order Assembler.

Pure accumulation of authoritative line items and the running total.
Names and prices come only from ``ReservedProduct`` (read from the store
by the inventory guard), never from the client.
"""

from __future__ import annotations

from orderdesk.domain.model.order import Order, OrderLineItem
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.domain.service.inventory_guard import ReservedProduct


class OrderAssembler:

    def __init__(self) -> None:
        self._items: list[OrderLineItem] = []
        self._total = Money.zero()

    @property
    def items(self) -> list[OrderLineItem]:
        return list(self._items)

    @property
    def total(self) -> Money:
        return self._total

    def add(self, reserved: ReservedProduct, quantity: int) -> OrderLineItem:
        item = OrderLineItem(
            product_id=reserved.product_id,
            product_name=reserved.name,
            quantity=Quantity(quantity),
            unit_price=reserved.unit_price,  # <-- price snapshot
        )
        self._items.append(item)
        self._total = (self._total + item.line_total).rounded()
        return item

    def build(self, user_id: str, description: str = "") -> Order:
        return Order.place(
            user_id=user_id,
            items=self._items,
            description=description,
            expected_total=self._total,
        )
