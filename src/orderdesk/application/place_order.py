"""Application service: Place Order use case.

Orchestrates the flow between the transactional store and the domain
services. This is the only place that turns a customer's request into a
committed order:

1. Validate the request (no transaction is opened for bad input).
2. Open a session; reserve stock for every item via the inventory guard,
   in the order submitted, feeding each result into the assembler.
3. Insert the assembled order and commit.

Any failure inside step 2/3 aborts the session, so no stock decrement of
an earlier item survives a later failure. Write conflicts abort the
attempt and the whole of step 2/3 is retried with backoff.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

import structlog

from orderdesk.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from orderdesk.application.retry_policy import RetryPolicy
from orderdesk.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    OperationTimeoutError,
    ValidationError,
    WriteConflictError,
)
from orderdesk.domain.model.identity import Identity, require_identity
from orderdesk.domain.model.order import (
    MAX_DESCRIPTION_LENGTH,
    MAX_LINE_ITEMS,
    Order,
)
from orderdesk.domain.model.value_objects import MAX_QUANTITY, is_identifier
from orderdesk.domain.repository.transactional_store import TransactionalStore
from orderdesk.domain.service.inventory_guard import InventoryGuard
from orderdesk.domain.service.order_assembler import OrderAssembler

logger = structlog.get_logger(__name__)


def validate_order_request(
    items: Sequence[OrderItemSpec] | None, description: str | None
) -> None:
    """Raise ValidationError listing every malformed field."""
    if not items:
        raise ValidationError(
            "Order must contain at least one product",
            ["products: must contain at least one product"],
        )

    errors: list[str] = []
    if len(items) > MAX_LINE_ITEMS:
        errors.append(f"products: maximum {MAX_LINE_ITEMS} items per order")

    for index, item in enumerate(items):
        if not is_identifier(item.product_id):
            errors.append(f"products[{index}].productId: invalid product ID")
        quantity = item.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            errors.append(f"products[{index}].quantity: must be a positive integer")
        elif quantity > MAX_QUANTITY:
            errors.append(f"products[{index}].quantity: cannot exceed {MAX_QUANTITY}")

    if description is not None:
        if not isinstance(description, str):
            errors.append("description: must be a string")
        elif len(description.strip()) > MAX_DESCRIPTION_LENGTH:
            errors.append(
                f"description: cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

    if errors:
        raise ValidationError("Validation failed", errors)


class _Deadline:

    def __init__(self, timeout: float | None, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._expires_at = None if timeout is None else clock() + timeout

    def check(self, step: str) -> None:
        if self._expires_at is not None and self._clock() >= self._expires_at:
            raise OperationTimeoutError(f"Order placement timed out during {step}")


class PlaceOrderHandler:

    def __init__(
        self,
        store: TransactionalStore,
        guard: InventoryGuard | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._guard = guard or InventoryGuard()
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._sleep = sleep
        self._clock = clock

    def handle(
        self,
        identity: Identity | None,
        item_specs: Sequence[OrderItemSpec],
        description: str | None = None,
        timeout: float | None = None,
    ) -> OrderDTO:
        """Place an order for the caller and return it as persisted.

        Raises ValidationError, EntityNotFoundError, InsufficientStockError,
        ConcurrencyConflictError (retries exhausted) or OperationTimeoutError.
        """
        identity = require_identity(identity)
        validate_order_request(item_specs, description)

        deadline = _Deadline(
            timeout if timeout is not None else self._timeout, self._clock
        )
        log = logger.bind(user_id=identity.user_id, item_count=len(item_specs))
        policy = self._retry_policy

        attempt = 0
        while True:
            attempt += 1
            try:
                order = self._attempt(
                    identity.user_id, item_specs, description or "", deadline
                )
            except WriteConflictError as exc:
                if attempt == policy.max_attempts:
                    log.error("order_retries_exhausted", attempts=attempt, error=str(exc))
                    raise ConcurrencyConflictError(
                        "Order could not be placed due to concurrent updates; "
                        "please retry"
                    ) from exc
                delay = policy.delay_for(attempt)
                log.warning(
                    "order_write_conflict", attempt=attempt, retry_in=round(delay, 3)
                )
                deadline.check("retry backoff")
                self._sleep(delay)
                continue
            except (EntityNotFoundError, InsufficientStockError) as exc:
                log.info("order_rejected", reason=type(exc).__name__, detail=str(exc))
                raise

            log.info(
                "order_placed",
                order_id=order.id,
                total=str(order.total.amount),
                attempt=attempt,
            )
            return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    def _attempt(
        self,
        user_id: str,
        item_specs: Sequence[OrderItemSpec],
        description: str,
        deadline: _Deadline,
    ) -> Order:
        with self._store.session() as session:
            assembler = OrderAssembler()

            for item in item_specs:
                deadline.check("stock reservation")
                reserved = self._guard.reserve(session, item.product_id, item.quantity)
                assembler.add(reserved, item.quantity)

            order = assembler.build(user_id, description)

            deadline.check("order insert")
            session.orders.add(order)

            deadline.check("commit")
            session.commit()

        return order
