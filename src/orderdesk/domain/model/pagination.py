"""Paging and filtering types shared by the read side."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.order import OrderStatus

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        errors = []
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            errors.append("page: must be an integer >= 1")
        if (
            isinstance(self.page_size, bool)
            or not isinstance(self.page_size, int)
            or not 1 <= self.page_size <= MAX_PAGE_SIZE
        ):
            errors.append(f"limit: must be an integer between 1 and {MAX_PAGE_SIZE}")
        if errors:
            raise ValidationError("Invalid pagination parameters", errors)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class OrderFilters:
    """Optional narrowing of an order listing."""

    status: OrderStatus | None = None
    min_total: Decimal | None = None
    max_total: Decimal | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def __post_init__(self) -> None:
        if (
            self.min_total is not None
            and self.max_total is not None
            and self.min_total > self.max_total
        ):
            raise ValidationError(
                "Invalid filters", ["minTotal: must not exceed maxTotal"]
            )
        if (
            self.created_from is not None
            and self.created_to is not None
            and self.created_from > self.created_to
        ):
            raise ValidationError("Invalid filters", ["from: must not be after to"])


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page_number: int
    page_size: int
    total_size: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_size / self.page_size))
