"""Money, quantities and identifiers.

All three are validated on construction, so a line item can never hold a
negative price, a zero quantity or a price with floating-point error.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from orderdesk.domain.exceptions import ValidationError

CENT = Decimal("0.01")

# Largest quantity or stock level a single write may carry (signed 32-bit).
MAX_QUANTITY = 2**31 - 1


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Money:
    """A non-negative, finite Decimal amount in one currency.

    Arithmetic keeps full precision; call ``rounded()`` to settle on whole
    cents (half-up).
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        amount = self.amount
        if not isinstance(amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(amount).__name__}"
            )
        if not amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {amount}")
        if amount.is_signed() and amount != 0:
            raise ValidationError(f"Money amount cannot be negative, got {amount}")

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(Decimal("0.00"), currency)

    @classmethod
    def of(cls, amount: str | int | float | Decimal) -> Money:
        """Parse user or database input; floats go through ``str`` first."""
        if isinstance(amount, bool):
            raise ValidationError(f"Invalid money amount: {amount!r}")
        try:
            parsed = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        return cls(parsed)

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same_currency(other).amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not _is_int(factor):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def rounded(self) -> Money:
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    def _same_currency(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other


@dataclass(frozen=True)
class Quantity:
    """How many units of one product a line item holds (at least one)."""

    value: int

    def __post_init__(self) -> None:
        if not _is_int(self.value):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be positive")
        if self.value > MAX_QUANTITY:
            raise ValidationError(f"Quantity cannot exceed {MAX_QUANTITY}")

    def __str__(self) -> str:
        return str(self.value)


def new_identifier() -> str:
    return str(uuid.uuid4())


def is_identifier(value: object) -> bool:
    """True for a well-formed UUID string; anything else is malformed."""
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True
