"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from dms.domain.exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Monetary amount.

    Uses Decimal to avoid floating-point rounding errors.  The digital menu
    sends plain JSON numbers, so ``Money.of`` goes through ``str`` first.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __mul__(self, factor: int | Decimal) -> Money:
        if not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > other.amount

    def quantize(self) -> Money:
        """Round to whole cents."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    def differs_from(self, other: Money, tolerance: Decimal = CENT) -> bool:
        return abs(self.amount - other.amount) > tolerance

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | float | int | Decimal | None) -> Money:
        """Convenient factory that coerces to Decimal safely.

        ``None`` is treated as zero, the way the digital menu omits prices.
        """
        if amount is None:
            return Money.zero()
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
