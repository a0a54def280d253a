"""
Money value object for handling monetary amounts with currency.

This value object ensures type safety and provides clear semantics
for monetary operations in the domain.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_CURRENCY = "THB"
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable value object representing a monetary amount with currency.

    Amounts are kept at two decimal places (half-up rounding).

    Attributes:
        amount: The monetary amount as Decimal for precision
        currency: Currency code (e.g., "THB", "USD")

    Example:
        >>> rice = Money(amount=Decimal("275"))
        >>> fee = Money(amount=Decimal("20"))
        >>> (rice + fee).amount
        Decimal('295.00')
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        object.__setattr__(self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

        if self.amount < 0:
            raise ValueError(f"Money amount cannot be negative: {self.amount}")

        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency}")

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")

        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __mul__(self, multiplier: int | Decimal) -> "Money":
        """Multiply money by a quantity."""
        if not isinstance(multiplier, (int, Decimal)):
            raise TypeError(f"Cannot multiply Money by {type(multiplier)}")

        return Money(amount=self.amount * Decimal(multiplier), currency=self.currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Create a zero Money object."""
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def of(cls, value, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Create Money from a number, numeric string or Decimal."""
        return cls(amount=Decimal(str(value)), currency=currency)
