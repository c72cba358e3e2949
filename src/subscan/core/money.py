#!/usr/bin/env python3
"""
Money Primitive Type

Immutable currency value wrapper that uses integer cents internally.
Prevents floating-point errors when comparing extracted prices against
stored subscription costs.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from .currency import (
    DEFAULT_CURRENCY,
    cents_to_decimal,
    decimal_to_cents,
    format_amount,
    sanitize_currency,
    to_decimal,
)

# Two amounts closer than this are the same price
PRICE_EPSILON = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable money value in cents with an ISO currency code.

    Examples:
        >>> price = Money.from_amount("15.99")
        >>> str(price)
        '$15.99'
        >>> Money.from_amount(11.99, "€").currency
        'EUR'
        >>> Money.from_cents(999).same_price(Money.from_amount("9.99"))
        True
    """

    cents: int
    currency: str = DEFAULT_CURRENCY

    # Unrounded amount when parsed from text or JSON; cents are the rounded value
    exact: Decimal | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Normalize symbols passed straight into the constructor
        object.__setattr__(self, "currency", sanitize_currency(self.currency))

    @classmethod
    def from_cents(cls, cents: int, currency: str | None = None) -> "Money":
        """Create Money from cents."""
        return cls(cents=cents, currency=sanitize_currency(currency))

    @classmethod
    def from_amount(
        cls, amount: Union[str, int, float, Decimal, None], currency: str | None = None
    ) -> "Money":
        """
        Parse from a decimal amount such as 15.99, "15.99" or "$15.99".

        Integers are whole currency units (15 -> 15.00), not cents.
        Missing or unparseable amounts become zero.
        """
        exact = to_decimal(amount)
        return cls(cents=decimal_to_cents(exact), currency=sanitize_currency(currency), exact=exact)

    @classmethod
    def zero(cls, currency: str | None = None) -> "Money":
        """Zero amount in the given currency."""
        return cls(cents=0, currency=sanitize_currency(currency))

    def to_cents(self) -> int:
        """Get value in cents."""
        return self.cents

    def to_decimal(self) -> Decimal:
        """Get value as an exact two-place Decimal."""
        return cents_to_decimal(self.cents)

    def exact_decimal(self) -> Decimal:
        """Get the unrounded amount when known, otherwise the cents value."""
        return self.exact if self.exact is not None else self.to_decimal()

    def is_zero(self) -> bool:
        """Check whether the amount is zero."""
        return self.cents == 0

    def same_price(self, other: "Money") -> bool:
        """
        Check whether two amounts are the same price.

        Compares unrounded amounts, so 9.995 and 9.99 are the same price.
        Currencies are not considered.
        """
        return abs(self.exact_decimal() - other.exact_decimal()) < PRICE_EPSILON

    def monthly_equivalent(self, frequency: str) -> "Money":
        """
        Spread a yearly price across months.

        Monthly and one-time amounts are returned unchanged.
        """
        if frequency == "yearly":
            return Money(cents=self.cents // 12, currency=self.currency)
        return self

    def __str__(self) -> str:
        """Format with currency symbol."""
        return format_amount(self.cents, self.currency)

    def __repr__(self) -> str:
        """Repr format."""
        return f"Money(cents={self.cents}, currency={self.currency!r})"
