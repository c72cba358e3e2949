#!/usr/bin/env python3
"""
Subscription Record Models

Type-safe models for persisted subscription records and the write payloads
the commit step sends to the record store.
"""

from dataclasses import dataclass
from typing import Any

from ..core.dates import BillingDate
from ..core.money import Money


@dataclass(frozen=True)
class ExistingSubscriptionRecord:
    """
    A previously persisted subscription.

    Read-only input to reconciliation; only the record store mutates it.
    """

    id: str
    name: str
    cost: Money

    # Optional fields
    frequency: str = "monthly"
    category: str | None = None
    status: str = "active"
    renewal_date: BillingDate | None = None
    previous_cost: Money | None = None
    last_price_change_date: BillingDate | None = None
    trust_score: int | None = None
    source_message_id: str | None = None

    @property
    def currency(self) -> str:
        """ISO currency code of the cost."""
        return self.cost.currency

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExistingSubscriptionRecord":
        """
        Create record from a stored dict.

        Args:
            data: Record as persisted (cost as a decimal number or string)

        Returns:
            ExistingSubscriptionRecord instance
        """
        currency = data.get("currency")
        previous_cost = data.get("previous_cost")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            cost=Money.from_amount(data.get("cost"), currency),
            frequency=data.get("frequency") or "monthly",
            category=data.get("category"),
            status=data.get("status") or "active",
            renewal_date=BillingDate.parse(data.get("renewal_date")),
            previous_cost=Money.from_amount(previous_cost, currency) if previous_cost is not None else None,
            last_price_change_date=BillingDate.parse(data.get("last_price_change_date")),
            trust_score=data.get("trust_score"),
            source_message_id=data.get("source_message_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "cost": str(self.cost.to_decimal()),
            "currency": self.currency,
            "frequency": self.frequency,
            "category": self.category,
            "status": self.status,
            "renewal_date": self.renewal_date.to_iso_string() if self.renewal_date else None,
            "previous_cost": str(self.previous_cost.to_decimal()) if self.previous_cost else None,
            "last_price_change_date": (
                self.last_price_change_date.to_iso_string() if self.last_price_change_date else None
            ),
            "trust_score": self.trust_score,
            "source_message_id": self.source_message_id,
        }


@dataclass(frozen=True)
class NewSubscription:
    """Insert payload for a newly tracked subscription."""

    name: str
    cost: Money
    frequency: str
    renewal_date: BillingDate
    category: str
    status: str = "active"
    trust_score: int = 100
    source_message_id: str | None = None


@dataclass(frozen=True)
class SubscriptionUpdate:
    """Update payload for a price change on an existing record."""

    cost: Money
    renewal_date: BillingDate
    previous_cost: Money | None = None
    last_price_change_date: BillingDate | None = None
