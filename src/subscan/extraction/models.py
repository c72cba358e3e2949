#!/usr/bin/env python3
"""
Extraction Domain Models

SubscriptionCandidate plus the tagged result type shared by every
extraction stage.

A stage never raises for an extraction problem. It returns one of:
- ``Extracted``: a candidate was produced; the chain stops
- ``NotSubscription``: the message was judged not to be a bill; the chain stops
- ``Unextractable``: this stage could not decide; the next stage runs
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, Union

from ..core.dates import BillingDate
from ..core.money import Money

if TYPE_CHECKING:
    from ..gmail.fetcher import RawMessage


class BillingFrequency(Enum):
    """How often a subscription bills."""

    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"

    @classmethod
    def normalize(cls, value: Any) -> "BillingFrequency":
        """
        Map free-form frequency text to a BillingFrequency.

        Unknown or missing values are treated as monthly.
        """
        text = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        if text in ("yearly", "annual", "annually", "year", "per_year"):
            return cls.YEARLY
        if text in ("one_time", "once", "onetime", "single"):
            return cls.ONE_TIME
        return cls.MONTHLY


class ExtractionConfidence(Enum):
    """Coarse confidence of an extracted candidate."""

    HIGH = "high"  # Structured model extraction
    LOW = "low"  # Regex heuristic fallback


@dataclass(frozen=True)
class SubscriptionCandidate:
    """
    Structured subscription facts extracted from one message.

    Created fresh per scan and never mutated.
    """

    source_message_id: str
    merchant_name: str
    amount: Money
    billing_frequency: BillingFrequency
    billing_date: BillingDate | None
    extraction_confidence: ExtractionConfidence

    @property
    def currency(self) -> str:
        """ISO currency code of the amount."""
        return self.amount.currency

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source_message_id": self.source_message_id,
            "merchant_name": self.merchant_name,
            "amount": str(self.amount.to_decimal()),
            "currency": self.currency,
            "billing_frequency": self.billing_frequency.value,
            "billing_date": self.billing_date.to_iso_string() if self.billing_date else None,
            "extraction_confidence": self.extraction_confidence.value,
        }


@dataclass(frozen=True)
class Extracted:
    """A stage produced a candidate."""

    candidate: SubscriptionCandidate


@dataclass(frozen=True)
class NotSubscription:
    """A stage decided the message is not a recurring bill."""

    reason: str


@dataclass(frozen=True)
class Unextractable:
    """A stage could not decide; defer to the next stage."""

    reason: str


ExtractionResult = Union[Extracted, NotSubscription, Unextractable]


class ExtractionStage(Protocol):
    """One link in the extraction chain."""

    async def extract(self, message: "RawMessage") -> ExtractionResult:
        """Attempt to extract a candidate from a message."""
        ...
