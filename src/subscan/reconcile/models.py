#!/usr/bin/env python3
"""
Reconciliation Domain Models

Classification of extracted candidates relative to the user's existing
subscription records.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.money import Money
from ..extraction.models import SubscriptionCandidate
from ..store.models import ExistingSubscriptionRecord


class Classification(Enum):
    """Relationship of a candidate to existing records."""

    NEW = "new"  # No record matches
    DUPLICATE = "duplicate"  # Matches a record at the same price
    CONFLICT = "conflict"  # Matches a record at a different price


@dataclass(frozen=True)
class RecordSnapshot:
    """Copy of the matched record's identity fields at classification time."""

    name: str
    cost: Money

    @property
    def currency(self) -> str:
        """ISO currency code of the cost."""
        return self.cost.currency

    @classmethod
    def of(cls, record: ExistingSubscriptionRecord) -> "RecordSnapshot":
        """Snapshot a record."""
        return cls(name=record.name, cost=record.cost)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a match strategy: the matched record, if any, and how."""

    record: ExistingSubscriptionRecord | None
    method: str = "no_match"

    @property
    def matched(self) -> bool:
        """Check whether a record was found."""
        return self.record is not None


@dataclass(frozen=True)
class ClassifiedCandidate:
    """
    A candidate plus its classification against existing records.

    CONFLICT candidates always carry the matched record id and snapshot.
    """

    candidate: SubscriptionCandidate
    classification: Classification
    matched_record_id: str | None = None
    matched_record_snapshot: RecordSnapshot | None = None
    match_method: str | None = None

    def __post_init__(self) -> None:
        if self.classification != Classification.NEW and (
            self.matched_record_id is None or self.matched_record_snapshot is None
        ):
            raise ValueError(
                f"{self.classification.value} candidate {self.candidate.source_message_id} "
                "requires a matched record id and snapshot"
            )

    @property
    def ref(self) -> str:
        """Stable reference to this candidate (its source message id)."""
        return self.candidate.source_message_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        snapshot = self.matched_record_snapshot
        return {
            **self.candidate.to_dict(),
            "classification": self.classification.value,
            "matched_record_id": self.matched_record_id,
            "matched_record_snapshot": (
                {
                    "name": snapshot.name,
                    "cost": str(snapshot.cost.to_decimal()),
                    "currency": snapshot.currency,
                }
                if snapshot
                else None
            ),
            "match_method": self.match_method,
        }
