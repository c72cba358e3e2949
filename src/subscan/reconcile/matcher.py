#!/usr/bin/env python3
"""
Reconciliation Engine Module

Classifies extracted candidates against the user's existing subscription
records as NEW, DUPLICATE or CONFLICT.

Matching is pluggable through the MatchStrategy protocol. The default chain
tries an exact source-message match first, then case-insensitive substring
containment of names in either direction.
"""

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import pandas as pd

from ..extraction.models import SubscriptionCandidate
from ..store.models import ExistingSubscriptionRecord
from .models import Classification, ClassifiedCandidate, MatchResult, RecordSnapshot

logger = logging.getLogger(__name__)


class MatchStrategy(Protocol):
    """Finds the existing record a candidate refers to, if any."""

    def match(
        self, candidate: SubscriptionCandidate, records: Sequence[ExistingSubscriptionRecord]
    ) -> MatchResult: ...


def names_overlap(candidate_name: str, record_name: str) -> bool:
    """
    Check whether either name contains the other, ignoring case.

    Empty names never match anything.

    Examples:
        names_overlap("Spotify Premium", "spotify") -> True
        names_overlap("Netflix", "Netflix Standard") -> True
        names_overlap("Hulu", "") -> False
    """
    a = candidate_name.strip().lower()
    b = record_name.strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


class SubstringMatchStrategy:
    """Bidirectional case-insensitive name containment."""

    method = "name_substring"

    def match(
        self, candidate: SubscriptionCandidate, records: Sequence[ExistingSubscriptionRecord]
    ) -> MatchResult:
        """
        Find the record whose name overlaps the candidate's merchant name.

        When several records qualify, the one with the smallest id wins so
        the result does not depend on store ordering.
        """
        hits = [r for r in records if names_overlap(candidate.merchant_name, r.name)]
        if not hits:
            return MatchResult(record=None)

        if len(hits) > 1:
            logger.debug(
                f"{len(hits)} records match {candidate.merchant_name!r}; "
                f"using smallest id {min(r.id for r in hits)}"
            )
        return MatchResult(record=min(hits, key=lambda r: r.id), method=self.method)


class SourceMessageMatchStrategy:
    """Exact match on the message a record was originally imported from."""

    method = "source_message"

    def match(
        self, candidate: SubscriptionCandidate, records: Sequence[ExistingSubscriptionRecord]
    ) -> MatchResult:
        """Find a record imported from the candidate's own source message."""
        for record in sorted(records, key=lambda r: r.id):
            if record.source_message_id and record.source_message_id == candidate.source_message_id:
                return MatchResult(record=record, method=self.method)
        return MatchResult(record=None)


class ChainedMatchStrategy:
    """Tries strategies in order; the first match wins."""

    def __init__(self, strategies: Sequence[MatchStrategy]):
        self.strategies = list(strategies)

    def match(
        self, candidate: SubscriptionCandidate, records: Sequence[ExistingSubscriptionRecord]
    ) -> MatchResult:
        for strategy in self.strategies:
            result = strategy.match(candidate, records)
            if result.matched:
                return result
        return MatchResult(record=None)


def default_match_strategy() -> MatchStrategy:
    """Source-message match, then name substring match."""
    return ChainedMatchStrategy([SourceMessageMatchStrategy(), SubstringMatchStrategy()])


class ReconciliationEngine:
    """Core candidate-to-record classifier"""

    def __init__(self, strategy: MatchStrategy | None = None):
        """
        Initialize the engine.

        Args:
            strategy: Match strategy (default: source-message then substring)
        """
        self.strategy = strategy or default_match_strategy()

    def classify(
        self, candidate: SubscriptionCandidate, records: Sequence[ExistingSubscriptionRecord]
    ) -> ClassifiedCandidate:
        """
        Classify one candidate.

        Args:
            candidate: Extracted candidate
            records: The user's existing records (not modified)

        Returns:
            ClassifiedCandidate; DUPLICATE and CONFLICT carry the matched record
        """
        result = self.strategy.match(candidate, records)
        if result.record is None:
            return ClassifiedCandidate(candidate=candidate, classification=Classification.NEW)

        record = result.record
        if candidate.amount.same_price(record.cost):
            classification = Classification.DUPLICATE
        else:
            classification = Classification.CONFLICT
            logger.debug(
                f"Price change for {record.name!r}: {record.cost} -> {candidate.amount} "
                f"(record {record.id})"
            )

        return ClassifiedCandidate(
            candidate=candidate,
            classification=classification,
            matched_record_id=record.id,
            matched_record_snapshot=RecordSnapshot.of(record),
            match_method=result.method,
        )

    def classify_all(
        self,
        candidates: Sequence[SubscriptionCandidate],
        records: Sequence[ExistingSubscriptionRecord],
    ) -> list[ClassifiedCandidate]:
        """Classify candidates in order against the same record snapshot."""
        classified = [self.classify(candidate, records) for candidate in candidates]

        counts = {c: 0 for c in Classification}
        for item in classified:
            counts[item.classification] += 1
        logger.info(
            f"Reconciled {len(classified)} candidates against {len(records)} records: "
            f"{counts[Classification.NEW]} new, {counts[Classification.DUPLICATE]} duplicate, "
            f"{counts[Classification.CONFLICT]} conflict"
        )
        return classified


def generate_scan_summary(classified: Sequence[ClassifiedCandidate]) -> dict[str, Any]:
    """
    Generate summary statistics for classified candidates.

    Args:
        classified: List of ClassifiedCandidate objects

    Returns:
        Dictionary with summary statistics
    """
    total = len(classified)
    if total == 0:
        return {"total_candidates": 0}

    by_classification = {c.value: 0 for c in Classification}
    by_confidence: dict[str, int] = {}
    for item in classified:
        by_classification[item.classification.value] += 1
        confidence = item.candidate.extraction_confidence.value
        by_confidence[confidence] = by_confidence.get(confidence, 0) + 1

    # Monthly spend per currency across NEW candidates, in cents
    new_monthly_cents: dict[str, int] = {}
    for item in classified:
        if item.classification == Classification.NEW:
            monthly = item.candidate.amount.monthly_equivalent(item.candidate.billing_frequency.value)
            new_monthly_cents[monthly.currency] = new_monthly_cents.get(monthly.currency, 0) + monthly.to_cents()

    return {
        "total_candidates": total,
        "classification_breakdown": by_classification,
        "confidence_breakdown": by_confidence,
        "new_monthly_cents": new_monthly_cents,
    }


def candidates_to_dataframe(classified: Sequence[ClassifiedCandidate]) -> pd.DataFrame:
    """
    Convert classified candidates to a DataFrame for tabular display.

    Args:
        classified: List of ClassifiedCandidate objects

    Returns:
        DataFrame with one row per candidate, in input order
    """
    rows = []
    for item in classified:
        candidate = item.candidate
        snapshot = item.matched_record_snapshot
        rows.append(
            {
                "merchant": candidate.merchant_name,
                "amount": str(candidate.amount),
                "amount_cents": candidate.amount.to_cents(),
                "currency": candidate.currency,
                "frequency": candidate.billing_frequency.value,
                "billing_date": candidate.billing_date.to_iso_string() if candidate.billing_date else "",
                "confidence": candidate.extraction_confidence.value,
                "classification": item.classification.value,
                "matched_record_id": item.matched_record_id or "",
                "current_cost": str(snapshot.cost) if snapshot else "",
                "source_message_id": candidate.source_message_id,
            }
        )

    columns = [
        "merchant",
        "amount",
        "amount_cents",
        "currency",
        "frequency",
        "billing_date",
        "confidence",
        "classification",
        "matched_record_id",
        "current_cost",
        "source_message_id",
    ]
    df = pd.DataFrame(rows, columns=columns)
    logger.debug(f"Converted {len(df)} candidates to DataFrame")
    return df
