#!/usr/bin/env python3
"""
Commit Executor Module

Applies resolved candidates to the subscription record store one item at a
time. There is no shared transaction: each insert or update stands alone,
and a failed item never rolls back or skips its siblings.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..core.dates import BillingDate
from ..reconcile.models import Classification, ClassifiedCandidate
from ..store.base import SubscriptionStore
from ..store.models import NewSubscription, SubscriptionUpdate
from .session import ConflictAction, ResolutionDecision

logger = logging.getLogger(__name__)


class CommitResult(Enum):
    """Outcome of one attempted action."""

    APPLIED = "applied"
    FAILED = "failed"


@dataclass(frozen=True)
class CommitOutcome:
    """Per-item outcome, reported back to the caller only."""

    candidate_ref: str
    result: CommitResult
    error_detail: str | None = None


@dataclass
class CommitSummary:
    """
    Result of applying a batch of resolved candidates.

    Callers show the aggregate count; per-item detail stays in ``outcomes``.
    """

    outcomes: list[CommitOutcome] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        """Number of items applied."""
        return sum(1 for o in self.outcomes if o.result == CommitResult.APPLIED)

    @property
    def failures(self) -> list[CommitOutcome]:
        """Outcomes that failed."""
        return [o for o in self.outcomes if o.result == CommitResult.FAILED]

    @property
    def attempted(self) -> int:
        """Number of items attempted."""
        return len(self.outcomes)

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if not self.outcomes:
            return 0.0
        return (self.applied_count / self.attempted) * 100


class CommitExecutor:
    """Sequential, per-item fault-isolated writer of resolved candidates."""

    def __init__(
        self,
        store: SubscriptionStore,
        user_id: str,
        default_category: str = "Software",
        default_trust_score: int = 100,
    ):
        """
        Initialize the executor.

        Args:
            store: Record store to write to
            user_id: Owner of inserted records
            default_category: Category for inserted records
            default_trust_score: Trust score for inserted records
        """
        self.store = store
        self.user_id = user_id
        self.default_category = default_category
        self.default_trust_score = default_trust_score

    async def apply(self, items: Sequence[tuple[ClassifiedCandidate, ResolutionDecision]]) -> CommitSummary:
        """
        Apply each committable item in order.

        Items that are deselected or resolved as SKIP are ignored.

        Returns:
            CommitSummary with one outcome per attempted item
        """
        summary = CommitSummary()

        for classified, decision in items:
            if not decision.committable:
                logger.debug(f"Skipping {classified.ref}: not selected for commit")
                continue

            try:
                await self._apply_one(classified, decision)
            except Exception as e:
                logger.error(f"Commit failed for {classified.ref} ({classified.candidate.merchant_name!r}): {e}")
                summary.outcomes.append(CommitOutcome(classified.ref, CommitResult.FAILED, str(e)))
            else:
                summary.outcomes.append(CommitOutcome(classified.ref, CommitResult.APPLIED))

        logger.info(f"Committed {summary.applied_count} of {summary.attempted} items ({len(summary.failures)} failed)")
        return summary

    async def _apply_one(self, classified: ClassifiedCandidate, decision: ResolutionDecision) -> None:
        candidate = classified.candidate
        renewal_date = candidate.billing_date or BillingDate.today()

        if classified.classification == Classification.CONFLICT and decision.action == ConflictAction.UPDATE_EXISTING:
            if classified.matched_record_id is None or classified.matched_record_snapshot is None:
                raise ValueError(f"Conflict {classified.ref} has no matched record to update")

            await self.store.update_record(
                classified.matched_record_id,
                SubscriptionUpdate(
                    cost=candidate.amount,
                    renewal_date=renewal_date,
                    previous_cost=classified.matched_record_snapshot.cost,
                    last_price_change_date=BillingDate.today(),
                ),
            )
            return

        await self.store.insert_record(
            self.user_id,
            NewSubscription(
                name=candidate.merchant_name,
                cost=candidate.amount,
                frequency=candidate.billing_frequency.value,
                renewal_date=renewal_date,
                category=self.default_category,
                status="active",
                trust_score=self.default_trust_score,
                source_message_id=candidate.source_message_id,
            ),
        )
