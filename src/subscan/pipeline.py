#!/usr/bin/env python3
"""
Discovery Pipeline

Caller-facing entry points tying the stages together:

    fetch -> extract -> reconcile -> (review) -> commit

``scan`` runs the first three stages and returns classified candidates.
``import_all_new`` and ``commit`` run the commit stage over a review result.
Data only flows forward; no stage reaches back into an earlier one.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .core.config import Config
from .core.errors import MailboxError, NotEntitledError, RecordStoreError
from .extraction.extractor import CandidateExtractor, build_extractor_from_config
from .gmail.fetcher import GmailFetcher
from .reconcile.matcher import ReconciliationEngine
from .reconcile.models import ClassifiedCandidate
from .review.commit import CommitExecutor, CommitSummary
from .review.session import ResolutionDecision, import_all_new_items
from .store.base import SubscriptionStore
from .store.json_store import JsonSubscriptionStore

logger = logging.getLogger(__name__)

NO_BILLS_MESSAGE = "No bills found."


@dataclass
class ScanResult:
    """Outcome of one scan."""

    success: bool
    found: int = 0
    scanned: int = 0
    candidates: list[ClassifiedCandidate] = field(default_factory=list)
    error: str | None = None
    message: str | None = None

    @classmethod
    def failed(cls, error: str) -> "ScanResult":
        """Scan-level failure with a human-readable message."""
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "found": self.found,
            "scanned": self.scanned,
            "candidates": [c.to_dict() for c in self.candidates],
            "error": self.error,
            "message": self.message,
        }


class DiscoveryPipeline:
    """Scan, classify and commit subscriptions for one user."""

    def __init__(
        self,
        store: SubscriptionStore,
        user_id: str,
        fetcher: GmailFetcher,
        extractor: CandidateExtractor,
        engine: ReconciliationEngine | None = None,
        executor: CommitExecutor | None = None,
        entitlement_check: Callable[[str], bool] | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            store: Subscription record store
            user_id: User whose records are reconciled and written
            fetcher: Mailbox message fetcher
            extractor: Candidate extractor
            engine: Reconciliation engine (default strategy if omitted)
            executor: Commit executor (store defaults if omitted)
            entitlement_check: Optional external gate; called with user_id
        """
        self.store = store
        self.user_id = user_id
        self.fetcher = fetcher
        self.extractor = extractor
        self.engine = engine or ReconciliationEngine()
        self.executor = executor or CommitExecutor(store, user_id)
        self.entitlement_check = entitlement_check

    async def scan(self, access_token: str, days: int | None = None) -> ScanResult:
        """
        Discover subscriptions in the mailbox.

        Only transport and store failures fail the scan; extraction problems
        just yield fewer or lower-confidence candidates.

        Args:
            access_token: Mailbox bearer token
            days: Lookback window in days (default: configured lookback)

        Returns:
            ScanResult; candidates follow mailbox order
        """
        if days is not None and days <= 0:
            return ScanResult.failed(f"Lookback window must be a positive number of days, got {days}")

        try:
            if self.entitlement_check is not None and not self.entitlement_check(self.user_id):
                raise NotEntitledError("Inbox scanning is not available on your current plan")

            # Read once; treated as an immutable snapshot for the whole scan
            records = await self.store.list_records(self.user_id)
            messages = await self.fetcher.fetch_messages(access_token, days)
        except (MailboxError, RecordStoreError, NotEntitledError) as e:
            logger.error(f"Scan failed: {e}")
            return ScanResult.failed(str(e))

        if not messages:
            logger.info("Search returned no messages")
            return ScanResult(success=True, message=NO_BILLS_MESSAGE)

        candidates = await self.extractor.extract_all(messages)
        classified = self.engine.classify_all(candidates, records)

        return ScanResult(
            success=True,
            found=len(classified),
            scanned=len(messages),
            candidates=classified,
            message=f"Found {len(classified)} potential subscriptions." if classified else NO_BILLS_MESSAGE,
        )

    async def import_all_new(self, candidates: Sequence[ClassifiedCandidate]) -> CommitSummary:
        """Insert every NEW candidate; duplicates and conflicts are left alone."""
        return await self.executor.apply(import_all_new_items(candidates))

    async def commit(
        self, candidates: Sequence[ClassifiedCandidate], decisions: Sequence[ResolutionDecision]
    ) -> CommitSummary:
        """
        Apply review decisions.

        Raises:
            ValueError: If candidates and decisions differ in length
        """
        if len(candidates) != len(decisions):
            raise ValueError(f"Got {len(decisions)} decisions for {len(candidates)} candidates")
        return await self.executor.apply(list(zip(candidates, decisions)))


def build_pipeline(config: Config, entitlement_check: Callable[[str], bool] | None = None) -> DiscoveryPipeline:
    """Build a pipeline wired from configuration with the JSON record store."""
    store = JsonSubscriptionStore(config.store.data_dir)
    return DiscoveryPipeline(
        store=store,
        user_id=config.user_id,
        fetcher=GmailFetcher(config.scan, config.gmail),
        extractor=build_extractor_from_config(config),
        engine=ReconciliationEngine(),
        executor=CommitExecutor(
            store,
            config.user_id,
            default_category=config.store.default_category,
            default_trust_score=config.store.default_trust_score,
        ),
        entitlement_check=entitlement_check,
    )
