#!/usr/bin/env python3
"""
Candidate Extractor Module

Turns fetched messages into SubscriptionCandidates with a three-tier strategy:

1. Keyword gate: cheap case-insensitive substring check of subject + snippet.
   Messages that fail are dropped without any model call.
2. Model-assisted extraction (ModelExtractionStage).
3. Regex heuristic fallback (HeuristicExtractionStage).

Stages 2 and 3 form a chain of responsibility over the tagged
``ExtractionResult`` type; no exception-driven control flow is involved.
"""

import asyncio
import logging
from collections.abc import Sequence

from ..core.config import Config, ScanConfig
from ..gmail.fetcher import NO_SUBJECT, RawMessage
from .heuristic import HeuristicExtractionStage
from .model_stage import ModelExtractionStage
from .models import (
    Extracted,
    ExtractionStage,
    NotSubscription,
    SubscriptionCandidate,
)
from .text_generation import OpenAITextGenerator, TextGenerator

logger = logging.getLogger(__name__)


class CandidateExtractor:
    """Keyword gate followed by a chain of extraction stages."""

    def __init__(self, stages: Sequence[ExtractionStage], keyword_list: Sequence[str]):
        """
        Initialize the extractor.

        Args:
            stages: Extraction stages, tried in order
            keyword_list: Gate terms; matched case-insensitively as substrings
        """
        if not stages:
            raise ValueError("At least one extraction stage is required")
        self.stages = list(stages)
        self.keywords = [k.lower() for k in keyword_list if k]

    def passes_keyword_gate(self, message: RawMessage) -> bool:
        """Check subject and snippet for any gate keyword."""
        haystack = f"{message.subject} {message.snippet}".lower()
        return any(keyword in haystack for keyword in self.keywords)

    async def extract(self, message: RawMessage) -> SubscriptionCandidate | None:
        """
        Extract at most one candidate from a message.

        Returns:
            The candidate, or None if the message was gated out, rejected,
            or produced an unusable merchant name
        """
        if not self.passes_keyword_gate(message):
            logger.debug(f"Message {message.id} failed keyword gate: {message.subject!r}")
            return None

        for stage in self.stages:
            result = await stage.extract(message)

            if isinstance(result, Extracted):
                return self._guard(result.candidate)
            if isinstance(result, NotSubscription):
                return None

            logger.debug(f"{type(stage).__name__} deferred on {message.id}: {result.reason}")

        return None

    async def extract_all(self, messages: Sequence[RawMessage]) -> list[SubscriptionCandidate]:
        """
        Extract candidates from all messages concurrently.

        Output order follows message order; discarded messages leave no gap.
        """
        results = await asyncio.gather(*(self.extract(message) for message in messages))
        candidates = [candidate for candidate in results if candidate is not None]
        logger.info(f"Extracted {len(candidates)} candidates from {len(messages)} messages")
        return candidates

    def _guard(self, candidate: SubscriptionCandidate) -> SubscriptionCandidate | None:
        name = candidate.merchant_name.strip()
        if not name or name == NO_SUBJECT:
            logger.debug(f"Dropping candidate from {candidate.source_message_id}: no merchant name")
            return None
        return candidate


def build_extractor(
    scan_config: ScanConfig,
    generator: TextGenerator | None = None,
    timeout_seconds: float = 20.0,
) -> CandidateExtractor:
    """
    Build the standard model-then-heuristic extractor.

    Without a generator the extractor runs heuristic-only.
    """
    stages: list[ExtractionStage] = []
    if generator is not None:
        stages.append(ModelExtractionStage(generator, scan_config, timeout_seconds))
    else:
        logger.warning("No text-generation service configured; using heuristic extraction only")
    stages.append(HeuristicExtractionStage())
    return CandidateExtractor(stages, scan_config.keyword_list)


def build_extractor_from_config(config: Config) -> CandidateExtractor:
    """Build the extractor, creating an OpenAI generator when an API key is set."""
    generator: TextGenerator | None = None
    if config.model.api_key:
        generator = OpenAITextGenerator(config.model)
    return build_extractor(config.scan, generator, config.model.timeout_seconds)
