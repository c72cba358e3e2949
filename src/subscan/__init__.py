"""
subscan - Subscription Discovery & Reconciliation

Discovers recurring-billing subscriptions in a connected mailbox and merges
them into the user's tracked subscriptions without silently overwriting
existing records.

Domain Packages:
- core: Money, dates, currency handling, configuration, errors
- gmail: Mailbox search and MIME decoding
- extraction: Keyword gate, model-assisted and heuristic extraction
- reconcile: NEW / DUPLICATE / CONFLICT classification
- review: Resolution session and commit executor
- store: Subscription record store
- cli: Command-line interface

Example Usage:
    from subscan import build_pipeline, get_config

    pipeline = build_pipeline(get_config())
    result = await pipeline.scan(access_token, days=90)

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Karl Davis"

from .core.config import Environment, get_config
from .core.money import Money
from .pipeline import DiscoveryPipeline, ScanResult, build_pipeline
from .reconcile import Classification, ClassifiedCandidate, ReconciliationEngine
from .review import CommitExecutor, CommitSummary, ConflictAction, ResolutionDecision, ResolutionSession

__all__ = [
    # Configuration
    "get_config",
    "Environment",

    # Core types
    "Money",

    # Pipeline
    "DiscoveryPipeline",
    "ScanResult",
    "build_pipeline",

    # Reconciliation and review
    "Classification",
    "ClassifiedCandidate",
    "ReconciliationEngine",
    "CommitExecutor",
    "CommitSummary",
    "ConflictAction",
    "ResolutionDecision",
    "ResolutionSession",
]
