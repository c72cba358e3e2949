"""
Reconciliation Package

Classifies extracted subscription candidates against existing records.

Key Components:
- matcher: ReconciliationEngine and pluggable match strategies
- models: Classification, ClassifiedCandidate and record snapshots
"""

from .matcher import (
    ChainedMatchStrategy,
    MatchStrategy,
    ReconciliationEngine,
    SourceMessageMatchStrategy,
    SubstringMatchStrategy,
    candidates_to_dataframe,
    default_match_strategy,
    generate_scan_summary,
    names_overlap,
)
from .models import Classification, ClassifiedCandidate, MatchResult, RecordSnapshot

__all__ = [
    "ChainedMatchStrategy",
    "Classification",
    "ClassifiedCandidate",
    "MatchResult",
    "MatchStrategy",
    "RecordSnapshot",
    "ReconciliationEngine",
    "SourceMessageMatchStrategy",
    "SubstringMatchStrategy",
    "candidates_to_dataframe",
    "default_match_strategy",
    "generate_scan_summary",
    "names_overlap",
]
