"""
Review Package

User-in-the-loop resolution of classified candidates and the commit step
that applies the result to the record store.
"""

from .commit import CommitExecutor, CommitOutcome, CommitResult, CommitSummary
from .session import (
    CommitItem,
    ConflictAction,
    ResolutionDecision,
    ResolutionSession,
    import_all_new_items,
)

__all__ = [
    "CommitExecutor",
    "CommitItem",
    "CommitOutcome",
    "CommitResult",
    "CommitSummary",
    "ConflictAction",
    "ResolutionDecision",
    "ResolutionSession",
    "import_all_new_items",
]
