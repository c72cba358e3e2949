#!/usr/bin/env python3
"""
Resolution Session Module

Per-candidate decision state for one review interaction. Decisions are
immutable values; every user interaction replaces one decision with a new
one, so the commit step sees a plain list of (candidate, decision) pairs
and can be exercised without any presentation layer.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum

from ..reconcile.models import Classification, ClassifiedCandidate

logger = logging.getLogger(__name__)


class ConflictAction(Enum):
    """How a selected CONFLICT candidate is applied."""

    UPDATE_EXISTING = "update_existing"  # Overwrite the matched record's price
    ADD_SEPARATE = "add_separate"  # Track as a second subscription
    SKIP = "skip"  # Same as deselecting


@dataclass(frozen=True)
class ResolutionDecision:
    """User decision for one classified candidate."""

    selected: bool
    action: ConflictAction | None = None

    @classmethod
    def default_for(cls, classification: Classification) -> "ResolutionDecision":
        """
        Initial decision when a session opens.

        NEW and CONFLICT start selected; DUPLICATE starts deselected.
        CONFLICT starts with UPDATE_EXISTING.
        """
        if classification == Classification.CONFLICT:
            return cls(selected=True, action=ConflictAction.UPDATE_EXISTING)
        return cls(selected=classification == Classification.NEW)

    @property
    def committable(self) -> bool:
        """Selected and not resolved as SKIP."""
        return self.selected and self.action != ConflictAction.SKIP


CommitItem = tuple[ClassifiedCandidate, ResolutionDecision]


def import_all_new_items(classified: Sequence[ClassifiedCandidate]) -> list[CommitItem]:
    """
    Commit set for bulk "import all new".

    Only NEW candidates, each with its default (selected) decision. Duplicates
    and conflicts are never included, whatever their selection state.
    """
    return [
        (item, ResolutionDecision.default_for(item.classification))
        for item in classified
        if item.classification == Classification.NEW
    ]


class ResolutionSession:
    """Selection and conflict-action state over a classified candidate set."""

    def __init__(self, classified: Sequence[ClassifiedCandidate]):
        self.candidates = list(classified)
        self.decisions = [ResolutionDecision.default_for(c.classification) for c in self.candidates]

    def __len__(self) -> int:
        return len(self.candidates)

    def items(self) -> list[CommitItem]:
        """All (candidate, decision) pairs in candidate order."""
        return list(zip(self.candidates, self.decisions))

    def toggle(self, index: int) -> ResolutionDecision:
        """Flip selection of one candidate."""
        decision = self.decisions[index]
        self.decisions[index] = replace(decision, selected=not decision.selected)
        return self.decisions[index]

    def set_selected(self, index: int, selected: bool) -> ResolutionDecision:
        """Set selection of one candidate explicitly."""
        self.decisions[index] = replace(self.decisions[index], selected=selected)
        return self.decisions[index]

    def set_action(self, index: int, action: ConflictAction) -> ResolutionDecision:
        """
        Choose how a CONFLICT candidate is applied.

        Raises:
            ValueError: If the candidate is not a CONFLICT
        """
        candidate = self.candidates[index]
        if candidate.classification != Classification.CONFLICT:
            raise ValueError(
                f"Only conflicts take an action; {candidate.ref} is {candidate.classification.value}"
            )
        self.decisions[index] = replace(self.decisions[index], action=action)
        return self.decisions[index]

    def committable(self) -> list[CommitItem]:
        """Pairs to hand to the commit executor: selected and not SKIP."""
        items = [(c, d) for c, d in self.items() if d.committable]
        logger.debug(f"{len(items)} of {len(self.candidates)} candidates committable")
        return items

    def import_all_new(self) -> list[CommitItem]:
        """Bulk NEW-only commit set, independent of interactive selection."""
        return import_all_new_items(self.candidates)
