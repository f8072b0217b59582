"""Selects the facts of a delta batch that can change an average rating."""

from __future__ import annotations

from typing import List, Tuple

from ..models import DeltaBatch, Fact
from ..vocabulary import ABOUT, RATING


def _has_predicate(fact: Fact, predicate: str) -> bool:
    return fact.predicate.value == predicate


def classify(batch: DeltaBatch) -> Tuple[List[Fact], List[Fact]]:
    """Return ``(added_ratings, removed_associations)`` in batch order."""
    added_ratings = [fact for fact in batch.added_facts() if _has_predicate(fact, RATING)]
    removed_associations = [fact for fact in batch.removed_facts() if _has_predicate(fact, ABOUT)]
    return added_ratings, removed_associations
