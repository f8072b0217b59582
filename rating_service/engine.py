"""Delta processing: classify, resolve, recompute and write per affected target."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from .models import DeltaBatch, Fact
from .services.aggregate import AggregateEngine, format_decimal
from .services.classifier import classify
from .services.resolver import EntityResolver
from .services.writer import AggregateWriter
from .store.base import StoreClient

LOGGER = logging.getLogger("rating_service.engine")


@dataclass
class BatchReport:
    targets: List[str] = field(default_factory=list)
    written: Dict[str, Optional[str]] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped_removals: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targets": list(self.targets),
            "written": dict(self.written),
            "failed": dict(self.failed),
            "skipped_removals": list(self.skipped_removals),
        }


def rated_reviews(added_ratings: Iterable[Fact]) -> Set[str]:
    return {fact.subject.value for fact in added_ratings}


def suppressed_removals(
    added_ratings: Sequence[Fact],
    removed_associations: Sequence[Fact],
) -> tuple[List[Fact], List[Fact]]:
    """Split removed associations into ``(kept, suppressed)``.

    A removal is suppressed when the same batch also adds a rating for that
    review: the review's new target is picked up through the rating instead.
    """
    reviews = rated_reviews(added_ratings)
    kept: List[Fact] = []
    suppressed: List[Fact] = []
    for fact in removed_associations:
        (suppressed if fact.subject.value in reviews else kept).append(fact)
    return kept, suppressed


class RatingPipeline:
    def __init__(self, store: StoreClient, *, max_workers: int = 1):
        self.store = store
        self.max_workers = max(1, int(max_workers))
        self.resolver = EntityResolver(store)
        self.aggregates = AggregateEngine(store)
        self.writer = AggregateWriter(store)

    def dirty_targets(self, batch: DeltaBatch, report: Optional[BatchReport] = None) -> List[str]:
        """Distinct targets whose average may have changed, in first-seen order."""
        report = report if report is not None else BatchReport()
        added_ratings, removed_associations = classify(batch)
        dirty: Dict[str, None] = {}

        for fact in added_ratings:
            review = fact.subject.value
            try:
                target = self.resolver.resolve_target(review)
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Error resolving target of review %s: %s", review, exc)
                report.failed[review] = str(exc)
                continue
            if target:
                dirty[target] = None

        kept, suppressed = suppressed_removals(added_ratings, removed_associations)
        report.skipped_removals.extend(fact.subject.value for fact in suppressed)
        for fact in kept:
            dirty[fact.object.value] = None
        return list(dirty)

    def recompute(self, target: str) -> Optional[str]:
        """Recompute and store the average of ``target``; returns the written literal."""
        avg = self.aggregates.compute_aggregate(target)
        LOGGER.info("Recalculating average for %s: %s", target, "no ratings" if avg is None else avg)
        self.writer.write_aggregate(target, avg)
        return None if avg is None else format_decimal(avg)

    def _recompute_guarded(self, target: str, report: BatchReport) -> None:
        try:
            report.written[target] = self.recompute(target)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Error updating average for %s: %s", target, exc)
            report.failed[target] = str(exc)

    def process(self, batch: DeltaBatch) -> BatchReport:
        report = BatchReport()
        if batch.is_empty():
            LOGGER.debug("Delta batch %s is empty", batch.kind.value)
            return report
        targets = self.dirty_targets(batch, report)
        report.targets = targets
        if not targets:
            LOGGER.debug("Delta contains nothing affecting average ratings")
            return report
        if self.max_workers > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets))) as pool:
                list(pool.map(lambda target: self._recompute_guarded(target, report), targets))
        else:
            for target in targets:
                self._recompute_guarded(target, report)
        LOGGER.info(
            "Delta processed: %s target(s), %s failed",
            len(targets),
            len(report.failed),
        )
        return report
