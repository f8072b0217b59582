from __future__ import annotations

import pytest

from rating_service.engine import RatingPipeline, suppressed_removals
from rating_service.errors import StoreError
from rating_service.models import Term, parse_delta
from rating_service.store import MemoryStore

from helpers import (
    BOOK_A,
    BOOK_B,
    BOOK_C,
    BOOK_D,
    BOOK_E,
    about,
    average,
    averages,
    changeset,
    rating,
    review,
)


class FailingStore(MemoryStore):
    """Memory store that fails every request touching one of ``failing``."""

    def __init__(self, *failing: str, **kwargs):
        super().__init__(**kwargs)
        self.failing = {Term.uri(uri) for uri in failing}

    def _check(self, nodes):
        if any(node in self.failing for node in nodes):
            raise StoreError("simulated store failure")

    def query(self, patterns, *, limit=None):
        self._check([node for p in patterns for node in (p.subject, p.object)])
        return super().query(patterns, limit=limit)

    def update(self, statement):
        self._check([p.subject for p in statement.delete])
        return super().update(statement)


def test_new_rating_updates_average(memory_store, pipeline):
    memory_store.add(
        about(review("0"), BOOK_A),
        rating(review("0"), "2.0"),
        about(review("1"), BOOK_A),
        rating(review("1"), "4.0"),
        average(BOOK_A, "2.0"),
    )
    batch = parse_delta([changeset(inserts=[rating(review("1"), "4.0")])])

    report = pipeline.process(batch)

    assert report.targets == [BOOK_A]
    assert [float(v) for v in averages(memory_store, BOOK_A)] == pytest.approx([3.0])


def test_removed_association_drops_average(memory_store, pipeline):
    memory_store.add(rating(review("2"), "5"), average(BOOK_B, "5.0"))
    batch = parse_delta({"delta": [changeset(deletes=[about(review("2"), BOOK_B)])]})

    report = pipeline.process(batch)

    assert report.targets == [BOOK_B]
    assert report.written == {BOOK_B: None}
    assert averages(memory_store, BOOK_B) == []


def test_empty_batch_writes_nothing(memory_store, pipeline):
    report = pipeline.process(parse_delta([changeset()]))
    assert report.targets == []
    assert memory_store.history == []


def test_unparsable_rating_is_ignored(memory_store, pipeline):
    memory_store.add(
        about(review("a"), BOOK_C),
        rating(review("a"), "1.0"),
        about(review("b"), BOOK_C),
        rating(review("b"), "3.0"),
        about(review("3"), BOOK_C),
        rating(review("3"), "abc"),
    )
    pipeline.process(parse_delta([changeset(inserts=[rating(review("3"), "abc")])]))
    assert [float(v) for v in averages(memory_store, BOOK_C)] == pytest.approx([2.0])


def test_rating_for_unassociated_review_is_noop(memory_store, pipeline):
    memory_store.add(rating(review("orphan"), "5"))
    report = pipeline.process(parse_delta([changeset(inserts=[rating(review("orphan"), "5")])]))
    assert report.targets == []
    assert memory_store.history == []


def test_mean_over_many_ratings(memory_store, pipeline):
    values = ["1", "2.5", "4", "4.75", "3"]
    for idx, value in enumerate(values):
        memory_store.add(about(review(f"m{idx}"), BOOK_A), rating(review(f"m{idx}"), value))
    pipeline.process(parse_delta([changeset(inserts=[rating(review("m0"), "1")])]))
    expected = sum(float(v) for v in values) / len(values)
    assert [float(v) for v in averages(memory_store, BOOK_A)] == pytest.approx([expected])


def test_suppressed_removals_split():
    added = [rating(review("1"), "4")]
    removed = [about(review("1"), BOOK_D), about(review("2"), BOOK_A)]
    kept, suppressed = suppressed_removals(added, removed)
    assert kept == [removed[1]]
    assert suppressed == [removed[0]]


def test_reassociation_only_recomputes_new_target(memory_store, pipeline):
    memory_store.add(
        about(review("4"), BOOK_E),
        rating(review("4"), "4"),
        about(review("5"), BOOK_D),
        rating(review("5"), "2"),
        average(BOOK_D, "3.0"),
    )
    batch = parse_delta(
        [
            changeset(
                inserts=[about(review("4"), BOOK_E), rating(review("4"), "4")],
                deletes=[about(review("4"), BOOK_D)],
            )
        ]
    )

    report = pipeline.process(batch)

    assert report.targets == [BOOK_E]
    assert report.skipped_removals == [review("4")]
    assert averages(memory_store, BOOK_E) == ["4.0"]
    assert averages(memory_store, BOOK_D) == ["3.0"]


def test_added_association_does_not_suppress_removal(memory_store, pipeline):
    memory_store.add(
        about(review("4"), BOOK_A),
        rating(review("4"), "4"),
        average(BOOK_B, "4.0"),
    )
    batch = parse_delta(
        [
            changeset(
                inserts=[about(review("4"), BOOK_A)],
                deletes=[about(review("4"), BOOK_B)],
            )
        ]
    )

    report = pipeline.process(batch)

    assert report.targets == [BOOK_B]
    assert report.skipped_removals == []
    assert report.written == {BOOK_B: None}
    assert averages(memory_store, BOOK_B) == []
    assert averages(memory_store, BOOK_A) == []


def test_out_of_range_rating_is_ignored(memory_store, pipeline):
    memory_store.add(
        about(review("x1"), BOOK_A),
        rating(review("x1"), "2.0"),
        about(review("x2"), BOOK_A),
        rating(review("x2"), "1e1000000"),
        average(BOOK_A, "9.0"),
    )

    report = pipeline.process(parse_delta([changeset(inserts=[rating(review("x2"), "1e1000000")])]))

    assert report.failed == {}
    assert report.written == {BOOK_A: "2.0"}
    assert averages(memory_store, BOOK_A) == ["2.0"]


def test_targets_are_recomputed_once_per_batch(memory_store, pipeline):
    memory_store.add(
        about(review("1"), BOOK_A),
        rating(review("1"), "1"),
        about(review("2"), BOOK_A),
        rating(review("2"), "3"),
    )
    batch = parse_delta(
        [
            changeset(inserts=[rating(review("1"), "1"), rating(review("2"), "3")]),
            changeset(deletes=[about(review("9"), BOOK_A)]),
        ]
    )
    report = pipeline.process(batch)
    assert report.targets == [BOOK_A]
    assert len(memory_store.history) == 1


def test_failure_on_one_target_does_not_block_others():
    store = FailingStore(BOOK_A)
    store.add(about(review("2"), BOOK_B), rating(review("2"), "5"))
    batch = parse_delta(
        [changeset(deletes=[about(review("1"), BOOK_A), about(review("3"), BOOK_B)])]
    )

    report = RatingPipeline(store).process(batch)

    assert set(report.targets) == {BOOK_A, BOOK_B}
    assert "simulated store failure" in report.failed[BOOK_A]
    assert not report.ok
    assert averages(store, BOOK_B) == ["5.0"]


def test_resolution_failure_is_contained():
    store = FailingStore(review("bad"))
    store.add(about(review("good"), BOOK_A), rating(review("good"), "2"))
    batch = parse_delta([changeset(inserts=[rating(review("bad"), "1"), rating(review("good"), "2")])])

    report = RatingPipeline(store).process(batch)

    assert report.targets == [BOOK_A]
    assert review("bad") in report.failed
    assert averages(store, BOOK_A) == ["2.0"]


def test_processing_twice_is_idempotent(memory_store, pipeline):
    memory_store.add(
        about(review("1"), BOOK_A),
        rating(review("1"), "5"),
        about(review("2"), BOOK_A),
        rating(review("2"), "2"),
        rating(review("3"), "4"),
    )
    batch = parse_delta(
        [changeset(inserts=[rating(review("1"), "5")], deletes=[about(review("3"), BOOK_B)])]
    )
    pipeline.process(batch)
    first = set(memory_store.facts())
    pipeline.process(batch)
    assert set(memory_store.facts()) == first
    assert averages(memory_store, BOOK_A) == ["3.5"]
    assert averages(memory_store, BOOK_B) == []


def test_parallel_recompute_matches_sequential():
    def seeded():
        store = MemoryStore()
        for idx, book in enumerate([BOOK_A, BOOK_B, BOOK_C, BOOK_D]):
            store.add(about(review(f"p{idx}"), book), rating(review(f"p{idx}"), str(idx + 1)))
        return store

    batch = parse_delta(
        [changeset(inserts=[rating(review(f"p{idx}"), str(idx + 1)) for idx in range(4)])]
    )
    sequential, parallel = seeded(), seeded()
    RatingPipeline(sequential).process(batch)
    report = RatingPipeline(parallel, max_workers=4).process(batch)

    assert set(parallel.facts()) == set(sequential.facts())
    assert report.written == {BOOK_A: "1.0", BOOK_B: "2.0", BOOK_C: "3.0", BOOK_D: "4.0"}
