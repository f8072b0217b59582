"""Typed representation of delta notifications.

The delta notifier posts either a bare JSON array of change-sets or an object
carrying them under ``delta``.  Both shapes are resolved once, here, into a
:class:`DeltaBatch`; the rest of the service never probes raw payload fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional

from .errors import DeltaFormatError

logger = logging.getLogger("rating_service.delta")

URI = "uri"
LITERAL = "literal"
BNODE = "bnode"

_TERM_TYPES = {
    "uri": URI,
    "literal": LITERAL,
    "typed-literal": LITERAL,
    "bnode": BNODE,
}


@dataclass(frozen=True, slots=True)
class Term:
    """RDF term in the SPARQL JSON results shape."""

    value: str
    type: str = URI
    datatype: str | None = None
    lang: str | None = None

    @classmethod
    def uri(cls, value: str) -> "Term":
        return cls(value, URI)

    @classmethod
    def literal(cls, value: str, datatype: str | None = None, lang: str | None = None) -> "Term":
        return cls(str(value), LITERAL, datatype, lang)

    @property
    def is_uri(self) -> bool:
        return self.type == URI

    @classmethod
    def from_json(cls, raw: Any) -> Optional["Term"]:
        """Build a term from ``{"type": ..., "value": ...}``; ``None`` if unusable."""
        if not isinstance(raw, dict):
            return None
        value = raw.get("value")
        if not isinstance(value, str):
            return None
        kind = _TERM_TYPES.get(str(raw.get("type") or URI).lower(), URI)
        datatype = raw.get("datatype") if isinstance(raw.get("datatype"), str) else None
        lang = raw.get("xml:lang") or raw.get("lang")
        return cls(value, kind, datatype, lang if isinstance(lang, str) else None)


@dataclass(frozen=True, slots=True)
class Fact:
    """A (subject, predicate, object) statement tagged with its graph."""

    subject: Term
    predicate: Term
    object: Term
    graph: str | None = None

    @classmethod
    def from_json(cls, raw: Any, *, default_graph: str | None = None) -> Optional["Fact"]:
        if not isinstance(raw, dict):
            return None
        subject = Term.from_json(raw.get("subject"))
        predicate = Term.from_json(raw.get("predicate"))
        obj = Term.from_json(raw.get("object"))
        if subject is None or predicate is None or obj is None:
            return None
        graph_term = Term.from_json(raw.get("graph"))
        graph = graph_term.value if graph_term is not None else default_graph
        return cls(subject, predicate, obj, graph)


@dataclass(frozen=True, slots=True)
class ChangeSet:
    inserts: tuple[Fact, ...] = ()
    deletes: tuple[Fact, ...] = ()


class PayloadKind(str, Enum):
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True, slots=True)
class DeltaBatch:
    """One notification: ordered change-sets plus the payload shape they came from."""

    changesets: tuple[ChangeSet, ...] = field(default_factory=tuple)
    kind: PayloadKind = PayloadKind.OBJECT

    def added_facts(self) -> Iterator[Fact]:
        for changeset in self.changesets:
            yield from changeset.inserts

    def removed_facts(self) -> Iterator[Fact]:
        for changeset in self.changesets:
            yield from changeset.deletes

    def is_empty(self) -> bool:
        return not any(cs.inserts or cs.deletes for cs in self.changesets)


def _facts(raw: Any, default_graph: str | None) -> tuple[Fact, ...]:
    if not isinstance(raw, list):
        return ()
    facts: list[Fact] = []
    for item in raw:
        fact = Fact.from_json(item, default_graph=default_graph)
        if fact is None:
            logger.debug("Skipping malformed triple in delta: %r", item)
            continue
        facts.append(fact)
    return tuple(facts)


def _changesets(items: Iterable[Any], default_graph: str | None) -> tuple[ChangeSet, ...]:
    result: list[ChangeSet] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        result.append(
            ChangeSet(
                inserts=_facts(item.get("inserts"), default_graph),
                deletes=_facts(item.get("deletes"), default_graph),
            )
        )
    return tuple(result)


def parse_delta(
    payload: Any,
    *,
    default_graph: str | None = None,
    strict: bool = False,
) -> DeltaBatch:
    """Resolve a raw delta payload into a :class:`DeltaBatch`.

    Missing or misshapen fields degrade to empty collections.  With
    ``strict=True`` a payload that is neither an array nor an object raises
    :class:`DeltaFormatError` instead of producing an empty batch.
    """
    if isinstance(payload, list):
        return DeltaBatch(_changesets(payload, default_graph), PayloadKind.ARRAY)
    if isinstance(payload, dict):
        delta = payload.get("delta")
        items = delta if isinstance(delta, list) else []
        return DeltaBatch(_changesets(items, default_graph), PayloadKind.OBJECT)
    if strict:
        raise DeltaFormatError(f"Unsupported delta payload type: {type(payload).__name__}")
    return DeltaBatch()
