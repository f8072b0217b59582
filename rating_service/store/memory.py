"""In-process triple store implementing the :class:`StoreClient` contract.

Used for local runs (``RATING_STORE_BACKEND=memory``) and tests.  Facts keep
insertion order so "first match" lookups are deterministic.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..models import Fact, Term
from ..vocabulary import DEFAULT_GRAPH
from .base import Bindings, Node, TriplePattern, UpdateStatement, Variable

logger = logging.getLogger("rating_service.store.memory")

Triple = Tuple[Term, Term, Term]


def _match(node: Node, term: Term, bindings: Bindings) -> Optional[Bindings]:
    if isinstance(node, Variable):
        bound = bindings.get(node.name)
        if bound is None:
            extended = dict(bindings)
            extended[node.name] = term
            return extended
        return bindings if bound == term else None
    return bindings if node == term else None


def _ground(node: Node, bindings: Bindings) -> Optional[Term]:
    if isinstance(node, Variable):
        return bindings.get(node.name)
    return node


class MemoryStore:
    """Thread-safe set of facts grouped by graph."""

    def __init__(self, graph: str = DEFAULT_GRAPH, facts: Iterable[Fact] = ()) -> None:
        self.graph = graph
        self._graphs: Dict[str, Dict[Triple, None]] = {}
        self._lock = threading.RLock()
        self.history: List[UpdateStatement] = []
        for fact in facts:
            self._add(fact)

    def _triples(self, graph: Optional[str] = None) -> Dict[Triple, None]:
        return self._graphs.setdefault(graph or self.graph, {})

    def _add(self, fact: Fact) -> None:
        self._triples(fact.graph)[(fact.subject, fact.predicate, fact.object)] = None

    def add(self, *facts: Fact) -> None:
        """Seed facts without recording an update."""
        with self._lock:
            for fact in facts:
                self._add(fact)

    def facts(self, graph: Optional[str] = None) -> List[Fact]:
        name = graph or self.graph
        with self._lock:
            return [Fact(s, p, o, name) for (s, p, o) in self._triples(name)]

    def objects(self, subject: Term, predicate: Term) -> List[Term]:
        with self._lock:
            return [o for (s, p, o) in self._triples() if s == subject and p == predicate]

    def _solutions(self, patterns: Sequence[TriplePattern]) -> Iterator[Bindings]:
        triples = list(self._triples())

        def walk(index: int, bindings: Bindings) -> Iterator[Bindings]:
            if index == len(patterns):
                yield bindings
                return
            pattern = patterns[index]
            for s, p, o in triples:
                current: Optional[Bindings] = bindings
                for node, term in ((pattern.subject, s), (pattern.predicate, p), (pattern.object, o)):
                    current = _match(node, term, current)
                    if current is None:
                        break
                if current is not None:
                    yield from walk(index + 1, current)

        yield from walk(0, {})

    def query(self, patterns: Sequence[TriplePattern], *, limit: Optional[int] = None) -> List[Bindings]:
        results: List[Bindings] = []
        with self._lock:
            for bindings in self._solutions(patterns):
                results.append(bindings)
                if limit is not None and len(results) >= limit:
                    break
        return results

    def update(self, statement: UpdateStatement) -> None:
        with self._lock:
            self.history.append(statement)
            triples = self._triples()
            solutions = list(self._solutions(statement.where)) if statement.where else [{}]
            removed = 0
            for bindings in solutions:
                for pattern in statement.delete:
                    s = _ground(pattern.subject, bindings)
                    p = _ground(pattern.predicate, bindings)
                    o = _ground(pattern.object, bindings)
                    if s is None or p is None or o is None:
                        continue
                    if (s, p, o) in triples:
                        del triples[(s, p, o)]
                        removed += 1
            for fact in statement.insert:
                self._add(fact)
            logger.debug("Memory update: removed=%s inserted=%s", removed, len(statement.insert))
