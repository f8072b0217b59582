"""SPARQL 1.1 protocol backend.

Patterns and update statements are rendered to SPARQL text scoped to a single
``GRAPH`` and sent to the endpoint as form-encoded POST requests.
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import StoreError
from ..models import BNODE, Fact, Term
from ..services.http import SparqlHttpClient
from ..vocabulary import PREFIXES
from .base import Bindings, Node, TriplePattern, UpdateStatement, Variable

logger = logging.getLogger("rating_service.store.sparql")

_IRI_UNSAFE = re.compile(r'[\x00-\x20<>"{}|^`\\]')
_LOCAL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def sparql_escape_uri(value: str) -> str:
    """Render ``value`` as an IRIREF; raises :class:`StoreError` for characters SPARQL forbids."""
    if _IRI_UNSAFE.search(value):
        raise StoreError(f"IRI contains characters not allowed in SPARQL: {value!r}")
    return f"<{value}>"


def sparql_escape_string(value: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in value) + '"'


def _compact(iri: str, prefixes: Mapping[str, str]) -> Optional[str]:
    for prefix, namespace in prefixes.items():
        if iri.startswith(namespace):
            local = iri[len(namespace):]
            if _LOCAL_NAME.match(local):
                return f"{prefix}:{local}"
    return None


def render_node(node: Node, prefixes: Mapping[str, str] = PREFIXES) -> str:
    if isinstance(node, Variable):
        return str(node)
    if node.is_uri:
        return _compact(node.value, prefixes) or sparql_escape_uri(node.value)
    if node.type == BNODE:
        return f"_:{node.value}"
    text = sparql_escape_string(node.value)
    if node.lang:
        return f"{text}@{node.lang}"
    if node.datatype:
        datatype = _compact(node.datatype, prefixes) or sparql_escape_uri(node.datatype)
        return f"{text}^^{datatype}"
    return text


def render_triples(patterns: Iterable[TriplePattern | Fact], indent: str = "    ") -> str:
    lines = []
    for pattern in patterns:
        lines.append(
            f"{indent}{render_node(pattern.subject)} {render_node(pattern.predicate)} {render_node(pattern.object)} ."
        )
    return "\n".join(lines)


def _graph_block(graph: str, body: str) -> str:
    return f"GRAPH {sparql_escape_uri(graph)} {{\n{body}\n  }}"


def _prologue() -> str:
    return "\n".join(f"PREFIX {prefix}: {sparql_escape_uri(ns)}" for prefix, ns in PREFIXES.items())


def build_select(
    patterns: Sequence[TriplePattern],
    graph: str,
    *,
    limit: Optional[int] = None,
) -> str:
    """SELECT every variable appearing in ``patterns`` within ``graph``."""
    names: "OrderedDict[str, None]" = OrderedDict()
    for pattern in patterns:
        for variable in pattern.variables():
            names[variable.name] = None
    projection = " ".join(f"?{name}" for name in names) or "*"
    text = (
        f"{_prologue()}\n"
        f"SELECT {projection} WHERE {{\n"
        f"  {_graph_block(graph, render_triples(patterns))}\n"
        f"}}"
    )
    if limit is not None:
        text += f" LIMIT {int(limit)}"
    return text


def build_update(statement: UpdateStatement, graph: str) -> str:
    """Render a delete/insert pair as one request of ``;``-separated operations."""
    operations: List[str] = []
    if statement.delete:
        delete_block = _graph_block(graph, render_triples(statement.delete))
        if statement.where:
            where_block = _graph_block(graph, render_triples(statement.where))
            operations.append(f"DELETE {{\n  {delete_block}\n}}\nWHERE {{\n  {where_block}\n}}")
        else:
            operations.append(f"DELETE DATA {{\n  {delete_block}\n}}")
    if statement.insert:
        by_graph: Dict[str, List[Fact]] = OrderedDict()
        for fact in statement.insert:
            by_graph.setdefault(fact.graph or graph, []).append(fact)
        blocks = "\n  ".join(_graph_block(name, render_triples(facts)) for name, facts in by_graph.items())
        operations.append(f"INSERT DATA {{\n  {blocks}\n}}")
    return f"{_prologue()}\n" + " ;\n".join(operations)


def parse_bindings(document: Mapping) -> List[Bindings]:
    """Turn a SPARQL JSON results document into ``name -> Term`` rows."""
    try:
        rows = document["results"]["bindings"]
    except (KeyError, TypeError) as exc:
        raise StoreError(f"Malformed SPARQL results document: missing {exc}") from exc
    results: List[Bindings] = []
    for row in rows or []:
        bindings: Bindings = {}
        for name, raw in (row or {}).items():
            term = Term.from_json(raw)
            if term is not None:
                bindings[name] = term
        results.append(bindings)
    return results


class SparqlStore:
    """Store client backed by a SPARQL endpoint such as Virtuoso or mu-authorization."""

    def __init__(
        self,
        endpoint: str,
        graph: str,
        *,
        sudo: bool = False,
        client: SparqlHttpClient | None = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.endpoint = endpoint
        self.graph = graph
        self.sudo = sudo
        self.client = client or SparqlHttpClient()
        self.headers = dict(headers or {})

    def query(self, patterns: Sequence[TriplePattern], *, limit: Optional[int] = None) -> List[Bindings]:
        text = build_select(patterns, self.graph, limit=limit)
        logger.debug("SPARQL query:\n%s", text)
        return parse_bindings(self.client.post_json(self.endpoint, {"query": text}, headers=self.headers))

    def update(self, statement: UpdateStatement) -> None:
        if statement.is_empty():
            return
        text = build_update(statement, self.graph)
        logger.debug("SPARQL update:\n%s", text)
        self.client.post(self.endpoint, {"update": text}, headers=self.headers, sudo=self.sudo)
