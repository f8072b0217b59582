"""Store client contract shared by the SPARQL and in-memory backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Union

from ..models import Fact, Term


@dataclass(frozen=True, slots=True)
class Variable:
    """Query variable, rendered as ``?name``."""

    name: str

    def __str__(self) -> str:
        return f"?{self.name}"


Node = Union[Term, Variable]
Bindings = Dict[str, Term]


@dataclass(frozen=True, slots=True)
class TriplePattern:
    subject: Node
    predicate: Node
    object: Node

    def variables(self) -> List[Variable]:
        return [node for node in (self.subject, self.predicate, self.object) if isinstance(node, Variable)]


@dataclass(frozen=True, slots=True)
class UpdateStatement:
    """Delete/insert executed as one operation.

    ``delete`` patterns are instantiated with every solution of ``where``
    and removed; ``insert`` facts are added afterwards.
    """

    delete: tuple[TriplePattern, ...] = ()
    where: tuple[TriplePattern, ...] = ()
    insert: tuple[Fact, ...] = ()

    def is_empty(self) -> bool:
        return not (self.delete or self.insert)


class StoreClient(Protocol):
    """Read/write capability over one graph of the triple store."""

    graph: str

    def query(self, patterns: Sequence[TriplePattern], *, limit: Optional[int] = None) -> List[Bindings]:
        ...

    def update(self, statement: UpdateStatement) -> None:
        ...
