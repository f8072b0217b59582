"""Persistence of the derived average rating."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from ..models import Fact, Term
from ..store.base import StoreClient, TriplePattern, UpdateStatement, Variable
from ..vocabulary import AVERAGE_RATING, XSD_DECIMAL
from .aggregate import format_decimal

LOGGER = logging.getLogger("rating_service.writer")

_OLD = Variable("oldAvg")


def replace_average_statement(target_uri: str, value: Optional[Decimal]) -> UpdateStatement:
    """Delete every stored average of ``target_uri`` and insert ``value`` if given."""
    target = Term.uri(target_uri)
    predicate = Term.uri(AVERAGE_RATING)
    old = TriplePattern(target, predicate, _OLD)
    insert: tuple[Fact, ...] = ()
    if value is not None:
        insert = (Fact(target, predicate, Term.literal(format_decimal(value), XSD_DECIMAL)),)
    return UpdateStatement(delete=(old,), where=(old,), insert=insert)


class AggregateWriter:
    def __init__(self, store: StoreClient):
        self.store = store

    def write_aggregate(self, target_uri: str, value: Optional[Decimal]) -> None:
        self.store.update(replace_average_statement(target_uri, value))
        if value is None:
            LOGGER.info("Removed average rating of %s (no ratings left)", target_uri)
        else:
            LOGGER.info("Updated average rating of %s to %s", target_uri, format_decimal(value))
