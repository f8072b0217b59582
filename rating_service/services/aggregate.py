"""Average rating computation."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, Overflow, localcontext
from typing import Iterable, List, Optional

from ..models import Term
from ..store.base import StoreClient, TriplePattern, Variable
from ..vocabulary import ABOUT, RATING

LOGGER = logging.getLogger("rating_service.aggregate")

_REVIEW = Variable("review")
_RATING = Variable("rating")

# Ratings are small numbers; anything with a larger decimal exponent is noise.
MAX_EXPONENT = 28


def parse_rating(raw: str) -> Optional[Decimal]:
    """Parse a rating literal; ``None`` for anything that is not a finite number."""
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    if value.is_zero():
        return Decimal(0)
    if abs(value.adjusted()) > MAX_EXPONENT:
        return None
    return value


def mean(values: Iterable[Decimal]) -> Optional[Decimal]:
    items = list(values)
    if not items:
        return None
    with localcontext() as ctx:
        ctx.prec = 28
        ctx.traps[Overflow] = True
        return sum(items, Decimal(0)) / Decimal(len(items))


def format_decimal(value: Decimal) -> str:
    """Canonical ``xsd:decimal`` lexical form: no exponent, at least one fractional digit."""
    text = format(value, "f")
    if "." not in text:
        return text + ".0"
    text = text.rstrip("0")
    return text + "0" if text.endswith(".") else text


class AggregateEngine:
    def __init__(self, store: StoreClient):
        self.store = store

    def ratings_for(self, target_uri: str) -> List[Decimal]:
        """Numeric ratings of every review about ``target_uri``; unparsable values are dropped."""
        rows = self.store.query(
            [
                TriplePattern(_REVIEW, Term.uri(ABOUT), Term.uri(target_uri)),
                TriplePattern(_REVIEW, Term.uri(RATING), _RATING),
            ]
        )
        values: List[Decimal] = []
        for row in rows:
            term = row.get(_RATING.name)
            if term is None:
                continue
            value = parse_rating(term.value)
            if value is not None:
                values.append(value)
        return values

    def compute_aggregate(self, target_uri: str) -> Optional[Decimal]:
        ratings = self.ratings_for(target_uri)
        avg = mean(ratings)
        LOGGER.debug("Ratings for %s: %s -> %s", target_uri, len(ratings), avg)
        return avg
