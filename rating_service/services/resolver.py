"""Review -> target lookups."""

from __future__ import annotations

import logging
from typing import Optional

from ..models import Term
from ..store.base import StoreClient, TriplePattern, Variable
from ..vocabulary import ABOUT

LOGGER = logging.getLogger("rating_service.resolver")

_TARGET = Variable("target")


class EntityResolver:
    def __init__(self, store: StoreClient):
        self.store = store

    def resolve_target(self, review_uri: str) -> Optional[str]:
        """Return the entity ``review_uri`` is about, or ``None``.

        A review is expected to be about a single entity; if the store holds
        several associations the first one returned wins.
        """
        pattern = TriplePattern(Term.uri(review_uri), Term.uri(ABOUT), _TARGET)
        rows = self.store.query([pattern], limit=1)
        for row in rows:
            target = row.get(_TARGET.name)
            if target is not None:
                return target.value
        LOGGER.debug("Review %s is not associated with any target", review_uri)
        return None
