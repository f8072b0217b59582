"""Builders for facts and delta payloads used across the test-suite."""

from __future__ import annotations

from typing import Any

from rating_service.models import Fact, Term
from rating_service.vocabulary import ABOUT, AVERAGE_RATING, RATING, XSD_DECIMAL

BOOK_A = "http://example.org/books/a"
BOOK_B = "http://example.org/books/b"
BOOK_C = "http://example.org/books/c"
BOOK_D = "http://example.org/books/d"
BOOK_E = "http://example.org/books/e"


def review(name: str) -> str:
    return f"http://example.org/reviews/{name}"


def about(review_uri: str, target: str) -> Fact:
    return Fact(Term.uri(review_uri), Term.uri(ABOUT), Term.uri(target))


def rating(review_uri: str, value: str) -> Fact:
    return Fact(Term.uri(review_uri), Term.uri(RATING), Term.literal(value))


def average(target: str, value: str) -> Fact:
    return Fact(Term.uri(target), Term.uri(AVERAGE_RATING), Term.literal(value, XSD_DECIMAL))


def averages(store, target: str) -> list[str]:
    return [term.value for term in store.objects(Term.uri(target), Term.uri(AVERAGE_RATING))]


def term_json(term: Term) -> dict[str, str]:
    data = {"type": term.type, "value": term.value}
    if term.datatype:
        data["datatype"] = term.datatype
    if term.lang:
        data["xml:lang"] = term.lang
    return data


def fact_json(fact: Fact) -> dict[str, Any]:
    data: dict[str, Any] = {
        "subject": term_json(fact.subject),
        "predicate": term_json(fact.predicate),
        "object": term_json(fact.object),
    }
    if fact.graph:
        data["graph"] = term_json(Term.uri(fact.graph))
    return data


def changeset(inserts=(), deletes=()) -> dict[str, Any]:
    return {
        "inserts": [fact_json(fact) for fact in inserts],
        "deletes": [fact_json(fact) for fact in deletes],
    }
