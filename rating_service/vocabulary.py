"""Relation identifiers watched and written by the rating service."""

from __future__ import annotations

SCHEMA = "http://schema.org/"
XSD = "http://www.w3.org/2001/XMLSchema#"

RATING = SCHEMA + "reviewRating"
ABOUT = SCHEMA + "about"
AVERAGE_RATING = SCHEMA + "averageRating"

XSD_DECIMAL = XSD + "decimal"

DEFAULT_GRAPH = "http://mu.semte.ch/graphs/public"

PREFIXES: dict[str, str] = {
    "schema": SCHEMA,
    "xsd": XSD,
}
