"""Service layer of the rating service."""

from .aggregate import AggregateEngine, format_decimal, mean, parse_rating
from .classifier import classify
from .http import HttpSettings, SparqlHttpClient
from .logging import JsonFormatter, SensitiveDataFilter, configure_logging
from .resolver import EntityResolver
from .writer import AggregateWriter, replace_average_statement

__all__ = [
    "AggregateEngine",
    "format_decimal",
    "mean",
    "parse_rating",
    "classify",
    "HttpSettings",
    "SparqlHttpClient",
    "JsonFormatter",
    "SensitiveDataFilter",
    "configure_logging",
    "EntityResolver",
    "AggregateWriter",
    "replace_average_statement",
]
