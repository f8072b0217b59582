"""Reactive average-rating service driven by triple store deltas."""

from .app import create_app
from .bootstrap import build_context
from .engine import BatchReport, RatingPipeline, suppressed_removals
from .models import DeltaBatch, Fact, Term, parse_delta

__all__ = [
    "create_app",
    "build_context",
    "BatchReport",
    "RatingPipeline",
    "suppressed_removals",
    "DeltaBatch",
    "Fact",
    "Term",
    "parse_delta",
]
