"""Allocation service helpers."""

from .engine import ValidationError, allocate, proximity_efficiency, validate_request
from .metrics import leftover_suggestion, summarize, supply_coverage_percent, unmet_suggestions
from .priority import classify, recommend, recommend_all

__all__ = [
    "ValidationError",
    "allocate",
    "proximity_efficiency",
    "validate_request",
    "classify",
    "recommend",
    "recommend_all",
    "supply_coverage_percent",
    "unmet_suggestions",
    "leftover_suggestion",
    "summarize",
]
