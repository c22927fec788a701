"""Planner domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..allocation.models import AllocationMetrics, AllocationResult, PriorityRecommendation


@dataclass(slots=True, frozen=True)
class PlanSnapshot:
    source: str
    total_supply: float
    result: AllocationResult
    recommendations: Tuple[PriorityRecommendation, ...]
    metrics: AllocationMetrics
