"""Allocation domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class AllocatedDestination:
    place: str
    demand: float
    distance_km: Optional[float]
    duration: Optional[str]
    sequence: int
    allocated_supply: float
    unmet_demand: float
    efficiency_score: float

    @property
    def fill_percent(self) -> float:
        return (self.allocated_supply / self.demand) * 100 if self.demand else 0.0


@dataclass(slots=True, frozen=True)
class AllocationResult:
    source: str
    total_supply: float
    optimized_destinations: Tuple[AllocatedDestination, ...]
    remaining_supply: float
    total_round_trip_distance: float
    anomalies: Tuple[str, ...] = ()

    @property
    def total_allocated(self) -> float:
        return sum(dest.allocated_supply for dest in self.optimized_destinations)


class PriorityTier(str, Enum):
    HIGH = "High Priority"
    MEDIUM = "Medium Priority"
    LOW = "Low Priority"


@dataclass(slots=True, frozen=True)
class PriorityRecommendation:
    place: str
    tier: PriorityTier
    reason: str


@dataclass(slots=True, frozen=True)
class UnmetDemandSuggestion:
    place: str
    unmet_demand: float
    message: str


@dataclass(slots=True, frozen=True)
class LeftoverSupplySuggestion:
    quantity: float
    message: str


@dataclass(slots=True, frozen=True)
class AllocationMetrics:
    supply_coverage_percent: float
    total_demand: float
    total_allocated: float
    total_unmet: float
    unmet_suggestions: Tuple[UnmetDemandSuggestion, ...]
    leftover_suggestion: Optional[LeftoverSupplySuggestion]
