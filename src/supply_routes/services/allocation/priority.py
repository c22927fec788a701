"""Distance-based delivery priority tiers."""

from __future__ import annotations

from typing import Optional

from .models import AllocatedDestination, AllocationResult, PriorityRecommendation, PriorityTier

HIGH_PRIORITY_MAX_KM = 100.0
MEDIUM_PRIORITY_MAX_KM = 150.0


def format_quantity(value: float) -> str:
    """Render a quantity without a trailing ``.0`` for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def classify(distance_km: Optional[float]) -> PriorityTier:
    if distance_km is None:
        return PriorityTier.LOW
    if distance_km < HIGH_PRIORITY_MAX_KM:
        return PriorityTier.HIGH
    if distance_km < MEDIUM_PRIORITY_MAX_KM:
        return PriorityTier.MEDIUM
    return PriorityTier.LOW


def recommend(destination: AllocatedDestination) -> PriorityRecommendation:
    demand = format_quantity(destination.demand)
    if destination.distance_km is None:
        reason = f"distance unresolved, {demand}kg demand"
    else:
        reason = f"{destination.distance_km:.1f}km distance, {demand}kg demand"
    return PriorityRecommendation(
        place=destination.place,
        tier=classify(destination.distance_km),
        reason=reason,
    )


def recommend_all(result: AllocationResult) -> tuple[PriorityRecommendation, ...]:
    return tuple(recommend(destination) for destination in result.optimized_destinations)
