"""Summary statistics and follow-up suggestions for an allocation."""

from __future__ import annotations

from typing import Iterable, Optional

from ...models.domain import Destination
from .models import (
    AllocatedDestination,
    AllocationMetrics,
    AllocationResult,
    LeftoverSupplySuggestion,
    UnmetDemandSuggestion,
)
from .priority import format_quantity


def supply_coverage_percent(
    total_supply: float, destinations: Iterable[Destination | AllocatedDestination]
) -> float:
    """Total supply as a percentage of aggregate demand; 0 when nothing is demanded."""
    total_demand = sum(destination.demand for destination in destinations)
    if total_demand <= 0:
        return 0.0
    return (total_supply / total_demand) * 100


def unmet_suggestions(result: AllocationResult) -> tuple[UnmetDemandSuggestion, ...]:
    return tuple(
        UnmetDemandSuggestion(
            place=destination.place,
            unmet_demand=destination.unmet_demand,
            message=f"{destination.place}: Unmet demand of {format_quantity(destination.unmet_demand)}kg",
        )
        for destination in result.optimized_destinations
        if destination.unmet_demand > 0
    )


def leftover_suggestion(result: AllocationResult) -> Optional[LeftoverSupplySuggestion]:
    if result.remaining_supply <= 0:
        return None
    quantity = result.remaining_supply
    return LeftoverSupplySuggestion(
        quantity=quantity,
        message=f"Unused supply: {format_quantity(quantity)}kg could be allocated to closer destinations",
    )


def summarize(result: AllocationResult) -> AllocationMetrics:
    destinations = result.optimized_destinations
    return AllocationMetrics(
        supply_coverage_percent=supply_coverage_percent(result.total_supply, destinations),
        total_demand=sum(destination.demand for destination in destinations),
        total_allocated=result.total_allocated,
        total_unmet=sum(destination.unmet_demand for destination in destinations),
        unmet_suggestions=unmet_suggestions(result),
        leftover_suggestion=leftover_suggestion(result),
    )
