"""Nearest-first supply allocation.

Destinations are served in ascending order of distance from the source, each
receiving ``min(demand, remaining supply)`` until the supply runs out. The
ordering is a stable sort, so destinations at equal distance keep the order in
which they were supplied. This is a proximity heuristic: it does not minimise
unmet demand or maximise total efficiency, and the priority tiers shown to
users assume exactly this ordering.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

from ...models.domain import Destination
from .models import AllocatedDestination, AllocationResult

logger = logging.getLogger(__name__)

ScoringFunction = Callable[[float, float], float]


class ValidationError(ValueError):
    """Raised when allocation inputs violate their constraints."""


def proximity_efficiency(allocated_supply: float, distance_km: float) -> float:
    """Supply delivered per kilometre, scaled by 100."""
    return (allocated_supply / distance_km) * 100


def _require_finite(value: object, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number, got {value!r}.")


def validate_request(total_supply: float, destinations: Sequence[Destination]) -> None:
    _require_finite(total_supply, "total_supply")
    if total_supply < 0:
        raise ValidationError(f"total_supply must be >= 0, got {total_supply}.")

    seen: set[str] = set()
    for destination in destinations:
        place = (destination.place or "").strip()
        if not place:
            raise ValidationError("Destination place must not be empty.")
        if place in seen:
            raise ValidationError(f"Duplicate destination '{place}'.")
        seen.add(place)

        _require_finite(destination.demand, f"Demand for '{place}'")
        if destination.demand <= 0:
            raise ValidationError(f"Demand for '{place}' must be > 0, got {destination.demand}.")
        if destination.distance_km is not None:
            _require_finite(destination.distance_km, f"Distance for '{place}'")
            if destination.distance_km < 0:
                raise ValidationError(f"Distance for '{place}' must be >= 0, got {destination.distance_km}.")


def _sort_key(destination: Destination) -> float:
    return destination.distance_km or 0.0


def allocate(
    source: str,
    total_supply: float,
    destinations: Sequence[Destination],
    *,
    scoring: ScoringFunction = proximity_efficiency,
) -> AllocationResult:
    """Allocate ``total_supply`` across ``destinations`` nearest first.

    Destinations are expected to carry a resolved distance. A zero or missing
    distance is treated as 0 km: it sorts first, contributes nothing to the
    round trip and scores 0 instead of being passed to ``scoring``. Such
    places are reported in ``AllocationResult.anomalies``.

    Raises:
        ValidationError: negative or non-finite supply, non-positive demand,
            empty or duplicate place names, or a negative distance.
    """
    validate_request(total_supply, destinations)

    ordered = sorted(destinations, key=_sort_key)
    remaining = total_supply
    optimized: list[AllocatedDestination] = []
    anomalies: list[str] = []

    for sequence, destination in enumerate(ordered, start=1):
        allocated_supply = min(destination.demand, remaining)
        remaining -= allocated_supply

        if destination.distance_km:
            score = scoring(allocated_supply, destination.distance_km)
        else:
            score = 0.0
            anomalies.append(destination.place)
            logger.warning(
                f"Destination '{destination.place}' has zero or unresolved distance from '{source}'; "
                "efficiency score set to 0"
            )

        optimized.append(
            AllocatedDestination(
                place=destination.place,
                demand=destination.demand,
                distance_km=destination.distance_km,
                duration=destination.duration,
                sequence=sequence,
                allocated_supply=allocated_supply,
                unmet_demand=destination.demand - allocated_supply,
                efficiency_score=score,
            )
        )

    total_round_trip = sum(_sort_key(destination) * 2 for destination in ordered)

    logger.debug(
        f"Allocated {total_supply - remaining} of {total_supply} from '{source}' "
        f"across {len(optimized)} destinations"
    )
    return AllocationResult(
        source=source,
        total_supply=total_supply,
        optimized_destinations=tuple(optimized),
        remaining_supply=remaining,
        total_round_trip_distance=total_round_trip,
        anomalies=tuple(anomalies),
    )
