"""Offline distance table for the Mandya supply region."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from ...config import settings
from .base import DistanceFetchError, DistanceResult

logger = logging.getLogger(__name__)

PREDEFINED_SOURCE = "Mandya"

# Road distances from Mandya in km
PREDEFINED_DISTANCES: dict[str, float] = {
    "Bangalore": 98,
    "Mysuru": 45,
    "Hassan": 85,
    "Chikkamagaluru": 185,
    "Tumkur": 155,
    "Chamarajanagar": 90,
    "Kodagu": 135,
    "Ramanagara": 75,
}


def format_duration(minutes: float) -> str:
    """Format minutes the way distance matrix APIs do, e.g. ``1 hour 8 mins``."""
    total = max(1, round(minutes))
    hours, mins = divmod(total, 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour" if hours == 1 else f"{hours} hours")
    if mins:
        parts.append(f"{mins} min" if mins == 1 else f"{mins} mins")
    return " ".join(parts)


class PredefinedDistanceProvider:
    def __init__(
        self,
        source: str = PREDEFINED_SOURCE,
        distances: Mapping[str, float] | None = None,
        average_speed_kmh: float | None = None,
    ) -> None:
        self.source = source
        table = distances if distances is not None else PREDEFINED_DISTANCES
        self._distances = {place.casefold(): km for place, km in table.items()}
        self.average_speed_kmh = average_speed_kmh or settings.average_speed_kmh

    async def resolve(self, origin: str, destination_names: Sequence[str]) -> list[DistanceResult]:
        if origin.strip().casefold() != self.source.casefold():
            raise DistanceFetchError(f"No distance table for origin '{origin}' (only '{self.source}').")

        results: list[DistanceResult] = []
        for name in destination_names:
            distance_km = self._distances.get(name.strip().casefold())
            if distance_km is None:
                raise DistanceFetchError(f"Unknown destination '{name}' for origin '{self.source}'.")
            minutes = distance_km / self.average_speed_kmh * 60
            results.append(DistanceResult(place=name, distance_km=float(distance_km), duration_text=format_duration(minutes)))
        logger.debug(f"Resolved {len(results)} distances from the predefined table")
        return results
