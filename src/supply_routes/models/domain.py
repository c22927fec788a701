"""Domain models for supply destinations."""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(slots=True, frozen=True)
class Destination:
    """A delivery point requesting part of the supply.

    ``distance_km`` and ``duration`` stay ``None`` until a distance provider
    resolves them against the current source.
    """

    place: str
    demand: float
    distance_km: Optional[float] = None
    duration: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.distance_km is not None

    def with_distance(self, distance_km: float, duration: Optional[str]) -> "Destination":
        return replace(self, distance_km=distance_km, duration=duration)
