"""Distance provider contract shared by all backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class DistanceFetchError(RuntimeError):
    """Raised when distances cannot be resolved (network, status or payload problems)."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(slots=True, frozen=True)
class DistanceResult:
    place: str
    distance_km: float
    duration_text: str


class DistanceProvider(Protocol):
    async def resolve(self, origin: str, destination_names: Sequence[str]) -> list[DistanceResult]:
        """Resolve one result per name, in the same order as ``destination_names``."""
        ...


def index_by_place(results: Sequence[DistanceResult]) -> dict[str, DistanceResult]:
    return {result.place: result for result in results}
