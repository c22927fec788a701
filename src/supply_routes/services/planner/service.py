"""Stateful supply route planner.

The planner owns the mutable inputs (source, total supply, destinations),
resolves distances through a :class:`DistanceProvider` and republishes a
:class:`PlanSnapshot` after every change. It runs on a single event loop:
provider calls are the only awaits, so each apply-and-recompute step is
atomic with respect to other planner operations.

Stale provider results are dropped on arrival instead of being cancelled:

* every ``set_source`` bumps a generation counter and a batch only applies
  if the generation is unchanged when it returns;
* every pending ``add_destination`` holds a token that ``remove_destination``
  invalidates, and a result measured from an origin that is no longer the
  current source is resolved again;
* a failed ``set_source`` restores the previous source, so later operations
  keep publishing against it.

A snapshot is only published when every committed destination was measured
from the current source, so consumers never see distances from one origin
mixed with another.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import Destination
from ..allocation.engine import ScoringFunction, ValidationError, allocate, proximity_efficiency, validate_request
from ..allocation.metrics import summarize
from ..allocation.priority import recommend_all
from ..distance import DistanceFetchError, DistanceProvider, DistanceResult, get_distance_provider, index_by_place
from .models import PlanSnapshot

logger = logging.getLogger(__name__)

Listener = Callable[[PlanSnapshot], None]


class UnknownDestinationError(LookupError):
    """Raised when removing a destination the planner does not hold."""


def build_plan(
    source: str,
    total_supply: float,
    destinations: Sequence[Destination],
    *,
    scoring: ScoringFunction = proximity_efficiency,
) -> PlanSnapshot:
    """Run allocation, priority classification and metrics over one input snapshot."""
    result = allocate(source, total_supply, destinations, scoring=scoring)
    return PlanSnapshot(
        source=source,
        total_supply=total_supply,
        result=result,
        recommendations=recommend_all(result),
        metrics=summarize(result),
    )


@dataclass(slots=True, eq=False)
class _PendingDestination:
    demand: float
    token: object = field(default_factory=object)


class SupplyRoutePlanner:
    def __init__(
        self,
        provider: DistanceProvider,
        source: str | None = None,
        total_supply: float | None = None,
        *,
        scoring: ScoringFunction = proximity_efficiency,
    ) -> None:
        source = (source if source is not None else settings.default_source).strip()
        if not source:
            raise ValidationError("Source must not be empty.")
        total_supply = settings.default_total_supply if total_supply is None else total_supply
        validate_request(total_supply, [])

        self._provider = provider
        self._scoring = scoring
        self._source = source
        self._total_supply = total_supply
        self._destinations: list[Destination] = []
        self._origins: dict[str, str] = {}
        self._pending: dict[str, _PendingDestination] = {}
        self._generation = 0
        self._listeners: list[Listener] = []
        self._snapshot = build_plan(source, total_supply, [], scoring=scoring)

    @property
    def source(self) -> str:
        return self._source

    @property
    def total_supply(self) -> float:
        return self._total_supply

    @property
    def destinations(self) -> tuple[Destination, ...]:
        return tuple(self._destinations)

    @property
    def pending_places(self) -> tuple[str, ...]:
        return tuple(self._pending)

    @property
    def snapshot(self) -> PlanSnapshot:
        return self._snapshot

    @property
    def is_stale(self) -> bool:
        """True while some destination was measured from an origin other than the current source."""
        return bool(self._stale_places())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every published snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _stale_places(self) -> list[str]:
        return [dest.place for dest in self._destinations if self._origins.get(dest.place) != self._source]

    def _recompute(self) -> PlanSnapshot:
        stale = self._stale_places()
        if stale:
            logger.info(
                f"Keeping previous plan: {len(stale)} destinations not yet measured from '{self._source}'"
            )
            return self._snapshot
        snapshot = build_plan(self._source, self._total_supply, self._destinations, scoring=self._scoring)
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _apply_distances(self, origin: str, results: Sequence[DistanceResult]) -> None:
        by_place = index_by_place(results)
        updated: list[Destination] = []
        for destination in self._destinations:
            match = by_place.get(destination.place)
            if match is None:
                updated.append(destination)
                continue
            updated.append(destination.with_distance(match.distance_km, match.duration_text))
            self._origins[destination.place] = origin
        self._destinations = updated

    async def _resolve_batch(self, places: list[str]) -> PlanSnapshot:
        generation = self._generation
        origin = self._source
        logger.info(f"Resolving {len(places)} destinations from '{origin}' (generation {generation})")
        results = await self._provider.resolve(origin, places)
        if generation != self._generation:
            logger.warning(f"Discarding distances from '{origin}': superseded by a newer source change")
            return self._snapshot
        self._apply_distances(origin, results)
        return self._recompute()

    async def set_source(self, source: str) -> PlanSnapshot:
        """Switch the source and re-resolve every destination in one batch.

        The previous snapshot stays published until the batch resolves. If the
        provider fails and no newer source change has happened meanwhile, the
        previous source is restored before the error propagates.
        """
        source = (source or "").strip()
        if not source:
            raise ValidationError("Source must not be empty.")
        if source == self._source and not self._stale_places():
            return self._snapshot

        previous_source, previous_generation = self._source, self._generation
        self._source = source
        self._generation += 1
        generation = self._generation
        places = [dest.place for dest in self._destinations]
        if not places:
            return self._recompute()
        try:
            return await self._resolve_batch(places)
        except DistanceFetchError:
            if self._generation == generation:
                logger.warning(f"Source change to '{source}' failed; keeping '{previous_source}'")
                self._source = previous_source
                self._generation = previous_generation
                # publish supply or removal changes deferred while the batch was in flight
                self._recompute()
            raise

    async def refresh(self) -> PlanSnapshot:
        """Re-resolve destinations measured from an origin other than the current source."""
        stale = self._stale_places()
        if not stale:
            return self._recompute()
        return await self._resolve_batch(stale)

    def set_total_supply(self, total_supply: float) -> PlanSnapshot:
        validate_request(total_supply, [])
        self._total_supply = total_supply
        return self._recompute()

    async def add_destination(self, place: str, demand: float) -> PlanSnapshot:
        """Resolve the distance for one new destination and fold it into the plan."""
        place = (place or "").strip()
        candidate = Destination(place=place, demand=demand)
        pending_destinations = [Destination(place=name, demand=entry.demand) for name, entry in self._pending.items()]
        validate_request(self._total_supply, [*self._destinations, *pending_destinations, candidate])

        pending = _PendingDestination(demand=demand)
        self._pending[place] = pending
        try:
            while True:
                origin = self._source
                results = await self._provider.resolve(origin, [place])
                if self._pending.get(place) is not pending:
                    logger.warning(f"Discarding distance for '{place}': destination was removed")
                    return self._snapshot
                if origin == self._source:
                    break
                logger.warning(
                    f"Distance for '{place}' was measured from '{origin}'; resolving again from '{self._source}'"
                )
            match = index_by_place(results).get(place)
            if match is None:
                raise DistanceFetchError(f"Distance provider returned no result for '{place}'.")
        finally:
            if self._pending.get(place) is pending:
                del self._pending[place]

        self._destinations.append(
            Destination(place=place, demand=demand, distance_km=match.distance_km, duration=match.duration_text)
        )
        self._origins[place] = origin
        logger.info(f"Added destination '{place}' ({match.distance_km:.1f} km from '{origin}')")
        return self._recompute()

    def remove_destination(self, place: str) -> PlanSnapshot:
        place = (place or "").strip()
        if self._pending.pop(place, None) is not None:
            logger.info(f"Cancelled pending destination '{place}'")
            return self._snapshot

        remaining = [dest for dest in self._destinations if dest.place != place]
        if len(remaining) == len(self._destinations):
            raise UnknownDestinationError(f"Destination '{place}' not found.")
        self._destinations = remaining
        self._origins.pop(place, None)
        logger.info(f"Removed destination '{place}'")
        return self._recompute()


@functools.lru_cache(maxsize=1)
def get_planner() -> SupplyRoutePlanner:
    """Process-wide planner used by the HTTP API."""
    return SupplyRoutePlanner(get_distance_provider())
