"""Stateless allocation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Response, status

from ...models.domain import Destination
from ...schemas.allocation import AllocationPlanResponse, AllocationRequestModel
from ...services.allocation.engine import ValidationError, validate_request
from ...services.distance import DistanceFetchError, get_distance_provider, index_by_place
from ...services.outputs.plan_formatter import plan_to_csv, plan_to_json
from ...services.planner.models import PlanSnapshot
from ...services.planner.service import build_plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/allocation", tags=["allocation"])


async def compute_plan(payload: AllocationRequestModel) -> PlanSnapshot:
    """Resolve missing distances in one batch, then allocate."""
    source = payload.source.strip()
    if not source:
        raise ValidationError("Source must not be empty.")
    destinations = [
        Destination(place=item.place, demand=item.demand, distance_km=item.distance_km, duration=item.duration)
        for item in payload.destinations
    ]
    validate_request(payload.total_supply, destinations)

    missing = [destination.place for destination in destinations if not destination.is_resolved]
    if missing:
        provider = get_distance_provider()
        resolved = index_by_place(await provider.resolve(source, missing))
        unresolved = [place for place in missing if place not in resolved]
        if unresolved:
            raise DistanceFetchError(f"Distance provider returned no result for: {', '.join(unresolved)}.")
        destinations = [
            destination
            if destination.is_resolved
            else destination.with_distance(resolved[destination.place].distance_km, resolved[destination.place].duration_text)
            for destination in destinations
        ]
    return build_plan(source, payload.total_supply, destinations)


@router.post("/compute", response_model=AllocationPlanResponse, status_code=status.HTTP_200_OK)
async def compute(payload: AllocationRequestModel) -> AllocationPlanResponse:
    try:
        snapshot = await compute_plan(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DistanceFetchError as exc:
        logger.error(f"Distance lookup failed for source '{payload.source}': {exc.reason}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.reason) from exc
    return AllocationPlanResponse.model_validate(plan_to_json(snapshot))


@router.post("/export", status_code=status.HTTP_200_OK)
async def export(payload: AllocationRequestModel) -> Response:
    """Return the computed plan as CSV, one row per destination in delivery order."""
    try:
        snapshot = await compute_plan(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DistanceFetchError as exc:
        logger.error(f"Distance lookup failed for source '{payload.source}': {exc.reason}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.reason) from exc
    return Response(
        content=plan_to_csv(snapshot),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="allocation_plan.csv"'},
    )
