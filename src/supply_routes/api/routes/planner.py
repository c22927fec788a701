"""Endpoints for the in-memory supply route planner."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.allocation import AllocationPlanResponse
from ...schemas.planner import (
    NewDestination,
    PlannerDestinationModel,
    PlannerStateResponse,
    SourceUpdate,
    SupplyUpdate,
)
from ...services.allocation.engine import ValidationError
from ...services.distance import DistanceFetchError
from ...services.outputs.plan_formatter import plan_to_json
from ...services.planner.service import SupplyRoutePlanner, UnknownDestinationError, get_planner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planner", tags=["planner"])


def _state_response(planner: SupplyRoutePlanner) -> PlannerStateResponse:
    return PlannerStateResponse(
        source=planner.source,
        total_supply=planner.total_supply,
        destinations=[
            PlannerDestinationModel(
                place=destination.place,
                demand=destination.demand,
                distance_km=destination.distance_km,
                duration=destination.duration,
            )
            for destination in planner.destinations
        ],
        pending=list(planner.pending_places),
        stale=planner.is_stale,
        plan=AllocationPlanResponse.model_validate(plan_to_json(planner.snapshot)),
    )


def _distance_error(exc: DistanceFetchError) -> HTTPException:
    logger.error(f"Distance lookup failed: {exc.reason}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.reason)


@router.get("", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def get_state() -> PlannerStateResponse:
    return _state_response(get_planner())


@router.put("/source", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def update_source(payload: SourceUpdate) -> PlannerStateResponse:
    planner = get_planner()
    try:
        await planner.set_source(payload.source)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DistanceFetchError as exc:
        raise _distance_error(exc) from exc
    return _state_response(planner)


@router.put("/supply", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def update_supply(payload: SupplyUpdate) -> PlannerStateResponse:
    planner = get_planner()
    try:
        planner.set_total_supply(payload.total_supply)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _state_response(planner)


@router.post("/destinations", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def add_destination(payload: NewDestination) -> PlannerStateResponse:
    planner = get_planner()
    try:
        await planner.add_destination(payload.place, payload.demand)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DistanceFetchError as exc:
        raise _distance_error(exc) from exc
    return _state_response(planner)


@router.delete("/destinations/{place}", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def remove_destination(place: str) -> PlannerStateResponse:
    planner = get_planner()
    try:
        planner.remove_destination(place)
    except UnknownDestinationError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _state_response(planner)


@router.post("/refresh", response_model=PlannerStateResponse, status_code=status.HTTP_200_OK)
async def refresh() -> PlannerStateResponse:
    planner = get_planner()
    try:
        await planner.refresh()
    except DistanceFetchError as exc:
        raise _distance_error(exc) from exc
    return _state_response(planner)
