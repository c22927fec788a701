"""Planner request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .allocation import AllocationPlanResponse


class SourceUpdate(BaseModel):
    source: str = Field(..., min_length=1)


class SupplyUpdate(BaseModel):
    total_supply: float = Field(..., ge=0)


class NewDestination(BaseModel):
    place: str = Field(..., min_length=1)
    demand: float = Field(..., gt=0)


class PlannerDestinationModel(BaseModel):
    place: str
    demand: float
    distance_km: Optional[float]
    duration: Optional[str]


class PlannerStateResponse(BaseModel):
    source: str
    total_supply: float
    destinations: List[PlannerDestinationModel]
    pending: List[str]
    stale: bool = Field(description="True while the published plan lags behind the current source.")
    plan: AllocationPlanResponse
