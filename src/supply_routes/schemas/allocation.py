"""Allocation request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DestinationInput(BaseModel):
    place: str = Field(..., min_length=1, description="Destination name, unique within a request.")
    demand: float = Field(..., gt=0, description="Requested quantity (kg).")
    distance_km: Optional[float] = Field(
        default=None,
        ge=0,
        description="Known distance from the source. Missing distances are resolved by the distance provider.",
    )
    duration: Optional[str] = None

    @field_validator("place")
    @classmethod
    def strip_place(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("place must not be blank")
        return value


class AllocationRequestModel(BaseModel):
    source: str = Field(..., min_length=1)
    total_supply: float = Field(..., ge=0, description="Total supply available at the source (kg).")
    destinations: List[DestinationInput] = Field(default_factory=list)


class AllocatedDestinationModel(BaseModel):
    place: str
    demand: float
    distance_km: Optional[float]
    duration: Optional[str]
    sequence: int
    allocated_supply: float
    unmet_demand: float
    efficiency_score: float
    fill_percent: float


class RecommendationModel(BaseModel):
    place: str
    priority: str
    reason: str


class UnmetDemandModel(BaseModel):
    place: str
    unmet_demand: float
    message: str


class LeftoverSupplyModel(BaseModel):
    quantity: float
    message: str


class AllocationMetricsModel(BaseModel):
    supply_coverage_percent: float
    total_demand: float
    total_allocated: float
    total_unmet: float
    unmet_suggestions: List[UnmetDemandModel]
    leftover_suggestion: Optional[LeftoverSupplyModel]


class AllocationPlanResponse(BaseModel):
    source: str
    total_supply: float
    remaining_supply: float
    total_round_trip_distance_km: float
    anomalies: List[str]
    destinations: List[AllocatedDestinationModel]
    recommendations: List[RecommendationModel]
    metrics: AllocationMetricsModel
