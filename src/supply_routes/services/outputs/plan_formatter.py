"""Serializers for allocation plans."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict

from ..planner.models import PlanSnapshot


def plan_to_json(snapshot: PlanSnapshot) -> dict:
    result = snapshot.result
    metrics = snapshot.metrics
    leftover = metrics.leftover_suggestion
    return {
        "source": snapshot.source,
        "total_supply": snapshot.total_supply,
        "remaining_supply": result.remaining_supply,
        "total_round_trip_distance_km": result.total_round_trip_distance,
        "anomalies": list(result.anomalies),
        "destinations": [
            {**asdict(destination), "fill_percent": destination.fill_percent}
            for destination in result.optimized_destinations
        ],
        "recommendations": [
            {"place": rec.place, "priority": rec.tier.value, "reason": rec.reason}
            for rec in snapshot.recommendations
        ],
        "metrics": {
            "supply_coverage_percent": metrics.supply_coverage_percent,
            "total_demand": metrics.total_demand,
            "total_allocated": metrics.total_allocated,
            "total_unmet": metrics.total_unmet,
            "unmet_suggestions": [asdict(item) for item in metrics.unmet_suggestions],
            "leftover_suggestion": asdict(leftover) if leftover else None,
        },
    }


def plan_to_csv(snapshot: PlanSnapshot) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "place",
        "demand",
        "distance_km",
        "duration",
        "allocated_supply",
        "unmet_demand",
        "efficiency_score",
        "priority",
    ]
    tiers = {rec.place: rec.tier.value for rec in snapshot.recommendations}
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for destination in snapshot.result.optimized_destinations:
        writer.writerow(
            {
                "sequence": destination.sequence,
                "place": destination.place,
                "demand": destination.demand,
                "distance_km": destination.distance_km,
                "duration": destination.duration,
                "allocated_supply": destination.allocated_supply,
                "unmet_demand": destination.unmet_demand,
                "efficiency_score": round(destination.efficiency_score, 4),
                "priority": tiers.get(destination.place, ""),
            }
        )
    return buffer.getvalue()
