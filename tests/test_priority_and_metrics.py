import pytest

from supply_routes.models.domain import Destination
from supply_routes.services.allocation.engine import allocate
from supply_routes.services.allocation.metrics import (
    leftover_suggestion,
    summarize,
    supply_coverage_percent,
    unmet_suggestions,
)
from supply_routes.services.allocation.models import PriorityTier
from supply_routes.services.allocation.priority import classify, format_quantity, recommend_all


def _karnataka() -> list[Destination]:
    return [
        Destination(place="Bangalore", demand=2000, distance_km=98),
        Destination(place="Mysuru", demand=1500, distance_km=45),
        Destination(place="Hassan", demand=800, distance_km=85),
        Destination(place="Chikkamagaluru", demand=700, distance_km=185),
    ]


@pytest.mark.parametrize(
    "distance_km, tier",
    [
        (0, PriorityTier.HIGH),
        (99.9, PriorityTier.HIGH),
        (100, PriorityTier.MEDIUM),
        (149.9, PriorityTier.MEDIUM),
        (150, PriorityTier.LOW),
        (185, PriorityTier.LOW),
        (None, PriorityTier.LOW),
    ],
)
def test_classify_thresholds(distance_km, tier):
    assert classify(distance_km) is tier


def test_recommendations_follow_delivery_sequence():
    result = allocate("Mandya", 5000, _karnataka())

    recommendations = recommend_all(result)

    assert [rec.place for rec in recommendations] == ["Mysuru", "Hassan", "Bangalore", "Chikkamagaluru"]
    assert [rec.tier.value for rec in recommendations] == [
        "High Priority",
        "High Priority",
        "High Priority",
        "Low Priority",
    ]
    assert recommendations[2].reason == "98.0km distance, 2000kg demand"


def test_format_quantity():
    assert format_quantity(2000.0) == "2000"
    assert format_quantity(12.5) == "12.5"
    assert format_quantity(1 / 3) == "0.33"


def test_coverage_for_scenarios():
    destinations = _karnataka()

    assert supply_coverage_percent(5000, destinations) == pytest.approx(100.0)
    assert supply_coverage_percent(1000, destinations) == pytest.approx(20.0)


def test_coverage_without_destinations_is_zero():
    assert supply_coverage_percent(5000, []) == 0.0


def test_coverage_grows_with_supply():
    destinations = _karnataka()
    values = [supply_coverage_percent(supply, destinations) for supply in (0, 100, 1000, 5000, 9000)]

    assert values == sorted(values)


def test_unmet_suggestions_list_short_destinations():
    result = allocate("Mandya", 1000, _karnataka())

    suggestions = unmet_suggestions(result)

    assert [(item.place, item.unmet_demand) for item in suggestions] == [
        ("Mysuru", 500),
        ("Hassan", 800),
        ("Bangalore", 2000),
        ("Chikkamagaluru", 700),
    ]
    assert suggestions[0].message == "Mysuru: Unmet demand of 500kg"
    assert leftover_suggestion(result) is None


def test_leftover_suggestion_only_with_remaining_supply():
    surplus = allocate("Mandya", 5600, _karnataka())
    exact = allocate("Mandya", 5000, _karnataka())

    leftover = leftover_suggestion(surplus)

    assert leftover is not None
    assert leftover.quantity == 600
    assert leftover.message == "Unused supply: 600kg could be allocated to closer destinations"
    assert leftover_suggestion(exact) is None
    assert unmet_suggestions(surplus) == ()


def test_summarize_bundles_totals():
    metrics = summarize(allocate("Mandya", 1000, _karnataka()))

    assert metrics.total_demand == 5000
    assert metrics.total_allocated == 1000
    assert metrics.total_unmet == 4000
    assert metrics.supply_coverage_percent == pytest.approx(20.0)
    assert len(metrics.unmet_suggestions) == 4
    assert metrics.leftover_suggestion is None
