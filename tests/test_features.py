from __future__ import annotations

from datetime import date

import pytest

from aquasafe.app.features import (
    FEATURE_NAMES,
    build_features,
    disaster_penalty,
    water_source_mix,
    water_source_score,
)
from aquasafe.app.geo import Coordinate
from aquasafe.app.records import DisasterEvent, WaterQualitySummary, WaterSource

POINT = Coordinate(40.0, -75.0)
KM_PER_DEGREE_LAT = 6371 * 3.141592653589793 / 180


def _disaster_km_north(km, id="d1", number="4001"):
    return DisasterEvent(
        id=id,
        title="Flood",
        state="PA",
        type="Flood",
        lat=POINT.lat + km / KM_PER_DEGREE_LAT,
        lng=POINT.lng,
        disaster_number=number,
    )


def test_disaster_ten_km_away_costs_twenty():
    count, penalty = disaster_penalty(POINT, [_disaster_km_north(10)])
    assert count == 1
    assert penalty == pytest.approx(20.0, abs=1e-6)


def test_duplicate_rows_of_one_disaster_are_penalized_once():
    rows = [_disaster_km_north(10, id="a"), _disaster_km_north(30, id="b")]
    count, penalty = disaster_penalty(POINT, rows)
    assert count == 1
    assert penalty == pytest.approx(20.0, abs=1e-6)


def test_disaster_penalty_is_capped():
    rows = [_disaster_km_north(1, id=str(i), number=str(i)) for i in range(5)]
    count, penalty = disaster_penalty(POINT, rows)
    assert count == 5
    assert penalty == 60.0


def test_disaster_penalty_decreases_with_distance():
    near = disaster_penalty(POINT, [_disaster_km_north(5)])[1]
    far = disaster_penalty(POINT, [_disaster_km_north(45)])[1]
    outside = disaster_penalty(POINT, [_disaster_km_north(60)])[1]
    assert near > far > outside == 0


def test_water_source_score_neutral_when_empty():
    assert water_source_score([]) == 50


def test_water_source_score_mean_of_type_values():
    sources = [
        WaterSource("1", 40, -75, "tap", "drinking_water"),
        WaterSource("2", 40, -75, "well", "well"),
        WaterSource("3", 40, -75, "lake", "reservoir"),
    ]
    assert water_source_score(sources) == 58


def test_potable_hint_overrides_type():
    assert water_source_score([WaterSource("1", 40, -75, "river", "river", "yes")]) == 100


def test_water_source_mix_labels():
    sources = [
        WaterSource("1", 40, -75, "a", "drinking_water"),
        WaterSource("2", 40, -75, "b", "drinking_water"),
        WaterSource("3", 40, -75, "c", "spring", "yes"),
    ]
    assert water_source_mix(sources) == {"drinking water": 2, "marked potable": 1}


def test_build_features_vector_order_and_scaling():
    wqp = WaterQualitySummary(station_count=3, result_count=2500, latest_year=2025)
    vector, details = build_features(
        POINT, [_disaster_km_north(10)], wqp, 80, today=date(2026, 3, 1)
    )
    assert len(vector) == len(FEATURE_NAMES)
    assert vector[0] == 1.0
    assert vector[1] == 1.0
    assert vector[2] == pytest.approx(20.0, abs=1e-6)
    assert vector[3] == 3.0
    assert vector[4] == 1.0
    assert vector[5] == 1.0
    assert vector[6] == 0.8
    assert details.has_recent_results == 1


def test_build_features_without_water_quality_summary():
    vector, details = build_features(POINT, [], None, today=date(2026, 3, 1))
    assert vector == [1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.5]
    assert details.wqp_station_count == 0
    assert details.has_recent_results == 0


def test_old_results_are_not_recent():
    wqp = WaterQualitySummary(station_count=1, result_count=10, latest_year=2020)
    _, details = build_features(POINT, [], wqp, today=date(2026, 3, 1))
    assert details.has_recent_results == 0
