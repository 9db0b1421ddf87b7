"""RiskService with in-process collaborators: no network, no FastAPI."""
from __future__ import annotations

import asyncio
import threading

import pytest

from aquasafe.app.geo import Coordinate, InvalidCoordinateError
from aquasafe.app.proximity_service import HazardScanner
from aquasafe.app.records import DisasterEvent, Facility, Reservoir, WaterQualitySummary, WaterSource
from aquasafe.app.risk_service import Collaborators, RiskInputs, RiskService
from aquasafe.app.scoring_service import ScoringStrategy
from aquasafe.app.store import MemoryStore
from aquasafe_feeds.http import UpstreamAPIError

POINT = Coordinate(41.0, -74.0)
RESERVOIR = Reservoir("res", "Test Reservoir", 41.2, -74.0, "NY", ("NY",))
REFINERY = Facility("ref", "Test Refinery", 41.05, -74.05, "NJ", "refinery")
DISASTER = DisasterEvent(
    "d1", title="Flooding", state="NY", type="Flood", lat=41.05, lng=-74.0, disaster_number="4700"
)


def _collaborators(disasters=(), wqp=None, sources=(), calls=None):
    calls = calls if calls is not None else {}

    async def fetch_disasters():
        calls["disasters"] = calls.get("disasters", 0) + 1
        if isinstance(disasters, Exception):
            raise disasters
        return list(disasters)

    async def fetch_water_quality(point, radius_miles):
        calls["wqp"] = calls.get("wqp", 0) + 1
        if isinstance(wqp, Exception):
            raise wqp
        return wqp

    async def fetch_water_sources(point, limit):
        calls["sources"] = calls.get("sources", 0) + 1
        return list(sources)[:limit]

    return Collaborators(fetch_disasters, fetch_water_quality, fetch_water_sources)


def _service(store=None, **kwargs):
    scanner = HazardScanner([RESERVOIR], [REFINERY])
    return RiskService(store or MemoryStore(), scanner, _collaborators(**kwargs))


def test_quiet_location_scores_formula_without_coverage():
    assessment = asyncio.run(_service().assess(POINT.lat, POINT.lng))
    assert assessment.score == 92
    assert assessment.method == "formula"
    assert assessment.sources == {"epa": False, "osm": 0}
    assert assessment.unavailable == []
    assert "No known disasters within 50 km" in assessment.explanation


def test_failed_collaborators_degrade_to_empty_inputs():
    service = _service(disasters=UpstreamAPIError("fema", "down"), wqp=UpstreamAPIError("wqp", "down"))
    assessment = asyncio.run(service.assess(POINT.lat, POINT.lng))
    assert assessment.unavailable == ["disasters", "water_quality"]
    assert assessment.score == 92
    assert "reduced confidence" in assessment.explanation


def test_invalid_coordinate_raises():
    with pytest.raises(InvalidCoordinateError):
        asyncio.run(_service().assess(95.0, 0.0))


def test_each_score_records_a_training_sample():
    store = MemoryStore()
    service = _service(store)
    asyncio.run(service.assess(POINT.lat, POINT.lng))
    asyncio.run(service.assess(POINT.lat, POINT.lng))
    assert len(store.list_samples()) == 2


def test_water_quality_summary_is_cached_unless_partial():
    calls = {}
    store = MemoryStore()
    scanner = HazardScanner([RESERVOIR], [REFINERY])
    full = WaterQualitySummary(station_count=2, result_count=30, latest_year=2020)
    service = RiskService(store, scanner, _collaborators(wqp=full, calls=calls))
    asyncio.run(service.assess(POINT.lat, POINT.lng))
    second = asyncio.run(service.assess(POINT.lat, POINT.lng))
    assert calls["wqp"] == 1
    assert second.sources["epa"] is True
    assert second.score == 100

    calls.clear()
    partial = WaterQualitySummary(station_count=2, partial=True)
    service = RiskService(MemoryStore(), scanner, _collaborators(wqp=partial, calls=calls))
    asyncio.run(service.assess(POINT.lat, POINT.lng))
    text = asyncio.run(service.assess(POINT.lat, POINT.lng)).explanation
    assert calls["wqp"] == 2
    assert "(Partial WQP data)" in text


def test_hazard_context_scores_reservoir_and_facilities():
    calls = {}
    service = RiskService(
        MemoryStore(),
        HazardScanner([RESERVOIR], [REFINERY]),
        _collaborators(disasters=[DISASTER], calls=calls),
    )
    assessment = asyncio.run(service.assess(POINT.lat, POINT.lng, ScoringStrategy.HAZARD_CONTEXT))
    assert assessment.strategy is ScoringStrategy.HAZARD_CONTEXT
    assert assessment.source_reservoir_in_disaster_zone is True
    assert [f.entity.id for f in assessment.facilities_at_risk] == ["ref"]
    assert assessment.score == 100 - 25 - 15 - 10
    assert "Your water source (Test Reservoir) is in a disaster zone" in assessment.explanation
    assert "wqp" not in calls
    assert "sources" not in calls


def test_proximity_strategy_uses_water_points():
    tap = WaterSource("1", POINT.lat, POINT.lng, "Tap", "drinking_water", "yes")
    calls = {}
    service = RiskService(
        MemoryStore(),
        HazardScanner([RESERVOIR], [REFINERY]),
        _collaborators(sources=[tap], calls=calls),
    )
    assessment = asyncio.run(service.assess(POINT.lat, POINT.lng, ScoringStrategy.PROXIMITY))
    assert assessment.score == 100
    assert assessment.sources["osm"] == 1
    assert "Closest water points: 1 marked potable." in assessment.explanation
    assert "wqp" not in calls


def test_assess_inputs_is_pure_apart_from_sample():
    service = _service()
    inputs = RiskInputs(disasters=[DISASTER, DISASTER])
    result = service.assess_inputs(POINT, inputs)
    assert len(result.nearby_disasters) == 1
    assert result.nearby_disasters[0].count == 2
    assert result.features["disaster_count"] == 1


def test_train_delegates_to_model_service():
    result = _service().train(10)
    assert not result.ok
    assert result.sample_count == 0


def test_water_source_score_uses_nearest_sources_regardless_of_feed_order():
    rivers = [
        WaterSource(f"r{i}", POINT.lat + 0.1 * (i + 1), POINT.lng, "River", "river") for i in range(10)
    ]
    taps = [WaterSource(f"t{i}", POINT.lat, POINT.lng, "Tap", "drinking_water", "yes") for i in range(2)]
    service = _service(sources=rivers + taps)
    assessment = asyncio.run(service.assess(POINT.lat, POINT.lng))
    assert assessment.features["water_source_score"] == (2 * 100 + 8 * 20) / 10
    assert "Nearby water sources: 8 river, 2 marked potable." in assessment.explanation


def test_measured_characteristics_survive_the_cache():
    calls = {}
    summary = WaterQualitySummary(
        station_count=2, result_count=30, latest_year=2020, characteristic_names=("pH", "Lead")
    )
    service = RiskService(
        MemoryStore(), HazardScanner([RESERVOIR], [REFINERY]), _collaborators(wqp=summary, calls=calls)
    )
    asyncio.run(service.assess(POINT.lat, POINT.lng))
    cached = asyncio.run(service.assess(POINT.lat, POINT.lng))
    assert calls["wqp"] == 1
    assert "Measured: pH, Lead." in cached.explanation


def test_store_writes_run_off_the_event_loop_thread():
    store = MemoryStore()
    threads = []
    original = store.append_sample

    def record_thread(sample):
        threads.append(threading.get_ident())
        original(sample)

    store.append_sample = record_thread
    asyncio.run(_service(store).assess(POINT.lat, POINT.lng))
    assert threads and threads[0] != threading.get_ident()
