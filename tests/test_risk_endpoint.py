"""Tests for /api/risk and /api/risk/train.

Uses FastAPI TestClient with in-process collaborators so no real network
calls are made.
"""
from __future__ import annotations

import importlib
import random

import pytest
from fastapi.testclient import TestClient

import aquasafe.app.config as config
from aquasafe.app.records import DisasterEvent, TrainingSample, WaterSource
from aquasafe.app.risk_service import Collaborators, RiskService
from aquasafe.app.store import MemoryStore
from aquasafe_feeds.http import UpstreamAPIError

NYC = {"lat": 40.7128, "lng": -74.006}

FLOOD = DisasterEvent(
    "row-1",
    title="Severe Storms and Flooding",
    state="NY",
    type="Flood",
    lat=40.75,
    lng=-74.0,
    disaster_number="4615",
)


def _collaborators(disasters=(), fail_disasters=False):
    async def fetch_disasters():
        if fail_disasters:
            raise UpstreamAPIError("fema", "HTTP 503: unavailable")
        return list(disasters)

    async def fetch_water_quality(point, radius_miles):
        return None

    async def fetch_water_sources(point, limit):
        return [WaterSource("node-1", 40.713, -74.0061, "Fountain", "fountain")]

    return Collaborators(fetch_disasters, fetch_water_quality, fetch_water_sources)


@pytest.fixture()
def app_module(monkeypatch):
    import aquasafe.app.main as main_module

    importlib.reload(main_module)
    store = MemoryStore()
    monkeypatch.setattr(main_module, "store", store)
    monkeypatch.setattr(
        main_module,
        "risk_service",
        RiskService(store, main_module.scanner, _collaborators([FLOOD, FLOOD])),
    )
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")
    monkeypatch.setattr(config, "MIN_TRAINING_SAMPLES", 10)
    return main_module


@pytest.fixture()
def client(app_module):
    return TestClient(app_module.app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_risk_returns_score_and_explanation(client):
    resp = client.get("/api/risk", params=NYC)
    assert resp.status_code == 200
    payload = resp.json()
    assert 0 <= payload["score"] <= 100
    assert payload["strategy"] == "water_quality"
    assert payload["scoring_method"] == "formula"
    assert payload["sources"] == {"epa": False, "osm": 1}
    assert payload["features"]["disaster_count"] == 1
    assert payload["nearby_disasters"][0]["count"] == 2
    assert "Severe Storms and Flooding (NY) (2 declarations)" in payload["explanation"]
    assert payload["ai_summary"] is None


def test_risk_reports_source_reservoir(client):
    payload = client.get("/api/risk", params=NYC).json()
    assert payload["reservoir"]["id"] == "croton"
    assert payload["reservoir"]["serves"] == ["NY"]


def test_risk_hazard_context_strategy(client):
    resp = client.get("/api/risk", params={**NYC, "strategy": "hazard_context"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["strategy"] == "hazard_context"
    assert payload["score"] <= 75
    assert payload["features"] == {}


def test_risk_rejects_unknown_strategy(client):
    resp = client.get("/api/risk", params={**NYC, "strategy": "vibes"})
    assert resp.status_code == 422


def test_risk_rejects_out_of_range_lat(client):
    assert client.get("/api/risk", params={"lat": 120, "lng": 0}).status_code == 422


def test_risk_rejects_missing_params(client):
    assert client.get("/api/risk").status_code == 422


def test_risk_survives_failed_disaster_feed(app_module, client, monkeypatch):
    monkeypatch.setattr(
        app_module,
        "risk_service",
        RiskService(app_module.store, app_module.scanner, _collaborators(fail_disasters=True)),
    )
    resp = client.get("/api/risk", params=NYC)
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["unavailable"] == ["disasters"]
    assert payload["nearby_disasters"] == []


def test_risk_ai_summary(app_module, client, monkeypatch):
    async def fake_rewrite(score, explanation, lat, lng):
        return f"Score {score} means take care."

    monkeypatch.setattr(app_module.ai_service, "rewrite_explanation", fake_rewrite)
    payload = client.get("/api/risk", params={**NYC, "ai": "true"}).json()
    assert payload["ai_summary"] == f"Score {payload['score']} means take care."


def test_train_needs_enough_samples(client):
    client.get("/api/risk", params=NYC)
    resp = client.post("/api/risk/train")
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["sample_count"] == 1
    assert "at least 10" in detail["reason"]


def test_train_then_score_with_model(app_module, client):
    rng = random.Random(3)
    for _ in range(30):
        x = (1.0,) + tuple(rng.uniform(0, 3) for _ in range(6))
        app_module.store.append_sample(TrainingSample(x, 60.0 + 5 * x[1]))

    resp = client.post("/api/risk/train")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["sample_count"] == 30
    assert len(payload["weights"]) == len(payload["feature_names"]) == 7
    assert payload["weights"][0] == pytest.approx(60.0, abs=1e-6)

    scored = client.get("/api/risk", params=NYC).json()
    assert scored["scoring_method"] == "model"
    assert scored["score"] == 65
