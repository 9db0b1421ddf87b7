"""Tests for the crowd-sourced /api/safe-water and /api/reports endpoints."""
from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

import aquasafe.app.config as config
from aquasafe.app.store import MemoryStore


@pytest.fixture()
def main_module(monkeypatch):
    import aquasafe.app.main as module

    importlib.reload(module)
    monkeypatch.setattr(module, "store", MemoryStore())
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")
    return module


@pytest.fixture()
def client(main_module):
    return TestClient(main_module.app)


def test_share_and_list_safe_water(client):
    resp = client.post("/api/safe-water", json={"lat": 40.71, "lng": -74.0, "name": "  Library fountain "})
    assert resp.status_code == 201
    created = resp.json()
    assert created["name"] == "Library fountain"
    assert created["id"] == 1

    listed = client.get("/api/safe-water").json()["reports"]
    assert [r["id"] for r in listed] == [1]


def test_safe_water_radius_filter(client):
    client.post("/api/safe-water", json={"lat": 40.71, "lng": -74.0})
    client.post("/api/safe-water", json={"lat": 34.05, "lng": -118.24})
    client.post("/api/safe-water", json={"lat": 40.75, "lng": -73.99})

    nearby = client.get(
        "/api/safe-water", params={"lat": 40.7128, "lng": -74.006, "radius_km": 10}
    ).json()["reports"]
    assert len(nearby) == 2
    assert nearby[0]["distance_km"] <= nearby[1]["distance_km"]


def test_safe_water_rejects_bad_payload(client):
    assert client.post("/api/safe-water", json={"lat": 95, "lng": 0}).status_code == 422
    assert client.post("/api/safe-water", json={"lat": 1, "lng": 0, "extra": 1}).status_code == 422


def test_report_defaults_to_medium_without_ai(client):
    resp = client.post("/api/reports", json={"description": "Water is brown", "lat": 40.7, "lng": -74.0})
    assert resp.status_code == 201
    assert resp.json()["urgency"] == "medium"


def test_report_uses_classified_urgency(main_module, client, monkeypatch):
    async def fake_classify(description):
        return "critical"

    monkeypatch.setattr(main_module.ai_service, "classify_urgency", fake_classify)
    resp = client.post("/api/reports", json={"description": "Boil notice ignored", "lat": 40.7, "lng": -74.0})
    assert resp.json()["urgency"] == "critical"


def test_report_rejects_blank_description(client):
    resp = client.post("/api/reports", json={"description": "   ", "lat": 40.7, "lng": -74.0})
    assert resp.status_code == 422


def test_list_reports_newest_first(client):
    for text in ("first", "second", "third"):
        client.post("/api/reports", json={"description": text, "lat": 40.7, "lng": -74.0})
    reports = client.get("/api/reports", params={"limit": 2}).json()["reports"]
    assert [r["description"] for r in reports] == ["third", "second"]
