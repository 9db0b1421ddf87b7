"""AquaSafe HTTP API.

Run: uvicorn aquasafe.app.main:app --reload
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from aquasafe_feeds.fema import fetch_fema_disasters
from aquasafe_feeds.http import UpstreamAPIError

from . import ai_service, config
from .features import FEATURE_NAMES
from .geo import Coordinate, InvalidCoordinateError, distance_km
from .proximity_service import HAZARD_RADIUS_KM, HazardScanner, summarize_disaster_prediction
from .reference_data import FACILITIES, NUCLEAR_PLANTS, RESERVOIRS, facility_type_label
from .risk_service import RiskAssessment, RiskService, default_collaborators
from .schemas import (
    DisasterOut,
    FacilityOut,
    HazardFacilityOut,
    HazardsResponse,
    NearbyDisaster,
    ReportCreate,
    ReportOut,
    ReservoirOut,
    RiskResponse,
    SafeWaterCreate,
    SafeWaterOut,
    SourcesOut,
    TrainResponse,
    WaterPointOut,
    WaterPointsResponse,
)
from .scoring_service import ScoringStrategy
from .store import open_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Demo points, used only when the live lookup returns nothing.
FALLBACK_WATER_POINTS = [
    ("1", 40.7589, -73.9851, "Midtown Fill Station"),
    ("2", 40.7282, -73.7942, "Queens Water Hub"),
    ("3", 40.6782, -73.9442, "Brooklyn Safe Water"),
    ("4", 40.8266, -73.9217, "Bronx Community Source"),
    ("5", 40.5795, -74.1502, "Staten Island Fill Point"),
    ("6", 40.7484, -73.9857, "Empire State Area"),
    ("7", 40.7614, -73.9776, "Central Park East"),
    ("8", 40.6892, -74.0445, "Brooklyn Bridge Area"),
]

store = open_store(config.AQUASAFE_DB_PATH)
scanner = HazardScanner(RESERVOIRS, FACILITIES, NUCLEAR_PLANTS)
risk_service = RiskService(store, scanner, default_collaborators(config.FEMA_LIMIT))

app = FastAPI(title="AquaSafe Water Risk API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _risk_response(lat: float, lng: float, assessment: RiskAssessment) -> RiskResponse:
    reservoir = None
    if assessment.reservoir is not None:
        r = assessment.reservoir.reservoir
        reservoir = ReservoirOut(
            id=r.id,
            name=r.name,
            lat=r.lat,
            lng=r.lng,
            state=r.state,
            serves=list(r.serves),
            distance_km=round(assessment.reservoir.distance_km, 2),
        )

    return RiskResponse(
        lat=lat,
        lng=lng,
        score=assessment.score,
        explanation=assessment.explanation,
        strategy=assessment.strategy.value,
        scoring_method=assessment.method,
        nearby_disasters=[
            NearbyDisaster(
                id=g.event.id,
                title=g.event.title,
                state=g.event.state,
                type=g.event.type,
                count=g.count,
                distance_km=round(g.distance_km, 2) if g.distance_km is not None else None,
            )
            for g in assessment.nearby_disasters
        ],
        reservoir=reservoir,
        source_reservoir_in_disaster_zone=assessment.source_reservoir_in_disaster_zone,
        facilities_at_risk=[
            FacilityOut(
                **asdict(item.entity),
                type_label=facility_type_label(item.entity.type),
                distance_km=round(item.distance_km, 2),
            )
            for item in assessment.facilities_at_risk
        ],
        sources=SourcesOut(**assessment.sources),
        features=assessment.features,
        unavailable=assessment.unavailable,
        ai_summary=assessment.ai_summary,
    )


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/risk", response_model=RiskResponse)
async def risk(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    strategy: ScoringStrategy = Query(ScoringStrategy.WATER_QUALITY),
    ai: bool = Query(False),
) -> RiskResponse:
    """Water-safety score (0-100, higher is safer) with a plain-text explanation."""
    try:
        assessment = await risk_service.assess(lat, lng, strategy)
    except InvalidCoordinateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if ai:
        assessment.ai_summary = await ai_service.rewrite_explanation(
            assessment.score, assessment.explanation, lat, lng
        )
    return _risk_response(lat, lng, assessment)


@app.post("/api/risk/train", response_model=TrainResponse)
def train_model() -> TrainResponse:
    """Refit the linear model on every recorded sample."""
    result = risk_service.train(config.MIN_TRAINING_SAMPLES)
    if not result.ok:
        raise HTTPException(
            status_code=400,
            detail={"reason": result.reason, "sample_count": result.sample_count},
        )
    return TrainResponse(
        weights=result.weights,
        feature_names=list(FEATURE_NAMES),
        sample_count=result.sample_count,
    )


@app.get("/api/hazards/nearby", response_model=HazardsResponse)
def hazards_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(HAZARD_RADIUS_KM, gt=0, le=500),
    active_disaster: bool = Query(False),
) -> HazardsResponse:
    exposure = scanner.nuclear_hazards(Coordinate(lat, lng), radius_km)
    return HazardsResponse(
        facilities=[
            HazardFacilityOut(
                id=item.entity.id,
                name=item.entity.name,
                lat=item.entity.lat,
                lng=item.entity.lng,
                type=item.entity.type,
                distance_km=item.distance_km,
            )
            for item in exposure.facilities
        ],
        by_type=exposure.by_type,
        hazard_penalty=round(exposure.hazard_penalty, 2),
        summary=summarize_disaster_prediction(exposure, active_disaster, radius_km),
    )


@app.get("/api/water/nearby", response_model=WaterPointsResponse)
async def water_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    limit: int = Query(5, ge=1, le=20),
) -> WaterPointsResponse:
    point = Coordinate(lat, lng)
    try:
        live = await risk_service.collaborators.fetch_water_sources(point, limit)
    except UpstreamAPIError as exc:
        logger.warning("Live water lookup failed: %s", exc)
        live = []

    if live:
        points = [
            WaterPointOut(
                id=s.id,
                lat=s.lat,
                lng=s.lng,
                name=s.name,
                type=s.type,
                potable_hint=s.potable_hint,
                distance_km=round(distance_km(point, s.location), 2),
            )
            for s in live
        ]
    else:
        points = [
            WaterPointOut(
                id=pid,
                lat=plat,
                lng=plng,
                name=name,
                distance_km=round(distance_km(point, Coordinate(plat, plng)), 2),
            )
            for pid, plat, plng, name in FALLBACK_WATER_POINTS
        ]
    points.sort(key=lambda p: p.distance_km)
    return WaterPointsResponse(points=points[:limit], source="live" if live else "fallback")


@app.post("/api/safe-water", response_model=SafeWaterOut, status_code=201)
def share_safe_water(body: SafeWaterCreate) -> SafeWaterOut:
    row = store.insert_safe_water(body.lat, body.lng, body.name)
    return SafeWaterOut(**asdict(row))


@app.get("/api/safe-water")
def list_safe_water(
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius_km: float | None = Query(None, gt=0),
    limit: int = Query(100, ge=1, le=500),
) -> dict[str, list[SafeWaterOut]]:
    rows = [SafeWaterOut(**asdict(row)) for row in store.safe_water_reports(limit)]
    if lat is not None and lng is not None and radius_km is not None:
        origin = Coordinate(lat, lng)
        filtered = []
        for row in rows:
            km = distance_km(origin, Coordinate(row.lat, row.lng))
            if km <= radius_km:
                row.distance_km = round(km, 2)
                filtered.append(row)
        rows = sorted(filtered, key=lambda r: r.distance_km)
    return {"reports": rows}


@app.post("/api/reports", response_model=ReportOut, status_code=201)
async def submit_report(body: ReportCreate) -> ReportOut:
    urgency = await ai_service.classify_urgency(body.description) or "medium"
    row = store.insert_report(body.description, body.lat, body.lng, urgency)
    return ReportOut(**asdict(row))


@app.get("/api/reports")
def list_reports(limit: int = Query(50, ge=1, le=500)) -> dict[str, list[ReportOut]]:
    return {"reports": [ReportOut(**asdict(row)) for row in store.recent_reports(limit)]}


@app.get("/api/disasters")
def disasters(limit: int = Query(50, ge=1, le=1000)) -> dict[str, list[DisasterOut]]:
    try:
        events = fetch_fema_disasters(limit)
    except UpstreamAPIError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"disasters": [DisasterOut(**asdict(event)) for event in events]}
