from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NearbyDisaster(BaseModel):
    id: str
    title: str | None = None
    state: str | None = None
    type: str | None = None
    count: int = Field(..., ge=1)
    distance_km: float | None = None


class ReservoirOut(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    state: str
    serves: list[str] = Field(default_factory=list)
    distance_km: float


class FacilityOut(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    state: str
    type: str
    type_label: str
    distance_km: float


class SourcesOut(BaseModel):
    epa: bool
    osm: int = Field(..., ge=0)


class RiskResponse(BaseModel):
    lat: float
    lng: float
    score: int = Field(..., ge=0, le=100)
    explanation: str = Field(..., min_length=1)
    strategy: Literal["water_quality", "hazard_context", "proximity"]
    scoring_method: Literal["formula", "model"]
    nearby_disasters: list[NearbyDisaster] = Field(default_factory=list)
    reservoir: ReservoirOut | None = None
    source_reservoir_in_disaster_zone: bool = False
    facilities_at_risk: list[FacilityOut] = Field(default_factory=list)
    sources: SourcesOut
    features: dict[str, float] = Field(default_factory=dict)
    unavailable: list[str] = Field(default_factory=list)
    ai_summary: str | None = None


class TrainResponse(BaseModel):
    weights: list[float]
    feature_names: list[str]
    sample_count: int


class HazardFacilityOut(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    type: str
    distance_km: float


class HazardsResponse(BaseModel):
    facilities: list[HazardFacilityOut]
    by_type: dict[str, int]
    hazard_penalty: float
    summary: str


class WaterPointOut(BaseModel):
    id: str
    lat: float
    lng: float
    name: str
    type: str | None = None
    potable_hint: str | None = None
    distance_km: float


class WaterPointsResponse(BaseModel):
    points: list[WaterPointOut]
    source: Literal["live", "fallback"]


class SafeWaterCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    name: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, name: str | None) -> str | None:
        if name is None:
            return None
        cleaned = name.strip()
        return cleaned or None


class SafeWaterOut(BaseModel):
    id: int
    lat: float
    lng: float
    name: str | None = None
    created_at: str
    distance_km: float | None = None


class ReportCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = Field(..., min_length=1, max_length=2000)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @field_validator("description")
    @classmethod
    def validate_description(cls, description: str) -> str:
        cleaned = description.strip()
        if not cleaned:
            raise ValueError("description must not be blank")
        return cleaned


class ReportOut(BaseModel):
    id: int
    description: str
    lat: float
    lng: float
    urgency: Literal["low", "medium", "high", "critical"]
    created_at: str


class DisasterOut(BaseModel):
    id: str
    disaster_number: str | None = None
    title: str | None = None
    state: str | None = None
    type: str | None = None
    lat: float | None = None
    lng: float | None = None
    declaration_date: str | None = None
