"""Typed records shared by the scoring core and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from .geo import Coordinate

FacilityType = Literal["nuclear", "refinery", "power_plant", "chemical"]
WaterSourceType = Literal["drinking_water", "fountain", "well", "spring", "reservoir", "river"]
PotableHint = Literal["yes", "no", "unknown"]


@dataclass(frozen=True)
class DisasterEvent:
    id: str
    title: str | None = None
    state: str | None = None
    type: str | None = None
    lat: float | None = None
    lng: float | None = None
    disaster_number: str | None = None
    declaration_date: str | None = None

    @property
    def location(self) -> Coordinate | None:
        if self.lat is None or self.lng is None:
            return None
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class Reservoir:
    id: str
    name: str
    lat: float
    lng: float
    state: str
    serves: tuple[str, ...] = ()

    @property
    def location(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class Facility:
    id: str
    name: str
    lat: float
    lng: float
    state: str
    type: FacilityType

    @property
    def location(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class WaterSource:
    id: str
    lat: float
    lng: float
    name: str
    type: WaterSourceType = "drinking_water"
    potable_hint: PotableHint = "unknown"

    @property
    def location(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class WaterQualitySummary:
    station_count: int = 0
    result_count: int = 0
    latest_year: int | None = None
    characteristic_names: tuple[str, ...] = ()
    partial: bool = False


@dataclass(frozen=True)
class TrainingSample:
    features: tuple[float, ...]
    score: float


@dataclass(frozen=True)
class CacheEntry:
    station_count: int
    result_count: int
    fetched_at: float
    latest_year: int | None = None
    characteristic_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class Report:
    id: int
    description: str
    lat: float
    lng: float
    urgency: str
    created_at: str


@dataclass(frozen=True)
class SafeWaterReport:
    id: int
    lat: float
    lng: float
    created_at: str
    name: str | None = None


@dataclass(frozen=True)
class Nearby:
    """An entity paired with its distance from a query point."""

    entity: Any
    distance_km: float


@dataclass
class DisasterGroup:
    event: DisasterEvent
    count: int = 1
    distance_km: float | None = None
