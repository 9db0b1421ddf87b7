"""Per-location risk assessment: fan out to collaborators, then score.

The collaborators are awaited together and any failure is replaced by an
empty or neutral value, so a valid coordinate always gets a score and an
explanation. Everything after the fetch step is synchronous and pure apart
from the training-sample side effect of the water-quality engine.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from . import explanation
from .disaster_events import group_for_display, group_for_penalty
from .features import WATER_SOURCE_LIMIT, build_features, water_source_mix, water_source_score
from .geo import Coordinate, validate_coordinate
from .model_service import TrainingResult, train
from .proximity_service import DISASTER_RADIUS_KM, HazardScanner, ReservoirForPoint
from .records import CacheEntry, DisasterEvent, DisasterGroup, Nearby, WaterQualitySummary, WaterSource
from .scoring_service import (
    PROXIMITY_RADIUS_KM,
    ScoringEngine,
    ScoringStrategy,
    nearest_water_points,
    score_hazard_context,
    score_proximity,
)
from .store import Store, WqpCache

logger = logging.getLogger(__name__)

WQP_RADIUS_MILES = 15

DisasterFetcher = Callable[[], Awaitable[list[DisasterEvent]]]
WaterQualityFetcher = Callable[[Coordinate, float], Awaitable[WaterQualitySummary | None]]
WaterSourceFetcher = Callable[[Coordinate, int], Awaitable[list[WaterSource]]]


@dataclass(frozen=True)
class Collaborators:
    fetch_disasters: DisasterFetcher
    fetch_water_quality: WaterQualityFetcher
    fetch_water_sources: WaterSourceFetcher


@dataclass
class RiskInputs:
    disasters: list[DisasterEvent] = field(default_factory=list)
    water_quality: WaterQualitySummary | None = None
    water_sources: list[WaterSource] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)


@dataclass
class RiskAssessment:
    score: int
    explanation: str
    strategy: ScoringStrategy
    method: str
    nearby_disasters: list[DisasterGroup]
    reservoir: ReservoirForPoint | None
    source_reservoir_in_disaster_zone: bool
    facilities_at_risk: list[Nearby]
    sources: dict[str, Any]
    features: dict[str, float] = field(default_factory=dict)
    unavailable: list[str] = field(default_factory=list)
    ai_summary: str | None = None


def default_collaborators(fema_limit: int = 200) -> Collaborators:
    from aquasafe_feeds.fema import fetch_fema_disasters
    from aquasafe_feeds.water_sources import fetch_water_sources
    from aquasafe_feeds.wqp import fetch_water_quality

    async def disasters() -> list[DisasterEvent]:
        return await asyncio.to_thread(fetch_fema_disasters, fema_limit)

    async def water_quality(point: Coordinate, radius_miles: float) -> WaterQualitySummary | None:
        return await fetch_water_quality(point.lat, point.lng, radius_miles)

    async def water_sources(point: Coordinate, limit: int) -> list[WaterSource]:
        return await fetch_water_sources(point.lat, point.lng, limit)

    return Collaborators(disasters, water_quality, water_sources)


class RiskService:
    def __init__(
        self,
        store: Store,
        scanner: HazardScanner,
        collaborators: Collaborators,
        cache: WqpCache | None = None,
    ):
        self.store = store
        self.scanner = scanner
        self.collaborators = collaborators
        self.cache = cache or WqpCache(store)
        self.engine = ScoringEngine(store)

    async def _water_quality(self, point: Coordinate) -> WaterQualitySummary | None:
        cached = await asyncio.to_thread(self.cache.get, point.lat, point.lng, WQP_RADIUS_MILES)
        if cached is not None:
            return WaterQualitySummary(
                station_count=cached.station_count,
                result_count=cached.result_count,
                latest_year=cached.latest_year,
                characteristic_names=cached.characteristic_names,
            )

        summary = await self.collaborators.fetch_water_quality(point, WQP_RADIUS_MILES)
        if summary is not None and not summary.partial:
            entry = CacheEntry(
                station_count=summary.station_count,
                result_count=summary.result_count,
                fetched_at=self.cache.clock(),
                latest_year=summary.latest_year,
                characteristic_names=summary.characteristic_names,
            )
            await asyncio.to_thread(self.cache.put, point.lat, point.lng, WQP_RADIUS_MILES, entry)
        return summary

    async def gather_inputs(self, point: Coordinate, strategy: ScoringStrategy) -> RiskInputs:
        async def nothing() -> None:
            return None

        wants_wqp = strategy is ScoringStrategy.WATER_QUALITY
        wants_sources = strategy is not ScoringStrategy.HAZARD_CONTEXT
        disasters, wqp, sources = await asyncio.gather(
            self.collaborators.fetch_disasters(),
            self._water_quality(point) if wants_wqp else nothing(),
            self.collaborators.fetch_water_sources(point, WATER_SOURCE_LIMIT) if wants_sources else nothing(),
            return_exceptions=True,
        )

        inputs = RiskInputs()
        for name, value in (("disasters", disasters), ("water_quality", wqp), ("water_sources", sources)):
            if isinstance(value, Exception):
                logger.warning("Upstream %s unavailable: %s", name, value)
                inputs.unavailable.append(name)
            elif isinstance(value, BaseException):
                raise value
        if not isinstance(disasters, BaseException):
            inputs.disasters = list(disasters or [])
        if not isinstance(wqp, BaseException):
            inputs.water_quality = wqp
        if not isinstance(sources, BaseException):
            inputs.water_sources = list(sources or [])
        return inputs

    async def assess(
        self,
        lat: float,
        lng: float,
        strategy: ScoringStrategy = ScoringStrategy.WATER_QUALITY,
    ) -> RiskAssessment:
        point = validate_coordinate(lat, lng)
        inputs = await self.gather_inputs(point, strategy)
        # Store I/O (weights, training sample) stays off the event loop.
        return await asyncio.to_thread(self.assess_inputs, point, inputs, strategy)

    def assess_inputs(
        self,
        point: Coordinate,
        inputs: RiskInputs,
        strategy: ScoringStrategy = ScoringStrategy.WATER_QUALITY,
    ) -> RiskAssessment:
        disasters = inputs.disasters
        reservoir = self.scanner.source_reservoir(point)
        reservoir_in_zone = self.scanner.reservoir_in_disaster_zone(reservoir, disasters)
        facilities_at_risk = self.scanner.facilities_at_risk(self.scanner.facilities_near(point), disasters)

        radius = PROXIMITY_RADIUS_KM if strategy is ScoringStrategy.PROXIMITY else DISASTER_RADIUS_KM
        in_radius = [(hit.entity, hit.distance_km) for hit in self.scanner.disasters_near(point, disasters, radius)]
        display_groups = group_for_display(in_radius)

        wqp = inputs.water_quality
        features: dict[str, float] = {}
        if strategy is ScoringStrategy.WATER_QUALITY:
            closest = [hit.entity for hit in nearest_water_points(point, inputs.water_sources, WATER_SOURCE_LIMIT)]
            vector, details = build_features(point, disasters, wqp, water_source_score(closest))
            result = self.engine.score(vector, details)
            features = details.as_dict()
            text = explanation.explain_water_quality(
                details,
                display_groups,
                wqp_partial=bool(wqp and wqp.partial),
                characteristics=wqp.characteristic_names if wqp else (),
                source_mix=water_source_mix(closest),
                reservoir=reservoir,
                reservoir_in_zone=reservoir_in_zone,
                facilities_at_risk=facilities_at_risk,
                unavailable=inputs.unavailable,
            )
        elif strategy is ScoringStrategy.HAZARD_CONTEXT:
            result = score_hazard_context(
                len(group_for_penalty(in_radius)),
                reservoir_in_zone,
                len(facilities_at_risk),
            )
            text = explanation.explain_hazard_context(
                display_groups,
                reservoir=reservoir,
                reservoir_in_zone=reservoir_in_zone,
                facilities_at_risk=facilities_at_risk,
                unavailable=inputs.unavailable,
            )
        else:
            result = score_proximity(point, disasters, inputs.water_sources)
            nearest = nearest_water_points(point, inputs.water_sources)
            text = explanation.explain_proximity(
                display_groups,
                water_source_mix([item.entity for item in nearest]),
                unavailable=inputs.unavailable,
            )

        logger.debug("Scored %s with %s/%s: %d", point, result.strategy.value, result.method, result.score)
        return RiskAssessment(
            score=result.score,
            explanation=text,
            strategy=result.strategy,
            method=result.method,
            nearby_disasters=display_groups,
            reservoir=reservoir,
            source_reservoir_in_disaster_zone=reservoir_in_zone,
            facilities_at_risk=facilities_at_risk,
            sources={"epa": wqp is not None, "osm": len(inputs.water_sources)},
            features=features,
            unavailable=list(inputs.unavailable),
        )

    def train(self, min_samples: int) -> TrainingResult:
        return train(self.store, min_samples=min_samples)

