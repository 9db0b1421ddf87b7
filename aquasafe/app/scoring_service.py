from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .features import FEATURE_NAMES, FeatureDetails, disaster_penalty
from .geo import Coordinate
from .proximity_service import nearby
from .records import DisasterEvent, Nearby, TrainingSample, WaterSource
from .store import Store

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50

NO_WQP_COVERAGE_PENALTY = 8
MAX_RECENT_RESULTS_BONUS = 5
WATER_SOURCE_NUDGE = 0.2

# hazard_context
HAZARD_PENALTY_PER_DISASTER = 25
SOURCE_RESERVOIR_IN_ZONE_PENALTY = 15
PENALTY_PER_FACILITY_AT_RISK = 10
MAX_FACILITY_PENALTY = 20

# proximity
PROXIMITY_RADIUS_KM = 500.0
PROXIMITY_MAX_DISASTER_PENALTY = 60.0
WATER_POINT_LIMIT = 5
WATER_POINT_DECAY_KM = 15.0
MIN_WATER_POINT_DECAY = 0.25
MAX_WATER_POINT_PENALTY = 35.0
NO_WATER_POINTS_PENALTY = 6.0

_WATER_POINT_TYPE_PENALTY = {
    "drinking_water": 2.0,
    "fountain": 4.0,
    "well": 6.0,
    "spring": 6.0,
    "reservoir": 8.0,
}
_OTHER_WATER_POINT_PENALTY = 10.0


class ScoringStrategy(str, Enum):
    WATER_QUALITY = "water_quality"
    HAZARD_CONTEXT = "hazard_context"
    PROXIMITY = "proximity"


@dataclass(frozen=True)
class ScoreBreakdown:
    strategy: ScoringStrategy
    score: int
    method: str = "formula"
    penalties: dict[str, float] = field(default_factory=dict)


def clamp_score(value: float) -> int:
    return max(0, min(100, round(value)))


def valid_weights(weights: Sequence[float] | None) -> bool:
    if not weights or len(weights) != len(FEATURE_NAMES):
        return False
    return all(isinstance(w, (int, float)) and math.isfinite(w) for w in weights)


def formula_score(details: FeatureDetails) -> int:
    score = 100.0 - details.disaster_penalty
    if details.wqp_station_count == 0 and details.wqp_result_count == 0:
        score -= NO_WQP_COVERAGE_PENALTY
    elif details.has_recent_results == 1:
        score += min(MAX_RECENT_RESULTS_BONUS, details.wqp_result_count // 100)
    score += (details.water_source_score - 50) * WATER_SOURCE_NUDGE
    return clamp_score(score)


def model_score(weights: Sequence[float], features: Sequence[float]) -> int:
    """Linear model score; neutral when the weights do not fit the vector."""
    if len(weights) != len(features):
        return NEUTRAL_SCORE
    return clamp_score(sum(w * x for w, x in zip(weights, features)))


def score_water_quality(
    features: Sequence[float],
    details: FeatureDetails,
    weights: Sequence[float] | None = None,
) -> ScoreBreakdown:
    penalties = {"disaster_penalty": details.disaster_penalty}
    if valid_weights(weights) and len(weights) == len(features):
        return ScoreBreakdown(
            ScoringStrategy.WATER_QUALITY,
            model_score(weights, features),
            method="model",
            penalties=penalties,
        )
    return ScoreBreakdown(ScoringStrategy.WATER_QUALITY, formula_score(details), penalties=penalties)


def score_hazard_context(
    distinct_disasters: int,
    source_reservoir_in_zone: bool,
    facilities_at_risk: int,
) -> ScoreBreakdown:
    """Disaster + source reservoir + facility formula."""
    disaster = HAZARD_PENALTY_PER_DISASTER * distinct_disasters
    reservoir = SOURCE_RESERVOIR_IN_ZONE_PENALTY if source_reservoir_in_zone else 0
    facility = min(MAX_FACILITY_PENALTY, facilities_at_risk * PENALTY_PER_FACILITY_AT_RISK)
    return ScoreBreakdown(
        ScoringStrategy.HAZARD_CONTEXT,
        clamp_score(100 - disaster - reservoir - facility),
        penalties={
            "disaster_penalty": float(disaster),
            "reservoir_penalty": float(reservoir),
            "facility_penalty": float(facility),
        },
    )


def nearest_water_points(
    point: Coordinate, points: Sequence[WaterSource], limit: int = WATER_POINT_LIMIT
) -> list[Nearby]:
    return nearby(point, math.inf, points)[:limit]


def water_point_penalty(nearest: Sequence[Nearby]) -> float:
    """Type-weighted, distance-decayed penalty over the nearest water points."""
    if not nearest:
        return NO_WATER_POINTS_PENALTY
    total = 0.0
    for item in nearest:
        source = item.entity
        if source.potable_hint == "yes":
            weight = 0.0
        else:
            weight = _WATER_POINT_TYPE_PENALTY.get(source.type, _OTHER_WATER_POINT_PENALTY)
        decay = max(MIN_WATER_POINT_DECAY, 1 - item.distance_km / WATER_POINT_DECAY_KM)
        total += weight * decay
    return min(total, MAX_WATER_POINT_PENALTY)


def score_proximity(
    point: Coordinate,
    disasters: Sequence[DisasterEvent],
    water_points: Sequence[WaterSource],
) -> ScoreBreakdown:
    """Disaster proximity (500 km) + water-source mix formula."""
    _, disaster = disaster_penalty(
        point,
        disasters,
        radius_km=PROXIMITY_RADIUS_KM,
        cap=PROXIMITY_MAX_DISASTER_PENALTY,
    )
    water = water_point_penalty(nearest_water_points(point, water_points))
    return ScoreBreakdown(
        ScoringStrategy.PROXIMITY,
        clamp_score(100 - disaster - water),
        penalties={"disaster_penalty": disaster, "water_point_penalty": water},
    )


class ScoringEngine:
    """Scores feature vectors with stored weights when usable, else the formula.

    Every call records a training sample, which is how the model bootstraps
    itself from formula output.
    """

    def __init__(self, store: Store):
        self.store = store

    def current_weights(self) -> list[float] | None:
        weights = self.store.get_weights()
        if weights is None:
            return None
        if not valid_weights(weights):
            logger.debug("Ignoring stored weights of length %d; using formula", len(weights))
            return None
        return weights

    def score(self, features: Sequence[float], details: FeatureDetails) -> ScoreBreakdown:
        result = score_water_quality(features, details, self.current_weights())
        self.store.append_sample(TrainingSample(tuple(features), float(result.score)))
        return result
