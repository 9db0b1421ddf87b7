"""Feature extraction for the water-quality score.

The vector order is fixed by ``FEATURE_NAMES``; stored model weights are only
usable when they were fitted against exactly this order and length.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import date
from typing import Sequence

from .disaster_events import group_for_penalty
from .geo import Coordinate
from .proximity_service import DISASTER_RADIUS_KM, nearby
from .records import DisasterEvent, WaterQualitySummary, WaterSource

FEATURE_NAMES = (
    "intercept",
    "disaster_count",
    "disaster_penalty",
    "wqp_station_count",
    "wqp_result_count",
    "has_recent_results",
    "water_source_score",
)

PENALTY_PER_DISASTER = 25.0
MAX_DISASTER_PENALTY = 60.0
RESULT_COUNT_SCALE = 1000
NEUTRAL_WATER_SOURCE_SCORE = 50
WATER_SOURCE_LIMIT = 10

_SOURCE_TYPE_VALUES = {
    "drinking_water": 85,
    "well": 60,
    "spring": 60,
    "fountain": 50,
    "reservoir": 30,
}
_OTHER_SOURCE_VALUE = 20

SOURCE_TYPE_LABELS = {
    "drinking_water": "drinking water",
    "fountain": "fountain",
    "well": "well",
    "spring": "spring",
    "reservoir": "reservoir",
    "river": "river",
}


@dataclass(frozen=True)
class FeatureDetails:
    disaster_count: int
    disaster_penalty: float
    wqp_station_count: int
    wqp_result_count: int
    has_recent_results: int
    water_source_score: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def source_value(source: WaterSource) -> int:
    if source.potable_hint == "yes":
        return 100
    return _SOURCE_TYPE_VALUES.get(source.type, _OTHER_SOURCE_VALUE)


def water_source_score(sources: Sequence[WaterSource], limit: int = WATER_SOURCE_LIMIT) -> int:
    """0-100 score from the first ``limit`` sources (pass them nearest first); 50 when none are known."""
    top = list(sources)[:limit]
    if not top:
        return NEUTRAL_WATER_SOURCE_SCORE
    return round(sum(source_value(s) for s in top) / len(top))


def water_source_mix(sources: Sequence[WaterSource], limit: int = WATER_SOURCE_LIMIT) -> dict[str, int]:
    """Counts by category label among the first ``limit`` sources (nearest first), most common first."""
    counts: Counter[str] = Counter()
    for source in list(sources)[:limit]:
        if source.potable_hint == "yes":
            counts["marked potable"] += 1
        else:
            counts[SOURCE_TYPE_LABELS.get(source.type, "other")] += 1
    return dict(counts.most_common())


def disaster_penalty(
    point: Coordinate,
    disasters: Sequence[DisasterEvent],
    radius_km: float = DISASTER_RADIUS_KM,
    per_event: float = PENALTY_PER_DISASTER,
    cap: float = MAX_DISASTER_PENALTY,
) -> tuple[int, float]:
    """Distinct in-radius events and their distance-decayed penalty, capped.

    Each distinct event contributes ``per_event * (1 - km / radius_km)`` using
    its nearest declaration row.
    """
    hits = nearby(point, radius_km, disasters)
    events = group_for_penalty((hit.entity, hit.distance_km) for hit in hits)
    total = 0.0
    for group in events:
        total += per_event * (1 - group.distance_km / radius_km)
    return len(events), min(total, cap)


def build_features(
    point: Coordinate,
    disasters: Sequence[DisasterEvent],
    wqp: WaterQualitySummary | None,
    source_score: float = NEUTRAL_WATER_SOURCE_SCORE,
    *,
    today: date | None = None,
) -> tuple[list[float], FeatureDetails]:
    count, penalty = disaster_penalty(point, disasters)

    station_count = wqp.station_count if wqp else 0
    result_count = wqp.result_count if wqp else 0
    latest_year = (wqp.latest_year if wqp else None) or 0
    current_year = (today or date.today()).year
    has_recent = 1 if result_count > 0 and latest_year >= current_year - 1 else 0

    details = FeatureDetails(
        disaster_count=count,
        disaster_penalty=penalty,
        wqp_station_count=station_count,
        wqp_result_count=result_count,
        has_recent_results=has_recent,
        water_source_score=source_score,
    )
    vector = [
        1.0,
        float(details.disaster_count),
        details.disaster_penalty,
        float(details.wqp_station_count),
        min(details.wqp_result_count, RESULT_COUNT_SCALE) / RESULT_COUNT_SCALE,
        float(details.has_recent_results),
        details.water_source_score / 100,
    ]
    return vector, details
