"""Deterministic, template-based explanations for each scoring strategy."""

from __future__ import annotations

from typing import Mapping, Sequence

from .disaster_events import describe_group
from .features import FeatureDetails
from .proximity_service import DISASTER_RADIUS_KM, ReservoirForPoint
from .records import DisasterGroup, Nearby
from .scoring_service import PROXIMITY_RADIUS_KM

NO_ISSUES_TEXT = (
    "No known disasters or water issues in this area. Consider checking local utility reports."
)
REDUCED_CONFIDENCE_TEXT = "Some data sources were unavailable; this score has reduced confidence."
MAX_LISTED_CHARACTERISTICS = 5


def _sentence(text: str) -> str:
    text = text.strip()
    return text if text.endswith((".", "!", "?")) else text + "."


def _join(parts: Sequence[str]) -> str:
    return " ".join(_sentence(p) for p in parts if p and p.strip())


def _disaster_list(groups: Sequence[DisasterGroup], radius_km: float) -> str:
    fallback = f"Active disaster declaration within {radius_km:g} km"
    return ". ".join(describe_group(g, fallback) for g in groups)


def _facility_list(facilities: Sequence[Nearby]) -> str:
    return ", ".join(f"{f.entity.name} ({f.entity.type.replace('_', ' ')})" for f in facilities)


def _mix_text(mix: Mapping[str, int]) -> str:
    return ", ".join(f"{count} {label}" for label, count in mix.items())


def _characteristic_list(names: Sequence[str], limit: int = MAX_LISTED_CHARACTERISTICS) -> str:
    shown = ", ".join(names[:limit])
    extra = len(names) - limit
    return f"{shown} (+{extra} more)" if extra > 0 else shown


def _context_callouts(
    reservoir: ReservoirForPoint | None,
    reservoir_in_zone: bool,
    facilities_at_risk: Sequence[Nearby],
) -> list[str]:
    parts: list[str] = []
    if reservoir_in_zone and reservoir is not None:
        parts.append(f"Your water source ({reservoir.reservoir.name}) is in a disaster zone")
    if facilities_at_risk:
        parts.append(f"Disaster near hazardous facility: {_facility_list(facilities_at_risk)}")
    return parts


def explain_water_quality(
    details: FeatureDetails,
    disaster_groups: Sequence[DisasterGroup],
    *,
    wqp_partial: bool = False,
    characteristics: Sequence[str] = (),
    source_mix: Mapping[str, int] | None = None,
    reservoir: ReservoirForPoint | None = None,
    reservoir_in_zone: bool = False,
    facilities_at_risk: Sequence[Nearby] = (),
    unavailable: Sequence[str] = (),
) -> str:
    parts: list[str] = []
    if details.disaster_count > 0:
        parts.append(
            f"{details.disaster_count} disaster declaration(s) within {DISASTER_RADIUS_KM:g} km"
        )
        if disaster_groups:
            parts.append(f"Disaster nearby: {_disaster_list(disaster_groups, DISASTER_RADIUS_KM)}")
    else:
        parts.append(f"No known disasters within {DISASTER_RADIUS_KM:g} km")

    if details.wqp_station_count > 0 or details.wqp_result_count > 0:
        parts.append(
            f"EPA monitoring: {details.wqp_station_count} station(s), "
            f"{details.wqp_result_count} recent result(s)"
        )
        if details.has_recent_results == 1:
            parts.append("Recent water quality data available")
        if characteristics:
            parts.append(f"Measured: {_characteristic_list(characteristics)}")
    else:
        parts.append("No EPA Water Quality Portal data in this area")
    if wqp_partial:
        parts.append("(Partial WQP data)")

    if source_mix:
        parts.append(f"Nearby water sources: {_mix_text(source_mix)}")
    else:
        parts.append("Limited nearby water-source data")

    parts.extend(_context_callouts(reservoir, reservoir_in_zone, facilities_at_risk))
    if unavailable:
        parts.append(REDUCED_CONFIDENCE_TEXT)
    return _join(parts)


def explain_hazard_context(
    disaster_groups: Sequence[DisasterGroup],
    *,
    reservoir: ReservoirForPoint | None = None,
    reservoir_in_zone: bool = False,
    facilities_at_risk: Sequence[Nearby] = (),
    unavailable: Sequence[str] = (),
) -> str:
    parts: list[str] = []
    if disaster_groups:
        parts.append(f"Disaster nearby: {_disaster_list(disaster_groups, DISASTER_RADIUS_KM)}")
    parts.extend(_context_callouts(reservoir, reservoir_in_zone, facilities_at_risk))
    if not parts:
        parts.append(NO_ISSUES_TEXT)
    if unavailable:
        parts.append(REDUCED_CONFIDENCE_TEXT)
    return _join(parts)


def explain_proximity(
    disaster_groups: Sequence[DisasterGroup],
    water_mix: Mapping[str, int] | None,
    *,
    unavailable: Sequence[str] = (),
) -> str:
    parts: list[str] = []
    if disaster_groups:
        parts.append(
            f"Disasters within {PROXIMITY_RADIUS_KM:g} km: "
            f"{_disaster_list(disaster_groups, PROXIMITY_RADIUS_KM)}"
        )
    else:
        parts.append(f"No known disasters within {PROXIMITY_RADIUS_KM:g} km")
    if water_mix:
        parts.append(f"Closest water points: {_mix_text(water_mix)}")
    else:
        parts.append("No mapped water points nearby; limited nearby water-source data")
    if unavailable:
        parts.append(REDUCED_CONFIDENCE_TEXT)
    return _join(parts)
