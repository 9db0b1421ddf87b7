from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from .geo import Coordinate, distance_km
from .records import DisasterEvent, Facility, Nearby, Reservoir

DISASTER_RADIUS_KM = 50.0
MAX_SOURCE_KM = 250.0
FACILITY_RADIUS_KM = 120.0
HAZARD_RADIUS_KM = 80.0
MAX_HAZARD_PENALTY = 50.0


def nearby(point: Coordinate, radius_km: float, entities: Iterable[Any]) -> list[Nearby]:
    """Entities within ``radius_km`` of ``point`` (boundary inclusive), nearest first.

    Any entity with a ``location`` attribute works; entities whose location is
    ``None`` are skipped.
    """
    out: list[Nearby] = []
    for entity in entities:
        location = getattr(entity, "location", None)
        if location is None:
            continue
        km = distance_km(point, location)
        if km <= radius_km:
            out.append(Nearby(entity, km))
    out.sort(key=lambda item: item.distance_km)
    return out


@dataclass(frozen=True)
class ReservoirForPoint:
    reservoir: Reservoir
    distance_km: float


@dataclass(frozen=True)
class HazardExposure:
    facilities: list[Nearby]
    by_type: dict[str, int] = field(default_factory=dict)
    hazard_penalty: float = 0.0


class HazardScanner:
    """Proximity queries over immutable reservoir/facility datasets."""

    def __init__(
        self,
        reservoirs: Sequence[Reservoir],
        facilities: Sequence[Facility],
        hazard_plants: Sequence[Facility] = (),
    ):
        self.reservoirs = tuple(reservoirs)
        self.facilities = tuple(facilities)
        self.hazard_plants = tuple(hazard_plants)

    def disasters_near(
        self,
        point: Coordinate,
        disasters: Iterable[DisasterEvent],
        radius_km: float = DISASTER_RADIUS_KM,
    ) -> list[Nearby]:
        return nearby(point, radius_km, disasters)

    def source_reservoir(self, point: Coordinate) -> ReservoirForPoint | None:
        hits = nearby(point, MAX_SOURCE_KM, self.reservoirs)
        if not hits:
            return None
        return ReservoirForPoint(hits[0].entity, hits[0].distance_km)

    def reservoir_in_disaster_zone(
        self,
        reservoir: ReservoirForPoint | None,
        disasters: Iterable[DisasterEvent],
        radius_km: float = DISASTER_RADIUS_KM,
    ) -> bool:
        if reservoir is None:
            return False
        return bool(nearby(reservoir.reservoir.location, radius_km, disasters))

    def facilities_near(self, point: Coordinate, radius_km: float = FACILITY_RADIUS_KM) -> list[Nearby]:
        return nearby(point, radius_km, self.facilities)

    def facilities_at_risk(
        self,
        facilities: Iterable[Nearby],
        disasters: Sequence[DisasterEvent],
        radius_km: float = DISASTER_RADIUS_KM,
    ) -> list[Nearby]:
        """Facilities (as returned by ``facilities_near``) with a disaster within ``radius_km``."""
        return [
            item
            for item in facilities
            if nearby(item.entity.location, radius_km, disasters)
        ]

    def nuclear_hazards(self, point: Coordinate, radius_km: float = HAZARD_RADIUS_KM) -> HazardExposure:
        hits = [
            Nearby(item.entity, round(item.distance_km, 2))
            for item in nearby(point, radius_km, self.hazard_plants)
        ]
        by_type = Counter(item.entity.type for item in hits)

        penalty = 0.0
        for item in hits:
            proximity = max(0.1, 1 - item.distance_km / radius_km)
            weight = 15 if item.entity.type == "nuclear" else 8
            penalty += weight * proximity

        return HazardExposure(
            facilities=hits,
            by_type=dict(by_type),
            hazard_penalty=min(penalty, MAX_HAZARD_PENALTY),
        )


def summarize_disaster_prediction(
    exposure: HazardExposure,
    has_active_disaster: bool,
    radius_km: float = HAZARD_RADIUS_KM,
) -> str:
    """One-line "in the event of a disaster" summary for a hazard exposure."""
    if not exposure.facilities:
        if has_active_disaster:
            return "No major industrial or nuclear facilities in range; hazard from disaster alone."
        return "No major hazard facilities nearby; water risk in a disaster would be lower."

    nuclear = exposure.by_type.get("nuclear", 0)
    if nuclear:
        detail = f"{nuclear} nuclear power plant(s) within {radius_km:g} km"
        if has_active_disaster:
            return (
                f"In this disaster, water quality could be affected by: {detail}. "
                "Avoid untreated surface water."
            )
        return f"If a disaster occurred here, risk could increase due to: {detail}."
    return "Some industrial facilities nearby could pose water risk in a flood or storm."
