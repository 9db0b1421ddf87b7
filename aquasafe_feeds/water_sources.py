"""Nearby mapped water sources from OpenStreetMap via Overpass.

Each element is typed from its tags (drinking water, fountain, well, spring,
reservoir, river) and carries a potable hint from ``drinking_water=*``.
Results are cached in-memory for an hour per rounded location.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Tuple

import httpx

from aquasafe.app.geo import Coordinate, distance_km
from aquasafe.app.records import PotableHint, WaterSource, WaterSourceType

from .http import ApiConfig, UpstreamAPIError, request_text_async

CacheKey = Tuple[float, float, int]

_CACHE: Dict[CacheKey, Tuple[float, List[WaterSource]]] = {}
_CACHE_TTL = 3600  # seconds

OVERPASS_ENDPOINTS = [
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
]

DEFAULT_RADIUS_M = 15_000

_TYPE_NAMES = {
    "drinking_water": "Drinking water",
    "fountain": "Drinking fountain",
    "well": "Water well",
    "spring": "Spring",
    "reservoir": "Reservoir",
    "river": "River",
}


def build_overpass_query(lat: float, lng: float, radius_m: int) -> str:
    around = f"(around:{radius_m},{lat},{lng})"
    query = f"""
    [out:json][timeout:25];
    (
      node{around}["amenity"="drinking_water"];
      node{around}["amenity"="fountain"]["fountain"="drinking"];
      node{around}["man_made"="drinking_fountain"];
      node{around}["man_made"="water_well"];
      node{around}["natural"="spring"];
      way{around}["water"="reservoir"];
      way{around}["landuse"="reservoir"];
    );
    out center tags;
    """
    return "\n".join(line.strip() for line in query.splitlines() if line.strip())


def classify_tags(tags: Dict[str, Any]) -> WaterSourceType | None:
    amenity = tags.get("amenity")
    man_made = tags.get("man_made")

    if amenity == "drinking_water":
        return "drinking_water"
    if man_made == "drinking_fountain" or (amenity == "fountain" and tags.get("fountain") == "drinking"):
        return "fountain"
    if man_made == "water_well":
        return "well"
    if tags.get("natural") == "spring":
        return "spring"
    if tags.get("water") == "reservoir" or tags.get("landuse") == "reservoir":
        return "reservoir"
    if tags.get("waterway") == "river" or tags.get("water") == "river":
        return "river"
    return None


def potable_hint(tags: Dict[str, Any]) -> PotableHint:
    value = str(tags.get("drinking_water", "")).strip().lower()
    if value in {"yes", "treated"}:
        return "yes"
    if value == "no":
        return "no"
    return "unknown"


def _extract_coords(el: dict) -> Tuple[float | None, float | None]:
    if "lat" in el and "lon" in el:
        return el.get("lat"), el.get("lon")
    center = el.get("center") or {}
    return center.get("lat"), center.get("lon")


def parse_elements(payload: Any, lat: float, lng: float) -> List[WaterSource]:
    """Typed sources sorted nearest first; unknown or coordinate-less elements are dropped."""
    elements = payload.get("elements", []) if isinstance(payload, dict) else []
    origin = Coordinate(lat, lng)
    seen: set[str] = set()
    ranked: List[Tuple[float, WaterSource]] = []
    for el in elements:
        tags = el.get("tags") or {}
        source_type = classify_tags(tags)
        if source_type is None:
            continue
        el_lat, el_lng = _extract_coords(el)
        if el_lat is None or el_lng is None:
            continue
        source_id = f"{el.get('type', 'node')}-{el.get('id')}"
        if source_id in seen:
            continue
        seen.add(source_id)
        name = (tags.get("name") or "").strip() or _TYPE_NAMES[source_type]
        source = WaterSource(
            id=source_id,
            lat=float(el_lat),
            lng=float(el_lng),
            name=name,
            type=source_type,
            potable_hint=potable_hint(tags),
        )
        ranked.append((distance_km(origin, source.location), source))
    ranked.sort(key=lambda item: item[0])
    return [source for _, source in ranked]


async def _fetch_overpass(query: str, config: ApiConfig) -> Any:
    """Try Overpass endpoints in order until one answers with JSON."""
    last_error: Exception | None = None
    async with httpx.AsyncClient(timeout=httpx.Timeout(25.0, connect=10.0)) as client:
        for endpoint in OVERPASS_ENDPOINTS:
            try:
                body = await request_text_async(
                    client, "POST", endpoint, data={"data": query}, stage="overpass", config=config
                )
                return json.loads(body)
            except (UpstreamAPIError, ValueError) as exc:
                last_error = exc
                continue
    raise UpstreamAPIError("overpass", f"All endpoints failed: {last_error}")


async def fetch_water_sources(
    lat: float,
    lng: float,
    limit: int = 10,
    radius_m: int = DEFAULT_RADIUS_M,
    *,
    config: ApiConfig | None = None,
) -> List[WaterSource]:
    key: CacheKey = (round(lat, 3), round(lng, 3), radius_m)
    now = time.time()
    cached = _CACHE.get(key)
    if cached and now - cached[0] < _CACHE_TTL:
        return list(cached[1][:limit])

    payload = await _fetch_overpass(build_overpass_query(lat, lng, radius_m), config or ApiConfig(retries=0))
    sources = parse_elements(payload, lat, lng)
    _CACHE[key] = (now, sources)
    return list(sources[:limit])
