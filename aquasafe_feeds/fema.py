"""OpenFEMA disaster declarations.

The API carries no coordinates, so each row is placed at its state's
approximate centroid.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from aquasafe.app.records import DisasterEvent

from .http import ApiConfig, UpstreamAPIError, request_json

OPENFEMA_URL = "https://www.fema.gov/api/open/v2/DisasterDeclarationsSummaries"

_CACHE: dict[int, tuple[float, list[DisasterEvent]]] = {}
_CACHE_TTL = 600  # seconds

DEFAULT_CENTROID = (39.5, -98.0)

STATE_CENTROIDS: dict[str, tuple[float, float]] = {
    "AL": (32.8, -86.9), "AK": (64.0, -152.0), "AZ": (34.2, -111.7),
    "AR": (34.9, -92.4), "CA": (37.2, -119.4), "CO": (39.1, -105.3),
    "CT": (41.6, -72.7), "DE": (38.9, -75.5), "FL": (28.6, -82.5),
    "GA": (32.6, -83.6), "HI": (20.3, -156.4), "ID": (44.4, -114.6),
    "IL": (40.0, -89.2), "IN": (40.3, -86.1), "IA": (42.0, -93.6),
    "KS": (38.5, -98.4), "KY": (37.5, -85.3), "LA": (31.2, -92.0),
    "ME": (45.4, -69.2), "MD": (39.0, -76.6), "MA": (42.4, -71.4),
    "MI": (43.3, -84.5), "MN": (46.3, -94.7), "MS": (32.7, -89.7),
    "MO": (37.9, -91.8), "MT": (47.0, -110.4), "NE": (41.1, -98.0),
    "NV": (39.3, -116.6), "NH": (43.2, -71.6), "NJ": (40.2, -74.6),
    "NM": (34.4, -106.1), "NY": (43.0, -75.5), "NC": (35.6, -79.4),
    "ND": (47.5, -100.5), "OH": (40.4, -82.8), "OK": (35.6, -97.5),
    "OR": (44.0, -120.5), "PA": (41.0, -77.2), "RI": (41.7, -71.5),
    "SC": (33.9, -80.9), "SD": (44.4, -100.2), "TN": (35.9, -86.6),
    "TX": (31.2, -99.5), "UT": (39.3, -111.7), "VT": (44.1, -72.6),
    "VA": (37.5, -78.5), "WA": (47.4, -120.5), "WV": (38.6, -80.6),
    "WI": (44.3, -89.6), "WY": (43.0, -107.5), "DC": (38.9, -77.0),
}


def parse_fema_rows(payload: Any) -> list[DisasterEvent]:
    rows = payload.get("DisasterDeclarationsSummaries", []) if isinstance(payload, dict) else []
    events: list[DisasterEvent] = []
    for row in rows:
        if not isinstance(row, dict) or not row.get("id"):
            continue
        state = row.get("state")
        lat, lng = STATE_CENTROIDS.get(state or "", DEFAULT_CENTROID)
        number = row.get("disasterNumber")
        events.append(
            DisasterEvent(
                id=str(row["id"]),
                title=row.get("declarationTitle") or "Disaster declaration",
                state=state,
                type=row.get("incidentType") or "Other",
                lat=lat,
                lng=lng,
                disaster_number=str(number) if number is not None else None,
                declaration_date=row.get("declarationDate"),
            )
        )
    return events


def fetch_fema_disasters(
    limit: int = 200,
    *,
    client: httpx.Client | None = None,
    config: ApiConfig | None = None,
) -> list[DisasterEvent]:
    """Most recent declarations, newest first. Raises ``UpstreamAPIError``."""
    top = min(max(1, limit), 1000)
    now = time.time()
    cached = _CACHE.get(top)
    if cached and now - cached[0] < _CACHE_TTL:
        return list(cached[1])

    params = {"$top": top, "$orderby": "declarationDate desc"}
    config = config or ApiConfig()
    if client is None:
        with httpx.Client(follow_redirects=True) as own_client:
            payload = request_json(own_client, OPENFEMA_URL, params=params, stage="fema", config=config)
    else:
        payload = request_json(client, OPENFEMA_URL, params=params, stage="fema", config=config)

    if not isinstance(payload, dict):
        raise UpstreamAPIError("fema", "Unexpected payload shape")
    events = parse_fema_rows(payload)
    _CACHE[top] = (now, events)
    return list(events)
