"""EPA Water Quality Portal station/result summaries for a location."""

from __future__ import annotations

import asyncio
import csv
import io
import logging
from datetime import date

import httpx

from aquasafe.app.records import WaterQualitySummary

from .http import ApiConfig, UpstreamAPIError, request_text_async

logger = logging.getLogger(__name__)

WQP_BASE = "https://www.waterqualitydata.us/wqx3"
DEFAULT_RADIUS_MILES = 15
MAX_PARSED_ROWS = 500


def _rows(text: str) -> list[list[str]]:
    text = text.strip()
    if not text:
        return []
    return [row for row in csv.reader(io.StringIO(text)) if row]


def count_csv_rows(text: str) -> int:
    """Data rows in a CSV body, excluding the header."""
    return max(0, len(_rows(text)) - 1)


def _find_column(header: list[str], *needles: str) -> int:
    lowered = [h.strip().lower() for h in header]
    for idx, col in enumerate(lowered):
        if any(n in col for n in needles):
            return idx
    return -1


def parse_result_summary(text: str) -> tuple[int, tuple[str, ...], int | None]:
    """(result_count, characteristic names, latest year) from a Result CSV."""
    rows = _rows(text)
    if len(rows) <= 1:
        return 0, (), None

    header, data = rows[0], rows[1:]
    name_idx = _find_column(header, "characteristic")
    date_idx = _find_column(header, "activitystartdate", "activity_startdate", "startdate")

    names: list[str] = []
    latest: int | None = None
    for row in data[:MAX_PARSED_ROWS]:
        if 0 <= name_idx < len(row):
            name = row[name_idx].strip()
            if name and name not in names:
                names.append(name)
        if 0 <= date_idx < len(row):
            year_text = row[date_idx].strip()[:4]
            if year_text.isdigit():
                year = int(year_text)
                if latest is None or year > latest:
                    latest = year
    return len(data), tuple(names), latest


def _wqp_date(d: date) -> str:
    return d.strftime("%m-%d-%Y")


async def fetch_water_quality(
    lat: float,
    lng: float,
    within_miles: float = DEFAULT_RADIUS_MILES,
    *,
    today: date | None = None,
    config: ApiConfig | None = None,
) -> WaterQualitySummary:
    """Stations and last-two-years results within ``within_miles``.

    A failed half of the lookup is reported through ``partial`` rather than
    raised; only a failure of both halves raises ``UpstreamAPIError``.
    """
    today = today or date.today()
    try:
        two_years_ago = today.replace(year=today.year - 2)
    except ValueError:  # Feb 29
        two_years_ago = today.replace(year=today.year - 2, day=28)

    config = config or ApiConfig()
    base = {"lat": str(lat), "long": str(lng), "within": str(within_miles), "mimeType": "csv"}
    timeout = httpx.Timeout(config.timeout, connect=8.0)
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        stations, results = await asyncio.gather(
            request_text_async(
                client, "GET", f"{WQP_BASE}/Station/search", params=base, stage="wqp:stations", config=config
            ),
            request_text_async(
                client,
                "GET",
                f"{WQP_BASE}/Result/search",
                params={**base, "startDateLo": _wqp_date(two_years_ago), "startDateHi": _wqp_date(today)},
                stage="wqp:results",
                config=config,
            ),
            return_exceptions=True,
        )

    failures = [r for r in (stations, results) if isinstance(r, BaseException)]
    for failure in failures:
        if not isinstance(failure, UpstreamAPIError):
            raise failure
        logger.warning("WQP lookup failed: %s", failure)
    if len(failures) == 2:
        raise UpstreamAPIError("wqp", "Both station and result lookups failed.")

    station_count = 0 if isinstance(stations, BaseException) else count_csv_rows(stations)
    result_count, names, latest = (0, (), None) if isinstance(results, BaseException) else parse_result_summary(results)
    return WaterQualitySummary(
        station_count=station_count,
        result_count=result_count,
        latest_year=latest,
        characteristic_names=names,
        partial=bool(failures),
    )
