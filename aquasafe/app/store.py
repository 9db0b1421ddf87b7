"""Persistence for reports, cache entries, model weights and training samples.

``MemoryStore`` and ``SqliteStore`` implement the same ``Store`` interface;
``open_store`` picks one at startup. Parsing and validation live on the base
class so both backends behave identically.
"""

from __future__ import annotations

import json
import logging
import math
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable

from .records import CacheEntry, Report, SafeWaterReport, TrainingSample

logger = logging.getLogger(__name__)

CacheKey = tuple[float, float, float]

WQP_CACHE_TTL = 24 * 3600  # seconds


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_weights(raw: str | None) -> list[float] | None:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Stored model weights are not valid JSON; ignoring")
        return None
    if not isinstance(value, list) or not value:
        return None
    out: list[float] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)) or not math.isfinite(item):
            logger.warning("Stored model weights contain a non-numeric entry; ignoring")
            return None
        out.append(float(item))
    return out


def _parse_names(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return ()
    if not isinstance(value, list):
        return ()
    return tuple(str(name) for name in value)


class Store(ABC):
    def get_weights(self) -> list[float] | None:
        return parse_weights(self._read_weights())

    def set_weights(self, weights: list[float]) -> None:
        self._write_weights(json.dumps([float(w) for w in weights]))

    @abstractmethod
    def _read_weights(self) -> str | None: ...

    @abstractmethod
    def _write_weights(self, raw: str) -> None: ...

    @abstractmethod
    def append_sample(self, sample: TrainingSample) -> None: ...

    @abstractmethod
    def list_samples(self) -> list[TrainingSample]: ...

    @abstractmethod
    def get_cache(self, key: CacheKey) -> CacheEntry | None: ...

    @abstractmethod
    def put_cache(self, key: CacheKey, entry: CacheEntry) -> None: ...

    @abstractmethod
    def insert_report(self, description: str, lat: float, lng: float, urgency: str) -> Report: ...

    @abstractmethod
    def recent_reports(self, limit: int = 50) -> list[Report]: ...

    @abstractmethod
    def insert_safe_water(self, lat: float, lng: float, name: str | None = None) -> SafeWaterReport: ...

    @abstractmethod
    def safe_water_reports(self, limit: int = 100) -> list[SafeWaterReport]: ...


class MemoryStore(Store):
    def __init__(self):
        self._lock = threading.Lock()
        self._weights: str | None = None
        self._samples: list[TrainingSample] = []
        self._cache: dict[CacheKey, CacheEntry] = {}
        self._reports: list[Report] = []
        self._safe_water: list[SafeWaterReport] = []

    def _read_weights(self) -> str | None:
        return self._weights

    def _write_weights(self, raw: str) -> None:
        self._weights = raw

    def append_sample(self, sample: TrainingSample) -> None:
        self._samples.append(sample)

    def list_samples(self) -> list[TrainingSample]:
        return list(self._samples)

    def get_cache(self, key: CacheKey) -> CacheEntry | None:
        return self._cache.get(key)

    def put_cache(self, key: CacheKey, entry: CacheEntry) -> None:
        self._cache[key] = entry

    def insert_report(self, description: str, lat: float, lng: float, urgency: str) -> Report:
        with self._lock:
            row = Report(len(self._reports) + 1, description, lat, lng, urgency, _now_iso())
            self._reports.append(row)
        return row

    def recent_reports(self, limit: int = 50) -> list[Report]:
        rows = sorted(self._reports, key=lambda r: (r.created_at, r.id), reverse=True)
        return rows[:limit]

    def insert_safe_water(self, lat: float, lng: float, name: str | None = None) -> SafeWaterReport:
        with self._lock:
            row = SafeWaterReport(len(self._safe_water) + 1, lat, lng, _now_iso(), name)
            self._safe_water.append(row)
        return row

    def safe_water_reports(self, limit: int = 100) -> list[SafeWaterReport]:
        rows = sorted(self._safe_water, key=lambda r: (r.created_at, r.id), reverse=True)
        return rows[:limit]


_SCHEMA = """
CREATE TABLE IF NOT EXISTS model_weights (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    weights TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS training_samples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    features TEXT NOT NULL,
    score REAL NOT NULL
);
CREATE TABLE IF NOT EXISTS wqp_cache (
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    radius REAL NOT NULL,
    station_count INTEGER NOT NULL,
    result_count INTEGER NOT NULL,
    latest_year INTEGER,
    characteristic_names TEXT,
    fetched_at REAL NOT NULL,
    PRIMARY KEY (lat, lng, radius)
);
CREATE TABLE IF NOT EXISTS reports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    description TEXT NOT NULL,
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    urgency TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS safe_water_reports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    name TEXT,
    created_at TEXT NOT NULL
);
"""


class SqliteStore(Store):
    def __init__(self, path: str):
        self.path = path
        conn = self._connect()
        try:
            conn.executescript(_SCHEMA)
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        conn = self._connect()
        try:
            with conn:
                return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def _insert(self, sql: str, params: tuple) -> int:
        conn = self._connect()
        try:
            with conn:
                return conn.execute(sql, params).lastrowid
        finally:
            conn.close()

    def _read_weights(self) -> str | None:
        rows = self._execute("SELECT weights FROM model_weights WHERE id = 1")
        return rows[0][0] if rows else None

    def _write_weights(self, raw: str) -> None:
        self._execute(
            "INSERT INTO model_weights (id, weights, updated_at) VALUES (1, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET weights = excluded.weights, updated_at = excluded.updated_at",
            (raw, _now_iso()),
        )

    def append_sample(self, sample: TrainingSample) -> None:
        self._execute(
            "INSERT INTO training_samples (features, score) VALUES (?, ?)",
            (json.dumps(list(sample.features)), sample.score),
        )

    def list_samples(self) -> list[TrainingSample]:
        rows = self._execute("SELECT features, score FROM training_samples ORDER BY id")
        samples: list[TrainingSample] = []
        for features_raw, score in rows:
            try:
                features = tuple(float(x) for x in json.loads(features_raw))
            except (json.JSONDecodeError, TypeError, ValueError):
                logger.warning("Skipping unreadable training sample")
                continue
            samples.append(TrainingSample(features, float(score)))
        return samples

    def get_cache(self, key: CacheKey) -> CacheEntry | None:
        rows = self._execute(
            "SELECT station_count, result_count, fetched_at, latest_year, characteristic_names "
            "FROM wqp_cache WHERE lat = ? AND lng = ? AND radius = ?",
            key,
        )
        if not rows:
            return None
        station_count, result_count, fetched_at, latest_year, names_raw = rows[0]
        return CacheEntry(station_count, result_count, fetched_at, latest_year, _parse_names(names_raw))

    def put_cache(self, key: CacheKey, entry: CacheEntry) -> None:
        self._execute(
            "INSERT OR REPLACE INTO wqp_cache "
            "(lat, lng, radius, station_count, result_count, latest_year, characteristic_names, fetched_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                *key,
                entry.station_count,
                entry.result_count,
                entry.latest_year,
                json.dumps(list(entry.characteristic_names)) if entry.characteristic_names else None,
                entry.fetched_at,
            ),
        )

    def insert_report(self, description: str, lat: float, lng: float, urgency: str) -> Report:
        created_at = _now_iso()
        row_id = self._insert(
            "INSERT INTO reports (description, lat, lng, urgency, created_at) VALUES (?, ?, ?, ?, ?)",
            (description, lat, lng, urgency, created_at),
        )
        return Report(row_id, description, lat, lng, urgency, created_at)

    def recent_reports(self, limit: int = 50) -> list[Report]:
        rows = self._execute(
            "SELECT id, description, lat, lng, urgency, created_at FROM reports "
            "ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [Report(*row) for row in rows]

    def insert_safe_water(self, lat: float, lng: float, name: str | None = None) -> SafeWaterReport:
        created_at = _now_iso()
        row_id = self._insert(
            "INSERT INTO safe_water_reports (lat, lng, name, created_at) VALUES (?, ?, ?, ?)",
            (lat, lng, name, created_at),
        )
        return SafeWaterReport(row_id, lat, lng, created_at, name)

    def safe_water_reports(self, limit: int = 100) -> list[SafeWaterReport]:
        rows = self._execute(
            "SELECT id, lat, lng, created_at, name FROM safe_water_reports "
            "ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [SafeWaterReport(*row) for row in rows]


def open_store(db_path: str | None) -> Store:
    """SQLite when a path is configured and usable, in-memory otherwise."""
    if db_path:
        try:
            return SqliteStore(db_path)
        except sqlite3.Error as exc:
            logger.warning("Could not open SQLite store at %s (%s); using in-memory store", db_path, exc)
    return MemoryStore()


class WqpCache:
    """Time-boxed memo of water-quality summaries on a ~1 km grid.

    Expiry is lazy: entries older than ``ttl_seconds`` read as absent and are
    simply overwritten by the next ``put``.
    """

    def __init__(
        self,
        store: Store,
        ttl_seconds: float = WQP_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @staticmethod
    def make_key(lat: float, lng: float, radius: float) -> CacheKey:
        return (round(lat, 2), round(lng, 2), float(radius))

    def get(self, lat: float, lng: float, radius: float) -> CacheEntry | None:
        entry = self.store.get_cache(self.make_key(lat, lng, radius))
        if entry is None:
            return None
        if self.clock() - entry.fetched_at >= self.ttl_seconds:
            return None
        return entry

    def put(self, lat: float, lng: float, radius: float, entry: CacheEntry) -> None:
        self.store.put_cache(self.make_key(lat, lng, radius), entry)
