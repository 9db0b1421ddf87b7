from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
USER_AGENT = "aquasafe/0.1"


@dataclass(frozen=True)
class ApiConfig:
    timeout: float = 15.0
    retries: int = 2


class UpstreamAPIError(RuntimeError):
    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.message = message


def backoff_seconds(attempt: int) -> float:
    return min(8.0, 0.5 * (2**attempt))


def short_error_text(text: str, limit: int = 240) -> str:
    one_line = " ".join(text.split())
    if len(one_line) <= limit:
        return one_line
    return one_line[:limit] + "..."


def request_json(
    client: httpx.Client,
    url: str,
    *,
    params: dict[str, Any] | None,
    stage: str,
    config: ApiConfig,
) -> Any:
    last_error: Exception | None = None
    headers = {"User-Agent": USER_AGENT}
    for attempt in range(config.retries + 1):
        try:
            response = client.get(url, params=params, timeout=config.timeout, headers=headers)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            last_error = exc
            if attempt < config.retries:
                time.sleep(backoff_seconds(attempt))
                continue
            raise UpstreamAPIError(stage, f"Network error after retries: {exc!s}") from exc

        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            last_error = UpstreamAPIError(stage, f"HTTP {status}: {short_error_text(response.text)}")
            if attempt < config.retries:
                time.sleep(backoff_seconds(attempt))
                continue
            raise last_error

        if 400 <= status < 500:
            raise UpstreamAPIError(stage, f"HTTP {status}: {short_error_text(response.text)}")

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamAPIError(stage, f"Invalid JSON in upstream response (HTTP {status})") from exc

    raise UpstreamAPIError(stage, f"Failed request after retries: {last_error!s}")


async def request_text_async(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    stage: str,
    config: ApiConfig,
    params: dict[str, Any] | None = None,
    data: dict[str, Any] | None = None,
) -> str:
    """Async counterpart of ``request_json`` that returns the raw body."""
    last_error: Exception | None = None
    headers = {"User-Agent": USER_AGENT}
    for attempt in range(config.retries + 1):
        try:
            response = await client.request(
                method, url, params=params, data=data, timeout=config.timeout, headers=headers
            )
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            last_error = exc
            if attempt < config.retries:
                await asyncio.sleep(backoff_seconds(attempt))
                continue
            raise UpstreamAPIError(stage, f"Network error after retries: {exc!s}") from exc

        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            last_error = UpstreamAPIError(stage, f"HTTP {status}: {short_error_text(response.text)}")
            if attempt < config.retries:
                await asyncio.sleep(backoff_seconds(attempt))
                continue
            raise last_error

        if 400 <= status < 500:
            raise UpstreamAPIError(stage, f"HTTP {status}: {short_error_text(response.text)}")
        return response.text

    raise UpstreamAPIError(stage, f"Failed request after retries: {last_error!s}")
