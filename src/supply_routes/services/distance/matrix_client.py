"""HTTP client for Google-compatible Distance Matrix APIs."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from .base import DistanceFetchError, DistanceResult

logger = logging.getLogger(__name__)


def _parse_elements(data: Any, destination_names: Sequence[str]) -> list[DistanceResult]:
    """Turn a distance matrix payload into one result per destination name."""
    if not isinstance(data, dict):
        raise DistanceFetchError("Distance matrix response is not a JSON object.")

    status = data.get("status")
    if status != "OK":
        detail = data.get("error_message")
        message = f"Distance matrix API error: {status}"
        raise DistanceFetchError(f"{message} ({detail})" if detail else message)

    rows = data.get("rows") or []
    if not rows or not isinstance(rows[0], dict):
        raise DistanceFetchError("Distance matrix response has no rows.")
    elements = rows[0].get("elements") or []
    if len(elements) != len(destination_names):
        raise DistanceFetchError(
            f"Distance matrix returned {len(elements)} elements for {len(destination_names)} destinations."
        )

    results: list[DistanceResult] = []
    for name, element in zip(destination_names, elements):
        element_status = element.get("status", "OK") if isinstance(element, dict) else None
        if element_status != "OK":
            raise DistanceFetchError(f"No route found to '{name}': {element_status}")
        try:
            meters = float(element["distance"]["value"])
            duration_text = str(element["duration"]["text"])
        except (KeyError, TypeError, ValueError) as exc:
            raise DistanceFetchError(f"Malformed distance element for '{name}'.") from exc
        results.append(DistanceResult(place=name, distance_km=meters / 1000, duration_text=duration_text))
    return results


class DistanceMatrixClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        mode: str | None = None,
        units: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.distance_api_base_url).rstrip("/")
        self.api_key = api_key or settings.distance_api_key
        if not self.api_key:
            raise ValueError("Distance matrix API key is not configured.")
        self.mode = mode or settings.distance_mode
        self.units = units or settings.distance_units
        self.timeout = timeout if timeout is not None else settings.distance_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.distance_backoff_seconds
        self._transport = transport

    def _backoff(self, attempt: int) -> float:
        return self.backoff_seconds * attempt

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    async def _fetch(self, params: dict[str, str]) -> Any:
        url = f"{self.base_url}/distancematrix/json"
        async with self._get_client() as client:
            attempt = 0
            while True:
                try:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    code = exc.response.status_code
                    attempt += 1
                    # 4xx responses will not change on retry
                    if code < 500 or attempt > self.max_retries:
                        raise DistanceFetchError(f"Distance matrix request failed with HTTP {code}.") from exc
                    wait_time = self._backoff(attempt)
                    logger.debug(f"Distance matrix HTTP {code}, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    await asyncio.sleep(wait_time)
                except httpx.HTTPError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise DistanceFetchError(
                            f"Failed to reach distance matrix service at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self._backoff(attempt)
                    logger.debug(
                        f"Distance matrix network error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    await asyncio.sleep(wait_time)
                except ValueError as exc:
                    raise DistanceFetchError("Distance matrix response is not valid JSON.") from exc

    async def resolve(self, origin: str, destination_names: Sequence[str]) -> list[DistanceResult]:
        """Resolve road distance and travel time from ``origin`` to each name.

        Results come back in the order of ``destination_names`` and carry the
        name, so callers can merge them by place.
        """
        if not destination_names:
            return []
        params = {
            "origins": origin,
            "destinations": "|".join(destination_names),
            "units": self.units,
            "mode": self.mode,
            "key": self.api_key,
        }
        logger.info(f"Resolving {len(destination_names)} distances from '{origin}'")
        data = await self._fetch(params)
        return _parse_elements(data, destination_names)


async def check_health(base_url: str | None = None, api_key: str | None = None) -> bool:
    """Probe the distance matrix service with a single origin/destination pair."""
    key = api_key or settings.distance_api_key
    if not key:
        return False
    base = (base_url or settings.distance_api_base_url).rstrip("/")
    params = {
        "origins": settings.default_source,
        "destinations": settings.default_source,
        "units": settings.distance_units,
        "mode": settings.distance_mode,
        "key": key,
    }
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(f"{base}/distancematrix/json", params=params)
            response.raise_for_status()
            data = response.json()
        return isinstance(data, dict) and data.get("status") == "OK"
    except (httpx.HTTPError, ValueError):
        return False
