"""
MET Norway Locationforecast client (the API behind yr.no).

Endpoint: https://api.met.no/weatherapi/locationforecast/2.0/compact
The terms of service require a descriptive User-Agent; requests without one
are rejected with 403.

Relevant response shape:

    {"properties": {"timeseries": [
        {"time": "2025-12-03T00:00:00Z",
         "data": {"instant": {"details": {"air_temperature": 5.2,
                                          "cloud_area_fraction": 87.5}},
                  "next_1_hours": {"details": {"precipitation_amount": 0.3}}}},
        ...
    ]}}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from weather.errors import WeatherApiError


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.met.no/weatherapi/locationforecast/2.0/compact"
DEFAULT_USER_AGENT = "conditions-watch/1.0 github.com/conditions-watch"
PRECIPITATION_WINDOW = 6

CloudCoverSource = Callable[[float, float], Optional[float]]


@dataclass(frozen=True)
class WeatherFragment:
    temperature: float
    timestamp: str
    precipitation: Optional[float] = None
    cloud_cover: Optional[float] = None


def _details(entry: Any, block: str) -> Dict[str, Any]:
    data = entry.get("data") if isinstance(entry, dict) else None
    section = data.get(block) if isinstance(data, dict) else None
    details = section.get("details") if isinstance(section, dict) else None
    return details if isinstance(details, dict) else {}


def sum_precipitation(timeseries: Sequence[Dict[str, Any]], window: int = PRECIPITATION_WINDOW) -> float:
    """
    Sum `next_1_hours.precipitation_amount` over the first `window` entries.
    Entries without the field contribute 0. Raises ValueError on a
    non-numeric amount.
    """
    total = 0.0
    for entry in list(timeseries)[:window]:
        amount = _details(entry, "next_1_hours").get("precipitation_amount")
        if amount is not None:
            total += float(amount)
    # strip float noise only (0.1 + 0.2 -> 0.3)
    return round(total, 6)


def parse_compact(payload: Dict[str, Any], window: int = PRECIPITATION_WINDOW) -> WeatherFragment:
    """
    Turn a compact Locationforecast body into a WeatherFragment.

    Temperature, cloud cover and timestamp come from the first (current) entry;
    precipitation is accumulated over the first `window` entries.
    """
    try:
        timeseries: List[Dict[str, Any]] = payload["properties"]["timeseries"]
        current = timeseries[0]
        instant = _details(current, "instant")
        temperature = float(instant["air_temperature"])
        timestamp = str(current["time"])
        precipitation = sum_precipitation(timeseries, window)
        cloud = instant.get("cloud_area_fraction")
        cloud_cover = float(cloud) if cloud is not None else None
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise WeatherApiError(f"Unexpected Locationforecast response: {e!r}") from e

    return WeatherFragment(
        temperature=temperature,
        timestamp=timestamp,
        precipitation=precipitation,
        cloud_cover=cloud_cover,
    )


@dataclass
class MetNoClient:
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = 30.0
    precipitation_window: int = PRECIPITATION_WINDOW
    # Secondary cloud-cover lookup; when unset the compact body's own value is used.
    cloud_cover_source: Optional[CloudCoverSource] = None
    transport: Optional[httpx.BaseTransport] = None

    def _get(self, params: dict) -> dict:
        headers = {"User-Agent": self.user_agent}
        timeout = httpx.Timeout(self.timeout_s)

        try:
            with httpx.Client(timeout=timeout, headers=headers, transport=self.transport) as client:
                r = client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise WeatherApiError(f"Weather API request failed: {e}") from e

        if not r.is_success:
            raise WeatherApiError(f"Weather API error: {r.status_code}", status=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise WeatherApiError(f"Weather API returned invalid JSON: {e}", status=r.status_code) from e

    def fetch(self, latitude: float, longitude: float) -> WeatherFragment:
        """
        Current conditions at a point.

        A failing Locationforecast call is fatal. A failing secondary
        cloud-cover call only blanks `cloud_cover`.
        """
        payload = self._get({"lat": latitude, "lon": longitude})
        fragment = parse_compact(payload, self.precipitation_window)

        if self.cloud_cover_source is None:
            return fragment

        try:
            cloud = self.cloud_cover_source(latitude, longitude)
        except WeatherApiError as e:
            logger.warning("cloud cover unavailable for %s,%s: %s", latitude, longitude, e)
            cloud = None

        return WeatherFragment(
            temperature=fragment.temperature,
            timestamp=fragment.timestamp,
            precipitation=fragment.precipitation,
            cloud_cover=cloud,
        )
