"""
Open-Meteo client used as the secondary cloud-cover source.

Default endpoint: https://api.open-meteo.com/v1/forecast
No API key is required for the public Open-Meteo API.

Only the `current` block is requested, e.g.

    {"current": {"time": "2025-12-03T00:00", "interval": 900, "cloud_cover": 87}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
import numpy as np

from weather.errors import WeatherApiError


DEFAULT_BASE_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_USER_AGENT = "conditions-watch/1.0 github.com/conditions-watch"


def _to_float(x) -> float:
    try:
        return float(x)
    except Exception:
        return float("nan")


@dataclass
class OpenMeteoClient:
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = 30.0
    transport: Optional[httpx.BaseTransport] = None

    def _get(self, params: dict) -> dict:
        headers = {"User-Agent": self.user_agent}
        timeout = httpx.Timeout(self.timeout_s)

        try:
            with httpx.Client(timeout=timeout, headers=headers, transport=self.transport) as client:
                r = client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise WeatherApiError(f"Open-Meteo request failed: {e}") from e

        if not r.is_success:
            raise WeatherApiError(f"Open-Meteo API error: {r.status_code}", status=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise WeatherApiError(f"Open-Meteo returned invalid JSON: {e}", status=r.status_code) from e

    def fetch_cloud_cover(self, latitude: float, longitude: float) -> Optional[float]:
        """
        Current total cloud cover (%) at a point.

        Returns None when the provider answers but has no value for the point;
        raises WeatherApiError when the call itself fails or the body has no
        `current` block.
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "cloud_cover",
            "timezone": "UTC",
        }
        data = self._get(params)

        current = data.get("current") if isinstance(data, dict) else None
        if not isinstance(current, dict):
            raise WeatherApiError("Open-Meteo response has no 'current' block")

        value = _to_float(current.get("cloud_cover"))
        return float(value) if np.isfinite(value) else None
