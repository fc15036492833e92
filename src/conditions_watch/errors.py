from __future__ import annotations

from typing import Optional

from weather.errors import WeatherApiError

__all__ = [
    "ConditionsWatchError",
    "ConfigError",
    "SheetApiError",
    "SheetLayoutError",
    "WeatherApiError",
]


class ConditionsWatchError(Exception):
    """Base class for failures raised by the pipeline itself."""


class ConfigError(ConditionsWatchError):
    pass


class SheetApiError(ConditionsWatchError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class SheetLayoutError(ConditionsWatchError):
    """The sheet already carries a header written by the other layout."""
