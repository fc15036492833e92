from __future__ import annotations

from typing import Optional


class WeatherApiError(RuntimeError):
    """
    A weather provider call failed: non-2xx status, transport error or a body
    that does not have the expected shape. `status` is None when no HTTP
    response was received.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
