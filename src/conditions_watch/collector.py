from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from weather.met_no import WeatherFragment

from .locations import Location


logger = logging.getLogger(__name__)

Fetch = Callable[[float, float], WeatherFragment]


@dataclass(frozen=True)
class Reading:
    location: str
    temperature: float
    timestamp: str
    area: Optional[str] = None
    precipitation: Optional[float] = None
    cloud_cover: Optional[float] = None


def collect_readings(
    locations: Sequence[Location],
    fetch: Fetch,
    delay_s: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[Reading]:
    """
    Fetch every location in order, pausing `delay_s` between two calls.

    The first failing fetch propagates and stops the collection.
    """
    readings: List[Reading] = []
    current_area: Optional[str] = None

    for i, loc in enumerate(locations):
        if i > 0 and delay_s > 0:
            sleep(float(delay_s))

        if loc.area and loc.area != current_area:
            logger.info("== %s ==", loc.area)
        current_area = loc.area

        logger.info("Fetching weather for %s (%d/%d)...", loc.name, i + 1, len(locations))
        w = fetch(loc.latitude, loc.longitude)
        readings.append(
            Reading(
                location=loc.name,
                area=loc.area,
                temperature=w.temperature,
                timestamp=w.timestamp,
                precipitation=w.precipitation,
                cloud_cover=w.cloud_cover,
            )
        )
        logger.info(
            "  Temperature: %s°C, precipitation: %s mm, cloud cover: %s%%",
            w.temperature,
            "-" if w.precipitation is None else w.precipitation,
            "-" if w.cloud_cover is None else w.cloud_cover,
        )

    return readings
