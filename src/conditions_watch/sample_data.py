"""
Synthetic temperature history for a fresh sheet (demo dashboards, charts).

Temperatures follow a simple model:
  base      15 - 2 * (latitude - 60)          colder further north
  seasonal  10 * sin(2*pi * (day_of_year - 80) / 365)
  daily     3 * sin(pi * (hour - 6) / 12)
  noise     uniform in [-1, 1)
"""

from __future__ import annotations

import logging
from datetime import date as Date
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .collector import Reading
from .locations import Location
from .sheet_layout import build_rows
from .sheets import SheetWriter


logger = logging.getLogger(__name__)

SAMPLE_HOURS = ("00", "06", "12", "18")


def model_temperature(latitude: float, day_of_year, hour, noise=0.0):
    base = 15 - (latitude - 60) * 2
    seasonal = np.sin((np.asarray(day_of_year) - 80) * (2 * np.pi / 365)) * 10
    daily = np.sin((np.asarray(hour, dtype=float) - 6) * np.pi / 12) * 3
    return base + seasonal + daily + noise


def generate_sample_frame(
    locations: Sequence[Location],
    end: Date,
    days: int = 66,
    hours: Sequence[str] = SAMPLE_HOURS,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    One row per (date, hour, location) from `end - days` to `end` inclusive,
    ordered by date, hour, then location order.
    """
    rng = rng or np.random.default_rng()
    dates = pd.date_range(end=pd.Timestamp(end), periods=int(days) + 1, freq="D")

    frames: List[pd.DataFrame] = []
    for d in dates:
        for h in hours:
            n = len(locations)
            lat = np.array([loc.latitude for loc in locations], dtype=float)
            temp = model_temperature(lat, d.dayofyear, int(h), rng.uniform(-1.0, 1.0, size=n))
            frames.append(
                pd.DataFrame(
                    {
                        "Date": d.strftime("%Y-%m-%d"),
                        "Hour": h,
                        "Area": [loc.area for loc in locations],
                        "Location": [loc.name for loc in locations],
                        "Temperature": np.round(temp, 1),
                    }
                )
            )

    if not frames:
        return pd.DataFrame(columns=["Date", "Hour", "Area", "Location", "Temperature"])
    return pd.concat(frames, ignore_index=True)


def upload_sample_data(writer: SheetWriter, frame: pd.DataFrame) -> int:
    """Append the frame through `writer`, aligned to the sheet's header."""
    if frame.empty:
        return 0

    header = writer.ensure_header(list(dict.fromkeys(frame["Location"].tolist())))

    rows: List[List] = []
    for (day, hour), g in frame.groupby(["Date", "Hour"], sort=False):
        readings = [
            Reading(
                location=r.Location,
                area=r.Area,
                temperature=float(r.Temperature),
                timestamp=f"{day}T{hour}:00:00Z",
            )
            for r in g.itertuples(index=False)
        ]
        rows += build_rows(readings, header, writer.layout, day, hour)

    logger.info("Generated %d rows from %d data points", len(rows), len(frame))
    return writer.append_rows(rows)
