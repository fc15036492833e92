"""
Header and row shaping for the readings sheet. No network access here.

Two layouts exist:

  long  Date | Hour | [Area] | Location | Temperature | [Precipitation] | [CloudCover]
        one row per (date, hour, location)

  wide  Date | Hour | <location 1> | <location 2> | ...
        one row per (date, hour), temperature only (legacy)

A header is append-only: columns may be added at the end, never reordered.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, TYPE_CHECKING

import pandas as pd

from .errors import SheetLayoutError

if TYPE_CHECKING:
    from .collector import Reading


LAYOUTS = ("long", "wide")
TRACKED_FIELDS = ("area", "precipitation", "cloud_cover")
KEY_COLUMNS = ["Date", "Hour"]
LONG_REQUIRED = ("Date", "Hour", "Location", "Temperature")
# not usable as location names: they would collide with key columns of the wide layout
RESERVED_NAMES = ("Date", "Hour", "Location")
APPEND_BATCH_SIZE = 1000


def default_header(layout: str, fields: Sequence[str] = TRACKED_FIELDS) -> List[str]:
    if layout == "wide":
        return list(KEY_COLUMNS)
    if layout != "long":
        raise ValueError(f"unknown layout: {layout!r}")

    header = list(KEY_COLUMNS)
    if "area" in fields:
        header.append("Area")
    header += ["Location", "Temperature"]
    if "precipitation" in fields:
        header.append("Precipitation")
    if "cloud_cover" in fields:
        header.append("CloudCover")
    return header


def _dedupe(names: Iterable[str]) -> List[str]:
    out: List[str] = []
    for n in names:
        if n not in out:
            out.append(n)
    return out


def reconcile_header(
    existing: Sequence[str],
    incoming: Sequence[str],
    layout: str,
    fields: Sequence[str] = TRACKED_FIELDS,
) -> List[str]:
    """
    Header to use for this write.

    existing : header row currently in the sheet (may be empty)
    incoming : location names of the readings about to be written

    Empty sheet -> the layout's default header (wide: plus the incoming
    locations). Wide -> existing columns followed by unseen locations.
    Long -> existing header unchanged. A header written by the other layout
    raises SheetLayoutError instead of mixing the two.
    """
    if layout == "wide":
        clashing = [n for n in incoming if n in RESERVED_NAMES]
        if clashing:
            raise SheetLayoutError(f"Location names clash with key columns: {clashing}")

    existing = [str(c).strip() for c in existing]
    while existing and not existing[-1]:
        existing.pop()

    if not existing:
        header = default_header(layout, fields)
        if layout == "wide":
            header += [n for n in _dedupe(incoming) if n not in header]
        return header

    if existing[:2] != KEY_COLUMNS:
        raise SheetLayoutError(f"Unrecognized header (expected it to start with Date, Hour): {existing}")

    is_long = "Location" in existing
    if layout == "long":
        if not is_long:
            raise SheetLayoutError("Sheet has a wide-layout header; refusing to append long-layout rows.")
        missing = [c for c in LONG_REQUIRED if c not in existing]
        if missing:
            raise SheetLayoutError(f"Long-layout header is missing columns: {missing}")
        return existing

    if layout == "wide":
        if is_long:
            raise SheetLayoutError("Sheet has a long-layout header; refusing to append wide-layout rows.")
        return existing + [n for n in _dedupe(incoming) if n not in existing]

    raise ValueError(f"unknown layout: {layout!r}")


def build_rows(
    readings: Sequence["Reading"],
    header: Sequence[str],
    layout: str,
    date: str,
    hour: str,
) -> List[List]:
    """
    Rows for `readings`, each aligned to `header`. Cells without a value
    (missing optional field, location absent from this run, unknown column)
    are written as "".
    """
    if not readings:
        return []

    if layout == "wide":
        record = {"Date": date, "Hour": hour}
        for r in readings:
            record[r.location] = r.temperature
        records = [record]
    else:
        records = [
            {
                "Date": date,
                "Hour": hour,
                "Area": r.area,
                "Location": r.location,
                "Temperature": r.temperature,
                "Precipitation": r.precipitation,
                "CloudCover": r.cloud_cover,
            }
            for r in readings
        ]

    df = pd.DataFrame.from_records(records).reindex(columns=list(header))
    df = df.astype(object).where(df.notna(), "")
    return df.values.tolist()


def chunked(rows: Sequence[List], size: int = APPEND_BATCH_SIZE) -> Iterator[Sequence[List]]:
    size = max(1, int(size))
    for start in range(0, len(rows), size):
        yield rows[start : start + size]
