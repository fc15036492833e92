from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import ConfigError
from .sheet_layout import RESERVED_NAMES


@dataclass(frozen=True)
class Location:
    name: str
    latitude: float
    longitude: float
    area: Optional[str] = None


def _to_float(x) -> float:
    try:
        return float(x)
    except Exception:
        return float("nan")


def _clean_text(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    s = str(value).strip()
    return s or None


def _read_records(path: Path) -> List[Dict[str, Any]]:
    if path.suffix.lower() == ".csv":
        try:
            df = pd.read_csv(path, dtype={"name": str, "area": str})
        except (OSError, ValueError) as e:
            raise ConfigError(f"{path}: cannot read locations CSV: {e}") from e
        return df.to_dict(orient="records")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"{path}: cannot read locations file: {e}") from e
    except ValueError as e:
        raise ConfigError(f"{path}: invalid JSON: {e}") from e

    records = data.get("locations") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ConfigError(f"{path}: expected a 'locations' list")
    return records


def load_locations(path: Path) -> List[Location]:
    """
    Read the configured locations, in file order.

    Accepted formats:
      - JSON: {"locations": [{"name", "latitude", "longitude", "area"?}, ...]}
        (a bare list is accepted too)
      - CSV with the same columns
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Locations file not found: {path}")

    out: List[Location] = []
    seen = set()
    for i, rec in enumerate(_read_records(path)):
        if not isinstance(rec, dict):
            raise ConfigError(f"{path}: entry {i} is not an object")

        missing = [k for k in ("name", "latitude", "longitude") if k not in rec]
        if missing:
            raise ConfigError(f"{path}: entry {i} missing required fields: {missing}")

        name = _clean_text(rec["name"]) or ""
        lat = _to_float(rec["latitude"])
        lon = _to_float(rec["longitude"])
        if not name:
            raise ConfigError(f"{path}: entry {i} has an empty name")
        if not np.isfinite(lat) or not np.isfinite(lon):
            raise ConfigError(f"{path}: {name} has non-numeric coordinates")
        if name in RESERVED_NAMES:
            raise ConfigError(f"{path}: location name {name!r} is reserved for a sheet column")
        if name in seen:
            raise ConfigError(f"{path}: duplicate location name {name!r}")
        seen.add(name)

        out.append(Location(name=name, latitude=lat, longitude=lon, area=_clean_text(rec.get("area"))))

    return out


def group_by_area(locations: Iterable[Location]) -> List[Tuple[Optional[str], List[Location]]]:
    """Group by area label, areas in order of first appearance."""
    groups: Dict[Optional[str], List[Location]] = {}
    for loc in locations:
        groups.setdefault(loc.area, []).append(loc)
    return list(groups.items())
