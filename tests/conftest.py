from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httplib2
import pytest
from googleapiclient.errors import HttpError

from weather.met_no import WeatherFragment


def make_http_error(status: int, message: str = "boom") -> HttpError:
    resp = httplib2.Response({"status": status})
    resp.reason = message
    content = json.dumps({"error": {"code": status, "message": message}}).encode()
    return HttpError(resp, content, uri="https://sheets.googleapis.com/v4/spreadsheets/test")


class _Request:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeValues:
    """In-memory stand-in for service.spreadsheets().values()."""

    def __init__(self, sheet: "FakeSheet") -> None:
        self.sheet = sheet

    def _maybe_fail(self, op: str) -> None:
        if op in self.sheet.fail_on:
            failure = self.sheet.fail_on[op]
            raise make_http_error(failure) if isinstance(failure, int) else failure

    def get(self, spreadsheetId: str, range: str):
        def run():
            self.sheet.calls.append(("get", range))
            self._maybe_fail("get")
            if self.sheet.header:
                return {"range": range, "values": [list(self.sheet.header)]}
            return {"range": range}

        return _Request(run)

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):
        def run():
            self.sheet.calls.append(("update", range))
            self._maybe_fail("update")
            self.sheet.header = list(body["values"][0])
            return {"updatedRange": range}

        return _Request(run)

    def append(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):
        def run():
            self.sheet.calls.append(("append", range))
            self._maybe_fail("append")
            self.sheet.rows.extend(list(r) for r in body["values"])
            return {"updates": {"updatedRows": len(body["values"])}}

        return _Request(run)


class _Spreadsheets:
    def __init__(self, sheet: "FakeSheet") -> None:
        self._sheet = sheet

    def values(self) -> FakeValues:
        return FakeValues(self._sheet)


class FakeSheet:
    """Mimics the googleapiclient Sheets v4 service for one spreadsheet."""

    def __init__(self, header: Optional[List[str]] = None) -> None:
        self.header: List[str] = list(header or [])
        self.rows: List[List[Any]] = []
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, Any] = {}  # op -> HTTP status or exception to raise

    def spreadsheets(self) -> _Spreadsheets:
        return _Spreadsheets(self)

    def ops(self) -> List[str]:
        return [op for op, _ in self.calls]


@pytest.fixture
def fake_sheet() -> FakeSheet:
    return FakeSheet()


@pytest.fixture
def locations_file(tmp_path: Path) -> Path:
    path = tmp_path / "locations.json"
    path.write_text(
        json.dumps(
            {
                "locations": [
                    {"name": "Oslo", "latitude": 59.91, "longitude": 10.75, "area": "East"},
                    {"name": "Bergen", "latitude": 60.39, "longitude": 5.32, "area": "West"},
                    {"name": "Trondheim", "latitude": 63.43, "longitude": 10.39},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def compact_payload(
    temperature: float = 5.2,
    time: str = "2025-12-03T00:00:00Z",
    precip: Optional[List[Optional[float]]] = None,
    cloud: Optional[float] = None,
) -> Dict[str, Any]:
    """Minimal Locationforecast compact body."""
    precip = precip if precip is not None else [0.0]
    series = []
    for i, amount in enumerate(precip):
        instant = {"air_temperature": temperature + i}
        if i == 0 and cloud is not None:
            instant["cloud_area_fraction"] = cloud
        data: Dict[str, Any] = {"instant": {"details": instant}}
        if amount is not None:
            data["next_1_hours"] = {"details": {"precipitation_amount": amount}}
        series.append({"time": time if i == 0 else f"step-{i}", "data": data})
    return {"type": "Feature", "properties": {"timeseries": series}}


class ScriptedFetch:
    """fetch(lat, lon) returning canned fragments and recording calls."""

    def __init__(self, fragments, fail_at: Optional[int] = None, error: Optional[Exception] = None) -> None:
        self.fragments = list(fragments)
        self.fail_at = fail_at
        self.error = error
        self.calls: List[tuple] = []

    def __call__(self, lat: float, lon: float) -> WeatherFragment:
        i = len(self.calls)
        self.calls.append((lat, lon))
        if self.fail_at is not None and i == self.fail_at:
            raise self.error
        return self.fragments[i % len(self.fragments)]
