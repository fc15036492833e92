"""
Google Sheets access for the readings sheet (Sheets API v4, values.*).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .collector import Reading
from .config import SHEETS_SCOPES
from .errors import SheetApiError
from .sheet_layout import (
    APPEND_BATCH_SIZE,
    TRACKED_FIELDS,
    build_rows,
    chunked,
    reconcile_header,
)


logger = logging.getLogger(__name__)


def build_sheets_service(credentials_info: Dict[str, Any]):
    """Sheets v4 service authenticated as a service account."""
    creds = service_account.Credentials.from_service_account_info(credentials_info, scopes=SHEETS_SCOPES)
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def _status(e: HttpError) -> Optional[int]:
    resp = getattr(e, "resp", None)
    status = getattr(resp, "status", None)
    return int(status) if status is not None else None


class SheetWriter:
    """Append readings to one tab of a spreadsheet."""

    def __init__(
        self,
        service,
        spreadsheet_id: str,
        sheet_name: str = "Sheet1",
        layout: str = "long",
        fields: Sequence[str] = TRACKED_FIELDS,
        batch_size: int = APPEND_BATCH_SIZE,
    ) -> None:
        self._values = service.spreadsheets().values()
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.layout = layout
        self.fields = tuple(fields)
        self.batch_size = batch_size

    def _range(self, a1: str) -> str:
        return f"{self.sheet_name}!{a1}"

    def _execute(self, what: str, request) -> Dict[str, Any]:
        try:
            return request.execute()
        except HttpError as e:
            raise SheetApiError(f"Sheets API {what} failed: {e}", status=_status(e)) from e
        except (GoogleAuthError, OSError) as e:
            raise SheetApiError(f"Sheets API {what} failed: {e}") from e

    def read_header(self) -> List[str]:
        resp = self._execute(
            "values.get",
            self._values.get(spreadsheetId=self.spreadsheet_id, range=self._range("A1:ZZ1")),
        )
        values = resp.get("values") or []
        return [str(v) for v in values[0]] if values else []

    def write_header(self, header: Sequence[str]) -> None:
        self._execute(
            "values.update",
            self._values.update(
                spreadsheetId=self.spreadsheet_id,
                range=self._range("A1"),
                valueInputOption="RAW",
                body={"values": [list(header)]},
            ),
        )

    def append_rows(self, rows: Sequence[List]) -> int:
        """Append rows in batches; returns the number of rows sent."""
        n_batches = (len(rows) + self.batch_size - 1) // self.batch_size
        for i, batch in enumerate(chunked(rows, self.batch_size), start=1):
            if n_batches > 1:
                logger.info("Uploading batch %d/%d...", i, n_batches)
            self._execute(
                "values.append",
                self._values.append(
                    spreadsheetId=self.spreadsheet_id,
                    range=self._range("A:ZZ"),
                    valueInputOption="RAW",
                    body={"values": [list(r) for r in batch]},
                ),
            )
        return len(rows)

    def ensure_header(self, incoming: Sequence[str]) -> List[str]:
        """
        Current header, written first if the sheet is empty or (wide layout)
        if new locations have to be added as columns.
        """
        existing = self.read_header()
        header = reconcile_header(existing, incoming, self.layout, self.fields)

        if not existing:
            logger.info("Creating headers: %s", ", ".join(header))
            self.write_header(header)
        elif header != existing:
            logger.info("Adding new location columns: %s", ", ".join(header[len(existing):]))
            self.write_header(header)
        return header

    def write(self, readings: Sequence[Reading], current_date: str, current_hour: str) -> int:
        header = self.ensure_header([r.location for r in readings])

        if self.layout == "long":
            dropped = [
                col for f, col in (("area", "Area"), ("precipitation", "Precipitation"), ("cloud_cover", "CloudCover"))
                if f in self.fields and col not in header
            ]
            if dropped:
                logger.warning("Existing header has no column for %s; values not written", ", ".join(dropped))

        rows = build_rows(readings, header, self.layout, current_date, current_hour)
        return self.append_rows(rows)
