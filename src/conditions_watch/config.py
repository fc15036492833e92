from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from weather.met_no import DEFAULT_USER_AGENT

from .errors import ConfigError
from .sheet_layout import LAYOUTS, TRACKED_FIELDS

CLOUD_COVER_SOURCES = ("open-meteo", "met-no")
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


@dataclass(frozen=True)
class Settings:
    sheet_id: str = ""
    google_credentials: Optional[Dict[str, Any]] = field(default=None, repr=False)

    sheet_name: str = "Sheet1"
    layout: str = "long"
    fields: Tuple[str, ...] = TRACKED_FIELDS
    locations_path: Path = Path("config/locations.json")
    user_agent: str = DEFAULT_USER_AGENT
    cloud_cover_source: str = "open-meteo"
    fetch_delay_s: float = 1.0  # pause between two provider calls

    def require_sheet_access(self) -> None:
        if not self.sheet_id:
            raise ConfigError("Missing SHEET_ID (set it in .env).")
        if not self.google_credentials:
            raise ConfigError("Missing GOOGLE_CREDENTIALS (set it in .env).")

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None, *, require_sheet: bool = True) -> "Settings":
        env = os.environ if env is None else env

        def get(name: str, default: str = "") -> str:
            return (env.get(name) or default).strip()

        raw_creds = get("GOOGLE_CREDENTIALS")
        creds: Optional[Dict[str, Any]] = None
        if raw_creds:
            try:
                creds = json.loads(raw_creds)
            except ValueError as e:
                raise ConfigError(f"GOOGLE_CREDENTIALS is not valid JSON: {e}") from e
            if not isinstance(creds, dict):
                raise ConfigError("GOOGLE_CREDENTIALS must be a JSON object.")

        layout = get("SHEET_LAYOUT", "long").lower()
        if layout not in LAYOUTS:
            raise ConfigError(f"SHEET_LAYOUT must be one of {LAYOUTS}, got {layout!r}.")

        fields_raw = get("SHEET_FIELDS", ",".join(TRACKED_FIELDS))
        fields = tuple(s.strip() for s in fields_raw.split(",") if s.strip())
        unknown = [f for f in fields if f not in TRACKED_FIELDS]
        if unknown:
            raise ConfigError(f"SHEET_FIELDS has unknown fields: {unknown}")

        source = get("CLOUD_COVER_SOURCE", "open-meteo").lower()
        if source not in CLOUD_COVER_SOURCES:
            raise ConfigError(f"CLOUD_COVER_SOURCE must be one of {CLOUD_COVER_SOURCES}, got {source!r}.")

        try:
            delay = float(get("FETCH_DELAY_S", "1.0"))
        except ValueError as e:
            raise ConfigError(f"FETCH_DELAY_S must be a number: {e}") from e

        settings = Settings(
            sheet_id=get("SHEET_ID"),
            google_credentials=creds,
            sheet_name=get("SHEET_NAME", "Sheet1"),
            layout=layout,
            fields=fields,
            locations_path=Path(get("LOCATIONS_PATH", "config/locations.json")),
            user_agent=get("MET_NO_USER_AGENT", DEFAULT_USER_AGENT),
            cloud_cover_source=source,
            fetch_delay_s=max(0.0, delay),
        )
        if require_sheet:
            settings.require_sheet_access()
        return settings
