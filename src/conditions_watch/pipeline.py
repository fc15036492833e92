from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from weather.met_no import MetNoClient
from weather.open_meteo import OpenMeteoClient

from .collector import Fetch, Reading, collect_readings
from .config import Settings
from .locations import Location, group_by_area, load_locations
from .sheets import SheetWriter, build_sheets_service


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    date: str
    hour: str
    locations: List[Location]
    readings: List[Reading]
    rows_written: int = 0
    dry_run: bool = False


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def date_and_hour(now: datetime) -> Tuple[str, str]:
    """UTC date (YYYY-MM-DD) and hour (HH) a run is filed under."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d"), now.strftime("%H")


def build_fetcher(settings: Settings) -> Fetch:
    cloud_source = None
    if settings.cloud_cover_source == "open-meteo":
        cloud_source = OpenMeteoClient(user_agent=settings.user_agent).fetch_cloud_cover
    return MetNoClient(user_agent=settings.user_agent, cloud_cover_source=cloud_source).fetch


def build_writer(settings: Settings) -> SheetWriter:
    settings.require_sheet_access()
    service = build_sheets_service(settings.google_credentials)
    return SheetWriter(
        service,
        spreadsheet_id=settings.sheet_id,
        sheet_name=settings.sheet_name,
        layout=settings.layout,
        fields=settings.fields,
    )


def run_once(
    settings: Settings,
    *,
    now: Optional[datetime] = None,
    fetch: Optional[Fetch] = None,
    writer: Optional[SheetWriter] = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """
    End-to-end: load locations -> fetch each in turn -> append to the sheet.

    `now` fixes the Date/Hour the rows are filed under. With `dry_run` the
    sheet is never touched (no writer is built, no credentials needed).
    """
    date, hour = date_and_hour(now or _utc_now())

    locations = load_locations(settings.locations_path)
    areas = [a for a, _ in group_by_area(locations) if a]
    if areas:
        logger.info("Loaded %d locations in %d areas", len(locations), len(areas))
    else:
        logger.info("Loaded %d locations", len(locations))

    readings = collect_readings(
        locations,
        fetch or build_fetcher(settings),
        delay_s=settings.fetch_delay_s,
        sleep=sleep,
    )

    if dry_run:
        logger.info("Dry run: skipping sheet write (%d readings for %s %s)", len(readings), date, hour)
        return RunResult(date=date, hour=hour, locations=locations, readings=readings, dry_run=True)

    logger.info("Writing to Google Sheets...")
    writer = writer or build_writer(settings)
    n = writer.write(readings, date, hour)
    logger.info("Appended %d rows", n)
    return RunResult(date=date, hour=hour, locations=locations, readings=readings, rows_written=n)
