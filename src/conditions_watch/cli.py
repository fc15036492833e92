from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from dotenv import find_dotenv, load_dotenv

from .config import Settings
from .locations import load_locations
from .pipeline import build_writer, run_once
from .sample_data import generate_sample_frame, upload_sample_data
from .sheet_layout import LAYOUTS


logger = logging.getLogger("conditions_watch")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _settings(args: argparse.Namespace, require_sheet: bool) -> Settings:
    settings = Settings.from_env(require_sheet=require_sheet)
    overrides = {}
    if args.locations:
        overrides["locations_path"] = Path(args.locations)
    if args.layout:
        overrides["layout"] = args.layout
    if overrides:
        settings = replace(settings, **overrides)
    return settings


def _add_common(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--locations", default=None, help="Locations file (.json or .csv). Overrides LOCATIONS_PATH.")
    ap.add_argument("--layout", choices=LAYOUTS, default=None, help="Sheet layout. Overrides SHEET_LAYOUT.")
    ap.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING...).")


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))

    ap = argparse.ArgumentParser(description="Fetch current weather for each location and append it to a Google Sheet.")
    ap.add_argument("--dry-run", action="store_true", help="Fetch only; do not touch the sheet.")
    _add_common(ap)
    args = ap.parse_args(list(argv) if argv is not None else None)

    _configure_logging(args.log_level)
    logger.info("Starting weather check...")
    try:
        settings = _settings(args, require_sheet=not args.dry_run)
        run_once(settings, dry_run=bool(args.dry_run))
    except Exception as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("Done!")
    return 0


def sample_main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))

    ap = argparse.ArgumentParser(description="Upload synthetic temperature history for the configured locations.")
    ap.add_argument("--days", type=int, default=66, help="Number of past days to generate.")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for reproducible noise.")
    _add_common(ap)
    args = ap.parse_args(list(argv) if argv is not None else None)

    _configure_logging(args.log_level)
    logger.info("Starting sample data generation...")
    try:
        settings = _settings(args, require_sheet=True)
        locations = load_locations(settings.locations_path)
        end = datetime.now(timezone.utc).date()
        frame = generate_sample_frame(locations, end, days=args.days, rng=np.random.default_rng(args.seed))
        logger.info("Locations: %s", ", ".join(loc.name for loc in locations))
        n = upload_sample_data(build_writer(settings), frame)
    except Exception as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("Done! %d sample rows have been added to your sheet.", n)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
