from __future__ import annotations

from pathlib import Path

import pytest

from conditions_watch.config import Settings
from conditions_watch.errors import ConfigError


ENV = {"SHEET_ID": "abc123", "GOOGLE_CREDENTIALS": '{"type": "service_account", "client_email": "x@y"}'}


def test_defaults():
    s = Settings.from_env(ENV)
    assert s.sheet_id == "abc123"
    assert s.google_credentials["type"] == "service_account"
    assert s.sheet_name == "Sheet1"
    assert s.layout == "long"
    assert s.fields == ("area", "precipitation", "cloud_cover")
    assert s.locations_path == Path("config/locations.json")
    assert s.cloud_cover_source == "open-meteo"
    assert s.fetch_delay_s == 1.0


def test_overrides():
    s = Settings.from_env(
        {
            **ENV,
            "SHEET_NAME": "Weather",
            "SHEET_LAYOUT": "WIDE",
            "SHEET_FIELDS": "precipitation",
            "LOCATIONS_PATH": "conf/places.csv",
            "CLOUD_COVER_SOURCE": "met-no",
            "FETCH_DELAY_S": "0",
        }
    )
    assert (s.sheet_name, s.layout, s.fields) == ("Weather", "wide", ("precipitation",))
    assert s.locations_path == Path("conf/places.csv")
    assert s.cloud_cover_source == "met-no"
    assert s.fetch_delay_s == 0.0


def test_credentials_are_not_in_repr():
    assert "service_account" not in repr(Settings.from_env(ENV))


@pytest.mark.parametrize(
    "env, match",
    [
        ({"GOOGLE_CREDENTIALS": ENV["GOOGLE_CREDENTIALS"]}, "SHEET_ID"),
        ({"SHEET_ID": "abc"}, "GOOGLE_CREDENTIALS"),
        ({**ENV, "GOOGLE_CREDENTIALS": "{oops"}, "not valid JSON"),
        ({**ENV, "GOOGLE_CREDENTIALS": "[1, 2]"}, "JSON object"),
        ({**ENV, "SHEET_LAYOUT": "tall"}, "SHEET_LAYOUT"),
        ({**ENV, "SHEET_FIELDS": "humidity"}, "unknown fields"),
        ({**ENV, "CLOUD_COVER_SOURCE": "radar"}, "CLOUD_COVER_SOURCE"),
        ({**ENV, "FETCH_DELAY_S": "soon"}, "FETCH_DELAY_S"),
    ],
)
def test_invalid_env(env, match):
    with pytest.raises(ConfigError, match=match):
        Settings.from_env(env)


def test_dry_run_settings_do_not_need_sheet():
    s = Settings.from_env({}, require_sheet=False)
    assert s.sheet_id == ""
    assert s.google_credentials is None
