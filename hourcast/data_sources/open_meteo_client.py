"""Fetch hourly temperature and weather codes from the Open-Meteo forecast API."""
from __future__ import annotations

import requests

from hourcast.domain import RawHourlySeries
from hourcast.errors import FetchError, InvalidLocation
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

HOURLY_VARS = ["temperature_2m", "weather_code"]

EXPECTED_HOURLY_UNITS = {
    "temperature_2m": "°F",
    "weather_code": "wmo code",
}

# Acceptable alternative units that should not trigger warnings (API/localized differences).
ALLOWED_HOURLY_UNIT_SYNONYMS = {
    "temperature_2m": {"°F", "F"},
    "weather_code": {"wmo code", "WMO code", ""},
}


def _warn_on_unexpected_units(units: dict | None, *, context: str):
    """Log a warning if Open-Meteo returns units we did not request/expect."""
    if not units:
        return
    for field, expected in EXPECTED_HOURLY_UNITS.items():
        actual = units.get(field)
        if actual is None or actual == expected:
            continue
        allowed = ALLOWED_HOURLY_UNIT_SYNONYMS.get(field, set())
        if actual not in allowed:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected},
            )


def _error_reason(resp) -> str:
    """Best-effort extraction of Open-Meteo's error message."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or ""
    if isinstance(body, dict):
        return str(body.get("reason") or "")
    return ""


def fetch_hourly_series(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    forecast_days: int = 1,
    temperature_unit: str = "fahrenheit",
    timeout: float = 10.0,
) -> RawHourlySeries:
    """
    Fetch `forecast_days` of hourly temperature and WMO weather codes.

    With timezone="auto" Open-Meteo reports naive local wall-clock times for
    the requested coordinates, which is what hour-of-day logic downstream
    expects. Missing arrays are passed through as None; the normalizer decides
    whether the series is usable.
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(HOURLY_VARS),
        "forecast_days": forecast_days,
        "timezone": timezone,
        "temperature_unit": temperature_unit,
    }

    logger.debug("Requesting Open-Meteo hourly forecast", extra={"latitude": latitude, "longitude": longitude})
    try:
        resp = session.get(OPEN_METEO_WEATHER_URL, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Open-Meteo request failed: {exc}") from exc

    if resp.status_code == 400:
        raise InvalidLocation(_error_reason(resp) or "Open-Meteo rejected the coordinates")
    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        raise FetchError(f"Open-Meteo returned HTTP {resp.status_code}") from exc

    try:
        data = resp.json()
    except ValueError as exc:
        raise FetchError("Open-Meteo returned a non-JSON body") from exc
    if not isinstance(data, dict):
        raise FetchError("Open-Meteo returned an unexpected payload")

    hourly = data.get("hourly")
    if not isinstance(hourly, dict):
        hourly = {}
    _warn_on_unexpected_units(data.get("hourly_units"), context="weather_hourly")

    return RawHourlySeries(
        times=hourly.get("time"),
        temperatures_f=hourly.get("temperature_2m"),
        weather_codes=hourly.get("weather_code"),
    )
