"""Shared builders for engine tests."""

from hourcast.forecast_normalizer import normalize

LOCATION_KEY = "41.8800,-87.6300"


def make_records(times, temps, codes, *, location_key=LOCATION_KEY, lookup=None):
    raw = {"times": list(times), "temperatures_f": list(temps), "weather_codes": list(codes)}
    return normalize(raw, location_key, lookup)
