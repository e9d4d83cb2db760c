"""Turn a raw hourly series into classified HourRecords.

Pure transform: the only outside call is the injected task lookup, which the
caller wires to the persistence store. Output order always matches input
order.
"""

from __future__ import annotations

import hashlib
import math
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Sequence

from hourcast.classifier import classify
from hourcast.domain import HourRecord, Tier
from hourcast.errors import MalformedForecast
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_normalizer")

TaskLookup = Callable[[str], Sequence[str]]

SERIES_FIELDS = ("times", "temperatures_f", "weather_codes")

# Cards hide unsuitable hours until the user opts in.
DEFAULT_VISIBLE_TIERS = frozenset({Tier.GOOD, Tier.BAD})


def _get_field(raw: Any, key: str, default=None):
    """Support attribute, dict, or Mapping access for raw series."""
    if raw is None:
        return default
    if isinstance(raw, Mapping):
        return raw.get(key, default)
    return getattr(raw, key, default)


def slot_id_for(location_key: str, timestamp: str) -> str:
    """Stable id for one hour at one place; persisted tasks are keyed by it."""
    digest = hashlib.sha1(f"{location_key}|{timestamp}".encode("utf-8")).hexdigest()
    return digest[:16]


def _parse_time(value: Any, index: int) -> tuple[str, datetime]:
    """Return (source string, parsed datetime) for a timestamp entry."""
    if isinstance(value, datetime):
        return value.isoformat(), value
    if not isinstance(value, str):
        raise MalformedForecast(f"times[{index}] is not a timestamp: {value!r}")
    try:
        return value, datetime.fromisoformat(value)
    except ValueError as exc:
        raise MalformedForecast(f"times[{index}] is not ISO-8601: {value!r}") from exc


def _parse_temperature(value: Any, index: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedForecast(f"temperatures_f[{index}] is not numeric: {value!r}")
    temp = float(value)
    if not math.isfinite(temp):
        raise MalformedForecast(f"temperatures_f[{index}] is not finite: {value!r}")
    return temp


def _parse_code(value: Any, index: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedForecast(f"weather_codes[{index}] is not numeric: {value!r}")
    if not math.isfinite(value) or int(value) != value:
        raise MalformedForecast(f"weather_codes[{index}] is not an integer code: {value!r}")
    return int(value)


def _require_arrays(raw: Any) -> tuple[list, list, list]:
    """Pull the three parallel arrays out of `raw`, enforcing presence and equal length."""
    arrays = []
    for name in SERIES_FIELDS:
        value = _get_field(raw, name)
        if value is None:
            raise MalformedForecast(f"hourly series is missing '{name}'")
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise MalformedForecast(f"hourly series field '{name}' is not an array")
        arrays.append(list(value))

    times, temps, codes = arrays
    if not (len(times) == len(temps) == len(codes)):
        raise MalformedForecast(
            f"hourly arrays differ in length: times={len(times)}, "
            f"temperatures_f={len(temps)}, weather_codes={len(codes)}"
        )
    return times, temps, codes


def normalize(raw: Any, location_key: str, lookup: TaskLookup | None = None) -> List[HourRecord]:
    """
    Build one HourRecord per input index, in input order.

    `raw` may be a RawHourlySeries, a mapping or any object exposing `times`,
    `temperatures_f` and `weather_codes`. `lookup(slot_id)` returns previously
    persisted tasks for a slot; it defaults to "no tasks".
    """
    times, temps, codes = _require_arrays(raw)

    records: List[HourRecord] = []
    for i, (t, temp_raw, code_raw) in enumerate(zip(times, temps, codes)):
        timestamp, local_time = _parse_time(t, i)
        temperature_f = _parse_temperature(temp_raw, i)
        weather_code = _parse_code(code_raw, i)
        classification = classify(weather_code, temperature_f)
        slot_id = slot_id_for(location_key, timestamp)
        tasks = list(lookup(slot_id)) if lookup else []

        records.append(
            HourRecord(
                slot_id=slot_id,
                timestamp=timestamp,
                local_time=local_time,
                temperature_f=temperature_f,
                weather_code=weather_code,
                tier=classification.tier,
                icon=classification.icon,
                condition_label=classification.condition_label,
                tasks=tasks,
            )
        )

    logger.debug(
        "Normalized hourly series",
        extra={"location_key": location_key, "records": len(records)},
    )
    return records


def filter_by_tier(records: Sequence[HourRecord], tiers: Iterable[Tier] | None = None) -> List[HourRecord]:
    """Return the records whose tier is visible; unsuitable hours are hidden by default."""
    visible = frozenset(tiers) if tiers is not None else DEFAULT_VISIBLE_TIERS
    return [r for r in records if r.tier in visible]
