"""Recommendations and anomaly alerts computed from classified hours.

Both outputs are recomputed from scratch for every record snapshot.
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

from hourcast.classifier import COLD_BELOW_F, HOT_ABOVE_F, THUNDERSTORM_MIN_CODE
from hourcast.domain import HourRecord, InsightItem, InsightKind, Tier
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="insight_engine")

TIER_WEIGHTS: Dict[Tier, float] = {
    Tier.GOOD: 3.0,
    Tier.BAD: 1.0,
    Tier.UNSUITABLE: -3.0,
}
DAYLIGHT_HOURS = (8, 18)  # inclusive, local hour-of-day
DAYLIGHT_WEIGHT = 1.5

MIN_RECOMMENDATION_SCORE = 1.0  # strictly greater than
MAX_RECOMMENDATIONS = 4
MAX_ANOMALIES = 6
SWING_THRESHOLD_F = 15.0


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def format_time(record: HourRecord) -> str:
    """Local wall-clock label, e.g. "14:00"."""
    return record.local_time.strftime("%H:%M")


def format_temp(temperature_f: float) -> str:
    return f"{round_half_away(temperature_f)}°"


def _temperature_weight(temp_f: float) -> float:
    """Comfort bonus/penalty for a temperature."""
    if 55.0 <= temp_f <= 82.0:
        return 2.0
    if 45.0 <= temp_f < 55.0:
        return 1.0
    if temp_f > 90.0 or temp_f < 35.0:
        return -2.0
    return 0.0


def _daylight_weight(record: HourRecord) -> float:
    start, end = DAYLIGHT_HOURS
    return DAYLIGHT_WEIGHT if start <= record.local_time.hour <= end else 0.0


def score_hour(record: HourRecord) -> float:
    """Ranking score for one hour: tier + temperature + daylight weights."""
    return TIER_WEIGHTS[record.tier] + _temperature_weight(record.temperature_f) + _daylight_weight(record)


def compute_recommendations(
    records: Sequence[HourRecord],
    *,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[InsightItem]:
    """
    Pick the best task windows.

    - Hours scoring at or below MIN_RECOMMENDATION_SCORE are dropped.
    - Survivors are ordered by score, highest first; ties keep chronological order.
    - At most `limit` windows are returned.
    """
    scored = [(score_hour(r), r) for r in records]
    eligible = [(s, r) for s, r in scored if s > MIN_RECOMMENDATION_SCORE]
    # sorted() is stable, so equal scores keep their input order
    ranked = sorted(eligible, key=lambda pair: pair[0], reverse=True)[:limit]

    return [
        InsightItem(
            kind=InsightKind.RECOMMENDATION,
            message=f"Task window {format_time(r)} • {r.condition_label} • {format_temp(r.temperature_f)}",
            score=s,
        )
        for s, r in ranked
    ]


def _anomaly_candidates(records: Sequence[HourRecord]) -> List[str]:
    """Raw anomaly messages in chronological order, duplicates included."""
    messages: List[str] = []
    prev: HourRecord | None = None
    for r in records:
        time_label = format_time(r)
        if r.tier == Tier.UNSUITABLE:
            messages.append(f"{time_label} alert • {r.condition_label} {r.icon.glyph}")
        if prev is not None:
            delta = r.temperature_f - prev.temperature_f
            if abs(delta) >= SWING_THRESHOLD_F:
                messages.append(f"{time_label} swing • ~{round_half_away(abs(delta))}° jump")
        if r.weather_code >= THUNDERSTORM_MIN_CODE:
            messages.append(f"{time_label} alert • Thunderstorm risk")
        if r.temperature_f > HOT_ABOVE_F:
            messages.append(f"{time_label} heat • {format_temp(r.temperature_f)}")
        if r.temperature_f < COLD_BELOW_F:
            messages.append(f"{time_label} freeze • {format_temp(r.temperature_f)}")
        prev = r
    return messages


def _dedupe_limit(messages: Sequence[str], max_items: int) -> List[str]:
    """Drop repeated messages (first occurrence wins) and cap the list."""
    seen = set()
    unique: List[str] = []
    for m in messages:
        if m in seen:
            continue
        seen.add(m)
        unique.append(m)
    return unique[:max_items]


def detect_anomalies(
    records: Sequence[HourRecord],
    *,
    limit: int = MAX_ANOMALIES,
) -> List[InsightItem]:
    """Alerts for unsuitable hours, temperature swings, storms, heat and freezes."""
    candidates = _anomaly_candidates(records)
    unique = _dedupe_limit(candidates, max_items=limit)
    if len(candidates) != len(unique):
        logger.debug(
            "Collapsed anomaly candidates",
            extra={"candidates": len(candidates), "kept": len(unique)},
        )
    return [InsightItem(kind=InsightKind.ANOMALY, message=m) for m in unique]


def build_insights(records: Sequence[HourRecord]) -> Tuple[List[InsightItem], List[InsightItem]]:
    """Return (recommendations, anomalies) for one record snapshot."""
    return compute_recommendations(records), detect_anomalies(records)
