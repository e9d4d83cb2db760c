"""Deterministic weather classification for a single forecast hour.

Two independent mappings share the same inputs (WMO weather code, temperature
in Fahrenheit):

- classify(): suitability tier + icon for the hourly cards
- theme_tag(): coarse page theme

Precedence is significant in both. Thunderstorm beats temperature extremes,
and temperature extremes beat rain/snow, so a 20F drizzle is unsuitable (cold)
rather than merely bad (rain). Unknown codes never raise; they fall through to
the mild default.
"""

from __future__ import annotations

from hourcast.domain import CONDITION_LABELS, Classification, Icon, ThemeTag, Tier

THUNDERSTORM_MIN_CODE = 95
HOT_ABOVE_F = 95.0
COLD_BELOW_F = 32.0
DRIZZLE_RAIN_CODES = range(51, 68)  # 51-67
SNOW_CODES = range(71, 78)  # 71-77
SHOWER_MIN_CODE = 80
CLOUDY_CODES = range(1, 4)  # 1-3


def _result(tier: Tier, icon: Icon) -> Classification:
    """Bundle a tier/icon pair with its condition label."""
    return Classification(tier=tier, icon=icon, condition_label=CONDITION_LABELS[tier])


def classify(weather_code: int, temperature_f: float) -> Classification:
    """Map a (code, temperature) pair to its tier, icon and condition label."""
    if weather_code >= THUNDERSTORM_MIN_CODE:
        return _result(Tier.UNSUITABLE, Icon.THUNDERSTORM)

    if temperature_f > HOT_ABOVE_F:
        return _result(Tier.UNSUITABLE, Icon.HOT)
    if temperature_f < COLD_BELOW_F:
        return _result(Tier.UNSUITABLE, Icon.COLD)

    if weather_code in DRIZZLE_RAIN_CODES:
        return _result(Tier.BAD, Icon.RAIN)
    if weather_code in SNOW_CODES:
        return _result(Tier.BAD, Icon.SNOW)
    if weather_code >= SHOWER_MIN_CODE:
        return _result(Tier.BAD, Icon.RAIN)

    if weather_code == 0:
        return _result(Tier.GOOD, Icon.CLEAR)
    if weather_code in CLOUDY_CODES:
        return _result(Tier.GOOD, Icon.CLOUDY)
    return _result(Tier.GOOD, Icon.DEFAULT_MILD)


def theme_tag(weather_code: int, temperature_f: float) -> ThemeTag:
    """Map a (code, temperature) pair to the page theme.

    Order: thunderstorm > hot > cold > rain > snow > clear > cloudy > default.
    Showers (80+) count as rain.
    """
    if weather_code >= THUNDERSTORM_MIN_CODE:
        return ThemeTag.THUNDERSTORM
    if temperature_f > HOT_ABOVE_F:
        return ThemeTag.HOT
    if temperature_f < COLD_BELOW_F:
        return ThemeTag.COLD
    if weather_code in DRIZZLE_RAIN_CODES or weather_code >= SHOWER_MIN_CODE:
        return ThemeTag.RAIN
    if weather_code in SNOW_CODES:
        return ThemeTag.SNOW
    if weather_code == 0:
        return ThemeTag.CLEAR
    if weather_code in CLOUDY_CODES:
        return ThemeTag.CLOUDY
    return ThemeTag.DEFAULT
