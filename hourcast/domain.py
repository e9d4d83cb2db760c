"""Domain vocabulary and schemas for hourly forecast previews.

This module is the contract between the classification/insight engine, the
task store and the HTTP layer: enums, display tokens and the Pydantic models
that flow through the pipeline. No interpretation logic lives here beyond
field validation.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hourcast.errors import InvalidLocation


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class Tier(str, Enum):
    """Suitability tier for a single forecast hour."""
    GOOD = "good"
    BAD = "bad"
    UNSUITABLE = "unsuitable"


class Icon(str, Enum):
    """Display icon token for an hour."""
    CLEAR = "clear"
    CLOUDY = "cloudy"
    DEFAULT_MILD = "default-mild"
    RAIN = "rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"
    HOT = "hot"
    COLD = "cold"

    @property
    def glyph(self) -> str:
        """Emoji rendered wherever the icon is interpolated into text."""
        return ICON_GLYPHS[self]


ICON_GLYPHS: Dict[Icon, str] = {
    Icon.CLEAR: "☀️",
    Icon.CLOUDY: "☁️",
    Icon.DEFAULT_MILD: "🌤️",
    Icon.RAIN: "🌧️",
    Icon.SNOW: "❄️",
    Icon.THUNDERSTORM: "⚡",
    Icon.HOT: "🔥",
    Icon.COLD: "🥶",
}


CONDITION_LABELS: Dict[Tier, str] = {
    Tier.GOOD: "Good Conditions",
    Tier.BAD: "Bad Conditions",
    Tier.UNSUITABLE: "Unsuitable Conditions",
}


class ThemeTag(str, Enum):
    """Coarse page theme derived from the current hour."""
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"
    HOT = "hot"
    COLD = "cold"
    DEFAULT = "default"


class InsightKind(str, Enum):
    """Kind of insight surfaced next to the hourly cards."""
    RECOMMENDATION = "recommendation"
    ANOMALY = "anomaly"


class Classification(_StrictBaseModel):
    """Result of classifying one (weather code, temperature) pair."""
    tier: Tier
    icon: Icon
    condition_label: str


class Location(_StrictBaseModel):
    """A named place; its identity is the coordinate pair."""
    name: str = ""
    latitude: float
    longitude: float

    @field_validator("latitude", "longitude", mode="after")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be a finite number")
        return v

    @field_validator("latitude", mode="after")
    @classmethod
    def _latitude_range(cls, v: float) -> float:
        if not -90.0 <= v <= 90.0:
            raise ValueError(f"latitude {v} outside [-90, 90]")
        return v

    @field_validator("longitude", mode="after")
    @classmethod
    def _longitude_range(cls, v: float) -> float:
        if not -180.0 <= v <= 180.0:
            raise ValueError(f"longitude {v} outside [-180, 180]")
        return v

    @property
    def key(self) -> str:
        """Stable identity used to derive slot ids and registry keys."""
        return f"{self.latitude:.4f},{self.longitude:.4f}"

    @classmethod
    def parse(cls, name: Any = "", latitude: Any = None, longitude: Any = None) -> "Location":
        """Build a Location from loosely typed input, raising InvalidLocation on any problem."""
        if latitude is None or longitude is None:
            raise InvalidLocation("latitude and longitude are required")
        try:
            return cls(name=str(name or ""), latitude=latitude, longitude=longitude)
        except ValidationError as exc:
            messages = "; ".join(err.get("msg", "") for err in exc.errors())
            raise InvalidLocation(messages or "invalid coordinates") from exc


class RawHourlySeries(BaseModel):
    """Hourly series as returned by a forecast data source (parallel arrays).

    Fields are deliberately loose; shape checks happen in the normalizer.
    """
    times: Any = None
    temperatures_f: Any = None
    weather_codes: Any = None


class HourRecord(_StrictBaseModel):
    """One classified forecast hour with its attached tasks."""
    slot_id: str
    timestamp: str
    local_time: datetime
    temperature_f: float
    weather_code: int
    tier: Tier
    icon: Icon
    condition_label: str
    tasks: List[str] = Field(default_factory=list)
    draft: str = ""


class InsightItem(_StrictBaseModel):
    """Recommendation or anomaly line; score is for ranking only."""
    kind: InsightKind
    message: str
    score: float | None = None


class ForecastPreview(_StrictBaseModel):
    """Everything the hourly view renders for one location."""
    location: Location
    records: List[HourRecord] = Field(default_factory=list)
    recommendations: List[InsightItem] = Field(default_factory=list)
    anomalies: List[InsightItem] = Field(default_factory=list)
    current: HourRecord | None = None
    theme: ThemeTag = ThemeTag.DEFAULT
    generated_at: datetime | None = None
