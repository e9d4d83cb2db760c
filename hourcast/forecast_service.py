"""Assemble a full hourly preview for one location."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from hourcast.current_hour import dominant_theme, select_current
from hourcast.data_sources import ForecastDataSource
from hourcast.domain import ForecastPreview, HourRecord, Location
from hourcast.forecast_normalizer import normalize
from hourcast.insight_engine import build_insights
from hourcast.kv_store import KeyValueStore
from hourcast.task_store import store_lookup
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="forecast_service")


def _as_location(location: Location | Any) -> Location:
    """Accept a Location or any object/mapping with name/latitude/longitude."""
    if isinstance(location, Location):
        return location
    if isinstance(location, dict):
        return Location.parse(location.get("name"), location.get("latitude"), location.get("longitude"))
    return Location.parse(
        getattr(location, "name", ""),
        getattr(location, "latitude", None),
        getattr(location, "longitude", None),
    )


def summarize(location: Location, records: list[HourRecord], now: datetime | None = None) -> ForecastPreview:
    """Recompute insights, current hour and theme for a record snapshot."""
    if now is None:
        now = datetime.now()
    recommendations, anomalies = build_insights(records)
    return ForecastPreview(
        location=location,
        records=records,
        recommendations=recommendations,
        anomalies=anomalies,
        current=select_current(records, now),
        theme=dominant_theme(records, now),
        generated_at=datetime.now(timezone.utc),
    )


def build_preview(
    location: Location | Any,
    *,
    data_source: ForecastDataSource,
    store: KeyValueStore,
    now: datetime | None = None,
) -> ForecastPreview:
    """
    Validate the location, fetch its hourly series and build the preview.

    InvalidLocation is raised before any fetch. FetchError and
    MalformedForecast propagate unchanged; nothing is retried here.
    """
    loc = _as_location(location)

    logger.info(
        "Fetching hourly forecast",
        extra={"location": loc.name, "latitude": loc.latitude, "longitude": loc.longitude},
    )
    raw = data_source.fetch_hourly_series(loc.latitude, loc.longitude)
    records = normalize(raw, loc.key, store_lookup(store))
    preview = summarize(loc, records, now)

    logger.info(
        "Built forecast preview",
        extra={
            "records": len(records),
            "recommendations": len(preview.recommendations),
            "anomalies": len(preview.anomalies),
            "theme": preview.theme.value,
        },
    )
    return preview
