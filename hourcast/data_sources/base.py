"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from hourcast.domain import RawHourlySeries


class ForecastDataSource(Protocol):
    """Anything that can produce an hourly temperature/weather-code series."""

    def fetch_hourly_series(self, latitude: float, longitude: float) -> RawHourlySeries:
        """Return parallel arrays of times, temperatures (F) and WMO codes.

        Raises FetchError when the backend is unreachable and InvalidLocation
        when it rejects the coordinates.
        """
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap a callable so tests and alternate backends can be swapped in."""

    hourly_series: Callable[..., RawHourlySeries]

    def fetch_hourly_series(self, latitude: float, longitude: float) -> RawHourlySeries:
        """Delegate to the configured callable."""
        return self.hourly_series(latitude, longitude)
