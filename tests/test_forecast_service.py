import unittest
from datetime import datetime
from unittest import mock

from hourcast.data_sources import CallableForecastDataSource
from hourcast.domain import InsightKind, Location, RawHourlySeries, ThemeTag, Tier
from hourcast.errors import FetchError, InvalidLocation, MalformedForecast
from hourcast.forecast_normalizer import slot_id_for
from hourcast.forecast_service import build_preview, summarize
from hourcast.kv_store import InMemoryKeyValueStore
from hourcast.task_store import save_tasks
from tests.helpers import make_records

TIMES = ["2024-01-01T08:00", "2024-01-01T09:00", "2024-01-01T10:00", "2024-01-01T11:00"]


def _series(temps=(64, 66, 42, 60), codes=(0, 1, 61, 95)):
    return RawHourlySeries(times=list(TIMES), temperatures_f=list(temps), weather_codes=list(codes))


class _RecordingSource:
    def __init__(self, series=None, exc=None):
        self.series = series
        self.exc = exc
        self.calls = []

    def __call__(self, lat, lon):
        self.calls.append((lat, lon))
        if self.exc is not None:
            raise self.exc
        return self.series


class TestBuildPreview(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.location = Location(name="Chicago", latitude=41.88, longitude=-87.63)

    def test_builds_records_insights_and_current_hour(self):
        source = _RecordingSource(_series())
        preview = build_preview(
            self.location,
            data_source=CallableForecastDataSource(source),
            store=self.store,
            now=datetime(2024, 1, 1, 10, 20),
        )

        self.assertEqual(source.calls, [(41.88, -87.63)])
        self.assertEqual([r.tier for r in preview.records], [Tier.GOOD, Tier.GOOD, Tier.BAD, Tier.UNSUITABLE])
        self.assertEqual(preview.current.timestamp, "2024-01-01T10:00")
        self.assertEqual(preview.theme, ThemeTag.RAIN)
        self.assertTrue(preview.recommendations)
        self.assertTrue(all(item.kind == InsightKind.RECOMMENDATION for item in preview.recommendations))
        self.assertTrue(any("Thunderstorm" in item.message for item in preview.anomalies))
        self.assertIsNotNone(preview.generated_at)

    def test_reattaches_persisted_tasks(self):
        slot = slot_id_for(self.location.key, "2024-01-01T09:00")
        save_tasks(self.store, slot, ["walk dog"])

        preview = build_preview(
            self.location,
            data_source=CallableForecastDataSource(_RecordingSource(_series())),
            store=self.store,
        )

        self.assertEqual(preview.records[1].tasks, ["walk dog"])
        self.assertEqual(preview.records[0].tasks, [])

    def test_accepts_mapping_location(self):
        source = _RecordingSource(_series())
        preview = build_preview(
            {"name": "Chicago", "latitude": 41.88, "longitude": -87.63},
            data_source=CallableForecastDataSource(source),
            store=self.store,
        )
        self.assertEqual(preview.location, self.location)

    def test_invalid_location_rejected_before_fetch(self):
        source = _RecordingSource(_series())
        for bad in ({"latitude": 95, "longitude": 0}, {"latitude": None, "longitude": 10}, {"latitude": 0, "longitude": 181}):
            with self.assertRaises(InvalidLocation):
                build_preview(bad, data_source=CallableForecastDataSource(source), store=self.store)
        self.assertEqual(source.calls, [])

    def test_fetch_error_propagates(self):
        source = _RecordingSource(exc=FetchError("timeout"))
        with self.assertRaises(FetchError):
            build_preview(self.location, data_source=CallableForecastDataSource(source), store=self.store)
        self.assertEqual(len(source.calls), 1)

    def test_malformed_series_propagates(self):
        series = RawHourlySeries(times=list(TIMES), temperatures_f=[60, 61], weather_codes=[0, 0, 0, 0])
        with self.assertRaises(MalformedForecast):
            build_preview(
                self.location,
                data_source=CallableForecastDataSource(_RecordingSource(series)),
                store=self.store,
            )


if __name__ == "__main__":
    unittest.main()


class _SteppingClock(datetime):
    """datetime whose now() jumps two hours on every call."""

    calls = 0

    @classmethod
    def now(cls, tz=None):
        cls.calls += 1
        return datetime(2024, 1, 1, 7 + 2 * cls.calls, 0, tzinfo=tz)


class TestSummarize(unittest.TestCase):
    def test_current_hour_and_theme_come_from_one_clock_reading(self):
        records = make_records(
            ["2024-01-01T09:00", "2024-01-01T11:00"],
            [64, 60],
            [0, 95],
        )
        _SteppingClock.calls = 0
        with mock.patch("hourcast.forecast_service.datetime", _SteppingClock):
            preview = summarize(Location(latitude=41.88, longitude=-87.63), records)

        self.assertEqual(preview.current.timestamp, "2024-01-01T09:00")
        self.assertEqual(preview.theme, ThemeTag.CLEAR)
