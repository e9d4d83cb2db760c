import os
import unittest

from hourcast.config import Settings


class TestConfig(unittest.TestCase):
    def _with_env(self, name, value):
        previous = os.environ.get(name)
        os.environ[name] = value
        self.addCleanup(self._restore, name, previous)

    @staticmethod
    def _restore(name, previous):
        if previous is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = previous

    def test_settings_defaults(self):
        previous = os.environ.pop("HOURCAST_FORECAST_DAYS", None)
        try:
            s = Settings()
            self.assertEqual(s.forecast_source, "open_meteo")
            self.assertEqual(s.forecast_days, 1)
            self.assertEqual(s.store_prefix, "hourcast:")
            self.assertFalse(s.allow_unsuitable_tasks_default)
        finally:
            if previous is not None:
                os.environ["HOURCAST_FORECAST_DAYS"] = previous

    def test_env_override(self):
        self._with_env("HOURCAST_FORECAST_DAYS", "3")
        self._with_env("HOURCAST_ALLOW_UNSUITABLE_TASKS_DEFAULT", "true")
        self._with_env("HOURCAST_FORECAST_SOURCE", " Open_Meteo ")
        s = Settings()
        self.assertEqual(s.forecast_days, 3)
        self.assertTrue(s.allow_unsuitable_tasks_default)
        self.assertEqual(s.forecast_source, "open_meteo")

    def test_preview_limits_from_env(self):
        self._with_env("HOURCAST_PREVIEW_TTL_SECONDS", "120")
        self._with_env("HOURCAST_PREVIEW_MAX_ENTRIES", "25")
        s = Settings()
        self.assertEqual(s.preview_ttl_seconds, 120.0)
        self.assertEqual(s.preview_max_entries, 25)

    def test_forecast_days_must_be_positive(self):
        self._with_env("HOURCAST_FORECAST_DAYS", "0")
        with self.assertRaises(ValueError):
            Settings()


if __name__ == "__main__":
    unittest.main()
