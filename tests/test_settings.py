import logging
import unittest

from config.logging_config import JsonFormatter, resolve_level
from config.settings import DEV_DATABASE_URL, load_settings
from config.validate_env import validate_environment
from utils.errors import ConfigurationError

BASE_ENV = {"AUTH_SECRET": "s3cret", "DATABASE_URL": "sqlite:///:memory:"}


class TestLoadSettings(unittest.TestCase):
    def test_valid_environment(self):
        s = load_settings(dict(BASE_ENV, APP_ENV="production"))
        self.assertTrue(s.is_production)
        self.assertEqual(s.auth_secret, "s3cret")
        self.assertEqual(s.generated_fallbacks, ())

    def test_missing_secret_is_generated(self):
        s = load_settings({"DATABASE_URL": "sqlite:///:memory:"})
        self.assertEqual(s.generated_fallbacks, ("AUTH_SECRET",))
        self.assertEqual(len(s.auth_secret), 32)

    def test_missing_database_url_falls_back_to_dev(self):
        s = load_settings({"AUTH_SECRET": "x"})
        self.assertEqual(s.database_url, DEV_DATABASE_URL)
        self.assertIn("DATABASE_URL", s.generated_fallbacks)

    def test_blank_values_count_as_missing(self):
        s = load_settings({"AUTH_SECRET": "undefined", "DATABASE_URL": "sqlite:///:memory:"})
        self.assertIn("AUTH_SECRET", s.generated_fallbacks)

    def test_secret_aliases(self):
        s = load_settings({"NEXTAUTH_SECRET": "from-nextauth", "DATABASE_URL": "sqlite:///:memory:"})
        self.assertEqual(s.auth_secret, "from-nextauth")

    def test_malformed_value_is_fatal(self):
        with self.assertRaises(ConfigurationError):
            load_settings(dict(BASE_ENV, APP_ENV="moon"))

    def test_feature_flags_parse_true_only(self):
        s = load_settings(
            dict(BASE_ENV, ENABLE_INVESTMENT_TRACKING="false", MAINTENANCE_MODE="TRUE", ENABLE_TWO_FACTOR_AUTH="yes")
        )
        flags = s.features
        self.assertFalse(flags.investment_tracking)
        self.assertTrue(flags.maintenance_mode)
        self.assertFalse(flags.two_factor_auth)
        self.assertTrue(flags.social_login)

    def test_rate_limit_string(self):
        s = load_settings(dict(BASE_ENV, RATE_LIMIT_MAX_REQUESTS="50", RATE_LIMIT_WINDOW_MS="60000"))
        self.assertEqual(s.rate_limit_config.limit_string, "50 per 60 seconds")

    def test_cors_origins(self):
        self.assertEqual(load_settings(BASE_ENV).cors_origins, ["*"])
        s = load_settings(dict(BASE_ENV, CORS_ORIGIN="https://a.example, https://b.example"))
        self.assertEqual(s.cors_origins, ["https://a.example", "https://b.example"])


class TestEnvironmentReport(unittest.TestCase):
    def _auth_result(self, settings):
        return next(r for r in validate_environment(settings) if r.category == "Authentication")

    def test_generated_secret_invalid_in_production(self):
        s = load_settings({"DATABASE_URL": "sqlite:///:memory:", "APP_ENV": "production"})
        self.assertEqual(self._auth_result(s).status, "invalid")

    def test_generated_secret_missing_in_development(self):
        s = load_settings({"DATABASE_URL": "sqlite:///:memory:"})
        self.assertEqual(self._auth_result(s).status, "missing")

    def test_optional_items_not_required(self):
        results = validate_environment(load_settings(BASE_ENV))
        email = next(r for r in results if r.category == "Email")
        self.assertEqual(email.status, "missing")
        self.assertFalse(email.required)


class TestLogging(unittest.TestCase):
    def test_warn_alias(self):
        self.assertEqual(resolve_level("warn"), logging.WARNING)

    def test_json_formatter_merges_meta(self):
        record = logging.LogRecord("app", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.meta = {"request_id": "abc"}
        out = JsonFormatter().format(record)
        self.assertIn('"request_id": "abc"', out)
        self.assertIn('"hello world"', out)


if __name__ == "__main__":
    unittest.main()
