import asyncio
import unittest
from unittest.mock import AsyncMock, Mock, patch

import tests._support  # noqa: F401  (environment defaults before importing database)
import database
from config.settings import load_settings
from config.validate_env import main as validate_env_main
from utils.errors import DatabaseConnectionError

NEON_URL = "postgresql://app:pw@ep-quiet-cloud.us-east-2.aws.neon.tech/app"


class TestValidateDatabaseUrl(unittest.TestCase):
    def test_production_requires_sslmode(self):
        with self.assertRaises(DatabaseConnectionError):
            database.validate_database_url(NEON_URL, "production")

    def test_production_with_sslmode_passes(self):
        database.validate_database_url(NEON_URL + "?sslmode=require", "production")

    def test_non_neon_url_warns(self):
        with self.assertLogs("database", level="WARNING") as logs:
            database.validate_database_url("postgresql://app:pw@localhost:5432/app", "development")
        self.assertIn("Neon", logs.output[0])

    def test_sqlite_is_skipped(self):
        database.validate_database_url("sqlite:///:memory:", "production")


class TestConnectWithRetry(unittest.TestCase):
    def test_backoff_doubles_and_gives_up(self):
        health = Mock(return_value={"connected": False, "error": "OperationalError"})
        sleep = AsyncMock()
        with patch("database.check_database_health", new=health), patch("database.asyncio.sleep", new=sleep):
            ok = asyncio.run(database.connect_with_retry(max_retries=4, retry_delay=0.5))

        self.assertFalse(ok)
        self.assertEqual(health.call_count, 4)
        self.assertEqual([c.args[0] for c in sleep.await_args_list], [0.5, 1.0, 2.0])

    def test_stops_on_first_success(self):
        health = Mock(side_effect=[{"connected": False}, {"connected": True, "latency_ms": 1.0}])
        sleep = AsyncMock()
        with patch("database.check_database_health", new=health), patch("database.asyncio.sleep", new=sleep):
            ok = asyncio.run(database.connect_with_retry(max_retries=3, retry_delay=1.0))

        self.assertTrue(ok)
        self.assertEqual(health.call_count, 2)
        sleep.assert_awaited_once_with(1.0)


class TestValidateEnvMain(unittest.TestCase):
    def _run(self, env):
        with patch("config.validate_env.get_settings", return_value=load_settings(env)), patch(
            "config.validate_env.configure_logging"
        ):
            return validate_env_main()

    def test_generated_secret_in_production_fails(self):
        self.assertEqual(self._run({"DATABASE_URL": "sqlite:///:memory:", "APP_ENV": "production"}), 1)

    def test_complete_environment_passes(self):
        env = {"DATABASE_URL": "sqlite:///:memory:", "APP_ENV": "production", "AUTH_SECRET": "s3cret"}
        self.assertEqual(self._run(env), 0)


if __name__ == "__main__":
    unittest.main()
