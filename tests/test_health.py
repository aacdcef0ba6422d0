import unittest
from unittest.mock import AsyncMock, patch

from config.settings import get_settings
from tests._support import ApiTestCase


class TestHealth(ApiTestCase):
    def test_healthy_with_database(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["checks"]["database"]["status"], "healthy")
        self.assertEqual(body["checks"]["auth"]["status"], "healthy")
        self.assertEqual(body["checks"]["email"]["status"], "not_configured")
        self.assertEqual(body["checks"]["storage"]["status"], "not_configured")
        self.assertEqual(body["environment"], "test")
        self.assertIn("investment_tracking", body["features"])
        self.assertIn("timestamp", body)
        self.assertIn("version", body)

    def test_degraded_when_database_down(self):
        with patch(
            "services.health_service.check_database_health",
            return_value={"connected": False, "error": "OperationalError"},
        ):
            resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["status"], "degraded")
        self.assertEqual(resp.json()["checks"]["database"]["status"], "unhealthy")

    def test_degraded_when_hosted_auth_cannot_authenticate(self):
        with patch("services.health_service.stack_auth.is_configured", return_value=True), patch(
            "services.health_service.stack_auth.check_stack_auth_health",
            new=AsyncMock(return_value={"configured": True, "reachable": False, "can_authenticate": False}),
        ):
            resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["checks"]["auth"]["status"], "unhealthy")

    def test_unexpected_failure_is_500(self):
        with patch("services.health_service.probe_email", side_effect=RuntimeError("boom")):
            resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["status"], "error")

    def test_configured_optional_probes(self):
        configured = get_settings().model_copy(
            update={"smtp_host": "smtp.example.com", "smtp_port": 587, "aws_access_key_id": "k",
                    "aws_secret_access_key": "s", "aws_s3_bucket": "b"}
        )
        with patch("services.health_service.get_settings", return_value=configured):
            body = self.client.get("/api/health").json()
        self.assertEqual(body["checks"]["email"]["status"], "healthy")
        self.assertEqual(body["checks"]["storage"]["provider"], "s3")

    def test_features_endpoint(self):
        resp = self.client.get("/api/features")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(set(resp.json()), {
            "social_login", "email_verification", "two_factor_auth",
            "investment_tracking", "real_time_updates", "maintenance_mode",
        })


class TestMaintenanceMode(ApiTestCase):
    def test_blocks_everything_but_health(self):
        on = get_settings().model_copy(update={"maintenance_mode": True})
        with patch("middleware.maintenance.get_settings", return_value=on):
            blocked = self.client.get("/api/posts")
            health = self.client.get("/api/health")
            features = self.client.get("/api/features")
        self.assertEqual(blocked.status_code, 503)
        self.assertEqual(blocked.json(), {"error": "Service is under maintenance"})
        self.assertEqual(health.status_code, 200)
        self.assertEqual(features.status_code, 200)


if __name__ == "__main__":
    unittest.main()
