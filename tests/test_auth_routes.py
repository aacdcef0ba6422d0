import unittest

from tests._support import ApiTestCase

SIGNUP = {
    "firstName": "Amina",
    "lastName": "Yusuf",
    "email": "Amina@Example.com",
    "password": "password123",
}


class TestSignup(ApiTestCase):
    def test_signup_creates_user(self):
        resp = self.client.post("/api/signup", json=SIGNUP)
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["message"], "User created successfully")
        self.assertEqual(body["user"]["email"], "amina@example.com")
        self.assertEqual(body["user"]["name"], "Amina Yusuf")
        self.assertNotIn("password", body["user"])

    def test_duplicate_email_conflicts(self):
        self.assertEqual(self.client.post("/api/signup", json=SIGNUP).status_code, 201)
        again = dict(SIGNUP, email="amina@example.com")
        resp = self.client.post("/api/signup", json=again)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json(), {"error": "User already exists"})

    def test_missing_field_is_validation_error(self):
        body = dict(SIGNUP)
        body.pop("lastName")
        resp = self.client.post("/api/signup", json=body)
        self.assertEqual(resp.status_code, 400)
        payload = resp.json()
        self.assertEqual(payload["error"], "Validation failed")
        self.assertIn("lastName", [d["field"] for d in payload["details"]])

    def test_short_password_rejected(self):
        resp = self.client.post("/api/signup", json=dict(SIGNUP, password="short"))
        self.assertEqual(resp.status_code, 400)


class TestSignin(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user(email="amina@example.com", password="password123")

    def test_signin_returns_token_and_sets_cookie(self):
        resp = self.client.post(
            "/api/auth/signin", json={"email": "AMINA@example.com", "password": "password123"}
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"]["id"], self.user.id)
        self.assertIn("auth_token", resp.cookies)

        session = self.client.get(
            "/api/auth/session", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        self.assertEqual(session.status_code, 200)
        self.assertEqual(session.json()["user"]["id"], str(self.user.id))
        self.assertEqual(session.json()["user"]["email"], "amina@example.com")

    def test_wrong_password_is_unauthorized(self):
        resp = self.client.post(
            "/api/auth/signin", json={"email": "amina@example.com", "password": "wrong-password"}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid email or password"})

    def test_unknown_email_is_unauthorized(self):
        resp = self.client.post(
            "/api/auth/signin", json={"email": "nobody@example.com", "password": "password123"}
        )
        self.assertEqual(resp.status_code, 401)

    def test_session_requires_authentication(self):
        resp = self.client.get("/api/auth/session")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Not authenticated"})

    def test_garbage_token_is_rejected(self):
        resp = self.client.get("/api/auth/session", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(resp.status_code, 401)

    def test_signout(self):
        resp = self.client.post("/api/auth/signout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Signed out"})


class TestProviders(ApiTestCase):
    def test_credentials_always_listed(self):
        resp = self.client.get("/api/auth/providers")
        ids = [p["id"] for p in resp.json()["providers"]]
        self.assertIn("credentials", ids)
        self.assertNotIn("google", ids)

    def test_google_signin_disabled_without_client_keys(self):
        resp = self.client.post("/api/auth/google", json={"id_token": "abc"})
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
