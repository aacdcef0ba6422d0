import unittest

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request as StarletteRequest

import tests._support  # noqa: F401  (test environment)
from middleware.error_handlers import register_exception_handlers
from middleware.rate_limit import _get_rate_limit_key
from utils.errors import (
    AppError,
    AuthorizationError,
    ConflictError,
    DatabaseConnectionError,
    NotFoundError,
    ValidationError,
)


class _Body(BaseModel):
    name: str
    amount: int


def _error_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    def missing():
        raise NotFoundError("Post not found")

    @app.get("/conflict")
    def conflict():
        raise ConflictError()

    @app.get("/forbidden")
    def forbidden():
        raise AuthorizationError()

    @app.get("/invalid")
    def invalid():
        raise ValidationError("Bad input", details=[{"field": "x", "message": "nope"}])

    @app.get("/db")
    def db_down():
        raise DatabaseConnectionError(cause=RuntimeError("refused"))

    @app.get("/http")
    def http():
        raise HTTPException(status_code=418, detail="I'm a teapot")

    @app.get("/crash")
    def crash():
        raise RuntimeError("kaboom")

    @app.post("/body")
    def body(payload: _Body):
        return payload

    return app


class TestErrorMapping(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(_error_app(), raise_server_exceptions=False)

    def test_app_errors_map_to_status(self):
        cases = {
            "/missing": (404, "Post not found"),
            "/conflict": (409, "Resource conflict"),
            "/forbidden": (403, "Insufficient permissions"),
            "/db": (503, "Database connection failed"),
        }
        for path, (status, message) in cases.items():
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, status, path)
            self.assertEqual(resp.json(), {"error": message}, path)

    def test_details_are_passed_through(self):
        resp = self.client.get("/invalid")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["details"], [{"field": "x", "message": "nope"}])

    def test_request_validation_is_400(self):
        resp = self.client.post("/body", json={"name": "x", "amount": "lots"})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["error"], "Validation failed")
        self.assertEqual([d["field"] for d in body["details"]], ["amount"])

    def test_http_exception_and_unknown_route(self):
        self.assertEqual(self.client.get("/http").json(), {"error": "I'm a teapot"})
        resp = self.client.get("/nowhere")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Not Found"})

    def test_unhandled_exception_is_500(self):
        resp = self.client.get("/crash")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"], "Internal server error")

    def test_base_error_defaults(self):
        err = AppError()
        self.assertEqual(err.status_code, 500)
        self.assertEqual(err.message, "Internal server error")


class TestRateLimit(unittest.TestCase):
    def test_exceeding_limit_returns_429(self):
        app = FastAPI()
        app.state.limiter = Limiter(key_func=get_remote_address, default_limits=["2 per 60 seconds"])
        app.add_middleware(SlowAPIMiddleware)
        register_exception_handlers(app)

        @app.get("/ping")
        def ping():
            return {"ok": True}

        client = TestClient(app)
        self.assertEqual(client.get("/ping").status_code, 200)
        self.assertEqual(client.get("/ping").status_code, 200)
        resp = client.get("/ping")
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.json(), {"error": "Too many requests"})

    def _request(self, headers):
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
            "client": ("10.0.0.7", 1234),
        }
        return StarletteRequest(scope)

    def test_key_uses_token_subject(self):
        from jose import jwt

        token = jwt.encode({"sub": "42"}, "k", algorithm="HS256")
        self.assertEqual(_get_rate_limit_key(self._request({"Authorization": f"Bearer {token}"})), "user:42")

    def test_key_falls_back_to_ip(self):
        self.assertEqual(_get_rate_limit_key(self._request({})), "10.0.0.7")
        self.assertEqual(_get_rate_limit_key(self._request({"Authorization": "Bearer junk"})), "10.0.0.7")


if __name__ == "__main__":
    unittest.main()
