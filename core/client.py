"""Small HTTP client for the platform API, used by the terminal runner."""
from __future__ import annotations

import logging

import requests

from core.errors import TransientGatewayError, UnauthorizedError
from core.gateway import DEFAULT_TIMEOUT_SECONDS, HttpSubmissionGateway, error_for_response
from models import Test
from serialization import parse_test_payload

log = logging.getLogger(__name__)


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self.token: str | None = None
        self.user: dict[str, object] | None = None

    def _request(self, method: str, path: str, **kwargs) -> object:
        try:
            response = self._session.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise TransientGatewayError(f"Cannot reach {self.base_url}: {exc}") from exc
        if response.status_code >= 400:
            raise error_for_response(response)
        return response.json()

    def login(self, username: str, password: str) -> dict[str, object]:
        """Log in and remember the bearer token for later calls."""
        payload = self._request(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        self.token = payload["access_token"]
        self._session.headers.update({"Authorization": f"Bearer {self.token}"})
        self.user = self._request("GET", "/api/auth/me")
        log.info("Logged in as %s", self.user.get("username"))
        return self.user

    def list_tests(self) -> list[dict[str, object]]:
        return self._request("GET", "/api/tests")

    def get_test(self, test_id: str) -> Test:
        return parse_test_payload(self._request("GET", f"/api/tests/{test_id}"))

    def list_attempts(self) -> list[dict[str, object]]:
        return self._request("GET", "/api/attempts")

    def gateway(self) -> HttpSubmissionGateway:
        if not self.token:
            raise UnauthorizedError("Log in before submitting attempts")
        return HttpSubmissionGateway(self.base_url, self.token, timeout=self.timeout)
