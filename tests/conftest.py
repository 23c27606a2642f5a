"""Shared fixtures: an in-memory Jamf server behind httpx.MockTransport."""
import base64
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from jamf_state.client import JamfClient, Session

API_URL = "https://jamf.test:8443"
TOKEN = "token-abc"

Responder = Callable[[httpx.Request], httpx.Response]


def basic_credentials(request: httpx.Request) -> Optional[tuple[str, str]]:
    header = request.headers.get("authorization", "")
    if not header.startswith("Basic "):
        return None
    username, _, password = base64.b64decode(header[6:]).decode().partition(":")
    return username, password


class FakeJamf:
    """Routes requests by (method, path) and records everything it sees.

    GET /healthCheck.html answers ``health`` and the token endpoint issues
    ``TOKEN`` unless ``passwords`` says the credentials are wrong. Writes
    without a route succeed with 201; reads without a route answer 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []
        self.health: Any = []
        self.health_status = 200
        self.passwords: dict[str, str] = {}
        self.token_status: Optional[int] = None

    def route(self, method: str, path: str, json_body: Any = None, status: int = 200,
              headers: Optional[dict] = None, handler: Optional[Callable] = None) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json_body, headers=headers)
        self.routes[(method, path)] = handler

    def _token(self, request: httpx.Request) -> httpx.Response:
        if self.token_status is not None:
            return httpx.Response(self.token_status, json={"error": "forced"})
        creds = basic_credentials(request)
        if creds and creds[0] in self.passwords and self.passwords[creds[0]] != creds[1]:
            return httpx.Response(401, json={"httpStatus": 401})
        return httpx.Response(200, json={"token": TOKEN, "expires": "2030-01-01T00:00:00Z"})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.routes:
            return self.routes[key](request)
        if key == ("GET", "/healthCheck.html"):
            return httpx.Response(self.health_status, json=self.health)
        if key == ("POST", "/api/v1/auth/token"):
            return self._token(request)
        if request.method in ("POST", "PUT", "DELETE"):
            return httpx.Response(201, text="")
        return httpx.Response(404, json={"error": "not found"})

    def client(self, **session_kwargs) -> JamfClient:
        session_kwargs.setdefault("api_url", API_URL)
        session_kwargs.setdefault("username", "admin")
        session_kwargs.setdefault("password", "jamf1234")
        return JamfClient(Session(**session_kwargs), transport=httpx.MockTransport(self.handle))

    # --- inspection helpers ---

    @property
    def writes(self) -> list[httpx.Request]:
        """POST/PUT/DELETE requests, excluding token requests."""
        return [
            r for r in self.requests
            if r.method in ("POST", "PUT", "DELETE") and r.url.path != "/api/v1/auth/token"
        ]

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> str:
        return request.content.decode()

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def fake():
    """A fresh fake Jamf server."""
    return FakeJamf()


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep log and audit files out of the home directory."""
    monkeypatch.setenv("JAMF_STATE_LOG_FILE", str(tmp_path / "logs" / "jamf-state.log"))
    monkeypatch.setenv("JAMF_STATE_AUDIT_FILE", str(tmp_path / "logs" / "audit.log"))
    return tmp_path / "logs"
