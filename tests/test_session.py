"""Tests for the HTTP client and session bootstrap."""
import httpx
import pytest

from jamf_state.client import (
    HealthState,
    check_health,
    fetch_cookie,
    fetch_token,
    initialize_server,
    open_session,
    wait_for_connection,
)
from jamf_state.errors import (
    APIError,
    AuthenticationError,
    ConnectionValidationError,
    InitializationError,
)

from conftest import API_URL, TOKEN, basic_credentials


class TestJamfClient:
    """Tests for request headers and error handling."""

    @pytest.mark.asyncio
    async def test_basic_auth_without_token(self, fake):
        """Without a token requests use basic auth."""
        fake.route("GET", "/JSSResource/categories", {"categories": []})
        async with fake.client() as client:
            await client.get(f"{API_URL}/JSSResource/categories")

        request = fake.requests[-1]
        assert basic_credentials(request) == ("admin", "jamf1234")
        assert request.headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_bearer_token(self, fake):
        """A token replaces basic auth."""
        fake.route("GET", "/JSSResource/categories", {"categories": []})
        async with fake.client(auth_token="t0k") as client:
            await client.get(f"{API_URL}/JSSResource/categories")

        assert fake.requests[-1].headers["authorization"] == "Bearer t0k"

    @pytest.mark.asyncio
    async def test_cloud_cookie_header(self, fake):
        """Cloud sessions send the affinity cookie."""
        fake.route("GET", "/JSSResource/categories", {"categories": []})
        async with fake.client(is_cloud=True, auth_token="t", cookie="APBALANCEID=aws.node1") as client:
            await client.get(f"{API_URL}/JSSResource/categories")

        assert fake.requests[-1].headers["cookie"] == "APBALANCEID=aws.node1"

    @pytest.mark.asyncio
    async def test_cookie_not_sent_on_prem(self, fake):
        """On-premises sessions never send the affinity cookie."""
        fake.route("GET", "/JSSResource/categories", {"categories": []})
        async with fake.client(auth_token="t", cookie="APBALANCEID=x") as client:
            await client.get(f"{API_URL}/JSSResource/categories")

        assert "cookie" not in fake.requests[-1].headers

    @pytest.mark.asyncio
    async def test_non_2xx_raises_api_error(self, fake):
        """Error statuses raise APIError with the status code."""
        fake.route("PUT", "/JSSResource/categories/id/1", {"error": "conflict"}, status=409)
        async with fake.client() as client:
            with pytest.raises(APIError) as exc_info:
                await client.put(f"{API_URL}/JSSResource/categories/id/1", body="<category/>")

        assert exc_info.value.status_code == 409
        assert not exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_get_empty_body(self, fake):
        """An empty 2xx body reads as None."""
        fake.route("GET", "/JSSResource/smtpserver", handler=lambda r: httpx.Response(200, text=""))
        async with fake.client() as client:
            assert await client.get(f"{API_URL}/JSSResource/smtpserver") is None

    @pytest.mark.asyncio
    async def test_json_body_serialized(self, fake):
        """Non-string bodies are sent as JSON."""
        async with fake.client() as client:
            await client.post(f"{API_URL}/api/v1/buildings", body={"name": "HQ"})

        request = fake.writes[-1]
        assert request.headers["content-type"] == "application/json"
        assert fake.json_body(request) == {"name": "HQ"}


class TestCheckHealth:
    """Tests for health page classification."""

    @pytest.mark.asyncio
    async def test_healthy(self, fake):
        """An empty list is healthy."""
        async with fake.client() as client:
            report = await check_health(client)
        assert report.state == HealthState.HEALTHY
        assert report.healthy

    @pytest.mark.asyncio
    async def test_awaiting_setup(self, fake):
        """healthCode 2 means the setup assistant has not run."""
        fake.health = [{"healthCode": 2, "httpCode": 503, "description": "SetupAssistant"}]
        async with fake.client() as client:
            report = await check_health(client)
        assert report.state == HealthState.AWAITING_SETUP

    @pytest.mark.asyncio
    async def test_awaiting_setup_with_503(self, fake):
        """A 503 carrying healthCode 2 still means awaiting setup."""
        fake.health = [{"healthCode": 2}]
        fake.health_status = 503
        async with fake.client() as client:
            report = await check_health(client)
        assert report.state == HealthState.AWAITING_SETUP
        assert report.status_code == 503

    @pytest.mark.asyncio
    async def test_other_problem_is_error(self, fake):
        """Any other entry is an error."""
        fake.health = [{"healthCode": 1, "description": "DBConnectionError"}]
        async with fake.client() as client:
            report = await check_health(client)
        assert report.state == HealthState.ERROR

    @pytest.mark.asyncio
    async def test_server_error_is_error(self, fake):
        """A 500 is an error."""
        fake.health_status = 500
        async with fake.client() as client:
            report = await check_health(client)
        assert report.state == HealthState.ERROR


class TestFetchToken:
    """Tests for token acquisition."""

    @pytest.mark.asyncio
    async def test_token_issued(self, fake):
        """Valid credentials get a token."""
        async with fake.client() as client:
            token = await fetch_token(client, "admin", "jamf1234", is_cloud=False)

        assert token == TOKEN
        token_request = fake.calls("POST", "/api/v1/auth/token")[0]
        assert basic_credentials(token_request) == ("admin", "jamf1234")

    @pytest.mark.asyncio
    async def test_awaiting_setup_skips_token_request(self, fake):
        """An uninitialized on-prem server is not asked for a token."""
        fake.health = [{"healthCode": 2}]
        async with fake.client() as client:
            token = await fetch_token(client, "admin", "jamf1234", is_cloud=False)

        assert token == ""
        assert fake.calls("POST", "/api/v1/auth/token") == []

    @pytest.mark.asyncio
    async def test_cloud_skips_health_check(self, fake):
        """Cloud servers go straight to the token endpoint."""
        async with fake.client(is_cloud=True) as client:
            token = await fetch_token(client, "admin", "jamf1234", is_cloud=True)

        assert token == TOKEN
        assert fake.calls("GET", "/healthCheck.html") == []

    @pytest.mark.asyncio
    async def test_refused_returns_empty(self, fake):
        """A refused token request returns an empty token."""
        fake.token_status = 401
        async with fake.client() as client:
            token = await fetch_token(client, "admin", "wrong", is_cloud=False)
        assert token == ""


class TestFetchCookie:
    """Tests for affinity cookie acquisition."""

    @pytest.mark.asyncio
    async def test_affinity_cookie_kept(self, fake):
        """Only the APBALANCEID pair is returned."""
        fake.route("GET", "/api/startup-status", handler=lambda r: httpx.Response(
            200,
            json={"step": "SETUP_COMPLETE"},
            headers=[
                ("set-cookie", "JSESSIONID=abc; Path=/; Secure"),
                ("set-cookie", "APBALANCEID=aws.std-node7; Path=/; Secure; HttpOnly"),
            ],
        ))
        async with fake.client(is_cloud=True) as client:
            cookie = await fetch_cookie(client)
        assert cookie == "APBALANCEID=aws.std-node7"

    @pytest.mark.asyncio
    async def test_no_affinity_cookie(self, fake):
        """Other cookies are ignored."""
        fake.route("GET", "/api/startup-status", handler=lambda r: httpx.Response(
            200, json={}, headers=[("set-cookie", "JSESSIONID=abc; Path=/")],
        ))
        async with fake.client(is_cloud=True) as client:
            assert await fetch_cookie(client) == ""

    @pytest.mark.asyncio
    async def test_error_status(self, fake):
        """A failing startup-status call yields no cookie."""
        fake.route("GET", "/api/startup-status", {"error": "x"}, status=500)
        async with fake.client(is_cloud=True) as client:
            assert await fetch_cookie(client) == ""


class TestOpenSession:
    """Tests for session bootstrap."""

    @pytest.mark.asyncio
    async def test_binds_token(self, fake):
        """The fetched token is bound to the client."""
        async with fake.client() as client:
            session = await open_session(client)
            assert client.session is session
        assert session.auth_token == TOKEN
        assert session.cookie == ""

    @pytest.mark.asyncio
    async def test_explicit_token_and_cookie(self, fake):
        """Given credentials are used without any requests."""
        async with fake.client(is_cloud=True) as client:
            session = await open_session(client, auth_token="given", cookie="APBALANCEID=n1")
        assert session.auth_token == "given"
        assert session.cookie == "APBALANCEID=n1"
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_token_failure_on_initialized_server(self, fake):
        """An initialized server that refuses a token fails the session."""
        fake.token_status = 500
        async with fake.client() as client:
            with pytest.raises(AuthenticationError) as exc_info:
                await open_session(client)
            assert not client.session.authenticated
        assert "auth token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_basic_auth_while_awaiting_setup(self, fake):
        """A server awaiting setup keeps the session on basic auth."""
        fake.health = [{"healthCode": 2}]
        async with fake.client() as client:
            session = await open_session(client)
        assert not session.authenticated
        assert fake.calls("POST", "/api/v1/auth/token") == []

    @pytest.mark.asyncio
    async def test_missing_affinity_cookie_on_cloud(self, fake):
        """A cloud server without an affinity cookie fails the session."""
        fake.route("GET", "/api/startup-status", {"step": "SETUP_COMPLETE"})
        async with fake.client(is_cloud=True) as client:
            with pytest.raises(AuthenticationError) as exc_info:
                await open_session(client)
        assert "affinity cookie" in str(exc_info.value)

    def test_password_not_in_repr(self, fake):
        """Session repr never shows secrets."""
        client = fake.client(auth_token="secret-token")
        assert "jamf1234" not in repr(client.session)
        assert "secret-token" not in repr(client.session)


class TestWaitForConnection:
    """Tests for the connection validator."""

    @pytest.mark.asyncio
    async def test_reachable(self, fake):
        """A 2xx health page passes immediately."""
        async with fake.client() as client:
            await wait_for_connection(client, timeout=1, interval=0.01)
        assert len(fake.calls("GET", "/healthCheck.html")) == 1

    @pytest.mark.asyncio
    async def test_becomes_reachable(self, fake):
        """The validator polls until the server answers."""
        answers = [503, 503, 200]

        def health(request):
            return httpx.Response(answers.pop(0), json=[])

        fake.route("GET", "/healthCheck.html", handler=health)
        async with fake.client() as client:
            await wait_for_connection(client, timeout=5, interval=0.01)
        assert answers == []

    @pytest.mark.asyncio
    async def test_transport_errors_retried(self, fake):
        """Connection errors count as failed attempts, not crashes."""
        attempts = []

        def health(request):
            attempts.append(request)
            if len(attempts) < 2:
                raise httpx.ConnectError("connection refused")
            return httpx.Response(200, json=[])

        fake.route("GET", "/healthCheck.html", handler=health)
        async with fake.client() as client:
            await wait_for_connection(client, timeout=5, interval=0.01)
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_timeout(self, fake):
        """A server that never answers fails the validator."""
        fake.health_status = 503
        async with fake.client() as client:
            with pytest.raises(ConnectionValidationError) as exc_info:
                await wait_for_connection(client, timeout=0.1, interval=0.02)
        assert "Unable to connect to Jamf server" in str(exc_info.value)


class TestInitializeServer:
    """Tests for first-time setup."""

    @pytest.mark.asyncio
    async def test_initializes_waiting_server(self, fake):
        """A server awaiting setup gets the initialize call."""
        fake.health = [{"healthCode": 2}]
        fake.health_status = 503
        async with fake.client() as client:
            sent = await initialize_server(client, "Example Inc", "ABCD-1234", "it@example.com")

        assert sent is True
        request = fake.calls("POST", "/api/system/initialize")[0]
        body = fake.json_body(request)
        assert body == {
            "activationCode": "ABCD-1234",
            "institutionName": "Example Inc",
            "isEulaAccepted": True,
            "username": "admin",
            "password": "jamf1234",
            "email": "it@example.com",
            "jssUrl": API_URL,
        }

    @pytest.mark.asyncio
    async def test_already_initialized(self, fake):
        """A healthy server is left alone."""
        async with fake.client() as client:
            sent = await initialize_server(client, "Example Inc", "ABCD-1234", "")
        assert sent is False
        assert fake.writes == []

    @pytest.mark.asyncio
    async def test_absent_does_nothing(self, fake):
        """ensure: absent never initializes."""
        fake.health = [{"healthCode": 2}]
        async with fake.client() as client:
            sent = await initialize_server(client, "Example Inc", "ABCD-1234", "", ensure="absent")
        assert sent is False
        assert fake.writes == []

    @pytest.mark.asyncio
    async def test_health_error_raises(self, fake):
        """Other health problems are reported."""
        fake.health = [{"healthCode": 4, "description": "DBConnectionError"}]
        async with fake.client() as client:
            with pytest.raises(InitializationError):
                await initialize_server(client, "Example Inc", "ABCD-1234", "")
