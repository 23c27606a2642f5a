"""Session bootstrap: health checks, token and affinity cookie acquisition.

A ``Session`` is computed once per run and then only read. Nothing here
writes credentials to disk.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

import httpx

from ..errors import AuthenticationError, ConnectionValidationError, InitializationError
from ..utils.connection import poll_until
from .http import JamfClient

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://127.0.0.1:8443"
DEFAULT_CONNECT_TIMEOUT = 300
POLL_INTERVAL = 5

HEALTH_PATH = "healthCheck.html"
TOKEN_PATH = "api/v1/auth/token"
STARTUP_STATUS_PATH = "api/startup-status"
INITIALIZE_PATH = "api/system/initialize"

# Load balancer cookie that pins a Jamf Cloud session to one cluster node
AFFINITY_COOKIE = "APBALANCEID"

# healthCheck.html code for "server is waiting for the setup assistant"
HEALTH_CODE_AWAITING_SETUP = 2


@dataclass(frozen=True)
class Session:
    """Credentials and target of one run."""
    api_url: str = DEFAULT_API_URL
    username: str = ""
    password: str = field(default="", repr=False)
    is_cloud: bool = False
    auth_token: str = field(default="", repr=False)
    cookie: str = field(default="", repr=False)

    def url(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/{path}"

    @property
    def authenticated(self) -> bool:
        return bool(self.auth_token)


class HealthState(str, Enum):
    HEALTHY = "healthy"
    AWAITING_SETUP = "awaiting_setup"
    ERROR = "error"


@dataclass
class HealthReport:
    """Outcome of one ``healthCheck.html`` call."""
    state: HealthState
    status_code: int
    entries: list = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return self.state == HealthState.HEALTHY


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _awaiting_setup(entries: Any) -> bool:
    return (
        isinstance(entries, list)
        and len(entries) >= 1
        and isinstance(entries[0], dict)
        and entries[0].get("healthCode") == HEALTH_CODE_AWAITING_SETUP
    )


async def check_health(client: JamfClient) -> HealthReport:
    """Classify the server's health page.

    ``[]`` means healthy, ``[{"healthCode": 2, ...}]`` means the server waits
    for initialization (also when it answers 503), anything else is an error.
    """
    response = await client.send("GET", client.session.url(HEALTH_PATH))
    data = _json_or_none(response)
    entries = data if isinstance(data, list) else []

    if response.is_success:
        if data == []:
            state = HealthState.HEALTHY
        elif _awaiting_setup(data):
            state = HealthState.AWAITING_SETUP
        else:
            state = HealthState.ERROR
    elif response.status_code == 503 and _awaiting_setup(data):
        state = HealthState.AWAITING_SETUP
    else:
        state = HealthState.ERROR

    return HealthReport(state=state, status_code=response.status_code, entries=entries)


async def fetch_token(client: JamfClient, username: str, password: str, is_cloud: bool) -> str:
    """Exchange basic-auth credentials for a bearer token.

    Returns ``""`` instead of raising when the server refuses, and skips the
    token request entirely while an on-premises server still needs
    initializing.
    """
    if not is_cloud:
        response = await client.send("GET", client.session.url(HEALTH_PATH))
        if response.is_success:
            data = _json_or_none(response)
            if isinstance(data, list) and len(data) >= 1:
                logger.info("Jamf server is not initialized yet; not requesting a token")
                return ""

    response = await client.send(
        "POST", client.session.url(TOKEN_PATH), auth=(username, password)
    )
    if not response.is_success:
        logger.warning(f"Token request for '{username}' returned HTTP {response.status_code}")
        return ""
    data = _json_or_none(response)
    token = data.get("token") if isinstance(data, dict) else None
    return token or ""


async def fetch_cookie(client: JamfClient) -> str:
    """Return ``"APBALANCEID=<value>"`` from the startup-status endpoint, or ``""``."""
    response = await client.send("GET", client.session.url(STARTUP_STATUS_PATH))
    if not response.is_success:
        logger.warning(f"Startup status returned HTTP {response.status_code}; no affinity cookie")
        return ""

    cookie = ""
    for header in response.headers.get_list("set-cookie"):
        pair = header.split("; ")[0]
        if pair.split("=", 1)[0] == AFFINITY_COOKIE:
            cookie = pair
    return cookie


async def wait_for_connection(
    client: JamfClient,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
    interval: float = POLL_INTERVAL,
) -> None:
    """Block until the health page answers 2xx.

    Raises:
        ConnectionValidationError: The server did not answer within ``timeout``.
    """
    url = client.session.url(HEALTH_PATH)

    async def attempt() -> bool:
        try:
            response = await client.send("GET", url)
        except httpx.HTTPError as e:
            logger.warning(f"Unable to connect to Jamf server ({url}): {e}")
            return False
        if not response.is_success:
            logger.warning(
                f"Unable to connect to Jamf server ({url}): "
                f"[{response.status_code}] {response.reason_phrase}"
            )
            return False
        return True

    if not await poll_until(attempt, timeout=timeout, interval=interval):
        logger.error(f"Failed to connect to Jamf within {timeout} seconds; giving up")
        raise ConnectionValidationError(url, timeout)
    logger.info(f"Jamf server at {client.session.api_url} is reachable")


async def initialize_server(
    client: JamfClient,
    institution_name: str,
    activation_code: str,
    email: str,
    ensure: str = "present",
) -> bool:
    """Run first-time setup on a server that is waiting for it.

    Returns True when the initialize request was sent. A server that is
    already initialized is left alone; only the one-shot initialize call is
    ever written.

    Raises:
        InitializationError: The health page reports some other problem.
    """
    report = await check_health(client)
    if report.state == HealthState.ERROR:
        raise InitializationError(
            f"Initialization returned an error: HTTP {report.status_code} {report.entries}"
        )
    if report.state == HealthState.HEALTHY or ensure != "present":
        logger.info("Jamf server already initialized; nothing to do")
        return False

    session = client.session
    body = {
        "activationCode": activation_code,
        "institutionName": institution_name,
        "isEulaAccepted": True,
        "username": session.username,
        "password": session.password,
        "email": email,
        "jssUrl": session.api_url,
    }
    logger.info(f"Initializing Jamf server at {session.api_url} for '{institution_name}'")
    await client.post(session.url(INITIALIZE_PATH), body=body)
    return True


async def open_session(
    client: JamfClient,
    auth_token: Optional[str] = None,
    cookie: Optional[str] = None,
) -> Session:
    """Fetch whatever the run needs and bind the resulting session to ``client``.

    A token or cookie given explicitly is used as is. Basic auth is only
    kept while the server still awaits setup.

    Raises:
        AuthenticationError: An initialized server gave no token, or a cloud
            server gave no affinity cookie.
    """
    session = client.session
    token = auth_token or await fetch_token(
        client, session.username, session.password, session.is_cloud
    )
    affinity = ""
    if session.is_cloud:
        affinity = cookie or await fetch_cookie(client)

    session = replace(session, auth_token=token, cookie=affinity)
    if not token or (session.is_cloud and not affinity):
        report = await check_health(client)
        if report.state != HealthState.AWAITING_SETUP:
            missing = "an auth token" if not token else "an affinity cookie"
            raise AuthenticationError(f"Unable to obtain {missing} from {session.api_url}")
        logger.warning("Jamf server awaits setup; using basic auth until it is initialized")
    client.bind(session)
    return session
