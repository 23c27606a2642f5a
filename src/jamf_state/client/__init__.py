"""HTTP client and session bootstrap for Jamf Pro servers."""
from .http import JamfClient
from .session import (
    Session,
    HealthState,
    HealthReport,
    check_health,
    fetch_token,
    fetch_cookie,
    wait_for_connection,
    initialize_server,
    open_session,
)

__all__ = [
    "JamfClient",
    "Session",
    "HealthState",
    "HealthReport",
    "check_health",
    "fetch_token",
    "fetch_cookie",
    "wait_for_connection",
    "initialize_server",
    "open_session",
]
