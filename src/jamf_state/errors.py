"""Exception hierarchy for jamf-state."""
from typing import Any, Iterable, Optional


class JamfStateError(Exception):
    """Base class for all jamf-state errors."""


class APIError(JamfStateError):
    """The Jamf server answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "", method: str = "", url: str = ""):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url
        snippet = body[:200] if body else ""
        super().__init__(f"{method} {url} returned HTTP {status_code}: {snippet}".strip())

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ConnectionValidationError(JamfStateError):
    """The server did not become healthy within the allowed time."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Unable to connect to Jamf server! ({url})")


class ValidationError(JamfStateError, ValueError):
    """A desired value is not acceptable for its field."""

    def __init__(
        self,
        field: str,
        value: Any,
        message: str = "",
        allowed: Optional[Iterable[Any]] = None,
    ):
        self.field = field
        self.value = value
        self.allowed = list(allowed) if allowed is not None else None
        text = f"{field}: {message or 'invalid value'} (got {value!r})"
        if self.allowed is not None:
            text += f"; allowed: {self.allowed}"
        super().__init__(text)


class ParseError(JamfStateError):
    """Error parsing a manifest or resource declaration."""


class InitializationError(JamfStateError):
    """Health check reported an error other than 'awaiting setup'."""


class AuthenticationError(JamfStateError):
    """No token or affinity cookie could be obtained from an initialized server."""
