"""Manifest loading from YAML configuration."""
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..client.session import DEFAULT_API_URL, DEFAULT_CONNECT_TIMEOUT, Session
from ..errors import ParseError

logger = logging.getLogger(__name__)

MANIFEST_ENV = "JAMF_STATE_MANIFEST"


@dataclass
class ConnectionSettings:
    """Connection block of a manifest."""
    api_url: str = DEFAULT_API_URL
    api_username: str = ""
    api_password: Optional[str] = None
    api_password_env: str = "JAMF_API_PASSWORD"
    is_cloud: bool = False
    auth_token: Optional[str] = None
    jamf_cookie: Optional[str] = None
    timeout: float = DEFAULT_CONNECT_TIMEOUT
    request_timeout: float = 30.0

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.api_password:
            return self.api_password
        return os.environ.get(self.api_password_env, "")

    def to_session(self) -> Session:
        return Session(
            api_url=self.api_url,
            username=self.api_username,
            password=self.get_password(),
            is_cloud=self.is_cloud,
        )

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ConnectionSettings":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ParseError(f"Unknown connection settings: {', '.join(unknown)}")
        return cls(**data)


class Manifest:
    """Desired state manifest loaded from YAML.

    ```yaml
    connection:
      api_url: https://jamf.example.com:8443
      api_username: admin
      api_password_env: JAMF_API_PASSWORD
    defaults:
      ensure: present
    resources:
      - kind: category
        name: Utilities
        priority: 9
    ```

    Keys in ``defaults`` are merged into every resource that does not set
    them.
    """

    def __init__(self, data: dict[str, Any], path: Optional[str] = None):
        self.path = path
        if not isinstance(data, dict):
            raise ParseError("Manifest must be a mapping with a 'resources' list")
        self._data = data
        self.connection = ConnectionSettings.from_dict(data.get("connection"))
        self.resources = self._merge_defaults(data.get("resources") or [], data.get("defaults") or {})

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Manifest":
        """Load a manifest file, searching the default locations when no path is given."""
        path = path or find_manifest()
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ParseError(f"Invalid YAML in {path}: {e}") from e
        logger.info(f"Loaded manifest {path}")
        return cls(data or {}, path=str(path))

    def _merge_defaults(self, resources: list, defaults: dict) -> list[dict]:
        if not isinstance(resources, list):
            raise ParseError("'resources' must be a list")
        merged = []
        for entry in resources:
            if not isinstance(entry, dict):
                raise ParseError(f"Resource entries must be mappings, got {entry!r}")
            record = dict(entry)
            for key, value in defaults.items():
                if key not in record:
                    record[key] = value
            merged.append(record)
        return merged

    def resources_of_kind(self, kind: str) -> list[dict]:
        return [r for r in self.resources if r.get("kind") == kind]

    def get_section(self, name: str) -> dict:
        """Raw top-level section (``initialize``), empty when missing."""
        section = self._data.get(name) or {}
        if not isinstance(section, dict):
            raise ParseError(f"'{name}' must be a mapping")
        return section


def find_manifest() -> str:
    """Find the manifest file."""
    env_path = os.environ.get(MANIFEST_ENV)
    if env_path:
        return env_path

    search_paths = [
        Path.cwd() / "jamf.yaml",
        Path.home() / ".config" / "jamf-state" / "jamf.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return str(path)

    raise FileNotFoundError(
        f"Could not find jamf.yaml. Create one in the current directory or set ${MANIFEST_ENV}"
    )
