"""State reader: fetch the current server-side state of one resource.

Every read is fresh. Collection kinds take two round trips because list
endpoints only return abbreviated records:

1. GET the collection and pick the entry whose name matches exactly
2. GET that entry's detail document by id

No match means the resource is absent, which is the normal state before it
is created.
"""
import logging
from typing import Any, Optional

from ..client import JamfClient
from ..client.session import TOKEN_PATH
from ..errors import APIError, ValidationError
from ..resources import ABSENT, ResourceKind
from ..utils.logging_config import timed
from .schema import Ensure, InstanceState, ResourceSpec

logger = logging.getLogger(__name__)


def dig(data: Any, path: tuple[str, ...]) -> Any:
    """Walk nested dicts; None when any step is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class StateReader:
    """Read resources through a bound ``JamfClient``."""

    def __init__(self, client: JamfClient):
        self.client = client

    @property
    def api_url(self) -> str:
        return self.client.session.api_url

    async def find(self, kind: ResourceKind, name: str) -> Optional[Any]:
        """Return the server id of the object called ``name``, or None.

        When several objects share the name the first one wins, matching the
        order the server lists them in; the others are reported in a warning.
        """
        data = await self.client.get(kind.collection_url(self.api_url))
        entries = _as_list(dig(data, kind.list_key) if kind.list_key else data)
        matches = [e for e in entries if isinstance(e, dict) and e.get("name") == name]
        if not matches:
            return None
        if len(matches) > 1:
            ignored = ", ".join(str(m.get("id")) for m in matches[1:])
            logger.warning(
                f"{kind.name} '{name}' matches {len(matches)} objects; "
                f"using id {matches[0].get('id')}, ignoring {ignored}"
            )
        return matches[0].get("id")

    async def fetch_detail(self, kind: ResourceKind, object_id: Any = None) -> dict:
        data = await self.client.get(kind.item_url(self.api_url, object_id))
        if kind.detail_key:
            data = dig(data, (kind.detail_key,))
        return data if isinstance(data, dict) else {}

    def extract(self, kind: ResourceKind, detail: dict) -> dict[str, Any]:
        """Map a detail document to canonical attribute values."""
        return {f.name: f.from_wire(dig(detail, f.source_path)) for f in kind.fields}

    @timed("read")
    async def read(self, kind: ResourceKind, spec: ResourceSpec) -> InstanceState:
        """Read the current state of the resource ``spec`` declares."""
        if kind.singleton:
            detail = await self.fetch_detail(kind)
            return InstanceState(
                kind=kind.name,
                name=spec.name,
                ensure=Ensure.PRESENT,
                attributes=self.extract(kind, detail),
            )

        object_id = await self.find(kind, spec.name)
        if object_id is None:
            logger.debug(f"{spec.identity} not found on server")
            return InstanceState(kind=kind.name, name=spec.name, ensure=Ensure.ABSENT)

        detail = await self.fetch_detail(kind, object_id)
        attributes = self.extract(kind, detail)

        for f in kind.fields:
            if getattr(f, "probe", False):
                desired = spec.attributes.get(f.name)
                if desired is None or spec.ensure == Ensure.ABSENT:
                    attributes[f.name] = ABSENT
                else:
                    attributes[f.name] = await self.probe_password(spec.name, desired)

        return InstanceState(
            kind=kind.name,
            name=spec.name,
            ensure=Ensure.PRESENT,
            id=object_id,
            attributes=attributes,
        )

    async def probe_password(self, username: str, password: str) -> Any:
        """Check a password by trying to log in with it.

        The server only stores salted hashes, so the only way to compare is
        to authenticate. Success reports the desired password (in sync);
        401/403 reports ``ABSENT`` (needs update); any other status raises.
        """
        url = self.client.session.url(TOKEN_PATH)
        response = await self.client.send("POST", url, auth=(username, password))
        if response.is_success:
            return password
        if response.status_code in (401, 403):
            logger.info(f"Password for '{username}' differs from the desired one")
            return ABSENT
        raise APIError(response.status_code, response.text, "POST", url)

    async def resolve_references(self, kind: ResourceKind, attributes: dict[str, Any]) -> dict[str, Any]:
        """Translate name-valued lookup fields to server ids for writing.

        An empty name maps to None so the id element is left out.

        Raises:
            ValidationError: No object with the given name exists.
        """
        resolved = {}
        for field_name, lookup in kind.lookups:
            name = attributes.get(field_name)
            if field_name not in attributes:
                continue
            if not name:
                resolved[field_name] = None
                continue
            data = await self.client.get(f"{self.api_url.rstrip('/')}/{lookup.collection}")
            entries = _as_list(dig(data, lookup.list_key))
            match = next(
                (e for e in entries if isinstance(e, dict) and e.get("name") == name), None
            )
            if match is None:
                raise ValidationError(field_name, name, f"no object named '{name}' in {lookup.collection}")
            resolved[field_name] = match.get("id")
        return resolved
