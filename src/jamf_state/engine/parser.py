"""Parser for resource declarations.

Converts manifest dicts into validated ``ResourceSpec`` objects. Every
attribute is checked against its field type here, before any network call.
"""
from typing import Any

from ..errors import ParseError, ValidationError
from ..resources import ResourceKind, get_kind
from ..resources.fields import to_bool
from .normalize import check_constraints
from .schema import Ensure, ResourceSpec

# Per-record connection parameters. They are accepted for compatibility with
# single-resource declarations; the run itself uses one shared session.
CONNECTION_KEYS = (
    "api_url",
    "api_username",
    "api_password",
    "is_cloud",
    "auth_token",
    "jamf_cookie",
    "conn_validator",
)

RESERVED_KEYS = ("kind", "name", "ensure")


class ResourceParser:
    """Parse resource declarations from dict/YAML format."""

    def __init__(self, is_cloud: bool = False):
        self.is_cloud = is_cloud

    def parse(self, record: dict[str, Any]) -> ResourceSpec:
        """
        Parse one declaration into a ResourceSpec.

        Args:
            record: Dict with ``kind``, ``name``, optional ``ensure`` and
                attribute values

        Returns:
            ResourceSpec with validated, coerced attributes

        Raises:
            ParseError: Unknown kind, unknown attribute or bad ensure
            ValidationError: An attribute value does not fit its field, or is
                not allowed given the value of another field
        """
        if not isinstance(record, dict):
            raise ParseError(f"Resource declaration must be a mapping, got {type(record).__name__}")

        kind_name = record.get("kind")
        if not kind_name:
            raise ParseError("Missing required field: kind")
        kind = get_kind(str(kind_name))

        ensure = self._parse_ensure(record.get("ensure", Ensure.PRESENT.value), kind)
        overrides = self._parse_overrides(record)
        is_cloud = overrides.get("is_cloud", self.is_cloud)
        name = self._identity(kind, record, is_cloud)

        attributes = {}
        for key, value in record.items():
            if key in RESERVED_KEYS or key in CONNECTION_KEYS or key == kind.cloud_name_field:
                continue
            if not kind.has_field(key):
                raise ParseError(
                    f"Unknown attribute '{key}' for {kind.name}. "
                    f"Valid: {', '.join(kind.field_names())}"
                )
            attributes[key] = kind.field(key).validate(value)

        if ensure == Ensure.PRESENT:
            check_constraints(kind, attributes, name)

        return ResourceSpec(
            kind=kind.name,
            name=name,
            ensure=ensure,
            attributes=attributes,
            overrides=overrides,
        )

    def _parse_ensure(self, value: Any, kind: ResourceKind) -> Ensure:
        try:
            return Ensure(str(value))
        except ValueError:
            raise ParseError(
                f"Invalid ensure for {kind.name}: {value}. Must be 'present' or 'absent'"
            ) from None

    def _identity(self, kind: ResourceKind, record: dict, is_cloud: bool) -> str:
        """Cloud servers may use an alternate name attribute (``account_name``)."""
        name = record.get("name")
        if is_cloud and kind.cloud_name_field and record.get(kind.cloud_name_field):
            name = record[kind.cloud_name_field]
        if name is None or name == "":
            if kind.singleton:
                return kind.name
            raise ParseError(f"Missing required field: name (kind {kind.name})")
        if not isinstance(name, (str, int)) or isinstance(name, bool):
            raise ValidationError("name", name, "expected a string")
        return str(name)

    def _parse_overrides(self, record: dict) -> dict[str, Any]:
        overrides = {}
        for key in CONNECTION_KEYS:
            if key not in record:
                continue
            value = record[key]
            if key == "is_cloud":
                try:
                    value = to_bool(value)
                except ValueError as e:
                    raise ValidationError(key, value, str(e)) from e
            elif value is not None and not isinstance(value, str):
                raise ValidationError(key, value, "expected a string")
            overrides[key] = value
        return overrides
