"""Pre-flight validation for parsed manifests.

Catches logical errors before any server communication. Per-field type and
choice checks already happened in the parser; this pass looks at whole
records and at the manifest as a whole.
"""
from typing import Optional

from ..errors import ValidationError
from ..resources import get_kind
from .normalize import check_constraints
from .schema import Ensure, ResourceSpec, ValidationResult


class ManifestValidator:
    """Validate parsed resource specs for logical errors before execution."""

    def __init__(self, api_url: Optional[str] = None):
        """
        Initialize validator.

        Args:
            api_url: URL of the run's session, used to flag records that
                name a different server
        """
        self.api_url = api_url

    def validate(self, specs: list[ResourceSpec]) -> ValidationResult:
        """
        Validate a list of resource specs.

        Performs pre-flight checks:
        - Required attributes on present resources
        - Conditional allowed values (e.g. SMTP ssl/tls vs encryption)
        - Lifecycle restrictions (settings pages cannot be absent)
        - Duplicate declarations

        Args:
            specs: Parsed resource specs

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        for spec in specs:
            self._validate_lifecycle(spec, errors, warnings)
            if spec.ensure == Ensure.PRESENT:
                self._validate_required(spec, errors)
                self._validate_constraints(spec, errors)
            self._check_overrides(spec, warnings)

        self._check_duplicates(specs, errors)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _validate_required(self, spec: ResourceSpec, errors: list[str]) -> None:
        kind = get_kind(spec.kind)
        for f in kind.fields:
            if f.required and spec.attributes.get(f.name) in (None, ""):
                errors.append(f"{spec.identity}: missing required attribute '{f.name}'")

    def _validate_constraints(self, spec: ResourceSpec, errors: list[str]) -> None:
        """Check explicitly set values whose allowed set depends on another field."""
        try:
            check_constraints(get_kind(spec.kind), spec.attributes, spec.name)
        except ValidationError as e:
            errors.append(f"{spec.identity}: {e}")

    def _validate_lifecycle(
        self,
        spec: ResourceSpec,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        kind = get_kind(spec.kind)
        if spec.ensure != Ensure.ABSENT:
            return
        if kind.singleton:
            errors.append(f"{spec.identity}: settings page '{kind.name}' cannot be absent")
        elif not kind.deletable:
            errors.append(f"{spec.identity}: {kind.name} cannot be removed with ensure: absent")
        elif spec.attributes:
            warnings.append(
                f"{spec.identity}: attributes are ignored for ensure: absent "
                f"({', '.join(sorted(spec.attributes))})"
            )

    def _check_overrides(self, spec: ResourceSpec, warnings: list[str]) -> None:
        api_url = spec.overrides.get("api_url")
        if api_url and self.api_url and api_url.rstrip("/") != self.api_url.rstrip("/"):
            warnings.append(
                f"{spec.identity}: api_url {api_url} differs from the session URL "
                f"{self.api_url}; the session URL is used"
            )

    def _check_duplicates(self, specs: list[ResourceSpec], errors: list[str]) -> None:
        """A resource may only be declared once per manifest."""
        seen: set[str] = set()
        for spec in specs:
            if spec.identity in seen:
                errors.append(f"{spec.identity}: declared more than once")
            seen.add(spec.identity)
