"""Schema definitions for the reconciliation engine.

Defines the desired/current state shapes and all result dataclasses.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Ensure(str, Enum):
    """Desired or observed lifecycle state of a resource."""
    PRESENT = "present"
    ABSENT = "absent"


class ChangeType(str, Enum):
    """Type of change in a diff."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    NO_CHANGE = "no_change"


@dataclass
class ResourceSpec:
    """Desired state for one resource.

    ``attributes`` holds only the fields the manifest manages, already
    validated and coerced. ``ensure`` is always set.
    """
    kind: str
    name: str
    ensure: Ensure = Ensure.PRESENT
    attributes: dict[str, Any] = field(default_factory=dict)
    overrides: dict[str, Any] = field(default_factory=dict)  # per-record connection keys

    @property
    def identity(self) -> str:
        return f"{self.kind}/{self.name}"


@dataclass
class InstanceState:
    """Current server-side state of one resource, read fresh every pass."""
    kind: str
    name: str
    ensure: Ensure = Ensure.ABSENT
    id: Optional[Any] = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return self.ensure == Ensure.PRESENT

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "name": self.name,
            "ensure": self.ensure.value,
            "id": self.id,
            "attributes": self.attributes,
        }


# --- Validation Results ---

@dataclass
class ValidationResult:
    """Result of manifest validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# --- Diff Results ---

@dataclass
class AttributeChange:
    """One attribute that is out of sync."""
    name: str
    current: Any
    desired: Any
    sensitive: bool = False

    def describe(self) -> str:
        if self.sensitive:
            return f"{self.name}: <sensitive> changed"
        return f"{self.name}: {self.current!r} -> {self.desired!r}"


@dataclass
class DiffResult:
    """Result of comparing desired and current state of one resource."""
    spec: ResourceSpec
    current: InstanceState
    change_type: ChangeType = ChangeType.NO_CHANGE
    changes: list[AttributeChange] = field(default_factory=list)

    @property
    def no_change(self) -> bool:
        return self.change_type == ChangeType.NO_CHANGE

    @property
    def total_changes(self) -> int:
        return len(self.changes)


# --- Write Plan ---

@dataclass
class WriteRequest:
    """One HTTP write the writer will send."""
    method: str
    url: str
    body: Optional[str] = None
    content_type: Optional[str] = None

    def describe(self) -> str:
        return f"{self.method} {self.url}"


# --- Execution Results ---

@dataclass
class ExecuteOptions:
    """Options for applying a manifest."""
    dry_run: bool = False
    stop_on_error: bool = False
    user: Optional[str] = None


@dataclass
class ExecuteResult:
    """Result of reconciling one resource."""
    kind: str
    name: str
    success: bool = False
    dry_run: bool = False
    change_type: ChangeType = ChangeType.NO_CHANGE
    changes_made: list[str] = field(default_factory=list)
    requests_sent: list[str] = field(default_factory=list)
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def identity(self) -> str:
        return f"{self.kind}/{self.name}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind,
            "name": self.name,
            "success": self.success,
            "dry_run": self.dry_run,
            "change_type": self.change_type.value,
            "changes_made": self.changes_made,
            "requests_sent": self.requests_sent,
            "error": self.error,
            "warnings": self.warnings,
        }


@dataclass
class RunResult:
    """Result of applying a whole manifest."""
    results: list[ExecuteResult] = field(default_factory=list)
    dry_run: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and all(r.success for r in self.results)

    @property
    def failed(self) -> list[ExecuteResult]:
        return [r for r in self.results if not r.success]

    @property
    def changed(self) -> list[ExecuteResult]:
        return [r for r in self.results if r.change_type != ChangeType.NO_CHANGE]

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "error": self.error,
            "changed": len(self.changed),
            "failed": len(self.failed),
            "results": [r.to_dict() for r in self.results],
        }
