"""Reconciliation engine - declarative desired state for Jamf Pro.

The engine converges a Jamf server towards declared resources:
- Declare desired state, not individual API calls
- Validation before any network call
- Order-insensitive comparison of list attributes
- Create/update/delete routed per resource kind

Usage:
    from jamf_state.engine import ReconcileEngine

    async with JamfClient(session) as client:
        engine = ReconcileEngine(client)
        result = await engine.apply_manifest([
            {"kind": "department", "name": "Engineering"},
            {
                "kind": "policy",
                "name": "Install Tools",
                "enabled": True,
                "scoped_computer_groups": [{"name": "All Managed Clients"}],
            },
        ], dry_run=True)
"""

from .engine import ReconcileEngine
from .schema import (
    Ensure,
    ChangeType,
    ResourceSpec,
    InstanceState,
    ValidationResult,
    AttributeChange,
    DiffResult,
    WriteRequest,
    ExecuteOptions,
    ExecuteResult,
    RunResult,
)
from .parser import ResourceParser
from .validator import ManifestValidator
from .normalize import normalize_spec
from .reader import StateReader
from .diff import DiffEngine, summarize_diff
from .generator import RequestGenerator, build_document, encode_xml, encode_json
from .executor import ResourceExecutor

__all__ = [
    # Main engine
    "ReconcileEngine",
    # Schema classes
    "Ensure",
    "ChangeType",
    "ResourceSpec",
    "InstanceState",
    "ValidationResult",
    "AttributeChange",
    "DiffResult",
    "WriteRequest",
    "ExecuteOptions",
    "ExecuteResult",
    "RunResult",
    # Components (for advanced use)
    "ResourceParser",
    "ManifestValidator",
    "normalize_spec",
    "StateReader",
    "DiffEngine",
    "summarize_diff",
    "RequestGenerator",
    "build_document",
    "encode_xml",
    "encode_json",
    "ResourceExecutor",
]
