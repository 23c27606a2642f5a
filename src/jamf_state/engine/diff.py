"""Diff engine for calculating changes between desired and current state.

Only attributes present in the (normalized) desired spec are compared, each
with its field's own equality rule.
"""
import logging

from ..resources import ResourceKind
from .schema import (
    AttributeChange,
    ChangeType,
    DiffResult,
    Ensure,
    InstanceState,
    ResourceSpec,
)

logger = logging.getLogger(__name__)


class DiffEngine:
    """Calculate differences between desired and current state."""

    def calculate(
        self,
        kind: ResourceKind,
        desired: ResourceSpec,
        current: InstanceState
    ) -> DiffResult:
        """
        Calculate the change needed to bring ``current`` to ``desired``.

        Args:
            kind: Resource kind of both sides
            desired: Normalized desired state
            current: Freshly read current state

        Returns:
            DiffResult with the change type and attribute changes
        """
        result = DiffResult(spec=desired, current=current)

        # Handle deletion
        if desired.ensure == Ensure.ABSENT:
            if not current.exists:
                return result
            if current.id is None:
                # Never delete without a server id from a real match
                logger.warning(f"{desired.identity} is present but has no id; not deleting")
                return result
            result.change_type = ChangeType.DELETE
            return result

        # Handle create
        if not current.exists:
            result.change_type = ChangeType.CREATE
            for name, value in desired.attributes.items():
                f = kind.field(name)
                if f.write:
                    result.changes.append(
                        AttributeChange(name, None, value, sensitive=f.sensitive)
                    )
            return result

        # Resource exists, check for modifications
        for name, value in desired.attributes.items():
            f = kind.field(name)
            if not f.compare:
                continue
            current_value = current.attributes.get(name)
            if not f.equals(value, current_value):
                result.changes.append(
                    AttributeChange(
                        name,
                        f.normalize(current_value),
                        f.normalize(value),
                        sensitive=f.sensitive,
                    )
                )

        if result.changes:
            result.change_type = ChangeType.MODIFY
        return result


def summarize_diff(diff: DiffResult) -> str:
    """
    Create a human-readable summary of a diff.

    Useful for dry-run output and logging.
    """
    spec = diff.spec

    if diff.no_change:
        return f"  [=] {spec.identity}: in sync"

    lines = []
    if diff.change_type == ChangeType.CREATE:
        lines.append(f"  [+] Create {spec.identity}")
        for change in diff.changes:
            lines.append(f"      {change.name}: {'<sensitive>' if change.sensitive else repr(change.desired)}")

    elif diff.change_type == ChangeType.DELETE:
        lines.append(f"  [-] Delete {spec.identity}")
        lines.append(f"      (id: {diff.current.id})")

    elif diff.change_type == ChangeType.MODIFY:
        lines.append(f"  [~] Modify {spec.identity} ({diff.total_changes} attributes)")
        for change in diff.changes:
            lines.append(f"      {change.describe()}")

    return "\n".join(lines)
