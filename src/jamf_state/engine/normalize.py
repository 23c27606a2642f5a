"""Normalization pass run on every desired record before diffing and writing.

Steps, in order:

1. field defaults for attributes the manifest leaves unset
2. ``default_from`` (take another attribute's value, or the identity name)
3. mirrors (account ``email_address`` follows ``email``)
4. master-switch coercions, in the order the kind declares them
5. read-all privilege expansion

The result is what the server is expected to hold after a write, so drift
detection never flags a value the write would override anyway.
"""
import copy
from dataclasses import replace
from typing import Any

from ..errors import ValidationError
from ..resources import ResourceKind
from .schema import Ensure, ResourceSpec


def apply_defaults(kind: ResourceKind, attributes: dict[str, Any], name: str) -> dict[str, Any]:
    """Fill defaults and ``default_from`` values; returns a new dict."""
    result = dict(attributes)
    for f in kind.fields:
        if f.name in result or f.default is None:
            continue
        result[f.name] = copy.deepcopy(f.default)

    for f in kind.fields:
        if f.name in result or not f.default_from:
            continue
        if f.default_from == "name":
            result[f.name] = name
        elif f.default_from in result:
            result[f.name] = result[f.default_from]
    return result


def check_constraints(kind: ResourceKind, attributes: dict[str, Any], name: str) -> None:
    """Check explicitly set values whose allowed set depends on another field.

    Raises:
        ValidationError: A value is not allowed given its switch.
    """
    effective = apply_defaults(kind, attributes, name)
    for constraint in kind.constraints:
        if constraint.field not in attributes:
            continue
        value = attributes[constraint.field]
        if constraint.restricts(effective) and value not in constraint.allowed:
            raise ValidationError(
                constraint.field,
                value,
                f"not allowed when {constraint.switch}={effective.get(constraint.switch)!r}",
                constraint.allowed,
            )


def apply_rules(kind: ResourceKind, attributes: dict[str, Any]) -> dict[str, Any]:
    """Apply mirrors, master-switch coercions and read-all expansion."""
    result = dict(attributes)

    for mirror in kind.mirrors:
        if mirror.source in result:
            result[mirror.target] = result[mirror.source]

    for rule in kind.rules:
        if rule.applies(result):
            result.update(rule.force)

    for expansion in kind.read_all:
        if result.get(expansion.switch) is True:
            given = result.get(expansion.target) or []
            result[expansion.target] = sorted(set(expansion.catalog) | set(given))

    return result


def normalize_spec(kind: ResourceKind, spec: ResourceSpec) -> ResourceSpec:
    """Return a copy of ``spec`` with the full normalization pass applied.

    Specs with ``ensure: absent`` are returned unchanged; their attributes
    are never compared or written.
    """
    if spec.ensure == Ensure.ABSENT:
        return spec
    attributes = apply_defaults(kind, spec.attributes, spec.name)
    attributes = apply_rules(kind, attributes)
    return replace(spec, attributes=attributes)
