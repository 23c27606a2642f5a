"""Declarative resource kinds: field types, kind configuration and the catalogue."""
from .fields import (
    ABSENT,
    Field,
    StringField,
    BoolField,
    IntField,
    StringListField,
    RecordKey,
    RecordListField,
    MappingField,
)
from .kinds import (
    Coerce,
    Constraint,
    Lookup,
    Mirror,
    ReadAll,
    ResourceKind,
    WireFormat,
)
from .definitions import KINDS, get_kind
from .catalog import read_privileges

__all__ = [
    "ABSENT",
    "Field",
    "StringField",
    "BoolField",
    "IntField",
    "StringListField",
    "RecordKey",
    "RecordListField",
    "MappingField",
    "Coerce",
    "Constraint",
    "Lookup",
    "Mirror",
    "ReadAll",
    "ResourceKind",
    "WireFormat",
    "KINDS",
    "get_kind",
    "read_privileges",
]
