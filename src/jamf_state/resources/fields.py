"""Declarative field types for resource kinds.

Every attribute of every resource kind is described by exactly one field
object. A field knows how to:

- validate and coerce a desired value (``validate``)
- turn a value read from the server into the same canonical form
  (``from_wire``)
- compare desired and current values (``equals``)
- lay the value out in a request body (``to_wire``)

Validation, diffing and body encoding are written once against this
interface; resource kinds only declare tables of fields.
"""
import hashlib
import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from ..errors import ValidationError


class _Absent:
    """Marker for 'this attribute has no value on the server'."""

    def __repr__(self) -> str:
        return "absent"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def to_bool(value: Any) -> bool:
    """Coerce booleans the way manifests and the API spell them."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    raise ValueError(f"expected a boolean, got {type(value).__name__}")


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"expected an integer, got {type(value).__name__}")


def to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"expected a string, got {type(value).__name__}")


def canonical_xml(text: str) -> str:
    """Canonical form of an XML document, ignoring formatting whitespace."""
    if not text:
        return ""
    try:
        return ET.canonicalize(xml_data=text, strip_text=True)
    except ET.ParseError:
        return " ".join(text.split())


@dataclass(frozen=True)
class Field:
    """Base field. Holds the metadata shared by every field type.

    Attributes:
        name: Attribute name used in manifests.
        path: Location in the request body, relative to the kind's detail
            element. Defaults to ``(name,)``.
        read_path: Location in the read document when it differs from
            ``path`` (for example ``*_sha256`` password digests).
        default: Value filled in when the manifest leaves the field unset.
            ``None`` means the field is unmanaged unless given.
        choices: Allowed desired values.
        required: The manifest must provide a value when ensure=present.
        default_from: Take the desired value of another field when unset.
        compare: Take part in drift detection.
        write: Appear in request bodies.
        sensitive: Never print the value.
    """
    name: str
    path: Optional[tuple[str, ...]] = None
    read_path: Optional[tuple[str, ...]] = None
    default: Any = None
    choices: Optional[tuple] = None
    required: bool = False
    default_from: Optional[str] = None
    compare: bool = True
    write: bool = True
    sensitive: bool = False
    description: str = ""

    type_name: ClassVar[str] = "value"

    @property
    def wire_path(self) -> tuple[str, ...]:
        return self.path or (self.name,)

    @property
    def source_path(self) -> tuple[str, ...]:
        return self.read_path or self.wire_path

    def allowed_values(self) -> Optional[tuple]:
        return self.choices

    def validate(self, value: Any) -> Any:
        """Coerce a desired value, raising ValidationError when it is unusable."""
        try:
            result = self.coerce(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(self.name, value, str(e)) from e
        allowed = self.allowed_values()
        if allowed is not None and result is not ABSENT and result not in allowed:
            raise ValidationError(self.name, value, "not an allowed value", allowed)
        return result

    def coerce(self, value: Any) -> Any:
        return value

    def from_wire(self, raw: Any) -> Any:
        """Canonical form of a value read from the server. Never raises."""
        try:
            return self.coerce(raw)
        except (TypeError, ValueError):
            return raw

    def normalize(self, value: Any) -> Any:
        return value

    def equals(self, desired: Any, current: Any) -> bool:
        return self.normalize(desired) == self.normalize(current)

    def to_wire(self, value: Any) -> Any:
        return value

    def display(self, value: Any) -> str:
        if self.sensitive and value not in (None, "", ABSENT):
            return "<sensitive>"
        return repr(value)


@dataclass(frozen=True)
class StringField(Field):
    """A string attribute.

    Attributes:
        wire_values: Map from manifest spelling to API spelling, e.g.
            ``active_directory`` -> ``Active Directory``. Its keys are the
            allowed values.
        digest: The server only reports a hash of the value (``sha256``).
        xml_document: The value is an XML document; compare canonically.
        empty_is_absent: An empty string means "no value".
        probe: Current value is determined by a credential probe instead
            of the read document.
    """
    wire_values: Optional[dict] = None
    digest: Optional[str] = None
    xml_document: bool = False
    empty_is_absent: bool = False
    probe: bool = False

    type_name: ClassVar[str] = "string"

    def allowed_values(self) -> Optional[tuple]:
        if self.choices is not None:
            return self.choices
        if self.wire_values:
            return tuple(self.wire_values)
        return None

    def coerce(self, value: Any) -> Any:
        if value is ABSENT:
            return ABSENT
        if value is None:
            return ABSENT if self.empty_is_absent else ""
        text = to_str(value)
        if self.empty_is_absent and text == "":
            return ABSENT
        return text

    def from_wire(self, raw: Any) -> Any:
        if self.wire_values and raw is not None:
            reverse = {v: k for k, v in self.wire_values.items()}
            if raw in reverse:
                return reverse[raw]
        return super().from_wire(raw)

    def normalize(self, value: Any) -> Any:
        if value is ABSENT or value is None or value == "":
            return ABSENT if self.empty_is_absent else ""
        if self.xml_document:
            return canonical_xml(str(value))
        return str(value)

    def equals(self, desired: Any, current: Any) -> bool:
        if self.digest and current not in (None, "", ABSENT):
            plain = "" if desired in (None, ABSENT) else str(desired)
            hashed = hashlib.new(self.digest, plain.encode("utf-8")).hexdigest()
            return hashed == str(current).lower()
        return super().equals(desired, current)

    def to_wire(self, value: Any) -> Any:
        if self.wire_values and value in self.wire_values:
            return self.wire_values[value]
        return value


@dataclass(frozen=True)
class BoolField(Field):
    type_name: ClassVar[str] = "boolean"

    def coerce(self, value: Any) -> bool:
        return to_bool(value)

    def normalize(self, value: Any) -> Any:
        if value is None or value == "":
            return None
        try:
            return to_bool(value)
        except ValueError:
            return value


@dataclass(frozen=True)
class IntField(Field):
    type_name: ClassVar[str] = "integer"

    def coerce(self, value: Any) -> int:
        return to_int(value)

    def normalize(self, value: Any) -> Any:
        if value is None or value == "":
            return None
        try:
            return to_int(value)
        except ValueError:
            return value


def _unwrap(raw: Any, item_tag: Optional[str]) -> list:
    """Read-side list shapes: None, a bare item, a list, or ``{item_tag: ...}``."""
    if raw is None or raw == "" or raw == {}:
        return []
    if isinstance(raw, dict) and item_tag and item_tag in raw:
        raw = raw[item_tag]
        if raw is None:
            return []
    if isinstance(raw, list):
        return raw
    return [raw]


@dataclass(frozen=True)
class StringListField(Field):
    """An unordered list of strings, compared as a set.

    Attributes:
        item_tag: XML element name of each item (``privilege``).
    """
    item_tag: Optional[str] = None

    type_name: ClassVar[str] = "string list"

    def coerce(self, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a list of strings, got {type(value).__name__}")
        return [to_str(item) for item in value]

    def from_wire(self, raw: Any) -> list:
        items = _unwrap(raw, self.item_tag)
        result = []
        for item in items:
            if isinstance(item, dict) and "name" in item:
                item = item["name"]
            result.append(item if isinstance(item, str) else str(item))
        return result

    def normalize(self, value: Any) -> list:
        if not value:
            return []
        return sorted(set(str(v) for v in value))

    def to_wire(self, value: Any) -> Any:
        items = self.normalize(value)
        if self.item_tag:
            return {self.item_tag: items} if items else {}
        return items


@dataclass(frozen=True)
class RecordKey:
    """One permissible key of a record in a RecordListField."""
    name: str
    type: type = str
    required: bool = True
    default: Any = None
    choices: Optional[tuple] = None

    def coerce(self, value: Any) -> Any:
        if self.type is bool:
            return to_bool(value)
        if self.type is int:
            return to_int(value)
        if value is None:
            return ""
        return to_str(value)


@dataclass(frozen=True)
class RecordListField(Field):
    """An unordered list of structured records.

    Records are filtered to the declared keys, missing optional keys take
    their defaults, and the list is sorted by ``sort_key`` before any
    comparison. The same normalization is applied to desired and current
    values, so order and extra server-side keys (such as ``id``) never
    produce drift.

    Attributes:
        keys: Permissible keys of each record.
        item_tag: XML element name of each record (``computer_group``).
            Without one, the field's own element repeats per record.
        sort_key: Record key the list is ordered by.
    """
    keys: tuple[RecordKey, ...] = ()
    item_tag: Optional[str] = None
    sort_key: str = "name"

    type_name: ClassVar[str] = "record list"

    def key_names(self) -> list[str]:
        return [k.name for k in self.keys]

    def validate(self, value: Any) -> list[dict]:
        if value is None:
            return []
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.name, value, "expected a list of records")
        records = []
        for item in value:
            if not isinstance(item, dict):
                raise ValidationError(self.name, item, "expected a record (mapping)")
            record = {}
            for key in self.keys:
                if key.name not in item or item[key.name] is None:
                    if key.default is not None:
                        record[key.name] = key.default
                        continue
                    if key.required:
                        raise ValidationError(
                            self.name, item, f"record is missing required key '{key.name}'"
                        )
                    continue
                try:
                    coerced = key.coerce(item[key.name])
                except ValueError as e:
                    raise ValidationError(f"{self.name}.{key.name}", item[key.name], str(e)) from e
                if key.choices is not None and coerced not in key.choices:
                    raise ValidationError(
                        f"{self.name}.{key.name}", item[key.name], "not an allowed value", key.choices
                    )
                record[key.name] = coerced
            records.append(record)
        return self._sorted(records)

    def from_wire(self, raw: Any) -> list[dict]:
        records = []
        for item in _unwrap(raw, self.item_tag):
            if not isinstance(item, dict):
                # Single-key records sometimes come back as bare values
                if len(self.keys) != 1:
                    continue
                item = {self.keys[0].name: item}
            record = self._filter(item)
            if self._complete(record):
                records.append(record)
        return self._sorted(records)

    def _complete(self, record: dict) -> bool:
        """Placeholder entries such as ``{"any": null}`` have no required keys."""
        return all(k.name in record for k in self.keys if k.required and k.default is None)

    def _filter(self, item: dict) -> dict:
        record = {}
        for key in self.keys:
            value = item.get(key.name)
            if value is None:
                if key.default is not None:
                    record[key.name] = key.default
                continue
            try:
                record[key.name] = key.coerce(value)
            except ValueError:
                record[key.name] = value
        return record

    def _sorted(self, records: list[dict]) -> list[dict]:
        def order(record: dict) -> tuple:
            value = record.get(self.sort_key, "")
            rank = (0, value, "") if isinstance(value, int) and not isinstance(value, bool) else (1, 0, str(value))
            return rank + (json.dumps(record, sort_keys=True, default=str),)

        return sorted(records, key=order)

    def normalize(self, value: Any) -> list:
        if not value:
            return []
        return self._sorted([self._filter(r) for r in value if isinstance(r, dict)])

    def to_wire(self, value: Any) -> Any:
        records = self.normalize(value)
        if self.item_tag:
            return {self.item_tag: records} if records else {}
        return records


@dataclass(frozen=True)
class MappingField(Field):
    """A free-form mapping (LDAP attribute mappings).

    Only the keys given in the manifest are compared, so server-side keys
    the manifest does not mention never produce drift.
    """
    type_name: ClassVar[str] = "mapping"

    def coerce(self, value: Any) -> dict:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"expected a mapping, got {type(value).__name__}")
        return dict(value)

    @staticmethod
    def _value(v: Any) -> Any:
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.lower() in ("true", "false"):
            return v.lower() == "true"
        return "" if v is None else str(v)

    def equals(self, desired: Any, current: Any) -> bool:
        desired = desired or {}
        current = current if isinstance(current, dict) else {}
        return all(
            self._value(v) == self._value(current.get(k)) for k, v in desired.items()
        )

    def normalize(self, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {k: self._value(v) for k, v in sorted(value.items())}


def scope_list(name: str, path: tuple[str, ...], item_tag: str) -> RecordListField:
    """A list of ``{name: ...}`` references, as used throughout scope blocks."""
    return RecordListField(
        name=name,
        path=path,
        default=[],
        item_tag=item_tag,
        keys=(RecordKey("name"),),
    )


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
    "scope_list",
    "to_bool",
    "to_int",
    "canonical_xml",
]
