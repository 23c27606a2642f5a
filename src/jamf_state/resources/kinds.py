"""Resource kind configuration.

A ``ResourceKind`` bundles everything the generic reader, diff engine and
writer need to know about one Jamf object type: where it lives, how its
documents are shaped, which fields it has, and which cross-field rules
apply. Kinds hold no behaviour of their own beyond URL building.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .fields import Field


class WireFormat(str, Enum):
    """Body format a kind's endpoint speaks."""
    XML = "xml"    # Classic API (JSSResource)
    JSON = "json"  # Jamf Pro API (api/v1)


@dataclass(frozen=True)
class Coerce:
    """Force dependent fields when a master switch holds one of ``values``.

    With ``negate`` the rule fires when the switch holds anything else,
    including when it is unset.

    Example: SMTP ``enabled == False`` forces ``host`` to ``""``.
    """
    switch: str
    values: tuple
    force: dict
    negate: bool = False

    def applies(self, record: dict) -> bool:
        if self.negate:
            return record.get(self.switch) not in self.values
        return self.switch in record and record[self.switch] in self.values


@dataclass(frozen=True)
class Mirror:
    """Keep ``target`` equal to ``source`` (account ``email_address``)."""
    source: str
    target: str


@dataclass(frozen=True)
class Constraint:
    """Allowed values of ``field`` that depend on another field.

    Checked only against values the manifest sets explicitly. When
    ``switch`` does not hold one of ``values`` (or does, with ``negate``),
    ``field`` must be one of ``allowed``.
    """
    field: str
    switch: str
    values: tuple
    allowed: tuple
    negate: bool = False

    def restricts(self, record: dict) -> bool:
        hit = record.get(self.switch) in self.values
        return hit if self.negate else not hit


@dataclass(frozen=True)
class ReadAll:
    """Union a fixed privilege catalog into ``target`` when ``switch`` is set."""
    switch: str
    target: str
    catalog: tuple[str, ...]


@dataclass(frozen=True)
class Lookup:
    """Resolve a name to a server id at write time.

    The field is read as a name at its ``read_path`` and written as the id
    of the matching object in ``collection`` at its ``path``.
    """
    collection: str
    list_key: tuple[str, ...]


@dataclass(frozen=True)
class ResourceKind:
    """Configuration of one resource type.

    Attributes:
        name: Kind name used in manifests (``policy``).
        path: Collection path below the API URL (``JSSResource/policies``).
        fields: Field table.
        list_key: Path to the summary list in the collection response.
        detail_key: Root element of the detail document (and of XML bodies).
            ``None`` for JSON kinds whose documents are not wrapped.
        id_segment: Path segment before the id (``id``, ``userid``). ``None``
            addresses items as ``{collection}/{id}``.
        wire_format: Body format for writes.
        singleton: Settings page with one fixed URL, always present.
        name_path: Where the identity name lives in the detail document.
            ``None`` when the body does not carry the name.
        cloud_name_field: Manifest key holding the identity on cloud servers.
        rules: Master-switch coercions, applied in order.
        mirrors: Fields kept equal to other fields.
        constraints: Conditional allowed values.
        read_all: Privilege catalog expansions.
        lookups: Name-to-id lookups keyed by field name.
        creatable: A missing object may be created.
        deletable: ``ensure: absent`` deletes the object.
    """
    name: str
    path: str
    fields: tuple[Field, ...]
    list_key: tuple[str, ...] = ()
    detail_key: Optional[str] = None
    id_segment: Optional[str] = "id"
    wire_format: WireFormat = WireFormat.XML
    singleton: bool = False
    name_path: Optional[tuple[str, ...]] = ("name",)
    cloud_name_field: Optional[str] = None
    rules: tuple[Coerce, ...] = ()
    mirrors: tuple[Mirror, ...] = ()
    constraints: tuple[Constraint, ...] = ()
    read_all: tuple[ReadAll, ...] = ()
    lookups: tuple[tuple[str, Lookup], ...] = ()
    creatable: bool = True
    deletable: bool = True
    description: str = ""

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"{self.name} has no field '{name}'")

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def lookup_for(self, field_name: str) -> Optional[Lookup]:
        if not self.lookups:
            return None
        return dict(self.lookups).get(field_name)

    # --- URLs ---

    def collection_url(self, api_url: str) -> str:
        return f"{api_url.rstrip('/')}/{self.path}"

    def item_url(self, api_url: str, object_id: Any) -> str:
        if self.singleton:
            return self.collection_url(api_url)
        if self.id_segment:
            return f"{self.collection_url(api_url)}/{self.id_segment}/{object_id}"
        return f"{self.collection_url(api_url)}/{object_id}"

    def create_url(self, api_url: str) -> str:
        """Classic API creates at id 0; the Pro API creates on the collection."""
        if self.wire_format == WireFormat.XML:
            return self.item_url(api_url, 0)
        return self.collection_url(api_url)
