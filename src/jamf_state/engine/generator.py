"""Request generator: turn a diff into the HTTP writes that apply it.

Bodies are built once, generically, from the kind's field table:
``build_document`` lays every managed attribute out at its wire path, and
``encode_xml``/``encode_json`` serialize the nested dict.

XML list convention (the Classic API reads and writes the same shape):

- a list under key ``k`` repeats ``<k>`` once per item
- list fields with an item tag are wrapped, so ``computers`` becomes
  ``<computers><computer>...</computer><computer>...</computer></computers>``
- an empty list or a ``None`` value becomes an empty element
"""
import json
import xml.etree.ElementTree as ET
from typing import Any, Optional

from ..client.http import JSON_CONTENT, XML_CONTENT
from ..errors import JamfStateError
from ..resources import ABSENT, ResourceKind, WireFormat
from .schema import ChangeType, DiffResult, WriteRequest

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _set_path(document: dict, path: tuple[str, ...], value: Any) -> None:
    node = document
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = value


def build_document(
    kind: ResourceKind,
    attributes: dict[str, Any],
    name: str,
    references: Optional[dict[str, Any]] = None,
) -> dict:
    """Nested body for ``kind`` holding the identity name and every managed attribute.

    ``references`` maps lookup fields to resolved server ids; a None id drops
    the element.
    """
    references = references or {}
    document: dict = {}
    if kind.name_path:
        _set_path(document, kind.name_path, name)

    for f in kind.fields:
        if f.name not in attributes or not f.write:
            continue
        if f.name in references:
            if references[f.name] is None:
                continue
            _set_path(document, f.wire_path, references[f.name])
            continue
        _set_path(document, f.wire_path, f.to_wire(attributes[f.name]))
    return document


def _text(value: Any) -> Optional[str]:
    if value is None or value is ABSENT:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    if isinstance(value, list):
        if not value:
            ET.SubElement(parent, tag)
        for item in value:
            _append(parent, tag, item)
        return

    element = ET.SubElement(parent, tag)
    if isinstance(value, dict):
        for key, child in value.items():
            _append(element, key, child)
    else:
        element.text = _text(value)


def encode_xml(root_tag: str, document: dict) -> str:
    """Serialize a nested dict as a Classic API XML body."""
    root = ET.Element(root_tag)
    for key, value in document.items():
        _append(root, key, value)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _json_ready(value: Any) -> Any:
    if value is ABSENT:
        return None
    if isinstance(value, dict):
        return {k: _json_ready(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_ready(v) for v in value]
    return value


def encode_json(document: dict) -> str:
    """Serialize a nested dict as a Jamf Pro API JSON body."""
    return json.dumps(_json_ready(document))


class RequestGenerator:
    """Generate the writes for one resource diff."""

    def encode(self, kind: ResourceKind, document: dict) -> tuple[str, str]:
        """Return ``(body, content_type)`` in the kind's wire format."""
        if kind.wire_format == WireFormat.JSON:
            return encode_json(document), JSON_CONTENT
        return encode_xml(kind.detail_key or kind.name, document), XML_CONTENT

    def generate(
        self,
        kind: ResourceKind,
        diff: DiffResult,
        api_url: str,
        references: Optional[dict[str, Any]] = None,
    ) -> list[WriteRequest]:
        """
        Generate the request plan for a diff.

        - DELETE the item by the id read from the server
        - CREATE with POST to the placeholder id 0 (Classic API) or the
          collection (Pro API)
        - MODIFY with PUT to the item addressed by the current id

        Args:
            kind: Resource kind
            diff: Diff of one resource
            api_url: Base URL of the server
            references: Resolved lookup ids for the body

        Returns:
            Requests to send, in order (empty when nothing changes)

        Raises:
            JamfStateError: The change is not possible for this kind
        """
        spec = diff.spec

        if diff.change_type == ChangeType.NO_CHANGE:
            return []

        if diff.change_type == ChangeType.DELETE:
            return [WriteRequest("DELETE", kind.item_url(api_url, diff.current.id))]

        document = build_document(kind, spec.attributes, spec.name, references)
        body, content_type = self.encode(kind, document)

        if diff.change_type == ChangeType.CREATE:
            if not kind.creatable:
                raise JamfStateError(
                    f"{spec.identity} does not exist on the server and {kind.name} "
                    f"cannot be created; create the underlying object first"
                )
            url = kind.create_url(api_url)
            return [WriteRequest("POST", url, body, content_type)]

        url = kind.item_url(api_url, diff.current.id)
        return [WriteRequest("PUT", url, body, content_type)]
