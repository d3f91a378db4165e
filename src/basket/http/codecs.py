"""
Structured payload codecs.

basket only moves bytes. Turning Python values into JSON or XML bodies
(and back) is delegated to the standard library:

    json                  dict / list / str / ...  <->  b'{"name": "John"}'
    xml.etree.ElementTree Element or mapping       <->  b'<person><name>John</name></person>'

Codec failures are wrapped in CodecError with the codec's own exception
kept untouched on ``CodecError.error``.
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Mapping, Union

from ..errors import CodecError


XmlPayload = Union[ET.Element, Mapping[str, Any]]


# =============================================================================
# JSON
# =============================================================================

def encode_json(payload: Any) -> bytes:
    """Serialize ``payload`` to UTF-8 JSON bytes."""
    try:
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise CodecError("json", e) from e


def decode_json(body: bytes) -> Any:
    """Parse a JSON body."""
    try:
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CodecError("json", e) from e


# =============================================================================
# XML
# =============================================================================
#
# A mapping is serialized as one element per key under a single root:
#
#     {"person": {"name": "John", "age": 42}}
#
#     <person><name>John</name><age>42</age></person>
#
# Lists repeat the element, None becomes an empty element, and every other
# scalar is written with str(). An Element is serialized as-is.
#
# =============================================================================

def _fill(element: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            if not isinstance(key, str):
                raise TypeError(f"XML element names must be str, not {type(key).__name__}")
            items = child if isinstance(child, (list, tuple)) else [child]
            for item in items:
                _fill(ET.SubElement(element, key), item)
    elif value is not None:
        element.text = str(value)


def encode_xml(payload: XmlPayload) -> bytes:
    """
    Serialize an Element, or a single-root mapping, to UTF-8 XML bytes.

    Raises:
        CodecError: If the payload has no single root or cannot be serialized.
    """
    try:
        if isinstance(payload, ET.Element):
            root = payload
        elif isinstance(payload, Mapping) and len(payload) == 1:
            (tag, value), = payload.items()
            if not isinstance(tag, str):
                raise TypeError(f"XML root name must be str, not {type(tag).__name__}")
            root = ET.Element(tag)
            _fill(root, value)
        else:
            raise TypeError("XML payload must be an Element or a mapping with one root key")
        return ET.tostring(root, encoding="unicode").encode("utf-8")
    except (TypeError, ValueError) as e:
        raise CodecError("xml", e) from e


def decode_xml(body: Union[str, bytes]) -> ET.Element:
    """Parse an XML body and return its root element."""
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise CodecError("xml", e) from e
