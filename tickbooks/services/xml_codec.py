"""
XML encoding of request arguments and decoding of API responses.

Requests are built from nested mappings whose keys are element names.
Responses are decoded into an explicit tree of ``XmlNode`` objects with
typed accessors, so callers never poke at parser internals.
"""

import html
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from tickbooks.services.errors import XmlDecodeError

logger = logging.getLogger(__name__)


@dataclass
class XmlNode:
    """
    A decoded XML element.

    Attributes:
        tag: Element name with any namespace removed ("" for the empty tree)
        attributes: Element attributes, namespaces removed
        children: Child elements in document order
        text: Text content directly inside the element

    Example:
        >>> root = decode('<response status="ok"><invoice_id>7</invoice_id></response>')
        >>> root.attr("status")
        'ok'
        >>> root.int_of("invoice_id")
        7
    """

    tag: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["XmlNode"] = field(default_factory=list)
    text: str = ""

    @classmethod
    def empty(cls) -> "XmlNode":
        """The empty tree, returned for empty or (leniently) malformed documents."""
        return cls()

    @classmethod
    def from_element(cls, element: ET.Element) -> "XmlNode":
        return cls(
            tag=_local_name(element.tag),
            attributes={
                _local_name(name): value for name, value in element.attrib.items()
            },
            children=[cls.from_element(child) for child in element],
            text=element.text or "",
        )

    @property
    def is_empty(self) -> bool:
        return not self.tag

    def child(self, name: str) -> Optional["XmlNode"]:
        """Return the first child element called ``name``."""
        for child in self.children:
            if child.tag == name:
                return child
        return None

    def children_named(self, name: str) -> List["XmlNode"]:
        return [child for child in self.children if child.tag == name]

    def find(self, path: str) -> Optional["XmlNode"]:
        """Follow a ``/`` separated path of child names."""
        node: Optional[XmlNode] = self
        for part in path.split("/"):
            if node is None:
                return None
            node = node.child(part)
        return node

    def text_of(self, path: str, default: str = "") -> str:
        node = self.find(path)
        if node is None:
            return default
        return node.text

    def int_of(self, path: str, default: int = 0) -> int:
        value = self.text_of(path).strip()
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            try:
                return int(float(value))
            except ValueError:
                return default

    def float_of(self, path: str, default: float = 0.0) -> float:
        value = self.text_of(path).strip()
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def attr(self, name: str, default: str = "") -> str:
        return self.attributes.get(name, default)


def _local_name(name: str) -> str:
    # "{http://www.freshbooks.com/api/}response" -> "response"
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


def _escape_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return html.escape(str(value), quote=True)


def _is_numeric_key(key: Any) -> bool:
    if isinstance(key, bool):
        return False
    if isinstance(key, int):
        return True
    return isinstance(key, str) and key.isdigit()


def _list_items(value: Any) -> Optional[Iterable[Any]]:
    """Return the items of a homogeneous list value, None for anything else."""
    if isinstance(value, (list, tuple)):
        return value
    if isinstance(value, Mapping) and all(_is_numeric_key(k) for k in value):
        return value.values()
    return None


def _encode_element(key: str, value: Any) -> str:
    items = _list_items(value)
    if items is not None:
        # Sibling elements repeat the parent key:
        # {"line": [a, b]} -> <line>a</line><line>b</line>
        return "".join(_encode_element(key, item) for item in items)

    if isinstance(value, Mapping):
        return f"<{key}>{encode(value)}</{key}>"

    return f"<{key}>{_escape_scalar(value)}</{key}>"


def encode(mapping: Mapping[str, Any]) -> str:
    """
    Serialize a nested mapping into an XML fragment.

    Keys become element names and must be valid XML names. A list value (or
    a mapping with only numeric keys) produces one element per item, each
    named after the key that holds the list. Scalar text is entity-escaped.

    Args:
        mapping: Request arguments

    Returns:
        XML fragment (no declaration, no root element)

    Example:
        >>> encode({"lines": {"line": [{"quantity": 1}, {"quantity": 2}]}})
        '<lines><line><quantity>1</quantity></line><line><quantity>2</quantity></line></lines>'
    """
    return "".join(_encode_element(str(key), value) for key, value in mapping.items())


def build_request_document(method: str, args: Mapping[str, Any]) -> str:
    """
    Wrap encoded arguments in a complete FreshBooks request envelope.

    Args:
        method: API method name, e.g. ``invoice.create``
        args: Request arguments

    Returns:
        Complete XML document
    """
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<request method="{html.escape(method, quote=True)}">'
        f"{encode(args)}"
        "</request>"
    )


def decode(xml_text: Union[str, bytes, None], lenient: bool = True) -> XmlNode:
    """
    Parse an XML document into an ``XmlNode`` tree.

    Empty input decodes to the empty tree. Malformed input also decodes to
    the empty tree when ``lenient`` is True; this hides protocol errors, so
    it is logged as a warning.

    Args:
        xml_text: Document text or raw bytes
        lenient: Return the empty tree instead of raising on malformed XML

    Returns:
        Root node of the document

    Raises:
        XmlDecodeError: If the document is malformed and ``lenient`` is False
    """
    if xml_text is None or not xml_text.strip():
        return XmlNode.empty()

    try:
        element = ET.fromstring(xml_text)
    except ET.ParseError as e:
        if not lenient:
            raise XmlDecodeError(f"Malformed XML document: {e}") from e
        logger.warning(f"Malformed XML document decoded as empty tree: {e}")
        return XmlNode.empty()

    return XmlNode.from_element(element)
