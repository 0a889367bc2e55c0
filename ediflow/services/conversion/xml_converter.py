"""Structural JSON <-> XML conversion for EDI-standard messages.

Keys map to elements in the UN/CEFACT default namespace. ``@name`` keys
become attributes, ``#text`` the element text and lists repeat the element.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, Mapping

from lxml import etree

from ediflow.core.errors import ConversionError
from ediflow.core.messages import MessageType, root_element_for
from ediflow.services.mapping.coercion import display_string

LOGGER = logging.getLogger(__name__)

NAMESPACE = "urn:un:unece:uncefact:data:standard:CrossIndustryInvoice:100"
QDT_NAMESPACE = "urn:un:unece:uncefact:data:standard:QualifiedDataType:100"
UDT_NAMESPACE = "urn:un:unece:uncefact:data:standard:UnqualifiedDataType:100"
NSMAP = {None: NAMESPACE, "qdt": QDT_NAMESPACE, "udt": UDT_NAMESPACE}

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Always read back as lists, even with a single occurrence.
ARRAY_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "IncludedCIOLSupplyChainTradeLineItem",
        "SpecifiedTradeProduct",
        "ApplicableTradeTax",
    }
)

TEXT_KEY = "#text"
_ATTRIBUTE_PREFIXES = ("@_", "@")
_INTEGER = re.compile(r"^-?(0|[1-9]\d*)$")
_DECIMAL = re.compile(r"^-?(0|[1-9]\d*)\.\d+$")


def _qualified(name: str) -> str:
    prefix, sep, local = name.partition(":")
    if sep and prefix in NSMAP:
        return f"{{{NSMAP[prefix]}}}{local}"
    return f"{{{NAMESPACE}}}{name}"


def _attribute_name(key: str) -> str | None:
    for prefix in _ATTRIBUTE_PREFIXES:
        if key.startswith(prefix):
            return key[len(prefix) :]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return display_string(value)


def _fill(element: etree._Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            _append(element, str(key), child)
    else:
        element.text = _text(value)


def _append(parent: etree._Element, key: str, value: Any) -> None:
    attribute = _attribute_name(key)
    if attribute is not None:
        parent.set(attribute, _text(value))
        return
    if key == TEXT_KEY:
        parent.text = _text(value)
        return
    items = value if isinstance(value, list) else [value]
    for item in items:
        _fill(etree.SubElement(parent, _qualified(key)), item)


def _scalar(text: str) -> Any:
    if _INTEGER.match(text):
        return int(text)
    if _DECIMAL.match(text):
        return float(text)
    if text in ("true", "false"):
        return text == "true"
    return text


def _localname(element: etree._Element) -> str:
    return etree.QName(element).localname


def _element_value(element: etree._Element, keep_attributes: bool = True) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    attributes = (
        {f"@{etree.QName(k).localname}": _scalar(v) for k, v in element.attrib.items()}
        if keep_attributes
        else {}
    )
    text = (element.text or "").strip()
    if not children and not attributes:
        return _scalar(text) if text else ""

    result: Dict[str, Any] = dict(attributes)
    repeated: set[str] = set()
    for child in children:
        name = _localname(child)
        value = _element_value(child)
        if name in ARRAY_ELEMENTS or name in repeated:
            result.setdefault(name, []).append(value)
        elif name in result:
            result[name] = [result[name], value]
            repeated.add(name)
        else:
            result[name] = value
    if text:
        result[TEXT_KEY] = _scalar(text)
    return result


class XmlConverter:
    """Convert between mapped EDI JSON and namespaced XML documents."""

    def json_to_xml(self, data: Mapping[str, Any], message_type: str | MessageType) -> str:
        """Serialize ``data`` under the message type's root element.

        A payload whose single key already names the root element is not
        wrapped a second time.

        Raises:
            ConversionError: When a key is not a valid XML name.
        """

        root_name = root_element_for(message_type)
        body: Any = data
        if isinstance(data, Mapping) and list(data.keys()) == [root_name]:
            body = data[root_name]
        try:
            root = etree.Element(_qualified(root_name), nsmap=NSMAP)
            _fill(root, body if isinstance(body, Mapping) else {TEXT_KEY: body})
        except (ValueError, TypeError) as exc:
            raise ConversionError(f"JSON to XML conversion error: {exc}") from exc
        xml = etree.tostring(root, encoding="unicode", pretty_print=True)
        LOGGER.debug("Built %s document (%s bytes)", root_name, len(xml))
        return XML_DECLARATION + xml

    def xml_to_json(self, text: str | bytes) -> Dict[str, Any]:
        """Parse a document into plain JSON data.

        Namespaces and the root element's attributes are dropped; nested
        attributes are kept as ``@name`` keys.

        Raises:
            ConversionError: When the text is not well-formed XML.
        """

        payload = text.encode("utf-8") if isinstance(text, str) else text
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(payload, parser=parser)
        except etree.XMLSyntaxError as exc:
            raise ConversionError(f"XML to JSON conversion error: {exc}") from exc
        value = _element_value(root, keep_attributes=False)
        if isinstance(value, dict):
            return value
        return {TEXT_KEY: value} if value != "" else {}


__all__ = ["ARRAY_ELEMENTS", "NAMESPACE", "NSMAP", "XmlConverter"]
