"""JSON <-> XML conversion tests."""

from __future__ import annotations

import pytest
from lxml import etree

from ediflow.core.errors import ConversionError
from ediflow.core.messages import MessageType
from ediflow.services.conversion import NAMESPACE, XmlConverter

NS = {"rsm": NAMESPACE}


@pytest.fixture()
def converter() -> XmlConverter:
    return XmlConverter()


def _parse(xml: str) -> etree._Element:
    return etree.fromstring(xml.split("\n", 1)[1].encode("utf-8"))


def test_json_to_xml_uses_message_root_and_namespace(converter: XmlConverter) -> None:
    xml = converter.json_to_xml({"header": {"orderNumber": "PO-1", "totalAmount": 1200.0}}, "order")

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
    root = _parse(xml)
    assert etree.QName(root).localname == "SMEOrder"
    assert root.nsmap[None] == NAMESPACE
    assert root.findtext("rsm:header/rsm:orderNumber", namespaces=NS) == "PO-1"
    assert root.findtext("rsm:header/rsm:totalAmount", namespaces=NS) == "1200"


def test_attributes_text_and_repeated_elements(converter: XmlConverter) -> None:
    data = {
        "amount": {"@currencyID": "JPY", "#text": 500},
        "line": [{"id": 1}, {"id": 2}],
        "flag": True,
        "empty": None,
    }

    root = _parse(converter.json_to_xml(data, MessageType.INVOICE))

    assert etree.QName(root).localname == "SMEInvoice"
    amount = root.find("rsm:amount", namespaces=NS)
    assert amount.get("currencyID") == "JPY"
    assert amount.text == "500"
    assert [e.text for e in root.findall("rsm:line/rsm:id", namespaces=NS)] == ["1", "2"]
    assert root.findtext("rsm:flag", namespaces=NS) == "true"
    assert root.findtext("rsm:empty", namespaces=NS) == ""


def test_payload_already_wrapped_in_root_is_not_wrapped_again(converter: XmlConverter) -> None:
    root = _parse(converter.json_to_xml({"SMEOrder": {"id": "A"}}, "order"))

    assert [etree.QName(child).localname for child in root] == ["id"]


def test_unknown_message_type_uses_cross_industry_invoice(converter: XmlConverter) -> None:
    root = _parse(converter.json_to_xml({"id": "A"}, "purchase"))

    assert etree.QName(root).localname == "CrossIndustryInvoice"


def test_prefixed_keys_use_data_type_namespaces(converter: XmlConverter) -> None:
    root = _parse(converter.json_to_xml({"udt:DateTimeString": "20240401"}, "order"))

    child = root[0]
    assert etree.QName(child).namespace == "urn:un:unece:uncefact:data:standard:UnqualifiedDataType:100"


def test_invalid_element_name_raises(converter: XmlConverter) -> None:
    with pytest.raises(ConversionError):
        converter.json_to_xml({"1bad name": "x"}, "order")


def test_xml_to_json_parses_scalars_and_arrays(converter: XmlConverter) -> None:
    xml = f"""<?xml version="1.0" encoding="UTF-8"?>
<SMEOrder xmlns="{NAMESPACE}" version="1">
  <ID>007</ID>
  <Count>12</Count>
  <Rate>1.50</Rate>
  <Urgent>false</Urgent>
  <Note/>
  <Amount currencyID="JPY">500</Amount>
  <IncludedCIOLSupplyChainTradeLineItem><LineID>1</LineID></IncludedCIOLSupplyChainTradeLineItem>
  <Tag>a</Tag>
  <Tag>b</Tag>
  <Tag>c</Tag>
</SMEOrder>"""

    data = converter.xml_to_json(xml)

    assert data == {
        "ID": "007",
        "Count": 12,
        "Rate": 1.5,
        "Urgent": False,
        "Note": "",
        "Amount": {"@currencyID": "JPY", "#text": 500},
        "IncludedCIOLSupplyChainTradeLineItem": [{"LineID": 1}],
        "Tag": ["a", "b", "c"],
    }


def test_round_trip_of_plain_payload(converter: XmlConverter) -> None:
    data = {"header": {"orderNumber": "PO-1", "totalAmount": 1200, "lines": {"sku": "A-1"}}}

    assert converter.xml_to_json(converter.json_to_xml(data, "order")) == data


def test_malformed_xml_raises(converter: XmlConverter) -> None:
    with pytest.raises(ConversionError, match="XML to JSON conversion error"):
        converter.xml_to_json("<SMEOrder><open></SMEOrder>")


def test_entities_are_not_expanded(converter: XmlConverter) -> None:
    xml = '<!DOCTYPE r [<!ENTITY x "expanded">]><r><v>&x;</v></r>'

    assert converter.xml_to_json(xml) != {"v": "expanded"}
