"""Routing, delivery and message pipeline tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import pytest

from ediflow.core.errors import RoutingError
from ediflow.core.messages import MessageType
from ediflow.services.conversion import XmlConverter
from ediflow.services.mapping import Mapper
from ediflow.services.messaging import (
    Application,
    Message,
    MessagePipeline,
    MessageRouter,
    MessageStatus,
    confirm_delivery,
    determine_provider_route,
    generate_delivery_error,
)
from ediflow.services.validation import JsonValidator
from ediflow_persist import MappingConfigStore

PROJECT = Path(__file__).resolve().parents[1] / "ediflow"


class _Directory:
    def __init__(self, *apps: Application) -> None:
        self.apps: Dict[str, Application] = {a.id: a for a in apps}

    def find_application(self, app_id: str) -> Optional[Application]:
        return self.apps.get(app_id)


@pytest.fixture()
def pipeline() -> MessagePipeline:
    configs = MappingConfigStore(PROJECT / "config" / "mapping_configs")
    return MessagePipeline(
        Mapper(config_store=configs),
        json_validator=JsonValidator(PROJECT / "schemas" / "json"),
        router=MessageRouter(_Directory(Application("buyer", "Buyer"), Application("dormant", is_active=False))),
    )


@pytest.mark.parametrize(
    ("receiver", "provider", "address", "protocol"),
    [
        ("acme", "local", "acme", "local"),
        ("acme@local-2", "local-2", "acme", "local"),
        ("acme@esp-hub", "esp-hub", "acme", "esp"),
        ("acme@provider.example", "provider.example", "acme", "api"),
        ("a@b@c", "local", "a@b@c", "local"),
    ],
)
def test_determine_provider_route(receiver: str, provider: str, address: str, protocol: str) -> None:
    route = determine_provider_route(receiver)

    assert (route.provider_id, route.receiver_address, route.protocol) == (provider, address, protocol)


def test_local_routing_checks_application_directory() -> None:
    router = MessageRouter(_Directory(Application("buyer"), Application("dormant", is_active=False)))

    def send(receiver: str):
        return router.route_message(Message(MessageType.ORDER, "shop", receiver))

    assert send("buyer").success
    assert send("nobody").error == "Receiver application not found: nobody"
    assert send("dormant").error == "Receiver application is inactive: dormant"
    assert send("anyone@esp-hub").success
    assert not send("").success


def test_router_without_directory_accepts_local_receivers() -> None:
    assert MessageRouter().route_message(Message(MessageType.ORDER, "shop", "x")).success


def test_confirm_delivery_marks_message() -> None:
    message = Message(MessageType.INVOICE, "seller", "buyer")

    confirmation = confirm_delivery(message)

    assert message.status is MessageStatus.DELIVERED
    assert message.delivered_at is not None
    assert confirmation["messageId"] == message.id
    assert confirmation["status"] == "delivered"

    error = generate_delivery_error(message, "timeout")
    assert (error["status"], error["error"]) == ("error", "timeout")


def test_outbound_message_is_mapped_converted_and_sent(pipeline: MessagePipeline) -> None:
    app_data = {
        "orderNumber": "PO-1",
        "orderDate": "2024/04/01",
        "totalAmount": "1,200",
        "hasDiscount": "true",
        "discountAmount": "100",
    }

    message = pipeline.process_outbound(app_data, "order", "sample-app", "buyer")

    assert message.status is MessageStatus.SENT, message.error_message
    assert message.data == app_data
    edi = XmlConverter().xml_to_json(message.xml_data)
    assert edi == {
        "header": {
            "orderNumber": "PO-1",
            "orderDate": "2024-04-01",
            "totalAmount": 1200,
            "currency": "JPY",
            "discount": 100,
        }
    }
    assert message.summary()["status"] == "sent"


def test_outbound_schema_violation_is_an_error(pipeline: MessagePipeline) -> None:
    message = pipeline.process_outbound({"orderNumber": "PO-1", "totalAmount": "-5"}, "order", "sample-app", "buyer")

    assert message.status is MessageStatus.ERROR
    assert message.xml_data is None
    assert "/header/totalAmount" in message.error_message


def test_outbound_routing_failure_is_an_error(pipeline: MessagePipeline) -> None:
    message = pipeline.process_outbound({"orderNumber": "PO-1"}, "order", "sample-app", "dormant")

    assert message.status is MessageStatus.ERROR
    assert message.error_message == "Receiver application is inactive: dormant"
    assert message.xml_data is not None


def test_outbound_requires_receiver(pipeline: MessagePipeline) -> None:
    with pytest.raises(RoutingError):
        pipeline.process_outbound({"orderNumber": "PO-1"}, "order", "sample-app", None)


def test_outbound_rejects_unknown_message_type(pipeline: MessagePipeline) -> None:
    with pytest.raises(ValueError):
        pipeline.process_outbound({}, "telegram", "sample-app", "buyer")


def test_inbound_message_is_mapped_back(pipeline: MessagePipeline) -> None:
    xml = XmlConverter().json_to_xml({"header": {"orderNumber": "PO-7", "totalAmount": 900}}, "order")

    message = pipeline.process_inbound(xml, "order", sender_id="seller", app_id="sample-app")

    assert message.status is MessageStatus.PROCESSED
    assert message.data == {"orderNumber": "PO-7", "totalAmount": 900, "currency": "JPY"}


def test_inbound_malformed_xml_is_an_error(pipeline: MessagePipeline) -> None:
    message = pipeline.process_inbound("<SMEOrder>", "order", app_id="sample-app")

    assert message.status is MessageStatus.ERROR
    assert message.error_message.startswith("XML parsing error:")
