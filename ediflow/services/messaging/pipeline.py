"""Outbound and inbound message processing.

PROCESS OVERVIEW
----------------
Outbound: application JSON -> mapping -> EDI JSON (schema check when one is
registered) -> XML -> XML check -> routing.
Inbound: XML -> XML check -> EDI JSON -> reverse mapping -> application JSON.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ediflow.core.errors import ConversionError, RoutingError
from ediflow.core.messages import MessageType, parse_message_type
from ediflow.services.conversion import XmlConverter
from ediflow.services.mapping import Mapper
from ediflow.services.validation import JsonValidator, XmlValidator

from .models import Message, MessageStatus
from .router import MessageRouter

LOGGER = logging.getLogger(__name__)


class MessagePipeline:
    """Wire the mapper, XML converter, validators and router together."""

    def __init__(
        self,
        mapper: Mapper,
        *,
        converter: XmlConverter | None = None,
        xml_validator: XmlValidator | None = None,
        json_validator: JsonValidator | None = None,
        router: MessageRouter | None = None,
    ) -> None:
        self.mapper = mapper
        self.converter = converter or XmlConverter()
        self.xml_validator = xml_validator or XmlValidator(converter=self.converter)
        self.json_validator = json_validator or JsonValidator()
        self.router = router or MessageRouter()

    def _xml_schema(self, message_type: MessageType) -> str | None:
        # Only registered schemas are checked; an absent XSD is not an error.
        return message_type.value if message_type.value in self.xml_validator.loaded_schemas else None

    def process_outbound(
        self,
        app_data: Mapping[str, Any],
        message_type: str | MessageType,
        sender_id: str,
        receiver_id: str | None,
        *,
        app_id: str | None = None,
    ) -> Message:
        """Map, serialize, validate and route one application message.

        Raises:
            RoutingError: When no receiver is given.
        """

        if not receiver_id:
            raise RoutingError("receiverId is required")
        mt = parse_message_type(message_type)
        message = Message(message_type=mt, sender_id=sender_id, receiver_id=receiver_id, data=dict(app_data))

        edi_data = self.mapper.map_to_edi_standard(app_data, mt.value, app_id=app_id or sender_id)

        if mt.value in self.json_validator.loaded_schemas:
            report = self.json_validator.validate_json(edi_data, mt.value)
            if not report.valid:
                message.mark(MessageStatus.ERROR, "; ".join(report.errors))
                LOGGER.warning("Message %s failed JSON validation: %s", message.id, message.error_message)
                return message

        try:
            message.xml_data = self.converter.json_to_xml(edi_data, mt)
        except ConversionError as exc:
            message.mark(MessageStatus.ERROR, str(exc))
            return message

        report = self.xml_validator.validate_xml(message.xml_data, self._xml_schema(mt))
        if not report.valid:
            message.mark(MessageStatus.ERROR, "; ".join(report.errors))
            LOGGER.warning("Message %s failed XML validation: %s", message.id, message.error_message)
            return message

        result = self.router.route_message(message)
        if result.success:
            message.mark(MessageStatus.SENT)
        else:
            message.mark(MessageStatus.ERROR, result.error)
        LOGGER.info("Outbound %s message %s: %s", mt.value, message.id, message.status.value)
        return message

    def process_inbound(
        self,
        xml_text: str,
        message_type: str | MessageType,
        *,
        sender_id: str = "unknown",
        app_id: str | None = None,
    ) -> Message:
        """Parse an EDI XML message and map it back to application JSON."""

        mt = parse_message_type(message_type)
        message = Message(message_type=mt, sender_id=sender_id, receiver_id=app_id, xml_data=xml_text)

        report = self.xml_validator.validate_xml(xml_text, self._xml_schema(mt))
        if not report.valid:
            message.mark(MessageStatus.ERROR, "; ".join(report.errors))
            return message

        edi_data = report.data if isinstance(report.data, dict) else {}
        message.data = self.mapper.map_from_edi_standard(edi_data, mt.value, app_id=app_id)
        message.mark(MessageStatus.PROCESSED)
        LOGGER.info("Inbound %s message %s processed", mt.value, message.id)
        return message


__all__ = ["MessagePipeline"]
