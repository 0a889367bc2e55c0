"""Delivery confirmation payloads."""

from __future__ import annotations

import logging
from typing import Any, Dict

from .models import Message, MessageStatus, utcnow

LOGGER = logging.getLogger(__name__)


def generate_delivery_confirmation(message: Message) -> Dict[str, Any]:
    now = utcnow()
    return {
        "messageId": message.id,
        "status": MessageStatus.DELIVERED.value,
        "deliveredAt": now.isoformat(),
        "timestamp": now.isoformat(),
    }


def generate_delivery_error(message: Message, error: str) -> Dict[str, Any]:
    return {
        "messageId": message.id,
        "status": MessageStatus.ERROR.value,
        "error": error,
        "timestamp": utcnow().isoformat(),
    }


def confirm_delivery(message: Message) -> Dict[str, Any]:
    """Mark ``message`` delivered and return the confirmation for its sender."""

    message.mark(MessageStatus.DELIVERED)
    confirmation = generate_delivery_confirmation(message)
    notify_sender(message.sender_id, confirmation)
    return confirmation


def notify_sender(sender_id: str, confirmation: Dict[str, Any]) -> None:
    # TODO: push confirmations to the sender's callback URL once applications register one.
    LOGGER.info("Notifying sender %s about message %s (%s)", sender_id, confirmation["messageId"], confirmation["status"])


__all__ = ["confirm_delivery", "generate_delivery_confirmation", "generate_delivery_error", "notify_sender"]
