"""Message envelope and routing records."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from ediflow.core.messages import MessageType

RouteProtocol = Literal["local", "api", "esp"]


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    ERROR = "error"
    PROCESSED = "processed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Message:
    """One business message travelling through the pipeline."""

    message_type: MessageType
    sender_id: str
    receiver_id: Optional[str] = None
    data: Any = None
    xml_data: Optional[str] = None
    status: MessageStatus = MessageStatus.PENDING
    error_message: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    delivered_at: Optional[datetime] = None

    def mark(self, status: MessageStatus, error: str | None = None) -> None:
        self.status = status
        self.error_message = error
        self.updated_at = utcnow()
        if status is MessageStatus.DELIVERED:
            self.delivered_at = self.updated_at

    def summary(self) -> dict:
        return {
            "id": self.id,
            "messageType": self.message_type.value,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "status": self.status.value,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class Application:
    """A registered business application that can receive messages."""

    id: str
    name: str = ""
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class ProviderRoute:
    provider_id: str
    receiver_address: str
    protocol: RouteProtocol = "local"


@dataclass(frozen=True, slots=True)
class RouteResult:
    success: bool
    error: Optional[str] = None
    route: Optional[ProviderRoute] = None


__all__ = [
    "Application",
    "Message",
    "MessageStatus",
    "ProviderRoute",
    "RouteResult",
    "utcnow",
]
