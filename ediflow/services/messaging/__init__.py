"""Message pipeline and routing service package."""

from .delivery import confirm_delivery, generate_delivery_confirmation, generate_delivery_error
from .models import Application, Message, MessageStatus, ProviderRoute, RouteResult
from .pipeline import MessagePipeline
from .router import ApplicationDirectory, MessageRouter, determine_provider_route, determine_receiver

__all__ = [
    "Application",
    "ApplicationDirectory",
    "Message",
    "MessagePipeline",
    "MessageRouter",
    "MessageStatus",
    "ProviderRoute",
    "RouteResult",
    "confirm_delivery",
    "determine_provider_route",
    "determine_receiver",
    "generate_delivery_confirmation",
    "generate_delivery_error",
]
