"""Receiver resolution and provider routing for outbound messages."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .models import Application, Message, ProviderRoute, RouteResult

LOGGER = logging.getLogger(__name__)


class ApplicationDirectory(Protocol):
    def find_application(self, app_id: str) -> Optional[Application]:  # pragma: no cover - interface definition
        ...


def determine_receiver(message: Message) -> str | None:
    return message.receiver_id or None


def determine_provider_route(receiver_id: str) -> ProviderRoute:
    """Split ``receiver@provider``; bare ids stay with the local provider.

    Providers starting with ``local`` are local, ``esp`` use ESP-to-ESP
    exchange and everything else goes through the provider API.
    """

    parts = receiver_id.split("@")
    if len(parts) == 2:
        receiver, provider = parts
        if provider.startswith("local"):
            protocol = "local"
        elif provider.startswith("esp"):
            protocol = "esp"
        else:
            protocol = "api"
        return ProviderRoute(provider_id=provider, receiver_address=receiver, protocol=protocol)
    return ProviderRoute(provider_id="local", receiver_address=receiver_id, protocol="local")


class MessageRouter:
    """Deliver messages to local applications or hand them to a provider.

    Provider API and ESP delivery have no transport yet; they log the hand-off
    and report success.
    """

    def __init__(self, applications: ApplicationDirectory | None = None) -> None:
        self._applications = applications

    def route_message(self, message: Message) -> RouteResult:
        receiver = determine_receiver(message)
        if not receiver:
            return RouteResult(success=False, error="Receiver not found")

        route = determine_provider_route(receiver)
        if route.protocol == "local":
            return self._send_to_local(route, message)
        LOGGER.info(
            "Handing message %s to %s provider %s for %s",
            message.id,
            route.protocol,
            route.provider_id,
            route.receiver_address,
        )
        return RouteResult(success=True, route=route)

    def _send_to_local(self, route: ProviderRoute, message: Message) -> RouteResult:
        if self._applications is None:
            LOGGER.warning("No application directory configured; accepting %s", route.receiver_address)
            return RouteResult(success=True, route=route)

        app = self._applications.find_application(route.receiver_address)
        if app is None:
            return RouteResult(success=False, error=f"Receiver application not found: {route.receiver_address}", route=route)
        if not app.is_active:
            return RouteResult(success=False, error=f"Receiver application is inactive: {route.receiver_address}", route=route)
        LOGGER.info("Delivered message %s locally to %s", message.id, app.id)
        return RouteResult(success=True, route=route)


__all__ = ["ApplicationDirectory", "MessageRouter", "determine_provider_route", "determine_receiver"]
