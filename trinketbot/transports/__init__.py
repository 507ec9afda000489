"""Transport factories and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import TrinketConfig, load_config
from .base import (
    GatewayConnection,
    GatewayTransport,
    RestClient,
    RestResponse,
    RestTransportError,
    TransportClosed,
)
from .inmemory import InMemoryConnection, InMemoryGatewayTransport, InMemoryRestClient


def get_transport(
    backend: Optional[str] = None, config: Optional[TrinketConfig] = None
) -> GatewayTransport:
    """Factory function to get the configured gateway transport."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("TRINKETBOT_TRANSPORT")
        or config.gateway.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryGatewayTransport()
    elif backend == "websocket":
        from .websocket import WebSocketTransport

        return WebSocketTransport()
    else:
        raise ValueError(f"Unsupported transport backend: {backend}")


def get_rest_client(config: Optional[TrinketConfig] = None) -> RestClient:
    """Build the REST client for the configured token."""

    config = config or load_config()
    if not config.token:
        raise ValueError("No bot token configured; set MARKETPLACE_TOKEN")

    from .http import HttpxRestClient

    return HttpxRestClient(
        config.token, base_url=config.rest.base_url, timeout=config.rest.timeout
    )


__all__ = [
    "GatewayConnection",
    "GatewayTransport",
    "InMemoryConnection",
    "InMemoryGatewayTransport",
    "InMemoryRestClient",
    "RestClient",
    "RestResponse",
    "RestTransportError",
    "TransportClosed",
    "get_rest_client",
    "get_transport",
]
