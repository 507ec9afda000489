"""Websocket transport for the live gateway connection."""

from __future__ import annotations

import logging
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed

from ..contracts import GatewayFrame
from .base import GatewayConnection, GatewayTransport, TransportClosed

logger = logging.getLogger(__name__)


class WebSocketConnection(GatewayConnection):
    """Gateway connection over a ``websockets`` client socket."""

    def __init__(self, ws: Any) -> None:
        self._ws = ws

    async def send(self, frame: GatewayFrame) -> None:
        try:
            await self._ws.send(frame.to_json())
        except ConnectionClosed as e:
            raise _closed(e) from e

    async def recv(self) -> GatewayFrame:
        try:
            raw = await self._ws.recv()
        except ConnectionClosed as e:
            raise _closed(e) from e
        return GatewayFrame.from_json(raw)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        await self._ws.close(code=code, reason=reason)


class WebSocketTransport(GatewayTransport):
    """Open gateway connections with the ``websockets`` library."""

    def __init__(self, max_size: int = 2**22) -> None:
        self.max_size = max_size

    async def connect(self, url: str) -> WebSocketConnection:
        logger.debug(f"Opening gateway socket to {url}")
        try:
            ws = await websockets.connect(url, max_size=self.max_size)
        except (OSError, websockets.exceptions.WebSocketException) as e:
            raise TransportClosed(reason=str(e)) from e
        return WebSocketConnection(ws)


def _closed(exc: ConnectionClosed) -> TransportClosed:
    received = exc.rcvd
    if received is None:
        return TransportClosed(reason="connection lost")
    return TransportClosed(code=received.code, reason=received.reason)
