"""In-memory transports for testing."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple, Union

from ..contracts import GatewayFrame
from .base import (
    GatewayConnection,
    GatewayTransport,
    RestClient,
    RestResponse,
    TransportClosed,
)

_CLOSE = object()


class InMemoryConnection(GatewayConnection):
    """Scripted socket: tests push inbound frames and inspect sent ones."""

    def __init__(self, url: str = "") -> None:
        self.url = url
        self.sent: List[GatewayFrame] = []
        self.closed_with: Optional[int] = None
        self._inbound: asyncio.Queue = asyncio.Queue()

    def push(self, op: int, d: Any = None, s: Optional[int] = None, t: Optional[str] = None) -> None:
        """Queue a frame for the client to receive."""
        self._inbound.put_nowait(GatewayFrame(op=op, d=d, s=s, t=t))

    def drop(self, code: Optional[int] = None, reason: str = "") -> None:
        """Simulate the server closing the socket."""
        self._inbound.put_nowait((_CLOSE, code, reason))

    def sent_ops(self) -> List[int]:
        return [frame.op for frame in self.sent]

    async def send(self, frame: GatewayFrame) -> None:
        if self.closed_with is not None:
            raise TransportClosed(code=self.closed_with)
        self.sent.append(frame)

    async def recv(self) -> GatewayFrame:
        if self.closed_with is not None:
            raise TransportClosed(code=self.closed_with)
        item = await self._inbound.get()
        if isinstance(item, tuple) and item[0] is _CLOSE:
            self.closed_with = item[1] if item[1] is not None else 1006
            raise TransportClosed(code=item[1], reason=item[2])
        return item

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.closed_with is None:
            self.closed_with = code
            self._inbound.put_nowait((_CLOSE, code, reason))


class InMemoryGatewayTransport(GatewayTransport):
    """Hands out pre-scripted connections in order."""

    def __init__(self, connections: Optional[List[InMemoryConnection]] = None) -> None:
        self._pending: Deque[InMemoryConnection] = deque(connections or [])
        self.opened: List[InMemoryConnection] = []
        self.connected = asyncio.Event()

    def add(self, connection: InMemoryConnection) -> InMemoryConnection:
        self._pending.append(connection)
        return connection

    async def connect(self, url: str) -> InMemoryConnection:
        if not self._pending:
            raise TransportClosed(reason="no scripted connection available")
        connection = self._pending.popleft()
        connection.url = url
        self.opened.append(connection)
        self.connected.set()
        return connection


Route = Union[RestResponse, Callable[[Any], RestResponse], Exception]


class InMemoryRestClient(RestClient):
    """Records calls and answers from a route table.

    Unrouted calls answer ``200 {}``. A route may be a response, a callable
    receiving the request body, or an exception to raise.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Any]] = []
        self._routes: Dict[Tuple[str, str], Route] = {}

    def route(self, method: str, path: str, response: Route) -> None:
        self._routes[(method.upper(), path)] = response

    def respond(self, method: str, path: str, status_code: int = 200, body: Any = None) -> None:
        self.route(method, path, RestResponse(status_code=status_code, body=body if body is not None else {}))

    def calls_to(self, method: str, path: Optional[str] = None) -> List[Tuple[str, str, Any]]:
        return [
            call
            for call in self.calls
            if call[0] == method.upper() and (path is None or call[1] == path)
        ]

    async def call(self, method: str, path: str, body: Any = None) -> RestResponse:
        method = method.upper()
        self.calls.append((method, path, body))
        route = self._routes.get((method, path))
        if route is None:
            return RestResponse(status_code=200, body={})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(body)
        return route
