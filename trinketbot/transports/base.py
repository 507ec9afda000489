"""Base interfaces for talking to the remote platform."""

from __future__ import annotations

import abc
from typing import Any, Optional

from pydantic import BaseModel

from ..contracts import GatewayFrame


class TransportClosed(Exception):
    """The underlying socket closed."""

    def __init__(self, code: Optional[int] = None, reason: str = "") -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"transport closed (code={code}, reason={reason!r})")


class RestTransportError(Exception):
    """A request/response call failed before a response arrived."""


class GatewayConnection(metaclass=abc.ABCMeta):
    """One socket carrying gateway frames."""

    @abc.abstractmethod
    async def send(self, frame: GatewayFrame) -> None:
        """Send a frame to the platform."""
        raise NotImplementedError

    @abc.abstractmethod
    async def recv(self) -> GatewayFrame:
        """Wait for the next inbound frame.

        Raises:
            TransportClosed: When the socket is gone.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the socket; pending ``recv`` calls raise ``TransportClosed``."""
        raise NotImplementedError


class GatewayTransport(metaclass=abc.ABCMeta):
    """Factory for gateway connections."""

    @abc.abstractmethod
    async def connect(self, url: str) -> GatewayConnection:
        raise NotImplementedError


class RestResponse(BaseModel):
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_message(self) -> str:
        if isinstance(self.body, dict) and self.body.get("message"):
            return f"{self.status_code}: {self.body['message']}"
        return f"HTTP {self.status_code}"


class RestClient(metaclass=abc.ABCMeta):
    """Request/response primitive used for every non-gateway call."""

    @abc.abstractmethod
    async def call(self, method: str, path: str, body: Any = None) -> RestResponse:
        """Perform a request and return status and decoded body.

        Non-2xx responses are returned, not raised.

        Raises:
            RestTransportError: When no response could be obtained.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources (no-op by default)."""
        pass
