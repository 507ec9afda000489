"""Gateway connection lifecycle: handshake, heartbeat, resume, reconnect."""

from __future__ import annotations

import asyncio
import logging
import sys
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlsplit

from .constants import (
    FATAL_CLOSE_CODES,
    INTENT_GUILDS,
    NON_RESUMABLE_CLOSE_CODES,
    OP_DISPATCH,
    OP_HEARTBEAT,
    OP_HEARTBEAT_ACK,
    OP_HELLO,
    OP_IDENTIFY,
    OP_INVALID_SESSION,
    OP_RECONNECT,
    OP_RESUME,
    ZOMBIE_CLOSE_CODE,
)
from .contracts import GatewayFrame, Session
from .errors import GatewayFatalError
from .transports.base import GatewayConnection, GatewayTransport, TransportClosed

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "wss://gateway.discord.gg/?v=10&encoding=json"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_HELLO = "awaiting_hello"
    IDENTIFYING = "identifying"
    RESUMING = "resuming"
    LIVE = "live"


class GatewayClient:
    """Keeps exactly one live gateway session until stopped.

    Dispatch frames (op 0) are pushed onto ``events`` in arrival order. The
    reader never waits on consumers, so heartbeats keep flowing while a
    handler awaits a slow REST call.
    """

    def __init__(
        self,
        token: str,
        transport: GatewayTransport,
        events: Optional[asyncio.Queue] = None,
        url: str = DEFAULT_GATEWAY_URL,
        intents: int = INTENT_GUILDS,
        reconnect_delay: float = 5.0,
    ) -> None:
        self._token = token
        self._transport = transport
        self.events: asyncio.Queue = events if events is not None else asyncio.Queue()
        self.url = url
        self.intents = intents
        self.reconnect_delay = reconnect_delay

        self.session = Session()
        self.state = ConnectionState.DISCONNECTED
        self._connection: Optional[GatewayConnection] = None
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._ack_pending = False
        self._running = False
        self._stop_event = asyncio.Event()

    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Connect and stay connected until ``stop`` or a fatal close code."""
        self._running = True
        self._stop_event.clear()
        try:
            while self._running:
                await self._run_connection()
                if not self._running:
                    break
                logger.info(f"Gateway disconnected; reconnecting in {self.reconnect_delay}s")
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(), timeout=self.reconnect_delay
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            self.state = ConnectionState.DISCONNECTED

    async def stop(self) -> None:
        """Close the socket and end ``start``."""
        self._running = False
        self._stop_event.set()
        if self._connection is not None:
            await self._connection.close(1000, "shutting down")

    async def send_frame(self, op: int, payload: Any) -> None:
        """Send a raw frame over the current connection."""
        if self._connection is None:
            raise RuntimeError("Gateway is not connected")
        await self._connection.send(GatewayFrame(op=op, d=payload))

    # ------------------------------------------------------------------
    async def _run_connection(self) -> None:
        resuming = self.session.resumable
        url = self._resume_url() if resuming else self.url
        self.state = ConnectionState.RESUMING if resuming else ConnectionState.CONNECTING

        try:
            connection = await self._transport.connect(url)
        except TransportClosed as e:
            logger.warning(f"Gateway connect to {url} failed: {e.reason}")
            self.state = ConnectionState.DISCONNECTED
            return

        if not self._running:
            await connection.close(1000, "shutting down")
            self.state = ConnectionState.DISCONNECTED
            return

        self._connection = connection
        if not resuming:
            self.state = ConnectionState.AWAITING_HELLO

        try:
            while True:
                frame = await connection.recv()
                await self._handle_frame(connection, frame, resuming)
        except TransportClosed as e:
            self._on_close(e)
        finally:
            self._cancel_heartbeat()
            self._connection = None
            self.session.live = False
            self.state = ConnectionState.DISCONNECTED

    async def _handle_frame(
        self, connection: GatewayConnection, frame: GatewayFrame, resuming: bool
    ) -> None:
        self.session.observe(frame.s)

        if frame.op == OP_HELLO:
            interval = float(frame.d["heartbeat_interval"]) / 1000.0
            self._start_heartbeat(connection, interval)
            if resuming:
                logger.info(f"Resuming session {self.session.session_id} at seq {self.session.sequence}")
                await connection.send(GatewayFrame(op=OP_RESUME, d=self._resume_payload()))
            else:
                self.state = ConnectionState.IDENTIFYING
                await connection.send(GatewayFrame(op=OP_IDENTIFY, d=self._identify_payload()))
        elif frame.op == OP_HEARTBEAT:
            await self._send_heartbeat(connection)
        elif frame.op == OP_HEARTBEAT_ACK:
            self._ack_pending = False
        elif frame.op == OP_RECONNECT:
            logger.info("Gateway requested reconnect")
            await connection.close(ZOMBIE_CLOSE_CODE, "reconnect requested")
        elif frame.op == OP_INVALID_SESSION:
            logger.warning("Gateway invalidated the session; next connect identifies afresh")
            self.session.clear()
            await connection.close(ZOMBIE_CLOSE_CODE, "invalid session")
        elif frame.op == OP_DISPATCH:
            if frame.t == "READY":
                self.session.session_id = frame.d.get("session_id")
                self.session.resume_url = frame.d.get("resume_gateway_url")
                self.session.live = True
                self.state = ConnectionState.LIVE
                logger.info(f"Gateway ready, session {self.session.session_id}")
            elif frame.t == "RESUMED":
                self.session.live = True
                self.state = ConnectionState.LIVE
                logger.info(f"Gateway resumed session {self.session.session_id}")
            self.events.put_nowait(frame)
        else:
            logger.debug(f"Ignoring gateway op {frame.op}")

    def _on_close(self, exc: TransportClosed) -> None:
        if exc.code in FATAL_CLOSE_CODES:
            self.session.clear()
            raise GatewayFatalError(exc.code, exc.reason) from exc
        if exc.code in NON_RESUMABLE_CLOSE_CODES:
            logger.warning(f"Gateway closed with {exc.code}; session cannot be resumed")
            self.session.clear()
        elif self._running:
            logger.warning(f"Gateway closed (code={exc.code}, reason={exc.reason!r})")

    # ------------------------------------------------------------------
    def _start_heartbeat(self, connection: GatewayConnection, interval: float) -> None:
        self._cancel_heartbeat()
        self._ack_pending = False
        self._heartbeat_task = asyncio.create_task(
            self._heartbeat_loop(connection, interval)
        )

    def _cancel_heartbeat(self) -> None:
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            self._heartbeat_task = None

    async def _heartbeat_loop(self, connection: GatewayConnection, interval: float) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                if self._ack_pending:
                    logger.warning("Heartbeat not acknowledged within one interval; reconnecting")
                    await connection.close(ZOMBIE_CLOSE_CODE, "heartbeat ack missed")
                    return
                await self._send_heartbeat(connection)
        except TransportClosed:
            return

    async def _send_heartbeat(self, connection: GatewayConnection) -> None:
        await connection.send(GatewayFrame(op=OP_HEARTBEAT, d=self.session.sequence))
        self._ack_pending = True

    # ------------------------------------------------------------------
    def _identify_payload(self) -> dict:
        return {
            "token": self._token,
            "intents": self.intents,
            "properties": {
                "os": sys.platform,
                "browser": "trinketbot",
                "device": "trinketbot",
            },
        }

    def _resume_payload(self) -> dict:
        return {
            "token": self._token,
            "session_id": self.session.session_id,
            "seq": self.session.sequence,
        }

    def _resume_url(self) -> str:
        if not self.session.resume_url:
            return self.url
        query = urlsplit(self.url).query
        base = self.session.resume_url.rstrip("/")
        return f"{base}/?{query}" if query else base
