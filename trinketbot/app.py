"""Application wiring: one gateway session, one sequential event consumer."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from .commands import SetupCommands
from .config import TrinketConfig, load_config
from .contracts import GatewayFrame, InteractionEvent, InteractionKind
from .dispatch import EventDispatcher
from .gateway import GatewayClient
from .interactions import InteractionResponder
from .iso import IsoBoard
from .listing import ListingPublisher, TagCatalog
from .persistence import DocumentStore, IsoLedger, SellerLedger, get_store
from .transports import GatewayTransport, RestClient, get_rest_client, get_transport
from .workflow import MarketplaceWorkflow, WorkflowStore

logger = logging.getLogger(__name__)


class TrinketBot:
    """Owns every collaborator and runs the gateway plus its consumer."""

    def __init__(
        self,
        config: Optional[TrinketConfig] = None,
        rest: Optional[RestClient] = None,
        transport: Optional[GatewayTransport] = None,
        store: Optional[DocumentStore] = None,
        sweep_interval: float = 60.0,
    ) -> None:
        self.config = config or load_config()
        self.rest = rest or get_rest_client(self.config)
        self.store = store or get_store(config=self.config)
        self.sweep_interval = sweep_interval

        self.gateway = GatewayClient(
            self.config.token or "",
            transport or get_transport(config=self.config),
            url=self.config.gateway.url,
            intents=self.config.gateway.intents,
            reconnect_delay=self.config.gateway.reconnect_delay,
        )
        self.dispatcher = EventDispatcher()
        self.responder = InteractionResponder(self.rest)

        marketplace = self.config.marketplace
        self.sellers = SellerLedger(self.store, cooldown=timedelta(days=marketplace.cooldown_days))
        self.catalog = TagCatalog(self.rest, marketplace.forum_id, marketplace.tag_ids)
        self.publisher = ListingPublisher(
            self.rest, self.sellers, self.catalog, max_tags=marketplace.max_tags
        )
        self.workflow = MarketplaceWorkflow(
            self.responder,
            self.publisher,
            self.sellers,
            self.catalog,
            config=marketplace,
            store=WorkflowStore(ttl=marketplace.session_ttl),
        )
        self.iso = IsoBoard(self.rest, self.responder, IsoLedger(self.store), self.config.iso)
        self.commands = SetupCommands(self.rest, self.responder, self.config)

        self.dispatcher.register(InteractionKind.SLASH_COMMAND, self.commands.handle_command)
        self.dispatcher.register(InteractionKind.BUTTON_PRESS, self.workflow.handle_button)
        self.dispatcher.register(InteractionKind.BUTTON_PRESS, self.iso.handle_button)
        self.dispatcher.register(InteractionKind.FORM_SUBMIT, self.workflow.handle_form)
        self.dispatcher.register(InteractionKind.FORM_SUBMIT, self.iso.handle_form)

    async def handle_frame(self, frame: GatewayFrame) -> None:
        """Route one dispatch frame; handler errors are reported, never raised."""
        try:
            event = self.dispatcher.normalize(frame)
        except Exception:
            logger.exception(f"Dropping malformed {frame.t} frame (seq {frame.s})")
            return
        if event is None:
            return
        try:
            await self.dispatcher.route(event)
        except Exception as e:
            logger.exception(f"Handler failed for {event.kind.value} {event.custom_id or event.command_name}")
            await self._report_error(event, e)

    async def _report_error(self, event: InteractionEvent, error: Exception) -> None:
        try:
            await self.responder.reply(event, f"❌ An error occurred: {error}")
        except Exception:
            logger.exception(f"Could not report error on interaction {event.id}")

    async def consume(self) -> None:
        """Process queued frames one at a time, in arrival order."""
        while True:
            frame = await self.gateway.events.get()
            try:
                await self.handle_frame(frame)
            finally:
                self.gateway.events.task_done()

    async def sweep(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.workflow.store.sweep()

    async def run(self) -> None:
        """Run until the gateway stops or fails fatally."""
        consumer = asyncio.create_task(self.consume())
        sweeper = asyncio.create_task(self.sweep())
        try:
            await self.gateway.start()
        finally:
            consumer.cancel()
            sweeper.cancel()
            await asyncio.gather(consumer, sweeper, return_exceptions=True)
            await self.rest.aclose()

    async def stop(self) -> None:
        await self.gateway.stop()
