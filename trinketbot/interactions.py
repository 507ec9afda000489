"""Replies sent back on an interaction handle."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .constants import CALLBACK_CHANNEL_MESSAGE, CALLBACK_MODAL, MESSAGE_FLAG_EPHEMERAL
from .contracts import InteractionEvent
from .transports.base import RestClient, RestResponse

logger = logging.getLogger(__name__)


class InteractionResponder:
    """Answers interactions through the REST callback route."""

    def __init__(self, rest: RestClient) -> None:
        self._rest = rest

    async def reply(
        self,
        event: InteractionEvent,
        content: str,
        components: Optional[List[Dict[str, Any]]] = None,
        ephemeral: bool = True,
    ) -> RestResponse:
        data: Dict[str, Any] = {"content": content[:2000]}
        if ephemeral:
            data["flags"] = MESSAGE_FLAG_EPHEMERAL
        if components:
            data["components"] = components
        return await self._respond(event, CALLBACK_CHANNEL_MESSAGE, data)

    async def show_modal(self, event: InteractionEvent, modal: Dict[str, Any]) -> RestResponse:
        return await self._respond(event, CALLBACK_MODAL, modal)

    async def _respond(self, event: InteractionEvent, callback_type: int, data: Dict[str, Any]) -> RestResponse:
        response = await self._rest.call(
            "POST",
            f"/interactions/{event.id}/{event.reply_token}/callback",
            {"type": callback_type, "data": data},
        )
        if not response.ok:
            logger.warning(
                f"Interaction {event.id} callback type {callback_type} failed: {response.error_message()}"
            )
        return response
