"""Admin slash commands that post the entry panels."""

from __future__ import annotations

import logging

from .config import TrinketConfig
from .constants import (
    BUTTON_DANGER,
    BUTTON_PRIMARY,
    BUTTON_SECONDARY,
    CREATE_LISTING_BUTTON,
    EMBED_COLOR,
    ISO_ADD_BUTTON,
    ISO_EDIT_BUTTON,
    ISO_REMOVE_BUTTON,
    PERMISSION_ADMINISTRATOR,
    SETUP_ISO_COMMAND,
    SETUP_MARKETPLACE_COMMAND,
)
from .contracts import InteractionEvent
from .forms import button_row
from .interactions import InteractionResponder
from .transports.base import RestClient

logger = logging.getLogger(__name__)

ISO_PANEL_DESCRIPTION = "\n".join(
    [
        "HOT ISOs are organised by brand and/or IP. Find the ISO category you're looking for "
        "and leave a comment — hopefully someone will have that item to sell to you soon!",
        "",
        "Remember that these channels are meant to be easily navigable lists. Any general "
        "conversation about ISOs should be held in bazaar-banter.",
        "",
        "**Buyer Guidelines**",
        "• Be specific in what you're looking for.",
        "• Include photos when possible.",
        "• Specify price range or any conditions.",
        "• No chatter — we want this forum to be easily searchable so everyone can find what "
        "they're looking for!",
        "",
        "**Seller Guidelines**",
        "• This thread is only for ISOs. UFS items will be removed.",
        "• If you have someone's ISO, tag them in your listing on member-shops.",
        "• Please do not tag each person more than once — you should assume they're not "
        "interested if they don't respond.",
        "• Do not DM anyone without mutual consent first.",
    ]
)


class SetupCommands:
    """Handles ``/setup_marketplace`` and ``/setup_iso``."""

    def __init__(self, rest: RestClient, responder: InteractionResponder, config: TrinketConfig) -> None:
        self._rest = rest
        self.responder = responder
        self.config = config

    def is_admin(self, event: InteractionEvent) -> bool:
        roles = set(event.member_roles)
        if self.config.admin_role_id in roles or self.config.bot_role_id in roles:
            return True
        return event.member_permissions & PERMISSION_ADMINISTRATOR == PERMISSION_ADMINISTRATOR

    async def handle_command(self, event: InteractionEvent) -> bool:
        if event.command_name not in (SETUP_MARKETPLACE_COMMAND, SETUP_ISO_COMMAND):
            return False
        if not self.is_admin(event):
            await self.responder.reply(event, "❌ You don't have permission.")
            return True
        if event.command_name == SETUP_MARKETPLACE_COMMAND:
            await self.setup_marketplace(event)
        else:
            await self.setup_iso(event)
        return True

    async def setup_marketplace(self, event: InteractionEvent) -> None:
        marketplace = self.config.marketplace
        embed = {
            "title": "Marketplace Listings",
            "color": EMBED_COLOR,
            "description": (
                "Ready to sell? Click **Create Listing** to build your shop post!\n\n"
                "**Requirements:**\n"
                "- Photos must include a handwritten note: username, server name, and today's date\n"
                f"- 1–{marketplace.max_photos} photos required\n"
                f"- One listing per **{marketplace.cooldown_days} days**\n\n"
                "Creating a new listing will automatically close your previous one."
            ),
        }
        channel_id = marketplace.panel_channel_id
        response = await self._rest.call(
            "POST",
            f"/channels/{channel_id}/messages",
            {
                "embeds": [embed],
                "components": [button_row((CREATE_LISTING_BUTTON, "Create Listing", BUTTON_SECONDARY))],
            },
        )
        if response.status_code == 404:
            await self.responder.reply(event, "❌ Panel channel not found.")
        elif not response.ok:
            await self.responder.reply(event, f"❌ Failed to post panel: {response.error_message()}")
        else:
            logger.info(f"Marketplace panel posted in {channel_id} by {event.user_id}")
            await self.responder.reply(event, f"✅ Panel posted in <#{channel_id}>!")

    async def setup_iso(self, event: InteractionEvent) -> None:
        response = await self._rest.call(
            "POST",
            f"/channels/{self.config.iso.forum_id}/threads",
            {
                "name": "ISO Board",
                "message": {
                    "embeds": [{"title": "HOT ISOs", "color": EMBED_COLOR, "description": ISO_PANEL_DESCRIPTION}],
                    "components": [
                        button_row(
                            (ISO_ADD_BUTTON, "Add ISO Item", BUTTON_PRIMARY),
                            (ISO_REMOVE_BUTTON, "Remove Listing", BUTTON_DANGER),
                            (ISO_EDIT_BUTTON, "Edit Listing", BUTTON_SECONDARY),
                        )
                    ],
                },
            },
        )
        thread_id = response.body.get("id") if response.ok and isinstance(response.body, dict) else None
        if thread_id:
            await self.responder.reply(event, f"✅ ISO panel created: <#{thread_id}>")
        else:
            await self.responder.reply(event, "❌ Failed to create ISO panel.")
