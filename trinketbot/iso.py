"""ISO ("in search of") board: one request post per user per category thread."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from .config import IsoConfig
from .constants import (
    EMBED_COLOR,
    ISO_ADD_BUTTON,
    ISO_EDIT_BUTTON,
    ISO_EDIT_FORM,
    ISO_REMOVE_BUTTON,
    ISO_REMOVE_FORM,
    ISO_SUBMIT_FORM,
)
from .contracts import InteractionEvent, IsoEntry, UserProfile
from .errors import StepValidationError
from .forms import file_upload, label, modal, string_select, text_input
from .interactions import InteractionResponder
from .persistence.ledger import IsoLedger, as_utc, utcnow
from .transports.base import RestClient, RestTransportError
from .workflow.validation import require_text, validate_attachments

logger = logging.getLogger(__name__)

CATEGORY_FIELD = "iso_category"
CONTENT_FIELD = "iso_content"
PHOTOS_FIELD = "iso_photos"

CONTENT_PLACEHOLDER = (
    "e.g.\nJellycat Bashful Bunny Medium — budget $40, any condition\n"
    'Squishmallow Avocado 16" — NWT only, up to $25'
)


def build_iso_embed(user: UserProfile, content: str, photo_urls: List[str], timestamp: datetime) -> dict:
    embed = {
        "color": EMBED_COLOR,
        "author": {"name": f"{user.display_name}'s ISOs", "icon_url": user.avatar_url},
        "description": content[:4096],
        "footer": {"text": 'Use "Edit Listing" to update or "Remove Listing" to delete'},
        "timestamp": timestamp.isoformat(),
    }
    if photo_urls:
        embed["image"] = {"url": photo_urls[0]}
    return embed


class IsoBoard:
    """Add, bump, edit and remove ISO posts in the category threads."""

    def __init__(
        self,
        rest: RestClient,
        responder: InteractionResponder,
        ledger: IsoLedger,
        config: Optional[IsoConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._rest = rest
        self.responder = responder
        self.ledger = ledger
        self.config = config or IsoConfig()
        self._clock = clock
        self._thread_names: Optional[Dict[str, str]] = None

    @property
    def bump_cooldown(self) -> timedelta:
        return timedelta(hours=self.config.bump_cooldown_hours)

    async def thread_options(self) -> List[Tuple[str, str]]:
        """``(label, thread_id)`` for each category thread; names are cached."""
        if self._thread_names is None:
            names = await asyncio.gather(*(self._thread_name(t) for t in self.config.thread_ids))
            self._thread_names = dict(zip(self.config.thread_ids, names))
        return [(name, thread_id) for thread_id, name in self._thread_names.items()]

    async def _thread_name(self, thread_id: str) -> str:
        try:
            response = await self._rest.call("GET", f"/channels/{thread_id}")
        except RestTransportError as e:
            logger.warning(f"Could not resolve ISO thread {thread_id}: {e}")
            return thread_id
        if response.ok and isinstance(response.body, dict) and response.body.get("name"):
            return str(response.body["name"])[:100]
        return thread_id

    # ------------------------------------------------------------------
    async def handle_button(self, event: InteractionEvent) -> bool:
        if event.custom_id == ISO_ADD_BUTTON:
            await self.responder.show_modal(event, await self.add_form())
        elif event.custom_id in (ISO_EDIT_BUTTON, ISO_REMOVE_BUTTON):
            form = await (self.edit_form if event.custom_id == ISO_EDIT_BUTTON else self.remove_form)(event.user_id)
            if form is None:
                await self.responder.reply(event, "❌ You don't have any active ISO listings.")
            else:
                await self.responder.show_modal(event, form)
        else:
            return False
        return True

    async def handle_form(self, event: InteractionEvent) -> bool:
        if event.custom_id not in (ISO_SUBMIT_FORM, ISO_EDIT_FORM, ISO_REMOVE_FORM):
            return False
        thread_id = next(iter(event.selected(CATEGORY_FIELD)), None)
        try:
            if event.custom_id == ISO_SUBMIT_FORM:
                if thread_id not in self.config.thread_ids:
                    raise StepValidationError("Please select an IP category.")
                content = require_text(event.text(CONTENT_FIELD), "A description of what you're looking for")
                files = validate_attachments(event.attachments(PHOTOS_FIELD), 0, self.config.max_photos)
                await self.upsert(event, thread_id, content, [f.url for f in files])
            elif not thread_id:
                raise StepValidationError("Please select a listing.")
            elif event.custom_id == ISO_EDIT_FORM:
                content = require_text(event.text(CONTENT_FIELD), "A description of what you're looking for")
                await self.edit(event, thread_id, content)
            else:
                await self.remove(event, thread_id)
        except StepValidationError as e:
            await self.responder.reply(event, f"❌ {e}")
        return True

    # ------------------------------------------------------------------
    async def add_form(self) -> dict:
        return modal(
            ISO_SUBMIT_FORM,
            "Add ISO",
            [
                label("IP / Brand Category", "Select the thread for your ISO",
                      string_select(CATEGORY_FIELD, await self.thread_options(), placeholder="Select category…")),
                label("What are you looking for?", "List items, budgets, conditions",
                      text_input(CONTENT_FIELD, placeholder=CONTENT_PLACEHOLDER, paragraph=True)),
                label("Photos (optional)", f"Upload up to {self.config.max_photos} reference photos",
                      file_upload(PHOTOS_FIELD, min_values=0, max_values=self.config.max_photos, required=False)),
            ],
        )

    async def _active_options(self, user_id: str) -> List[Tuple[str, str]]:
        active = self.ledger.entries(user_id)
        if not active:
            return []
        names = dict((value, text) for text, value in await self.thread_options())
        return [(names.get(thread_id, thread_id), thread_id) for thread_id in active]

    async def edit_form(self, user_id: str) -> Optional[dict]:
        options = await self._active_options(user_id)
        if not options:
            return None
        return modal(
            ISO_EDIT_FORM,
            "Edit ISO Listing",
            [
                label("Select Listing to Edit", "Choose which IP thread to edit",
                      string_select(CATEGORY_FIELD, options, placeholder="Select listing…")),
                label("Updated Content", "Replace your listing with this text",
                      text_input(CONTENT_FIELD, placeholder=CONTENT_PLACEHOLDER, paragraph=True)),
            ],
        )

    async def remove_form(self, user_id: str) -> Optional[dict]:
        options = await self._active_options(user_id)
        if not options:
            return None
        return modal(
            ISO_REMOVE_FORM,
            "Remove ISO Listing",
            [
                label("Select Listing to Remove", "This will delete your post in that thread",
                      string_select(CATEGORY_FIELD, options, placeholder="Select listing…")),
            ],
        )

    # ------------------------------------------------------------------
    async def upsert(self, event: InteractionEvent, thread_id: str, content: str, photo_urls: List[str]) -> None:
        """Post (or bump: delete and repost) the user's ISO in ``thread_id``."""
        now = self._clock()
        existing = self.ledger.get(event.user_id, thread_id)
        if existing is not None:
            elapsed = now - as_utc(existing.ts)
            if elapsed < self.bump_cooldown:
                hours_left = math.ceil((self.bump_cooldown - elapsed).total_seconds() / 3600)
                plural = "" if hours_left == 1 else "s"
                await self.responder.reply(
                    event,
                    f"❌ You can only bump your listing once every {self.config.bump_cooldown_hours} hours.\n"
                    f"Try again in **{hours_left} hour{plural}**.\n"
                    "Use **Edit Listing** to update your post without bumping.",
                )
                return
            await self._delete_message(thread_id, existing.message_id)

        embed = build_iso_embed(event.user, content, photo_urls, now)
        response = await self._rest.call("POST", f"/channels/{thread_id}/messages", {"embeds": [embed]})
        message_id = response.body.get("id") if response.ok and isinstance(response.body, dict) else None
        if not message_id:
            await self.responder.reply(event, "❌ Failed to post ISO. Check bot permissions in that thread.")
            return

        self.ledger.put(
            event.user_id,
            thread_id,
            IsoEntry(message_id=str(message_id), content=content, photo_urls=photo_urls, ts=now),
        )
        logger.info(f"ISO posted for {event.user_id} in {thread_id}")
        await self.responder.reply(event, f"✅ Your ISO has been posted in <#{thread_id}>!")

    async def edit(self, event: InteractionEvent, thread_id: str, content: str) -> None:
        """Rewrite the post in place; does not bump or reset the cooldown."""
        entry = self.ledger.get(event.user_id, thread_id)
        if entry is None:
            await self.responder.reply(event, '❌ No listing found. Use "Add ISO Item" instead.')
            return
        embed = build_iso_embed(event.user, content, entry.photo_urls, self._clock())
        response = await self._rest.call(
            "PATCH", f"/channels/{thread_id}/messages/{entry.message_id}", {"embeds": [embed]}
        )
        if not response.ok:
            await self.responder.reply(event, f"❌ Failed to update ISO: {response.error_message()}")
            return
        entry.content = content
        self.ledger.put(event.user_id, thread_id, entry)
        await self.responder.reply(event, "✅ Your ISO listing has been updated.")

    async def remove(self, event: InteractionEvent, thread_id: str) -> None:
        entry = self.ledger.get(event.user_id, thread_id)
        if entry is None:
            await self.responder.reply(event, "❌ No listing found in that thread.")
            return
        await self._delete_message(thread_id, entry.message_id)
        self.ledger.remove(event.user_id, thread_id)
        await self.responder.reply(event, "✅ Your ISO listing has been removed.")

    async def _delete_message(self, thread_id: str, message_id: str) -> None:
        try:
            response = await self._rest.call("DELETE", f"/channels/{thread_id}/messages/{message_id}")
        except RestTransportError as e:
            logger.warning(f"Could not delete ISO message {message_id}: {e}")
            return
        if not response.ok:
            logger.warning(f"Could not delete ISO message {message_id}: {response.error_message()}")
