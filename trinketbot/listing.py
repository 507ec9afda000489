"""Forum listing lifecycle: one active shop thread per seller."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .constants import EMBED_COLOR
from .contracts import ListingDraft, UserProfile
from .errors import CatalogUnavailableError, NoValidCategoryError, ResourceCreationError
from .persistence.ledger import SellerLedger, utcnow
from .transports.base import RestClient, RestTransportError

logger = logging.getLogger(__name__)

SHIPPING_LABELS = {
    "included": "Included in price",
    "additional": "Additional (buyer pays)",
}


class TagCatalog:
    """Reads the forum's available tags."""

    def __init__(self, rest: RestClient, forum_id: str, allowed_ids: Optional[List[str]] = None) -> None:
        self._rest = rest
        self.forum_id = forum_id
        self.allowed_ids = list(allowed_ids or [])

    async def fetch(self) -> Dict[str, str]:
        """Return every tag the forum currently offers as ``{id: name}``.

        Raises:
            CatalogUnavailableError: If the forum cannot be read.
        """
        try:
            response = await self._rest.call("GET", f"/channels/{self.forum_id}")
        except RestTransportError as e:
            raise CatalogUnavailableError(str(e)) from e
        if not response.ok or not isinstance(response.body, dict):
            raise CatalogUnavailableError(f"Marketplace forum not readable ({response.error_message()})")
        return {
            str(tag["id"]): str(tag.get("name") or tag["id"])
            for tag in response.body.get("available_tags") or []
            if tag.get("id") is not None
        }

    async def options(self) -> Dict[str, str]:
        """Tags offered to sellers: the configured ids the forum still has."""
        available = await self.fetch()
        if not self.allowed_ids:
            return available
        return {tag_id: available[tag_id] for tag_id in self.allowed_ids if tag_id in available}


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def render_listing_embed(user: UserProfile, draft: ListingDraft, timestamp: datetime) -> dict:
    fields = []
    for i, item in enumerate(draft.items):
        lines = [
            f"**{item.name}** — ${item.price}",
            f"Packaging: {item.packaging}  |  Condition: {item.condition}",
        ]
        if item.notes:
            lines.append(f"> {item.notes}")
        fields.append({"name": f"Item {i + 1}", "value": _clip("\n".join(lines), 1024), "inline": False})

    fields.append({"name": "Payment", "value": ", ".join(draft.payment) or "—", "inline": True})
    fields.append({
        "name": "Shipping",
        "value": SHIPPING_LABELS.get(draft.shipping or "", draft.shipping or "—"),
        "inline": True,
    })
    if draft.info:
        fields.append({"name": "General Info", "value": _clip(draft.info, 1024), "inline": False})

    embed = {
        "title": _clip(f"{user.display_name}'s Shop", 256),
        "color": EMBED_COLOR,
        "author": {"name": user.display_name, "icon_url": user.avatar_url},
        "timestamp": timestamp.isoformat(),
        "footer": {"text": f"Seller ID: {user.id}"},
    }
    if draft.photo_urls:
        links = "\n".join(f"[Photo {i + 1}]({url})" for i, url in enumerate(draft.photo_urls))
        fields.append({"name": "📸 Photos", "value": _clip(links, 1024), "inline": False})
        embed["image"] = {"url": draft.photo_urls[0]}
    embed["fields"] = fields[:25]
    return embed


class ListingPublisher:
    """Creates a seller's shop thread, retiring the previous one."""

    def __init__(
        self,
        rest: RestClient,
        ledger: SellerLedger,
        catalog: TagCatalog,
        max_tags: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._rest = rest
        self._ledger = ledger
        self._catalog = catalog
        self.max_tags = max_tags
        self._clock = clock

    @property
    def forum_id(self) -> str:
        return self._catalog.forum_id

    async def publish(self, user: UserProfile, draft: ListingDraft) -> str:
        """Create the listing thread and record it; returns the thread id.

        Raises:
            CooldownActiveError: The seller published inside the cooldown window.
            NoValidCategoryError: No requested tag exists in the forum.
            ResourceCreationError: The catalog or the create call failed.
        """
        now = self._clock()
        self._ledger.check_cooldown(user.id, now)

        await self._archive_previous(user.id)
        applied_tags = await self._resolve_tags(draft)

        body = {
            "name": _clip(f"{user.display_name}'s Shop", 100),
            "message": {
                "content": f"**{user.mention}'s Shop Listing**",
                "embeds": [render_listing_embed(user, draft, now)],
            },
            "applied_tags": applied_tags,
        }
        try:
            response = await self._rest.call("POST", f"/channels/{self.forum_id}/threads", body)
        except RestTransportError as e:
            raise ResourceCreationError(str(e)) from e
        thread_id = response.body.get("id") if isinstance(response.body, dict) else None
        if not response.ok or not thread_id:
            raise ResourceCreationError(response.error_message())

        thread_id = str(thread_id)
        self._ledger.record_listing(user.id, thread_id, now)
        logger.info(f"Published listing {thread_id} for seller {user.id} with tags {applied_tags}")
        return thread_id

    async def _archive_previous(self, user_id: str) -> None:
        record = self._ledger.get(user_id)
        if record is None or not record.thread_id:
            return
        try:
            response = await self._rest.call(
                "PATCH", f"/channels/{record.thread_id}", {"archived": True, "locked": True}
            )
        except RestTransportError as e:
            logger.warning(f"Could not archive previous listing {record.thread_id}: {e}")
            return
        if not response.ok:
            logger.warning(
                f"Could not archive previous listing {record.thread_id}: {response.error_message()}"
            )

    async def _resolve_tags(self, draft: ListingDraft) -> List[str]:
        if draft.tags_skipped:
            return []
        try:
            known = await self._catalog.fetch()
        except CatalogUnavailableError as e:
            raise ResourceCreationError(f"Could not load forum tags: {e}") from e
        applied = [tag_id for tag_id in dict.fromkeys(draft.tags) if tag_id in known]
        if not applied:
            raise NoValidCategoryError()
        return applied[: self.max_tags]
