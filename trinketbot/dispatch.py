"""Inbound event normalization and routing."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from .constants import (
    COMPONENT_BUTTON,
    COMPONENT_FILE_UPLOAD,
    INTERACTION_APPLICATION_COMMAND,
    INTERACTION_MESSAGE_COMPONENT,
    INTERACTION_MODAL_SUBMIT,
)
from .contracts import (
    Attachment,
    FormField,
    GatewayFrame,
    InteractionEvent,
    InteractionKind,
    UserProfile,
)

logger = logging.getLogger(__name__)

Handler = Callable[[InteractionEvent], Awaitable[bool]]


def normalize_interaction(payload: Dict[str, Any]) -> Optional[InteractionEvent]:
    """Turn a raw ``INTERACTION_CREATE`` payload into an ``InteractionEvent``.

    Returns ``None`` for interaction types the bot does not handle (pings,
    autocomplete).
    """
    data = payload.get("data") or {}
    interaction_type = payload.get("type")

    if interaction_type == INTERACTION_APPLICATION_COMMAND:
        kind = InteractionKind.SLASH_COMMAND
    elif interaction_type == INTERACTION_MESSAGE_COMPONENT:
        if data.get("component_type") == COMPONENT_BUTTON:
            kind = InteractionKind.BUTTON_PRESS
        else:
            kind = InteractionKind.SELECTION_SUBMIT
    elif interaction_type == INTERACTION_MODAL_SUBMIT:
        kind = InteractionKind.FORM_SUBMIT
    else:
        return None

    member = payload.get("member") or {}
    raw_user = member.get("user") or payload.get("user") or {}
    user = UserProfile(
        id=str(raw_user.get("id", "")),
        username=raw_user.get("username") or "",
        global_name=member.get("nick") or raw_user.get("global_name"),
        avatar=raw_user.get("avatar"),
    )

    fields: Dict[str, FormField] = {}
    if kind is InteractionKind.FORM_SUBMIT:
        fields = extract_fields(data.get("components") or [], data.get("resolved") or {})

    return InteractionEvent(
        id=str(payload.get("id")),
        reply_token=payload.get("token", ""),
        user_id=user.id,
        kind=kind,
        data=data,
        user=user,
        custom_id=data.get("custom_id"),
        command_name=data.get("name"),
        guild_id=payload.get("guild_id"),
        member_roles=[str(r) for r in member.get("roles") or []],
        member_permissions=int(member.get("permissions") or 0),
        fields=fields,
    )


def extract_fields(
    components: Iterable[Dict[str, Any]], resolved: Dict[str, Any]
) -> Dict[str, FormField]:
    """Flatten submitted modal components into a map keyed by custom id.

    Components may sit in action rows (``components``) or label wrappers
    (``component``); uploaded files are resolved to attachment records.
    """
    attachments = resolved.get("attachments") or {}
    fields: Dict[str, FormField] = {}

    def walk(items: Iterable[Dict[str, Any]]) -> None:
        for item in items or []:
            inner = item.get("component")
            if inner is not None:
                walk([inner])
            if item.get("components"):
                walk(item["components"])
            custom_id = item.get("custom_id")
            if not custom_id:
                continue
            values = [str(v) for v in item.get("values") or []]
            files: List[Attachment] = []
            if item.get("type") == COMPONENT_FILE_UPLOAD:
                for attachment_id in values:
                    raw = attachments.get(attachment_id)
                    if raw:
                        files.append(
                            Attachment(
                                id=str(raw.get("id", attachment_id)),
                                url=raw.get("url", ""),
                                filename=raw.get("filename"),
                            )
                        )
            fields[custom_id] = FormField(
                custom_id=custom_id,
                type=int(item.get("type") or 0),
                value=item.get("value"),
                values=values,
                attachments=files,
            )

    walk(components)
    return fields


class EventDispatcher:
    """Routes normalized interactions to handlers registered per kind.

    Handlers are tried in registration order; the first one that returns
    ``True`` claims the event. The dispatcher itself never replies.
    """

    def __init__(self) -> None:
        self._handlers: Dict[InteractionKind, List[Handler]] = {
            kind: [] for kind in InteractionKind
        }

    def register(self, kind: InteractionKind, handler: Handler) -> None:
        self._handlers[kind].append(handler)

    def normalize(self, frame: GatewayFrame) -> Optional[InteractionEvent]:
        """Return an interaction for ``INTERACTION_CREATE`` frames, else ``None``."""
        if frame.t != "INTERACTION_CREATE" or not isinstance(frame.d, dict):
            return None
        return normalize_interaction(frame.d)

    async def route(self, event: InteractionEvent) -> bool:
        """Hand ``event`` to the first handler that claims it."""
        for handler in self._handlers[event.kind]:
            if await handler(event):
                return True
        logger.debug(
            f"No handler claimed {event.kind.value} {event.custom_id or event.command_name}"
        )
        return False

    async def dispatch(self, frame: GatewayFrame) -> Optional[InteractionEvent]:
        """Normalize ``frame`` and route it; returns the event, if any."""
        event = self.normalize(frame)
        if event is not None:
            await self.route(event)
        return event
