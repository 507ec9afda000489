"""Shared fixtures: raw interaction payload builders and async polling."""

import asyncio
import itertools
from typing import Dict, List, Optional

import pytest

from trinketbot.constants import (
    COMPONENT_BUTTON,
    COMPONENT_FILE_UPLOAD,
    COMPONENT_LABEL,
    COMPONENT_STRING_SELECT,
    COMPONENT_TEXT_INPUT,
    INTERACTION_APPLICATION_COMMAND,
    INTERACTION_MESSAGE_COMPONENT,
    INTERACTION_MODAL_SUBMIT,
)
from trinketbot.dispatch import normalize_interaction

_ids = itertools.count(1)


def _envelope(interaction_type: int, data: dict, user_id: str, roles=None, permissions: int = 0) -> dict:
    n = next(_ids)
    return {
        "id": f"int{n}",
        "token": f"tok{n}",
        "type": interaction_type,
        "guild_id": "g1",
        "data": data,
        "member": {
            "user": {"id": user_id, "username": f"user{user_id}", "avatar": None},
            "roles": list(roles or []),
            "permissions": str(permissions),
        },
    }


@pytest.fixture
def button_payload():
    def build(custom_id: str, user_id: str = "u1") -> dict:
        return _envelope(
            INTERACTION_MESSAGE_COMPONENT,
            {"custom_id": custom_id, "component_type": COMPONENT_BUTTON},
            user_id,
        )

    return build


@pytest.fixture
def command_payload():
    def build(name: str, user_id: str = "u1", roles=None, permissions: int = 0) -> dict:
        return _envelope(INTERACTION_APPLICATION_COMMAND, {"name": name}, user_id, roles, permissions)

    return build


@pytest.fixture
def form_payload():
    """Modal submission with label-wrapped components.

    ``files`` maps a field id to a list of ``(attachment_id, url)`` pairs.
    """

    def build(
        custom_id: str,
        user_id: str = "u1",
        text: Optional[Dict[str, str]] = None,
        selects: Optional[Dict[str, List[str]]] = None,
        files: Optional[Dict[str, list]] = None,
    ) -> dict:
        components = []
        resolved: Dict[str, dict] = {}
        for field_id, value in (text or {}).items():
            components.append(
                {
                    "type": COMPONENT_LABEL,
                    "component": {"type": COMPONENT_TEXT_INPUT, "custom_id": field_id, "value": value},
                }
            )
        for field_id, values in (selects or {}).items():
            components.append(
                {
                    "type": COMPONENT_LABEL,
                    "component": {"type": COMPONENT_STRING_SELECT, "custom_id": field_id, "values": values},
                }
            )
        for field_id, uploads in (files or {}).items():
            components.append(
                {
                    "type": COMPONENT_LABEL,
                    "component": {
                        "type": COMPONENT_FILE_UPLOAD,
                        "custom_id": field_id,
                        "values": [attachment_id for attachment_id, _ in uploads],
                    },
                }
            )
            for attachment_id, url in uploads:
                resolved[attachment_id] = {"id": attachment_id, "url": url, "filename": f"{attachment_id}.png"}
        data = {"custom_id": custom_id, "components": components}
        if resolved:
            data["resolved"] = {"attachments": resolved}
        return _envelope(INTERACTION_MODAL_SUBMIT, data, user_id)

    return build


@pytest.fixture
def button_event(button_payload):
    return lambda custom_id, user_id="u1": normalize_interaction(button_payload(custom_id, user_id))


@pytest.fixture
def form_event(form_payload):
    return lambda custom_id, user_id="u1", **kw: normalize_interaction(form_payload(custom_id, user_id, **kw))


@pytest.fixture
def wait_until():
    async def poll(predicate, timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return poll
