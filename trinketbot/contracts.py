"""Core message contracts for the trinketbot gateway and workflows."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class GatewayFrame(BaseModel):
    """One frame exchanged over the live connection."""

    op: int
    d: Any = None
    s: Optional[int] = None
    t: Optional[str] = None

    def to_json(self) -> str:
        """Serialize frame to JSON."""
        return json.dumps({"op": self.op, "d": self.d})

    @classmethod
    def from_json(cls, data: str | bytes) -> "GatewayFrame":
        """Deserialize frame from JSON."""
        return cls.model_validate_json(data)


class Session(BaseModel):
    """Logical identity of the live connection, independent of the socket."""

    session_id: Optional[str] = None
    resume_url: Optional[str] = None
    sequence: Optional[int] = None
    live: bool = False

    @property
    def resumable(self) -> bool:
        return self.session_id is not None and self.sequence is not None

    def observe(self, sequence: Optional[int]) -> None:
        """Record the sequence number of an inbound frame."""
        if sequence is not None and (self.sequence is None or sequence > self.sequence):
            self.sequence = sequence

    def clear(self) -> None:
        """Forget the session so the next handshake identifies afresh."""
        self.session_id = None
        self.resume_url = None
        self.sequence = None
        self.live = False


class InteractionKind(str, Enum):
    SLASH_COMMAND = "slash_command"
    BUTTON_PRESS = "button_press"
    SELECTION_SUBMIT = "selection_submit"
    FORM_SUBMIT = "form_submit"


class Attachment(BaseModel):
    id: str
    url: str
    filename: Optional[str] = None


class FormField(BaseModel):
    """A single submitted form component, keyed by its own custom id."""

    custom_id: str
    type: int
    value: Optional[str] = None
    values: List[str] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)


class UserProfile(BaseModel):
    id: str
    username: str = ""
    global_name: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.global_name or self.username or self.id

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    @property
    def avatar_url(self) -> str:
        if self.avatar:
            return f"https://cdn.discordapp.com/avatars/{self.id}/{self.avatar}.png"
        return "https://cdn.discordapp.com/embed/avatars/0.png"


class InteractionEvent(BaseModel):
    """Normalized interaction ready for routing."""

    id: str
    reply_token: str
    user_id: str
    kind: InteractionKind
    data: Dict[str, Any] = Field(default_factory=dict)
    user: UserProfile
    custom_id: Optional[str] = None
    command_name: Optional[str] = None
    guild_id: Optional[str] = None
    member_roles: List[str] = Field(default_factory=list)
    member_permissions: int = 0
    fields: Dict[str, FormField] = Field(default_factory=dict)

    def text(self, field_id: str) -> str:
        """Return the stripped text value of a form field, or ``""``."""
        field = self.fields.get(field_id)
        if field is None or field.value is None:
            return ""
        return field.value.strip()

    def selected(self, field_id: str) -> List[str]:
        """Return selected option values for a form field or select menu."""
        field = self.fields.get(field_id)
        if field is not None:
            return list(field.values)
        if self.kind is InteractionKind.SELECTION_SUBMIT:
            return list(self.data.get("values") or [])
        return []

    def attachments(self, field_id: str) -> List[Attachment]:
        field = self.fields.get(field_id)
        return list(field.attachments) if field else []


class ItemEntry(BaseModel):
    name: str
    price: str
    notes: str = ""
    packaging: str
    condition: str


class ListingDraft(BaseModel):
    """Fields collected across the listing workflow."""

    item_count: int = 0
    info: str = ""
    payment: List[str] = Field(default_factory=list)
    shipping: Optional[str] = None
    items: List[ItemEntry] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    tags_skipped: bool = False
    photo_urls: List[str] = Field(default_factory=list)


class SellerRecord(BaseModel):
    """Active listing and cooldown stamp for one seller, stored together."""

    thread_id: Optional[str] = None
    listed_at: datetime


class IsoEntry(BaseModel):
    message_id: str
    content: str
    photo_urls: List[str] = Field(default_factory=list)
    ts: datetime
