"""Listing workflow steps and the transitions allowed between them."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class Step(str, Enum):
    IDLE = "idle"
    GENERAL_INFO = "general_info"
    PAYMENT_SHIPPING = "payment_shipping"
    ITEM = "item"
    TAGS = "tags"
    PHOTOS = "photos"
    COMPLETED = "completed"


# ITEM → ITEM moves to the next item; ITEM → PHOTOS skips the tag step.
SUCCESSORS: Dict[Step, FrozenSet[Step]] = {
    Step.IDLE: frozenset({Step.GENERAL_INFO}),
    Step.GENERAL_INFO: frozenset({Step.PAYMENT_SHIPPING}),
    Step.PAYMENT_SHIPPING: frozenset({Step.ITEM}),
    Step.ITEM: frozenset({Step.ITEM, Step.TAGS, Step.PHOTOS}),
    Step.TAGS: frozenset({Step.PHOTOS}),
    Step.PHOTOS: frozenset({Step.COMPLETED}),
    Step.COMPLETED: frozenset(),
}

_FORM_IDS: Dict[Step, str] = {
    Step.GENERAL_INFO: "mp_s1",
    Step.PAYMENT_SHIPPING: "mp_s2",
    Step.TAGS: "mp_tags",
    Step.PHOTOS: "mp_photos",
}
_STEPS_BY_FORM_ID = {form_id: step for step, form_id in _FORM_IDS.items()}
_ITEM_FORM_ID = re.compile(r"^mp_item_(\d+)$")


def form_id(step: Step, index: Optional[int] = None) -> str:
    """Return the modal custom id for ``step`` (and item ``index``)."""
    if step is Step.ITEM:
        if index is None:
            raise ValueError("item forms need an index")
        return f"mp_item_{index}"
    try:
        return _FORM_IDS[step]
    except KeyError:
        raise ValueError(f"{step.value} has no form") from None


def parse_form_id(custom_id: Optional[str]) -> Optional[Tuple[Step, Optional[int]]]:
    """Map a submitted modal custom id back to its step, or ``None``."""
    if not custom_id:
        return None
    step = _STEPS_BY_FORM_ID.get(custom_id)
    if step is not None:
        return step, None
    match = _ITEM_FORM_ID.match(custom_id)
    if match:
        return Step.ITEM, int(match.group(1))
    return None
