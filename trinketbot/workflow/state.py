"""Per-user workflow state and its expiring store."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from pydantic import BaseModel, Field

from ..contracts import ListingDraft, UserProfile
from .steps import SUCCESSORS, Step

logger = logging.getLogger(__name__)


class WorkflowState(BaseModel):
    """Progress of one user through the listing workflow."""

    user_id: str
    user: UserProfile
    step: Step = Step.IDLE
    draft: ListingDraft = Field(default_factory=ListingDraft)
    item_index: int = 0
    item_total: Optional[int] = None
    tag_options: Dict[str, str] = Field(default_factory=dict)
    updated_at: float = 0.0

    def expects(self, step: Step, index: Optional[int] = None) -> bool:
        """Return ``True`` if a submission for ``step``/``index`` is current."""
        if step is not self.step:
            return False
        return step is not Step.ITEM or index == self.item_index

    def set_item_total(self, total: int) -> None:
        if self.item_total is not None:
            raise ValueError("item total is already fixed")
        self.item_total = total

    def advance(self, to: Step) -> None:
        """Move forward along the fixed step order."""
        if to not in SUCCESSORS[self.step]:
            raise ValueError(f"Illegal transition {self.step.value} -> {to.value}")
        if to is Step.ITEM:
            if self.step is Step.ITEM:
                if self.item_total is None or self.item_index + 1 >= self.item_total:
                    raise ValueError("No items left to collect")
                self.item_index += 1
            else:
                self.item_index = 0
        self.step = to


class WorkflowStore:
    """In-flight workflow states keyed by user id, dropped after ``ttl`` idle seconds."""

    def __init__(self, ttl: float = 1800.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._states: Dict[str, WorkflowState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._states

    def start(self, user: UserProfile) -> WorkflowState:
        """Create a fresh state at the first step, replacing any stale one."""
        self.sweep()
        state = WorkflowState(user_id=user.id, user=user)
        state.advance(Step.GENERAL_INFO)
        self.touch(state)
        self._states[user.id] = state
        return state

    def get(self, user_id: str) -> Optional[WorkflowState]:
        state = self._states.get(user_id)
        if state is None:
            return None
        if self._expired(state):
            logger.info(f"Workflow for {user_id} expired at step {state.step.value}")
            del self._states[user_id]
            return None
        return state

    def touch(self, state: WorkflowState) -> None:
        state.updated_at = self._clock()

    def discard(self, user_id: str) -> None:
        self._states.pop(user_id, None)

    def sweep(self) -> int:
        """Drop every expired state; returns how many were removed."""
        expired = [uid for uid, state in self._states.items() if self._expired(state)]
        for uid in expired:
            del self._states[uid]
        if expired:
            logger.info(f"Swept {len(expired)} abandoned workflows")
        return len(expired)

    def _expired(self, state: WorkflowState) -> bool:
        return self._clock() - state.updated_at >= self.ttl
