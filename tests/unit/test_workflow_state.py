"""Step table, form ids and the expiring state store."""

import pytest

from trinketbot.contracts import UserProfile
from trinketbot.workflow import SUCCESSORS, Step, WorkflowState, WorkflowStore, form_id, parse_form_id


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _state(step=Step.GENERAL_INFO):
    return WorkflowState(user_id="u1", user=UserProfile(id="u1"), step=step)


def test_form_ids_round_trip_through_parser():
    assert form_id(Step.GENERAL_INFO) == "mp_s1"
    assert form_id(Step.ITEM, 2) == "mp_item_2"
    assert parse_form_id("mp_item_2") == (Step.ITEM, 2)
    assert parse_form_id("mp_tags") == (Step.TAGS, None)
    assert parse_form_id("mp_iso_submit") is None
    assert parse_form_id(None) is None
    with pytest.raises(ValueError):
        form_id(Step.ITEM)
    with pytest.raises(ValueError):
        form_id(Step.COMPLETED)


def test_completed_is_terminal():
    assert SUCCESSORS[Step.COMPLETED] == frozenset()
    state = _state(Step.PHOTOS)
    state.advance(Step.COMPLETED)
    with pytest.raises(ValueError):
        state.advance(Step.GENERAL_INFO)


def test_cannot_skip_steps():
    state = _state()
    with pytest.raises(ValueError):
        state.advance(Step.ITEM)
    assert state.step is Step.GENERAL_INFO


def test_item_loop_advances_index_until_total():
    state = _state()
    state.set_item_total(2)
    state.advance(Step.PAYMENT_SHIPPING)
    state.advance(Step.ITEM)
    assert state.expects(Step.ITEM, 0)
    state.advance(Step.ITEM)
    assert state.item_index == 1
    assert not state.expects(Step.ITEM, 0)
    with pytest.raises(ValueError):
        state.advance(Step.ITEM)
    state.advance(Step.PHOTOS)
    assert state.step is Step.PHOTOS


def test_item_total_is_fixed_once():
    state = _state()
    state.set_item_total(3)
    with pytest.raises(ValueError):
        state.set_item_total(4)


def test_store_expires_idle_states():
    clock = FakeClock()
    store = WorkflowStore(ttl=60, clock=clock)
    state = store.start(UserProfile(id="u1"))
    assert state.step is Step.GENERAL_INFO
    assert "u1" in store

    clock.now += 59
    store.touch(state)
    clock.now += 59
    assert store.get("u1") is state

    clock.now += 60
    assert store.get("u1") is None
    assert "u1" not in store


def test_start_replaces_previous_state():
    store = WorkflowStore()
    first = store.start(UserProfile(id="u1"))
    first.draft.info = "old"
    second = store.start(UserProfile(id="u1"))
    assert second is not first
    assert second.draft.info == ""
    assert len(store) == 1


def test_sweep_counts_removed_states():
    clock = FakeClock()
    store = WorkflowStore(ttl=10, clock=clock)
    store.start(UserProfile(id="old"))
    clock.now += 5
    store.start(UserProfile(id="fresh"))
    clock.now += 6
    assert store.sweep() == 1
    assert "fresh" in store
    assert "old" not in store
