"""Listing workflow engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from trinketbot.config import MarketplaceConfig
from trinketbot.constants import CALLBACK_CHANNEL_MESSAGE, CALLBACK_MODAL, CONTINUE_BUTTON, CREATE_LISTING_BUTTON
from trinketbot.interactions import InteractionResponder
from trinketbot.listing import ListingPublisher, TagCatalog
from trinketbot.persistence import InMemoryDocumentStore, SellerLedger
from trinketbot.transports import InMemoryRestClient
from trinketbot.workflow import MarketplaceWorkflow, Step

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)
TAGS = [{"id": "t1", "name": "Plush"}, {"id": "t2", "name": "Figures"}]


def _workflow(tags=TAGS):
    rest = InMemoryRestClient()
    rest.respond("GET", "/channels/forum", body={"available_tags": tags})
    rest.respond("POST", "/channels/forum/threads", body={"id": "thread-9"})
    ledger = SellerLedger(InMemoryDocumentStore(), clock=lambda: NOW)
    catalog = TagCatalog(rest, "forum")
    publisher = ListingPublisher(rest, ledger, catalog, clock=lambda: NOW)
    workflow = MarketplaceWorkflow(
        InteractionResponder(rest),
        publisher,
        ledger,
        catalog,
        config=MarketplaceConfig(forum_id="forum", tag_ids=[]),
        clock=lambda: NOW,
    )
    return rest, ledger, workflow


def _callbacks(rest):
    return [body for method, path, body in rest.calls if path.startswith("/interactions/")]


def _last(rest):
    return _callbacks(rest)[-1]


async def _item(workflow, form_event, index, name="Labubu", price="25"):
    await workflow.handle_form(
        form_event(
            f"mp_item_{index}",
            text={"name": name, "price": price, "notes": ""},
            selects={"packaging": ["Box sealed"], "condition": ["New"]},
        )
    )


async def _to_photos(workflow, button_event, form_event, items=1, tags=("t1",)):
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": str(items), "info": "Ships Mondays"}))
    await workflow.handle_form(
        form_event("mp_s2", selects={"payment": ["PayPal G&S", "Venmo G&S"], "shipping": ["additional"]})
    )
    for i in range(items):
        await _item(workflow, form_event, i, name=f"Item {i}")
    if tags is not None:
        await workflow.handle_form(form_event("mp_tags", selects={"tags": list(tags)}))


def _photos(form_event, confirm="YES", count=2):
    files = [(f"a{i}", f"https://cdn/a{i}.png") for i in range(count)]
    return form_event("mp_photos", text={"confirm": confirm}, files={"photos": files})


@pytest.mark.asyncio
async def test_create_button_opens_first_form(button_event):
    rest, _, workflow = _workflow()
    assert await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    callback = _last(rest)
    assert callback["type"] == CALLBACK_MODAL
    assert callback["data"]["custom_id"] == "mp_s1"
    assert workflow.store.get("u1").step is Step.GENERAL_INFO


@pytest.mark.asyncio
async def test_cooldown_blocks_entry(button_event):
    rest, ledger, workflow = _workflow()
    ledger.record_listing("u1", "thread-old", NOW - timedelta(days=1))
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))

    callback = _last(rest)
    assert callback["type"] == CALLBACK_CHANNEL_MESSAGE
    content = callback["data"]["content"]
    assert "once every 14 days" in content
    assert "Jun 14, 2026" in content
    assert callback["data"]["flags"] == 64
    assert "u1" not in workflow.store


@pytest.mark.parametrize("count", ["0", "11", "abc"])
@pytest.mark.asyncio
async def test_bad_item_count_keeps_step(count, button_event, form_event):
    rest, _, workflow = _workflow()
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": count}))

    callback = _last(rest)
    assert callback["data"]["content"].startswith("❌")
    button = callback["data"]["components"][0]["components"][0]
    assert button["custom_id"] == CONTINUE_BUTTON
    state = workflow.store.get("u1")
    assert state.step is Step.GENERAL_INFO
    assert state.item_total is None


@pytest.mark.asyncio
async def test_continue_opens_next_form(button_event, form_event):
    rest, _, workflow = _workflow()
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "2"}))
    assert _last(rest)["data"]["content"].startswith("✅")

    await workflow.handle_button(button_event(CONTINUE_BUTTON))
    assert _last(rest)["data"]["custom_id"] == "mp_s2"

    await workflow.handle_form(
        form_event("mp_s2", selects={"payment": ["Other"], "shipping": ["included"]})
    )
    await workflow.handle_button(button_event(CONTINUE_BUTTON))
    modal = _last(rest)["data"]
    assert modal["custom_id"] == "mp_item_0"
    assert modal["title"] == "Item 1 of 2"


@pytest.mark.asyncio
async def test_invalid_payment_selection_rejected(button_event, form_event):
    rest, _, workflow = _workflow()
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "1"}))
    await workflow.handle_form(form_event("mp_s2", selects={"payment": ["Cash"], "shipping": ["included"]}))
    assert "Unknown payment method" in _last(rest)["data"]["content"]
    assert workflow.store.get("u1").step is Step.PAYMENT_SHIPPING


@pytest.mark.asyncio
async def test_bad_price_keeps_item_index(button_event, form_event):
    rest, _, workflow = _workflow()
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "2"}))
    await workflow.handle_form(form_event("mp_s2", selects={"payment": ["Other"], "shipping": ["included"]}))
    await _item(workflow, form_event, 0, price="-5")

    state = workflow.store.get("u1")
    assert state.step is Step.ITEM
    assert state.item_index == 0
    assert state.draft.items == []

    await _item(workflow, form_event, 0, price="$25,000.5")
    assert state.item_index == 1
    assert state.draft.items[0].price == "25000.50"


@pytest.mark.asyncio
async def test_stale_or_missing_session_is_expired(button_event, form_event):
    rest, _, workflow = _workflow()
    await workflow.handle_form(form_event("mp_s2", selects={"payment": ["Other"], "shipping": ["included"]}))
    assert _last(rest)["data"]["content"] == "❌ Session expired. Please start again."

    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "1"}))
    await workflow.handle_form(form_event("mp_s1", text={"count": "1"}))
    assert "Session expired" in _last(rest)["data"]["content"]
    assert workflow.store.get("u1").step is Step.PAYMENT_SHIPPING

    await workflow.handle_button(button_event(CONTINUE_BUTTON, user_id="u2"))
    assert "Session expired" in _last(rest)["data"]["content"]


@pytest.mark.asyncio
async def test_foreign_ids_are_not_claimed(button_event, form_event):
    _, _, workflow = _workflow()
    assert not await workflow.handle_button(button_event("add_iso_item"))
    assert not await workflow.handle_form(form_event("mp_iso_submit"))


@pytest.mark.asyncio
async def test_catalog_failure_skips_tag_step(button_event, form_event):
    rest, ledger, workflow = _workflow()
    rest.respond("GET", "/channels/forum", status_code=500)
    await _to_photos(workflow, button_event, form_event, tags=None)

    state = workflow.store.get("u1")
    assert state.step is Step.PHOTOS
    assert state.draft.tags_skipped

    rest.respond("GET", "/channels/forum", body={"available_tags": TAGS})
    await workflow.handle_form(_photos(form_event))
    assert _last(rest)["data"]["content"] == "✅ Listing created: <#thread-9>"
    (_, _, body), = rest.calls_to("POST", "/channels/forum/threads")
    assert body["applied_tags"] == []


@pytest.mark.asyncio
async def test_retried_last_item_is_not_duplicated(button_event, form_event):
    rest, _, workflow = _workflow(tags=["not-a-tag"])
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "2", "info": "Ships Mondays"}))
    await workflow.handle_form(form_event("mp_s2", selects={"payment": ["PayPal G&S"], "shipping": ["included"]}))
    await _item(workflow, form_event, 0)
    with pytest.raises(AttributeError):
        await _item(workflow, form_event, 1)
    assert len(workflow.store.get("u1").draft.items) == 1

    rest.respond("GET", "/channels/forum", body={"available_tags": TAGS})
    await _item(workflow, form_event, 1)
    state = workflow.store.get("u1")
    assert len(state.draft.items) == 2
    assert state.step is Step.TAGS


@pytest.mark.asyncio
async def test_photo_step_requires_exact_confirmation(button_event, form_event):
    rest, _, workflow = _workflow()
    await _to_photos(workflow, button_event, form_event)
    await workflow.handle_form(_photos(form_event, confirm="Y"))
    assert "YES" in _last(rest)["data"]["content"]
    assert workflow.store.get("u1").step is Step.PHOTOS

    await workflow.handle_form(_photos(form_event, count=0))
    assert "at least 1 photo" in _last(rest)["data"]["content"]
    assert rest.calls_to("POST", "/channels/forum/threads") == []


@pytest.mark.asyncio
async def test_publish_failure_keeps_state_for_retry(button_event, form_event):
    rest, ledger, workflow = _workflow()
    await _to_photos(workflow, button_event, form_event)
    rest.respond("POST", "/channels/forum/threads", status_code=500, body={"message": "Internal"})

    await workflow.handle_form(_photos(form_event))
    content = _last(rest)["data"]["content"]
    assert content.startswith("❌ Failed to create listing:")
    assert workflow.store.get("u1").step is Step.PHOTOS
    assert ledger.get("u1") is None

    rest.respond("POST", "/channels/forum/threads", body={"id": "thread-9"})
    await workflow.handle_button(button_event(CONTINUE_BUTTON))
    assert _last(rest)["data"]["custom_id"] == "mp_photos"
    await workflow.handle_form(_photos(form_event))
    assert _last(rest)["data"]["content"] == "✅ Listing created: <#thread-9>"
    assert "u1" not in workflow.store


@pytest.mark.asyncio
async def test_unknown_only_tags_reply_with_category_error(button_event, form_event):
    rest, _, workflow = _workflow()
    await _to_photos(workflow, button_event, form_event, tags=["gone"])
    await workflow.handle_form(_photos(form_event))
    assert "None of the selected tags were found." in _last(rest)["data"]["content"]
    assert rest.calls_to("POST", "/channels/forum/threads") == []
    assert workflow.store.get("u1").step is Step.PHOTOS


@pytest.mark.asyncio
async def test_restart_discards_previous_draft(button_event, form_event):
    _, _, workflow = _workflow()
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    await workflow.handle_form(form_event("mp_s1", text={"count": "3"}))
    await workflow.handle_button(button_event(CREATE_LISTING_BUTTON))
    state = workflow.store.get("u1")
    assert state.step is Step.GENERAL_INFO
    assert state.item_total is None
