"""Listing workflow engine: drives a seller from the panel button to a thread."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from .. import forms
from ..config import MarketplaceConfig
from ..constants import (
    CONDITION_OPTIONS,
    CONTINUE_BUTTON,
    CREATE_LISTING_BUTTON,
    PACKAGING_OPTIONS,
    PAYMENT_OPTIONS,
    SHIPPING_OPTIONS,
)
from ..contracts import InteractionEvent, ItemEntry
from ..errors import (
    CatalogUnavailableError,
    CooldownActiveError,
    PublishError,
    SessionExpiredError,
    StepValidationError,
)
from ..interactions import InteractionResponder
from ..listing import ListingPublisher, TagCatalog
from ..persistence.ledger import SellerLedger, utcnow
from .state import WorkflowState, WorkflowStore
from .steps import Step, parse_form_id
from .validation import (
    confirm_token,
    normalize_price,
    parse_item_count,
    require_selection,
    require_text,
    validate_attachments,
    validate_choices,
)

logger = logging.getLogger(__name__)

StepHandler = Callable[[InteractionEvent, WorkflowState], Awaitable[None]]


def _values(options) -> list:
    return [value for _, value in options]


class MarketplaceWorkflow:
    """Per-user listing state machine.

    A modal cannot be answered with another modal, so every accepted step is
    acknowledged with an ephemeral "Continue" button that opens the next
    form. Rejected input leaves the state untouched and offers the same form
    again.
    """

    def __init__(
        self,
        responder: InteractionResponder,
        publisher: ListingPublisher,
        ledger: SellerLedger,
        catalog: TagCatalog,
        config: Optional[MarketplaceConfig] = None,
        store: Optional[WorkflowStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or MarketplaceConfig()
        self.responder = responder
        self.publisher = publisher
        self.ledger = ledger
        self.catalog = catalog
        self.store = store or WorkflowStore(ttl=self.config.session_ttl)
        self._clock = clock
        self._submit: Dict[Step, StepHandler] = {
            Step.GENERAL_INFO: self._submit_general_info,
            Step.PAYMENT_SHIPPING: self._submit_payment_shipping,
            Step.ITEM: self._submit_item,
            Step.TAGS: self._submit_tags,
            Step.PHOTOS: self._submit_photos,
        }

    # ------------------------------------------------------------------
    # Entry points
    async def handle_button(self, event: InteractionEvent) -> bool:
        if event.custom_id == CREATE_LISTING_BUTTON:
            await self.begin(event)
            return True
        if event.custom_id == CONTINUE_BUTTON:
            await self.open_current_form(event)
            return True
        return False

    async def handle_form(self, event: InteractionEvent) -> bool:
        ref = parse_form_id(event.custom_id)
        if ref is None:
            return False
        step, index = ref
        try:
            state = self._current_state(event.user_id, step, index)
            await self._submit[step](event, state)
        except StepValidationError as e:
            await self.responder.reply(event, f"❌ {e}", components=[forms.continue_row("Try again")])
        except SessionExpiredError as e:
            await self.responder.reply(event, f"❌ {e}")
        return True

    async def begin(self, event: InteractionEvent) -> None:
        """Gate on the cooldown, then open the first form."""
        try:
            self.ledger.check_cooldown(event.user_id, self._clock())
        except CooldownActiveError as e:
            await self.responder.reply(
                event,
                f"❌ You can only create a listing once every {self.config.cooldown_days} days.\n{e}",
            )
            return
        self.store.start(event.user)
        logger.info(f"Listing workflow started for {event.user_id}")
        await self.responder.show_modal(event, forms.general_info_form(self.config.max_items))

    async def open_current_form(self, event: InteractionEvent) -> None:
        state = self.store.get(event.user_id)
        if state is None:
            await self.responder.reply(event, f"❌ {SessionExpiredError()}")
            return
        self.store.touch(state)
        await self.responder.show_modal(event, self._form_for(state))

    # ------------------------------------------------------------------
    def _current_state(self, user_id: str, step: Step, index: Optional[int]) -> WorkflowState:
        state = self.store.get(user_id)
        if state is None or not state.expects(step, index):
            raise SessionExpiredError()
        self.store.touch(state)
        return state

    def _form_for(self, state: WorkflowState) -> dict:
        if state.step is Step.GENERAL_INFO:
            return forms.general_info_form(self.config.max_items)
        if state.step is Step.PAYMENT_SHIPPING:
            return forms.payment_shipping_form()
        if state.step is Step.ITEM:
            return forms.item_form(state.item_index, state.item_total or 1)
        if state.step is Step.TAGS:
            return forms.tag_form(state.tag_options)
        if state.step is Step.PHOTOS:
            return forms.photo_form(self.config.max_photos)
        raise SessionExpiredError()

    async def _prompt_next(self, event: InteractionEvent, message: str) -> None:
        await self.responder.reply(event, f"✅ {message}", components=[forms.continue_row()])

    # ------------------------------------------------------------------
    # Step handlers
    async def _submit_general_info(self, event: InteractionEvent, state: WorkflowState) -> None:
        count = parse_item_count(event.text("count"), self.config.max_items)
        state.set_item_total(count)
        state.draft.item_count = count
        state.draft.info = event.text("info")
        state.advance(Step.PAYMENT_SHIPPING)
        await self._prompt_next(event, "Step 1 saved. Continue to payment and shipping.")

    async def _submit_payment_shipping(self, event: InteractionEvent, state: WorkflowState) -> None:
        payment = validate_choices(
            event.selected("payment"), _values(PAYMENT_OPTIONS), "payment method",
            maximum=len(PAYMENT_OPTIONS),
        )
        shipping = validate_choices(event.selected("shipping"), _values(SHIPPING_OPTIONS), "shipping policy")
        state.draft.payment = payment
        state.draft.shipping = shipping[0]
        state.advance(Step.ITEM)
        await self._prompt_next(event, f"Step 2 saved. Continue to item 1 of {state.item_total}.")

    async def _submit_item(self, event: InteractionEvent, state: WorkflowState) -> None:
        item = ItemEntry(
            name=require_text(event.text("name"), "Item name"),
            price=normalize_price(event.text("price")),
            notes=event.text("notes"),
            packaging=validate_choices(
                event.selected("packaging"), _values(PACKAGING_OPTIONS), "packaging condition"
            )[0],
            condition=validate_choices(
                event.selected("condition"), _values(CONDITION_OPTIONS), "item condition"
            )[0],
        )
        done = state.item_index + 1

        if done < (state.item_total or 0):
            state.draft.items.append(item)
            state.advance(Step.ITEM)
            await self._prompt_next(
                event, f"Item {done} saved. Continue to item {done + 1} of {state.item_total}."
            )
            return

        try:
            options = await self.catalog.options()
        except CatalogUnavailableError as e:
            logger.warning(f"Tag catalog unavailable, skipping tag step for {state.user_id}: {e}")
            options = {}
        state.draft.items.append(item)

        if options:
            state.tag_options = options
            state.advance(Step.TAGS)
            await self._prompt_next(event, "All items saved. Continue to choose tags.")
        else:
            state.draft.tags_skipped = True
            state.advance(Step.PHOTOS)
            await self._prompt_next(event, "All items saved. Continue to upload photos.")

    async def _submit_tags(self, event: InteractionEvent, state: WorkflowState) -> None:
        state.draft.tags = require_selection(event.selected("tags"), "tag")
        state.advance(Step.PHOTOS)
        await self._prompt_next(event, "Tags saved. Continue to upload photos.")

    async def _submit_photos(self, event: InteractionEvent, state: WorkflowState) -> None:
        confirm_token(event.text("confirm"))
        files = validate_attachments(event.attachments("photos"), 1, self.config.max_photos)
        state.draft.photo_urls = [f.url for f in files]

        try:
            thread_id = await self.publisher.publish(state.user, state.draft)
        except CooldownActiveError as e:
            await self.responder.reply(event, f"❌ {e}")
            return
        except PublishError as e:
            logger.error(f"Publishing listing for {state.user_id} failed: {e}")
            await self.responder.reply(
                event, f"❌ Failed to create listing: {e}", components=[forms.continue_row("Try again")]
            )
            return

        state.advance(Step.COMPLETED)
        self.store.discard(state.user_id)
        await self.responder.reply(event, f"✅ Listing created: <#{thread_id}>")
