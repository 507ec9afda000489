"""Modal and component payload builders."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import (
    BUTTON_PRIMARY,
    COMPONENT_ACTION_ROW,
    COMPONENT_BUTTON,
    COMPONENT_FILE_UPLOAD,
    COMPONENT_LABEL,
    COMPONENT_STRING_SELECT,
    COMPONENT_TEXT_INPUT,
    CONDITION_OPTIONS,
    CONTINUE_BUTTON,
    PACKAGING_OPTIONS,
    PAYMENT_OPTIONS,
    SHIPPING_OPTIONS,
)
from .workflow.steps import Step, form_id

Component = Dict[str, Any]


def label(text: str, description: Optional[str], component: Component) -> Component:
    wrapper: Component = {"type": COMPONENT_LABEL, "label": text[:45], "component": component}
    if description:
        wrapper["description"] = description[:100]
    return wrapper


def text_input(
    custom_id: str,
    placeholder: Optional[str] = None,
    paragraph: bool = False,
    required: bool = True,
    max_length: int = 1000,
    min_length: Optional[int] = None,
) -> Component:
    component: Component = {
        "type": COMPONENT_TEXT_INPUT,
        "custom_id": custom_id,
        "style": 2 if paragraph else 1,
        "required": required,
        "max_length": max_length,
    }
    if placeholder:
        component["placeholder"] = placeholder
    if min_length is not None:
        component["min_length"] = min_length
    return component


def string_select(
    custom_id: str,
    options: Sequence[Tuple[str, str]],
    min_values: int = 1,
    max_values: int = 1,
    placeholder: Optional[str] = None,
    required: bool = True,
) -> Component:
    component: Component = {
        "type": COMPONENT_STRING_SELECT,
        "custom_id": custom_id,
        "options": [{"label": text[:100], "value": value} for text, value in options],
        "min_values": min_values,
        "max_values": max_values,
        "required": required,
    }
    if placeholder:
        component["placeholder"] = placeholder
    return component


def file_upload(custom_id: str, min_values: int = 1, max_values: int = 10, required: bool = True) -> Component:
    return {
        "type": COMPONENT_FILE_UPLOAD,
        "custom_id": custom_id,
        "min_values": min_values,
        "max_values": max_values,
        "required": required,
    }


def modal(custom_id: str, title: str, components: List[Component]) -> Dict[str, Any]:
    return {"custom_id": custom_id, "title": title[:45], "components": components}


def button_row(*buttons: Tuple[str, str, int]) -> Component:
    """An action row of ``(custom_id, label, style)`` buttons."""
    return {
        "type": COMPONENT_ACTION_ROW,
        "components": [
            {"type": COMPONENT_BUTTON, "custom_id": custom_id, "label": text, "style": style}
            for custom_id, text, style in buttons
        ],
    }


def continue_row(text: str = "Continue") -> Component:
    return button_row((CONTINUE_BUTTON, text, BUTTON_PRIMARY))


# ----------------------------------------------------------------------
# Listing workflow forms


def general_info_form(max_items: int = 10) -> Dict[str, Any]:
    return modal(
        form_id(Step.GENERAL_INFO),
        "Create Listing — Step 1",
        [
            label(f"How many items? (1–{max_items})", "Enter a whole number",
                  text_input("count", placeholder="e.g. 3", max_length=2)),
            label("General info (optional)", "Shipping notes, bundle deals, location…",
                  text_input("info", paragraph=True, required=False, max_length=500)),
        ],
    )


def payment_shipping_form() -> Dict[str, Any]:
    return modal(
        form_id(Step.PAYMENT_SHIPPING),
        "Create Listing — Step 2",
        [
            label("Payment methods", "Select all that apply (1–3)",
                  string_select("payment", PAYMENT_OPTIONS, max_values=len(PAYMENT_OPTIONS))),
            label("Shipping policy", "Is shipping included or additional?",
                  string_select("shipping", SHIPPING_OPTIONS)),
        ],
    )


def item_form(index: int, total: int) -> Dict[str, Any]:
    return modal(
        form_id(Step.ITEM, index),
        f"Item {index + 1} of {total}",
        [
            label("Item name", "Full name of the item", text_input("name", max_length=200)),
            label("Price (USD)", "Number only, no $ symbol",
                  text_input("price", placeholder="35.00", max_length=20)),
            label("Notes (optional)", "Condition details, flaws, extras",
                  text_input("notes", paragraph=True, required=False, max_length=500)),
            label("Packaging condition", "How is the item packaged?",
                  string_select("packaging", PACKAGING_OPTIONS)),
            label("Item condition", "What condition is the item itself?",
                  string_select("condition", CONDITION_OPTIONS)),
        ],
    )


def tag_form(options: Dict[str, str]) -> Dict[str, Any]:
    choices = list(options.items())[:25]
    return modal(
        form_id(Step.TAGS),
        "Create Listing — Tags",
        [
            label("Listing tags", "Select all tags that describe your items",
                  string_select("tags", [(name, tag_id) for tag_id, name in choices],
                                max_values=len(choices))),
        ],
    )


def photo_form(max_photos: int = 10) -> Dict[str, Any]:
    return modal(
        form_id(Step.PHOTOS),
        "Create Listing — Photos",
        [
            label(f"Photos (1–{max_photos} files)",
                  "Each photo must show a handwritten note: username, server name, today's date",
                  file_upload("photos", max_values=max_photos)),
            label("Confirm handwritten note",
                  "Type YES to confirm every photo includes the required note",
                  text_input("confirm", placeholder="YES", min_length=3, max_length=3)),
        ],
    )
