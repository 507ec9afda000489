"""Input checks for workflow steps. Each raises ``StepValidationError``."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Sequence, TypeVar

from ..constants import CONFIRM_TOKEN
from ..errors import StepValidationError

T = TypeVar("T")

_PRICE_NOISE = re.compile(r"[\s$€£¥,]")
_WHOLE_NUMBER = re.compile(r"^\d+$")
# Largest accepted price is below 10**13.
_MAX_PRICE_DIGITS = 12


def parse_item_count(raw: str, maximum: int = 10) -> int:
    value = (raw or "").strip()
    if not _WHOLE_NUMBER.match(value) or not 1 <= int(value) <= maximum:
        raise StepValidationError(f"Please enter a whole number between 1 and {maximum}.")
    return int(value)


def normalize_price(raw: str) -> str:
    """Return ``raw`` as a positive amount with two decimals, e.g. ``"25000.50"``."""
    cleaned = _PRICE_NOISE.sub("", raw or "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite() or amount.adjusted() > _MAX_PRICE_DIGITS:
        raise StepValidationError("Price must be a positive number (e.g. 25.00).")
    amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise StepValidationError("Price must be a positive number (e.g. 25.00).")
    return format(amount, "f")


def require_text(raw: str, label: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise StepValidationError(f"{label} is required.")
    return value


def require_selection(values: Sequence[str], label: str) -> List[str]:
    selected = [v for v in dict.fromkeys(values) if v]
    if not selected:
        raise StepValidationError(f"Please select at least one {label}.")
    return selected


def validate_choices(
    values: Sequence[str],
    allowed: Iterable[str],
    label: str,
    minimum: int = 1,
    maximum: int = 1,
) -> List[str]:
    """Check a select-menu submission against its option set."""
    selected = [v for v in dict.fromkeys(values) if v]
    allowed = set(allowed)
    unknown = [v for v in selected if v not in allowed]
    if unknown:
        raise StepValidationError(f"Unknown {label}: {', '.join(unknown)}.")
    if not minimum <= len(selected) <= maximum:
        if minimum == maximum:
            raise StepValidationError(f"Please select {minimum} {label}.")
        raise StepValidationError(f"Please select between {minimum} and {maximum} {label} options.")
    return selected


def confirm_token(raw: str) -> None:
    if (raw or "").strip().upper() != CONFIRM_TOKEN:
        raise StepValidationError(
            f"You must type **{CONFIRM_TOKEN}** to confirm every photo includes the required handwritten note."
        )


def validate_attachments(files: Sequence[T], minimum: int = 1, maximum: int = 10) -> List[T]:
    if len(files) < minimum:
        noun = "photo" if minimum == 1 else "photos"
        raise StepValidationError(f"Please upload at least {minimum} {noun}.")
    if len(files) > maximum:
        raise StepValidationError(f"Please upload no more than {maximum} photos.")
    return list(files)
