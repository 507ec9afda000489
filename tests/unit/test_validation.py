"""Step input validation tests."""

import pytest

from trinketbot.errors import StepValidationError
from trinketbot.workflow.validation import (
    confirm_token,
    normalize_price,
    parse_item_count,
    require_selection,
    require_text,
    validate_attachments,
    validate_choices,
)


@pytest.mark.parametrize("raw,expected", [("1", 1), (" 3 ", 3), ("10", 10)])
def test_item_count_accepts_range(raw, expected):
    assert parse_item_count(raw) == expected


@pytest.mark.parametrize("raw", ["0", "11", "abc", "", "2.5", "-1"])
def test_item_count_rejects(raw):
    with pytest.raises(StepValidationError):
        parse_item_count(raw)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("$25,000.5", "25000.50"),
        ("35", "35.00"),
        ("€ 12.345", "12.35"),
        ("0.01", "0.01"),
    ],
)
def test_price_normalization(raw, expected):
    assert normalize_price(raw) == expected


@pytest.mark.parametrize(
    "raw", ["-5", "0", "0.004", "free", "", "NaN", "Infinity", "1e30", "99999999999999999999999999999"]
)
def test_price_rejects(raw):
    with pytest.raises(StepValidationError):
        normalize_price(raw)


@pytest.mark.parametrize("raw", ["yes", "YES", "Yes", " yes "])
def test_confirm_token_accepts(raw):
    confirm_token(raw)


@pytest.mark.parametrize("raw", ["Y", "yep", "", "no"])
def test_confirm_token_rejects(raw):
    with pytest.raises(StepValidationError):
        confirm_token(raw)


def test_choices_enforce_option_set_and_cardinality():
    allowed = ["a", "b", "c"]
    assert validate_choices(["a", "a", "c"], allowed, "method", maximum=3) == ["a", "c"]
    with pytest.raises(StepValidationError):
        validate_choices(["z"], allowed, "method")
    with pytest.raises(StepValidationError):
        validate_choices([], allowed, "method")
    with pytest.raises(StepValidationError):
        validate_choices(["a", "b"], allowed, "method")


def test_required_text_and_selection():
    assert require_text("  Labubu ", "Item name") == "Labubu"
    with pytest.raises(StepValidationError, match="Item name"):
        require_text("   ", "Item name")
    assert require_selection(["t1", "t1", "t2"], "tag") == ["t1", "t2"]
    with pytest.raises(StepValidationError):
        require_selection([], "tag")


def test_attachment_bounds():
    assert validate_attachments([1, 2], 1, 10) == [1, 2]
    assert validate_attachments([], 0, 5) == []
    with pytest.raises(StepValidationError):
        validate_attachments([], 1, 10)
    with pytest.raises(StepValidationError):
        validate_attachments(list(range(6)), 0, 5)
