"""Exception types raised by trinketbot components."""

from __future__ import annotations

from datetime import datetime


class TrinketError(Exception):
    """Base class for errors that carry a user-facing message."""


class StepValidationError(TrinketError):
    """Submitted input for a workflow step was rejected."""


class SessionExpiredError(TrinketError):
    """An event referenced a workflow step with no matching state."""

    def __init__(self, message: str = "Session expired. Please start again.") -> None:
        super().__init__(message)


class CooldownActiveError(TrinketError):
    """The seller published too recently."""

    def __init__(self, next_eligible: datetime, days_left: int) -> None:
        self.next_eligible = next_eligible
        self.days_left = days_left
        plural = "" if days_left == 1 else "s"
        super().__init__(
            f"Next listing available: **{next_eligible.strftime('%b %d, %Y')}** "
            f"(~{days_left} day{plural})."
        )


class PublishError(TrinketError):
    """Terminal step failed; the workflow state is kept for a retry."""


class ResourceCreationError(PublishError):
    """The remote platform rejected or failed the create call."""


class NoValidCategoryError(PublishError):
    """None of the requested tags exist in the forum catalog."""

    def __init__(self, message: str = "None of the selected tags were found.") -> None:
        super().__init__(message)


class CatalogUnavailableError(TrinketError):
    """The forum tag catalog could not be fetched."""


class GatewayFatalError(TrinketError):
    """The gateway closed with a code that forbids reconnecting."""

    def __init__(self, code: int, reason: str = "") -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"Gateway closed with fatal code {code}: {reason}")
