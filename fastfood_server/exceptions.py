"""Storefront exceptions.

Every failure a user action can hit is one of these; surfaces show
``message`` and nothing else.
"""

import math
from typing import Optional


class FastFoodError(Exception):
    """Base exception for storefront failures."""

    def __init__(self, message: str = "Something went wrong. Please try again later.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationRejected(FastFoodError):
    """Raised when user input fails validation. Carries per-field messages."""

    def __init__(self, errors: dict[str, str], message: Optional[str] = None) -> None:
        self.errors = errors
        super().__init__(message or "; ".join(errors.values()) or "Please check your input and try again.")


class RateLimited(FastFoodError):
    """Raised when too many authentication attempts were made for an email."""

    def __init__(self, remaining_seconds: float) -> None:
        self.remaining_seconds = remaining_seconds
        minutes = math.ceil(remaining_seconds / 60)
        super().__init__(f"Too many attempts. Please wait {minutes} minutes before trying again.")


class RemoteFailure(FastFoodError):
    """Raised when the remote service call failed. ``message`` is already sanitized."""


class ActionInProgress(FastFoodError):
    """Raised when the same action is triggered again before the previous one finished."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__("Please wait for the current request to finish.")


class NotAuthenticated(FastFoodError):
    """Raised when an action needs a signed-in user."""

    def __init__(self) -> None:
        super().__init__("Please sign in to continue.")
