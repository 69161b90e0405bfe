"""Error sanitizing, error reporting and client-side rate limiting."""

import logging
import re
import threading
import time
from typing import Callable, Optional

import sentry_sdk

from .models import AppSettings

logger = logging.getLogger(__name__)


class ErrorMessages:
    """User-safe messages. Nothing else is ever shown for a remote failure."""

    AUTHENTICATION_FAILED = "Invalid email or password. Please try again."
    ACCOUNT_EXISTS = "An account with this email already exists."
    INVALID_EMAIL = "Please enter a valid email address."
    PASSWORD_REQUIREMENTS = "Password does not meet requirements."
    NETWORK_ERROR = "Network error. Please check your connection and try again."
    NOT_FOUND = "The requested item could not be found."
    UNAUTHORIZED = "You are not authorized to perform this action."
    SESSION_EXPIRED = "Your session has expired. Please sign in again."
    GENERAL_ERROR = "Something went wrong. Please try again later."


# First match wins
ERROR_MAPPINGS: list[tuple[str, str]] = [
    ("invalid credentials", ErrorMessages.AUTHENTICATION_FAILED),
    ("user already exists", ErrorMessages.ACCOUNT_EXISTS),
    ("invalid email", ErrorMessages.INVALID_EMAIL),
    ("password must be", ErrorMessages.PASSWORD_REQUIREMENTS),
    ("network request failed", ErrorMessages.NETWORK_ERROR),
    ("document not found", ErrorMessages.NOT_FOUND),
    ("unauthorized", ErrorMessages.UNAUTHORIZED),
    ("session expired", ErrorMessages.SESSION_EXPIRED),
]

EMAIL_MASK = "***"
_EMAIL_LOCAL_TAIL = re.compile(r"(?<=.{2}).*(?=@)")


def sanitize_error(error: object, debug: bool = False) -> str:
    """
    Map any failure to one of the fixed user-safe messages.

    Args:
        error: Exception, string or anything else describing the failure
        debug: Development mode; unmapped failures are logged raw

    Returns:
        A message from ErrorMessages
    """
    if not error:
        return ErrorMessages.GENERAL_ERROR

    error_string = str(error).lower()
    for pattern, message in ERROR_MAPPINGS:
        if pattern in error_string:
            return message

    if debug:
        logger.warning(f"Unmapped error: {error}")

    return ErrorMessages.GENERAL_ERROR


def mask_email(email: Optional[str]) -> Optional[str]:
    """Keep the first 2 characters of the local part and mask the rest."""
    if not email:
        return email
    return _EMAIL_LOCAL_TAIL.sub(EMAIL_MASK, email, count=1)


def init_monitoring(settings: AppSettings) -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    if not settings.sentry_dsn:
        logger.debug("SENTRY_DSN not set, error monitoring disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment,
        send_default_pii=False,
    )
    logger.info(f"Error monitoring enabled (environment: {settings.sentry_environment})")
    return True


def report_error(
    error: object, action: str, email: Optional[str] = None, debug: bool = False
) -> None:
    """
    Send a failure to error monitoring with personal data masked.

    Raw error details leave the process only in debug mode; otherwise
    monitoring receives the sanitized message.
    """
    tags = {"action": action}
    extras = {"email": mask_email(email)} if email else {}

    if not debug:
        sentry_sdk.capture_message(sanitize_error(error), tags=tags, extras=extras)
        return

    logger.warning(f"{action} error: {error!r}")
    if isinstance(error, BaseException):
        sentry_sdk.capture_exception(error, tags=tags, extras=extras)
    else:
        sentry_sdk.capture_message(str(error), tags=tags, extras=extras)


class ClientRateLimit:
    """Sliding-window attempt counter keyed by e.g. email."""

    def __init__(
        self,
        max_attempts: int = 5,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            max_attempts: Attempts allowed inside the window
            window_seconds: Length of the trailing window
            clock: Time source in seconds
        """
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, key: str, now: float) -> list[float]:
        return [t for t in self._attempts.get(key, []) if now - t < self.window_seconds]

    def is_allowed(self, key: str) -> bool:
        """Record an attempt for ``key`` and return whether it is within the limit."""
        with self._lock:
            now = self._clock()
            recent = self._recent(key, now)

            if len(recent) >= self.max_attempts:
                self._attempts[key] = recent
                return False

            recent.append(now)
            self._attempts[key] = recent
            return True

    def get_remaining_time(self, key: str) -> float:
        """Seconds until the oldest counted attempt leaves the window, 0 if under the limit."""
        with self._lock:
            now = self._clock()
            recent = self._recent(key, now)
            if len(recent) < self.max_attempts:
                return 0.0

            time_left = self.window_seconds - (now - min(recent))
            return max(0.0, time_left)


# Shared by sign-in and sign-up: 5 attempts per 15 minutes
auth_rate_limit = ClientRateLimit(5, 15 * 60)
