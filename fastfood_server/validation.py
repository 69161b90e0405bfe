"""Input validation for sign-in, sign-up and menu search."""

import re
from typing import Callable

from .models import SearchValidationResult, ValidationResult

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
EMAIL_MESSAGE = "Please enter a valid email address"

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = "@$!%*?&"
PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
PASSWORD_MESSAGE = (
    "Password must be at least 8 characters with uppercase, lowercase, number, and special character"
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
NAME_PATTERN = re.compile(r"[a-zA-Z\s'-]+")
NAME_MESSAGE = "Name must be 2-50 characters and contain only letters, spaces, hyphens, and apostrophes"

SEARCH_MAX_LENGTH = 100
SEARCH_STRIP_PATTERN = re.compile(r"[<>'\";]")
SEARCH_MESSAGE = "Search contains invalid characters"


def validate_email(email: str) -> ValidationResult:
    if not email:
        return ValidationResult(is_valid=False, message="Email is required")

    if not EMAIL_PATTERN.fullmatch(email):
        return ValidationResult(is_valid=False, message=EMAIL_MESSAGE)

    return ValidationResult(is_valid=True)


def validate_password(password: str) -> ValidationResult:
    if not password:
        return ValidationResult(is_valid=False, message="Password is required")

    if len(password) < PASSWORD_MIN_LENGTH:
        return ValidationResult(
            is_valid=False,
            message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
        )

    if not PASSWORD_PATTERN.match(password):
        return ValidationResult(is_valid=False, message=PASSWORD_MESSAGE)

    return ValidationResult(is_valid=True)


def validate_name(name: str) -> ValidationResult:
    if not name:
        return ValidationResult(is_valid=False, message="Name is required")

    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        return ValidationResult(
            is_valid=False,
            message=f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters",
        )

    if not NAME_PATTERN.fullmatch(name):
        return ValidationResult(is_valid=False, message=NAME_MESSAGE)

    return ValidationResult(is_valid=True)


def sanitize_search_query(query: str) -> str:
    """Strip markup and statement characters, trim, and cap the length."""
    if not query:
        return ""
    return SEARCH_STRIP_PATTERN.sub("", query).strip()[:SEARCH_MAX_LENGTH]


def validate_search_input(text: str) -> SearchValidationResult:
    """
    Clean a search query.

    Searching is never blocked: callers must use ``sanitized`` whatever the
    verdict. ``is_valid`` is False when cleaning removed or cut anything
    beyond surrounding whitespace.
    """
    if not text:
        return SearchValidationResult(is_valid=True, sanitized="")

    sanitized = sanitize_search_query(text)

    if sanitized != text.strip():
        return SearchValidationResult(is_valid=False, sanitized=sanitized, message=SEARCH_MESSAGE)

    return SearchValidationResult(is_valid=True, sanitized=sanitized)


FIELD_VALIDATORS: dict[str, Callable[[str], ValidationResult]] = {
    "email": validate_email,
    "password": validate_password,
    "name": validate_name,
    "search": validate_search_input,
}


def validate_field(kind: str, value: str) -> ValidationResult:
    """
    Validate ``value`` as a field of the given kind.

    Raises:
        ValueError: If ``kind`` is not one of email, password, name, search
    """
    try:
        validator = FIELD_VALIDATORS[kind]
    except KeyError:
        raise ValueError(f"Unknown field kind: {kind}") from None
    return validator(value or "")
