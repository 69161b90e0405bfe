import pytest

from fastfood_server.validation import (
    validate_email,
    validate_field,
    validate_name,
    validate_password,
    validate_search_input,
)


@pytest.mark.parametrize("email", ["user@domain.tld", "first.last@mail.example.com", "a+b@c.io"])
def test_valid_emails(email):
    assert validate_email(email).is_valid


@pytest.mark.parametrize(
    "email",
    ["userdomain.tld", "user@domain", "us er@domain.com", "user@@domain.com", "@domain.com", "user@.com"],
)
def test_invalid_emails(email):
    result = validate_email(email)
    assert not result.is_valid
    assert result.message == "Please enter a valid email address"


def test_empty_email_is_required():
    result = validate_email("")
    assert not result.is_valid
    assert result.message == "Email is required"


def test_password_meeting_all_rules_is_valid():
    assert validate_password("Abcdef1!").is_valid


def test_short_password():
    result = validate_password("Ab1!")
    assert not result.is_valid
    assert result.message == "Password must be at least 8 characters"


@pytest.mark.parametrize(
    "password",
    [
        "abcdefg1!",  # no uppercase
        "ABCDEFG1!",  # no lowercase
        "Abcdefgh!",  # no digit
        "Abcdefgh1",  # no special character
        "#Abcdefg1!",  # starts outside the allowed set
    ],
)
def test_password_missing_a_character_class(password):
    result = validate_password(password)
    assert not result.is_valid
    assert "uppercase, lowercase, number, and special character" in result.message


def test_empty_password_is_required():
    assert validate_password("").message == "Password is required"


@pytest.mark.parametrize("name", ["Jo", "Mary-Jane O'Neil", "A" * 50])
def test_valid_names(name):
    assert validate_name(name).is_valid


def test_name_length_bounds():
    assert validate_name("J").message == "Name must be 2-50 characters"
    assert validate_name("A" * 51).message == "Name must be 2-50 characters"


def test_name_with_digits_rejected():
    result = validate_name("John3")
    assert not result.is_valid
    assert "only letters" in result.message


def test_empty_name_is_required():
    assert validate_name("").message == "Name is required"


def test_search_strips_markup_and_flags_it():
    result = validate_search_input("a<b>c")
    assert result.sanitized == "abc"
    assert not result.is_valid
    assert result.message == "Search contains invalid characters"


def test_search_plain_text_is_valid():
    result = validate_search_input("pizza")
    assert result.is_valid
    assert result.sanitized == "pizza"


def test_search_trims_whitespace_without_flagging():
    result = validate_search_input("  pizza  ")
    assert result.is_valid
    assert result.sanitized == "pizza"


def test_search_removes_quotes_and_semicolons():
    result = validate_search_input("burger'; DROP \"x\"")
    assert result.sanitized == "burger DROP x"
    assert not result.is_valid


def test_search_caps_length():
    result = validate_search_input("x" * 150)
    assert len(result.sanitized) == 100
    assert not result.is_valid


def test_empty_search_is_valid():
    result = validate_search_input("")
    assert result.is_valid
    assert result.sanitized == ""


def test_validate_field_dispatches_by_kind():
    assert not validate_field("email", "nope").is_valid
    assert validate_field("name", "Jo").is_valid
    assert validate_field("search", "a<b").sanitized == "ab"


def test_validate_field_unknown_kind():
    with pytest.raises(ValueError):
        validate_field("phone", "123")
