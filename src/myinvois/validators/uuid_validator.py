"""MyInvois document UUID validation"""

import re

from myinvois.exceptions import ValidationError

UUID_LENGTH = 15
UUID_PATTERN = re.compile(r"[A-Z0-9]{15}")


def _fail(message: str) -> None:
    raise ValidationError(message, errors={"uuid": [f"Invalid UUID format: {message}"]})


def validate_uuid(uuid: str) -> None:
    """
    Validate a MyInvois document UUID

    A UUID must be exactly 15 uppercase alphanumeric characters, start with
    a letter and contain at least one letter and one digit.

    Raises:
        ValidationError: If the UUID format is invalid
    """
    if not uuid:
        _fail("UUID cannot be empty")
    if len(uuid) != UUID_LENGTH:
        _fail(f"UUID must be exactly {UUID_LENGTH} characters")
    if not UUID_PATTERN.fullmatch(uuid):
        _fail("UUID must contain only uppercase letters (A-Z) and numbers")
    if not uuid[0].isalpha():
        _fail("UUID must start with an uppercase letter")
    if not any(ch.isdigit() for ch in uuid):
        _fail("UUID must contain at least one number")


def is_valid_uuid(uuid: str) -> bool:
    """Check whether a string is a valid MyInvois UUID"""
    try:
        validate_uuid(uuid)
    except ValidationError:
        return False
    return True


def format_uuid(uuid: str) -> str:
    """Trim and uppercase a UUID, then validate it"""
    formatted = uuid.strip().upper()
    validate_uuid(formatted)
    return formatted
