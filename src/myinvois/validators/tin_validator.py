"""Taxpayer identification validation"""

import re
from typing import Dict

from myinvois.exceptions import ValidationError

TIN_LENGTH = 11
TIN_PATTERN = re.compile(r"C[0-9]{10}")
TIN_FORMAT_MESSAGE = "TIN must start with C followed by 10 digits"

VALID_ID_TYPES = ("NRIC", "PASSPORT", "BRN", "ARMY")

ID_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "NRIC": re.compile(r"[0-9]{12}"),
    "PASSPORT": re.compile(r"[A-Z][0-9]{8}"),
    "BRN": re.compile(r"[0-9]{12}"),
    "ARMY": re.compile(r"[0-9]{12}"),
}

ID_FORMAT_MESSAGES = {
    "NRIC": "NRIC must be 12 digits",
    "PASSPORT": "Passport number must be an uppercase letter followed by 8 digits",
    "BRN": "Business registration number must be 12 digits",
    "ARMY": "Army number must be 12 digits",
}


def validate_tin(tin: str) -> None:
    """
    Validate a Tax Identification Number

    Raises:
        ValidationError: If the TIN is empty or not C followed by 10 digits
    """
    if not tin:
        raise ValidationError("TIN cannot be empty", errors={"tin": ["TIN is required"]})
    if len(tin) != TIN_LENGTH or not TIN_PATTERN.fullmatch(tin):
        raise ValidationError(
            f"Invalid TIN format: {TIN_FORMAT_MESSAGE}",
            errors={"tin": [TIN_FORMAT_MESSAGE]},
        )


def normalize_id_type(id_type: str) -> str:
    return (id_type or "").strip().upper()


def validate_id_type(id_type: str) -> str:
    """
    Validate a secondary identification type

    Returns:
        The normalized (uppercased) ID type
    """
    normalized = normalize_id_type(id_type)
    if not normalized:
        raise ValidationError("ID type cannot be empty", errors={"idType": ["ID type is required"]})
    if normalized not in VALID_ID_TYPES:
        raise ValidationError(
            "Invalid ID type",
            errors={"idType": [f"ID type must be one of: {', '.join(VALID_ID_TYPES)}"]},
        )
    return normalized


def validate_id_value(id_type: str, id_value: str) -> None:
    """Validate a secondary identification value against its type"""
    if not id_value:
        raise ValidationError("ID value cannot be empty", errors={"idValue": ["ID value is required"]})

    normalized = normalize_id_type(id_type)
    pattern = ID_PATTERNS.get(normalized)
    if pattern is None or not pattern.fullmatch(id_value):
        raise ValidationError(
            f"Invalid {normalized} format",
            errors={"idValue": [ID_FORMAT_MESSAGES.get(normalized, "Invalid format")]},
        )
