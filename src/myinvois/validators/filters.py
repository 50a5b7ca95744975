"""Helpers for validating and serializing list-endpoint filters"""

from enum import Enum
from typing import Any, Collection, Dict, Iterable, Mapping

from myinvois.exceptions import ValidationError
from myinvois.validators.date_validator import format_api_datetime


def plain_value(value: Any) -> Any:
    """Unwrap enum members to their wire value"""
    return value.value if isinstance(value, Enum) else value


def validate_choice(
    filters: Mapping[str, Any],
    key: str,
    allowed: Collection[Any],
    message: str,
    convert=None,
) -> None:
    """
    Check that an optional filter takes one of the allowed values

    Args:
        filters: Filter mapping
        key: Filter name, also used as the error key
        allowed: Accepted values
        message: Error message
        convert: Optional conversion applied before the membership test
    """
    if filters.get(key) is None:
        return

    value = plain_value(filters[key])
    if convert is not None:
        try:
            value = convert(value)
        except (TypeError, ValueError):
            raise ValidationError(message, errors={key: [message]}) from None

    if value not in allowed:
        raise ValidationError(message, errors={key: [message]})


def build_query(
    filters: Mapping[str, Any],
    date_fields: Iterable[str],
    direct_fields: Iterable[str],
) -> Dict[str, Any]:
    """Build query parameters, formatting dates as YYYY-MM-DDTHH:MM:SSZ"""
    query: Dict[str, Any] = {}
    for field_name in date_fields:
        if filters.get(field_name):
            query[field_name] = format_api_datetime(filters[field_name])
    for field_name in direct_fields:
        if filters.get(field_name) is not None:
            query[field_name] = plain_value(filters[field_name])
    return query
