"""Date and date-range validation for query filters"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union

from myinvois.exceptions import ValidationError

DateInput = Union[str, datetime]

API_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_datetime(value: DateInput, field_name: str = "date") -> datetime:
    """
    Parse an ISO 8601 string or datetime into an aware UTC datetime

    Naive values are assumed to be UTC.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError(
                f"Invalid {field_name} format",
                errors={f"{field_name}_format": ["Dates must be in valid ISO 8601 format"]},
                cause=e,
            ) from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_api_datetime(value: DateInput) -> str:
    """Format a date as the API expects it: YYYY-MM-DDTHH:MM:SSZ in UTC"""
    return parse_datetime(value).strftime(API_DATETIME_FORMAT)


def validate_date_range(
    start: Optional[DateInput],
    end: Optional[DateInput],
    field_name: str,
    max_days: Optional[int] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Validate a date range when both ends are provided

    Args:
        start: Start of the range
        end: End of the range
        field_name: Name used in error messages, e.g. "submission date"
        max_days: Maximum allowed span in days

    Returns:
        The parsed (start, end) pair, or (None, None) if either is missing

    Raises:
        ValidationError: If the range is malformed, reversed or too wide
    """
    if not start or not end:
        return None, None

    range_key = f"{field_name}_range"
    start_dt = parse_datetime(start, field_name)
    end_dt = parse_datetime(end, field_name)

    if start_dt > end_dt:
        raise ValidationError(
            f"Invalid {field_name} range",
            errors={range_key: ["Start date must be before end date"]},
        )

    if max_days is not None and end_dt > start_dt + timedelta(days=max_days):
        raise ValidationError(
            f"Invalid {field_name} range",
            errors={range_key: [f"Date range cannot exceed {max_days} days"]},
        )

    return start_dt, end_dt
