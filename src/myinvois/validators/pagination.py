"""Pagination and identifier validation shared by list endpoints"""

import re
from typing import Any, Dict, Optional

from myinvois.exceptions import ValidationError

MAX_PAGE_SIZE = 100
SUBMISSION_UID_PATTERN = re.compile(r"[A-Z0-9]+")


def validate_pagination(
    page_no: Optional[int] = None,
    page_size: Optional[int] = None,
    max_page_size: int = MAX_PAGE_SIZE,
) -> None:
    """
    Validate optional page number and page size

    Raises:
        ValidationError: If page_no < 1 or page_size outside 1..max_page_size
    """
    if page_no is not None:
        if isinstance(page_no, bool) or not isinstance(page_no, int) or page_no < 1:
            raise ValidationError(
                "Page number must be greater than 0",
                errors={"pageNo": ["Page number must be greater than 0"]},
            )

    if page_size is not None:
        if (
            isinstance(page_size, bool)
            or not isinstance(page_size, int)
            or not 1 <= page_size <= max_page_size
        ):
            message = f"Page size must be between 1 and {max_page_size}"
            raise ValidationError(message, errors={"pageSize": [message]})


def pagination_params(
    page_no: Optional[int] = None, page_size: Optional[int] = None
) -> Dict[str, Any]:
    """Build query parameters for the given pagination values"""
    params: Dict[str, Any] = {}
    if page_no is not None:
        params["pageNo"] = page_no
    if page_size is not None:
        params["pageSize"] = page_size
    return params


def validate_submission_uid(submission_uid: str) -> None:
    """Validate a submission UID (uppercase letters and digits)"""
    if not submission_uid:
        raise ValidationError(
            "Submission ID cannot be empty",
            errors={"submissionUid": ["Submission ID is required"]},
        )
    if not SUBMISSION_UID_PATTERN.fullmatch(submission_uid):
        raise ValidationError(
            "Invalid submission ID format",
            errors={"submissionUid": ["Submission ID may only contain uppercase letters and digits"]},
        )
