"""Domain validators shared by every public operation"""

from myinvois.validators.uuid_validator import (
    validate_uuid,
    is_valid_uuid,
    format_uuid,
)
from myinvois.validators.tin_validator import (
    TIN_PATTERN,
    TIN_FORMAT_MESSAGE,
    VALID_ID_TYPES,
    validate_tin,
    validate_id_type,
    validate_id_value,
)
from myinvois.validators.date_validator import (
    parse_datetime,
    format_api_datetime,
    validate_date_range,
)
from myinvois.validators.pagination import (
    MAX_PAGE_SIZE,
    validate_pagination,
    pagination_params,
    validate_submission_uid,
)
from myinvois.validators.filters import (
    plain_value,
    validate_choice,
    build_query,
)

__all__ = [
    "validate_uuid",
    "is_valid_uuid",
    "format_uuid",
    "TIN_PATTERN",
    "TIN_FORMAT_MESSAGE",
    "VALID_ID_TYPES",
    "validate_tin",
    "validate_id_type",
    "validate_id_value",
    "parse_datetime",
    "format_api_datetime",
    "validate_date_range",
    "MAX_PAGE_SIZE",
    "validate_pagination",
    "pagination_params",
    "validate_submission_uid",
    "plain_value",
    "validate_choice",
    "build_query",
]
