"""
Domain Validator Unit Tests
"""

from datetime import datetime, timezone

import pytest

from myinvois.exceptions import ValidationError
from myinvois.models import DocumentStatus
from myinvois.validators import (
    build_query,
    format_api_datetime,
    format_uuid,
    is_valid_uuid,
    pagination_params,
    parse_datetime,
    validate_choice,
    validate_date_range,
    validate_id_type,
    validate_id_value,
    validate_pagination,
    validate_submission_uid,
    validate_tin,
    validate_uuid,
)


class TestUuidValidator:
    """Tests for document UUID validation"""

    def test_valid_uuid(self):
        """Should accept a well-formed UUID"""
        validate_uuid("F9D425P6DS7D8IU")
        assert is_valid_uuid("F9D425P6DS7D8IU")

    @pytest.mark.parametrize("value", [
        "",
        "F9D425P6DS7D8I",
        "F9D425P6DS7D8IUX",
        "f9d425p6ds7d8iu",
        "9FD425P6DS7D8IU",
        "ABCDEFGHIJKLMNO",
    ])
    def test_invalid_uuid(self, value):
        """Should reject malformed UUIDs"""
        with pytest.raises(ValidationError) as exc_info:
            validate_uuid(value)
        assert "uuid" in exc_info.value.errors
        assert not is_valid_uuid(value)

    def test_uuid_with_trailing_newline(self):
        """Should reject a UUID followed by a newline"""
        assert not is_valid_uuid("F9D425P6DS7D8IU\n")

    def test_format_uuid(self):
        """Should trim and uppercase before validating"""
        assert format_uuid("  f9d425p6ds7d8iu ") == "F9D425P6DS7D8IU"


class TestTinValidator:
    """Tests for TIN and identifier validation"""

    def test_valid_tin(self):
        """Should accept C followed by 10 digits"""
        validate_tin("C1234567890")

    @pytest.mark.parametrize("value", [
        "",
        "C123",
        "D1234567890",
        "C12345678901",
        "c1234567890",
        "C1234567890\n",
        "C\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669\u0660",
    ])
    def test_invalid_tin(self, value):
        """Should reject malformed TINs"""
        with pytest.raises(ValidationError) as exc_info:
            validate_tin(value)
        assert "tin" in exc_info.value.errors

    def test_id_type_normalized(self):
        """Should uppercase the ID type"""
        assert validate_id_type("nric") == "NRIC"

    def test_invalid_id_type(self):
        """Should reject unknown ID types"""
        with pytest.raises(ValidationError) as exc_info:
            validate_id_type("SSN")
        assert "idType" in exc_info.value.errors

    @pytest.mark.parametrize("id_type,value", [
        ("NRIC", "900101145678"),
        ("BRN", "202001234567"),
        ("ARMY", "123456789012"),
        ("PASSPORT", "A12345678"),
    ])
    def test_valid_id_values(self, id_type, value):
        """Should accept values matching their type"""
        validate_id_value(id_type, value)

    @pytest.mark.parametrize("id_type,value", [
        ("NRIC", "12345"),
        ("PASSPORT", "a12345678"),
        ("BRN", ""),
        ("NRIC", "900101145678\n"),
        ("BRN", "\u0662" * 12),
        ("PASSPORT", "A12345678\n"),
    ])
    def test_invalid_id_values(self, id_type, value):
        """Should reject values not matching their type"""
        with pytest.raises(ValidationError) as exc_info:
            validate_id_value(id_type, value)
        assert "idValue" in exc_info.value.errors


class TestDateValidator:
    """Tests for date parsing and ranges"""

    def test_parse_z_suffix(self):
        """Should parse a Z-suffixed timestamp as UTC"""
        parsed = parse_datetime("2024-01-15T10:00:00Z")
        assert parsed == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        """Should treat naive datetimes as UTC"""
        assert parse_datetime(datetime(2024, 1, 15)).tzinfo == timezone.utc

    def test_invalid_date(self):
        """Should reject unparseable dates"""
        with pytest.raises(ValidationError):
            parse_datetime("yesterday")

    def test_format_api_datetime(self):
        """Should format dates in UTC without fractions"""
        assert format_api_datetime("2024-01-15T18:30:00.123+08:00") == "2024-01-15T10:30:00Z"

    def test_range_missing_end(self):
        """Should skip validation when either end is missing"""
        assert validate_date_range("2024-01-01T00:00:00Z", None, "issueDate", 30) == (None, None)

    def test_range_reversed(self):
        """Should reject a start after the end"""
        with pytest.raises(ValidationError) as exc_info:
            validate_date_range("2024-02-01T00:00:00Z", "2024-01-01T00:00:00Z", "issueDate")
        assert exc_info.value.errors == {"issueDate_range": ["Start date must be before end date"]}

    def test_range_too_wide(self):
        """Should reject a span over the limit"""
        validate_date_range("2024-01-01T00:00:00Z", "2024-01-31T00:00:00Z", "issueDate", 30)
        with pytest.raises(ValidationError):
            validate_date_range("2024-01-01T00:00:00Z", "2024-01-31T00:00:01Z", "issueDate", 30)


class TestPagination:
    """Tests for pagination validation"""

    @pytest.mark.parametrize("page_no,page_size", [(None, None), (1, 1), (5, 100)])
    def test_valid(self, page_no, page_size):
        """Should accept values in range"""
        validate_pagination(page_no, page_size)

    @pytest.mark.parametrize("page_no,page_size,key", [
        (0, None, "pageNo"),
        (None, 0, "pageSize"),
        (None, 101, "pageSize"),
        (True, None, "pageNo"),
    ])
    def test_invalid(self, page_no, page_size, key):
        """Should reject values out of range"""
        with pytest.raises(ValidationError) as exc_info:
            validate_pagination(page_no, page_size)
        assert key in exc_info.value.errors

    def test_pagination_params(self):
        """Should only include provided values"""
        assert pagination_params(2, None) == {"pageNo": 2}

    def test_submission_uid(self):
        """Should accept uppercase alphanumerics only"""
        validate_submission_uid("HJSD135P2S7D8IU")
        with pytest.raises(ValidationError):
            validate_submission_uid("hjsd-135")
        with pytest.raises(ValidationError):
            validate_submission_uid("HJSD135P2S7D8IU\n")


class TestFilters:
    """Tests for filter helpers"""

    def test_validate_choice_accepts_enum(self):
        """Should unwrap enum members before checking"""
        validate_choice({"status": DocumentStatus.VALID}, "status", DocumentStatus.values(), "bad")

    def test_validate_choice_rejects(self):
        """Should key the error by filter name"""
        with pytest.raises(ValidationError) as exc_info:
            validate_choice({"documentType": "x"}, "documentType", [1, 2], "Invalid type", convert=int)
        assert exc_info.value.errors == {"documentType": ["Invalid type"]}

    def test_build_query(self):
        """Should format dates and drop missing values"""
        query = build_query(
            {"issueDateFrom": "2024-01-01", "status": DocumentStatus.VALID, "pageNo": None},
            ("issueDateFrom", "issueDateTo"),
            ("status", "pageNo"),
        )
        assert query == {"issueDateFrom": "2024-01-01T00:00:00Z", "status": "Valid"}
