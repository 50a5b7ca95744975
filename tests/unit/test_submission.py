"""
Submission Unit Tests
"""

import base64
import json

import pytest

from myinvois.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from myinvois.models import DocumentFormat, SubmissionItem, SubmissionResult, SubmissionStatus
from myinvois.services import SubmissionService
from myinvois.submission import (
    MAX_DOCUMENTS_PER_SUBMISSION,
    SubmissionValidator,
    minify_json,
    minify_xml,
)

from tests.unit.conftest import json_response


VALID_HASH = "a" * 64
INVOICE = json.dumps({"_D": "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2", "ID": "INV/001"}, indent=2)


def make_item(code: str = "INV-001", content: str = INVOICE) -> SubmissionItem:
    return SubmissionItem.from_content(content, code)


def raw_item(size: int, code: str) -> dict:
    return {"document": "a" * size, "documentHash": VALID_HASH, "codeNumber": code}


def status_payload(count: int = 1, overall: str = "Valid", status: str = "Valid") -> dict:
    return {
        "submissionUid": "HJSD135P2S7D8IU",
        "documentCount": count,
        "dateTimeReceived": "2024-01-15T10:00:00Z",
        "overallStatus": overall,
        "documentSummary": [
            {"uuid": f"F9D425P6DS7D8I{i % 10}", "status": status, "internalId": f"INV-{i}"}
            for i in range(count)
        ],
    }


class TestSubmissionValidator:
    """Tests for SubmissionValidator"""

    @pytest.fixture
    def validator(self) -> SubmissionValidator:
        return SubmissionValidator()

    def test_valid_batch(self, validator: SubmissionValidator):
        """Should return items in caller order"""
        items = validator.validate_batch([make_item("INV-001"), make_item("INV-002")])
        assert [i.code_number for i in items] == ["INV-001", "INV-002"]

    def test_accepts_wire_mappings(self, validator: SubmissionValidator):
        """Should accept mappings with wire keys"""
        items = validator.validate_batch([raw_item(10, "INV-001")])
        assert items[0] == SubmissionItem("a" * 10, VALID_HASH, "INV-001")

    def test_empty_batch(self, validator: SubmissionValidator):
        """Should reject an empty batch"""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([])
        assert "documents" in exc_info.value.errors

    def test_document_count_boundary(self, validator: SubmissionValidator):
        """Should accept 100 documents and reject 101"""
        batch = [raw_item(10, f"INV-{i}") for i in range(MAX_DOCUMENTS_PER_SUBMISSION)]
        assert len(validator.validate_batch(batch)) == 100

        batch.append(raw_item(10, "INV-100"))
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch(batch)
        assert "documents" in exc_info.value.errors

    def test_total_size_boundary(self, validator: SubmissionValidator):
        """Should accept exactly 5 MiB and reject one byte more"""
        batch = [raw_item(262144, f"INV-{i}") for i in range(20)]
        assert len(validator.validate_batch(batch)) == 20

        batch[0] = raw_item(262145, "INV-0")
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch(batch)
        assert exc_info.value.errors == {"size": ["Total submission size must not exceed 5MB"]}

    def test_document_size_boundary(self, validator: SubmissionValidator):
        """Should accept 300 KiB and reject one byte more"""
        validator.validate_batch([raw_item(300 * 1024, "INV-001")])

        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([raw_item(300 * 1024 + 1, "INV-001")])
        assert exc_info.value.errors == {"size": ["Individual document size must not exceed 300KB"]}

    @pytest.mark.parametrize("field_name", ["document", "documentHash", "codeNumber"])
    def test_missing_field(self, validator: SubmissionValidator, field_name: str):
        """Should report the missing field"""
        item = raw_item(10, "INV-001")
        del item[field_name]
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([item])
        assert field_name in exc_info.value.errors

    def test_invalid_code_number(self, validator: SubmissionValidator):
        """Should reject code numbers with other characters"""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([raw_item(10, "INV/001")])
        assert "codeNumber" in exc_info.value.errors

    def test_invalid_hash(self, validator: SubmissionValidator):
        """Should reject a hash that is not 64 hex characters"""
        item = raw_item(10, "INV-001")
        item["documentHash"] = "xyz"
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([item])
        assert "documentHash" in exc_info.value.errors

    def test_hash_with_trailing_newline(self, validator: SubmissionValidator):
        """Should reject a hash followed by a newline"""
        item = raw_item(10, "INV-001")
        item["documentHash"] = VALID_HASH + "\n"
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([item])
        assert "documentHash" in exc_info.value.errors

    def test_code_number_with_trailing_newline(self, validator: SubmissionValidator):
        """Should reject a code number followed by a newline before duplicate checks"""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([raw_item(10, "INV-001"), raw_item(10, "INV-001\n")])
        assert "codeNumber" in exc_info.value.errors

    def test_empty_content(self, validator: SubmissionValidator):
        """Should reject empty content"""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([raw_item(0, "INV-001")])
        assert exc_info.value.errors == {"document": ["Document content cannot be empty"]}

    def test_duplicate_code_numbers(self, validator: SubmissionValidator):
        """Should reject duplicate code numbers"""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_batch([make_item("INV-001"), make_item("INV-001")])
        assert "codeNumbers" in exc_info.value.errors
        assert "INV-001" in exc_info.value.message

    def test_same_input_same_error(self, validator: SubmissionValidator):
        """Should fail identically on repeated validation"""
        batch = [raw_item(10, "bad code")]
        errors = []
        for _ in range(2):
            with pytest.raises(ValidationError) as exc_info:
                validator.validate_batch(batch)
            errors.append((exc_info.value.message, exc_info.value.errors))
        assert errors[0] == errors[1]

    def test_prepare_json_item(self, validator: SubmissionValidator):
        """Should minify, base64-encode and keep the caller's hash"""
        item = make_item()
        prepared = validator.prepare_item(item, DocumentFormat.JSON)

        assert prepared["format"] == "JSON"
        assert prepared["codeNumber"] == "INV-001"
        assert prepared["documentHash"] == item.document_hash
        decoded = base64.b64decode(prepared["document"]).decode("utf-8")
        assert decoded == '{"_D":"urn:oasis:names:specification:ubl:schema:xsd:Invoice-2","ID":"INV/001"}'

    def test_prepare_invalid_json(self, validator: SubmissionValidator):
        """Should reject malformed JSON content"""
        item = SubmissionItem("{not json", VALID_HASH, "INV-001")
        with pytest.raises(ValidationError) as exc_info:
            validator.prepare_item(item, DocumentFormat.JSON)
        assert "document" in exc_info.value.errors


class TestMinify:
    """Tests for content minification"""

    def test_minify_json_keeps_slashes_and_unicode(self):
        """Should not escape slashes or non-ASCII characters"""
        content = '{"url": "https://a/b", "name": "Syarikat Émas"}'.encode("utf-8")
        assert minify_json(content) == '{"url":"https://a/b","name":"Syarikat Émas"}'.encode("utf-8")

    def test_minify_xml(self):
        """Should drop insignificant whitespace"""
        result = minify_xml(b"<Invoice>\n  <ID>INV-001</ID>\n</Invoice>\n")
        assert result.startswith(b"<?xml")
        assert result.endswith(b"<Invoice><ID>INV-001</ID></Invoice>")

    def test_minify_xml_ignores_entities(self):
        """Should not expand external entities"""
        content = (
            b'<?xml version="1.0"?><!DOCTYPE r [<!ENTITY e SYSTEM "file:///etc/passwd">]>'
            b"<r>&e;</r>"
        )
        assert b"root:" not in minify_xml(content)

    def test_minify_invalid_xml(self):
        """Should raise ValidationError for malformed XML"""
        with pytest.raises(ValidationError):
            minify_xml(b"<Invoice>")


class TestSubmissionService:
    """Tests for SubmissionService"""

    @pytest.fixture
    def service(self, api_client, clock) -> SubmissionService:
        return SubmissionService(api_client, clock=clock, sleep=clock.sleep)

    def test_submit_documents(self, service: SubmissionService, transport):
        """Should post prepared documents and parse the result"""
        transport.queue(json_response({
            "submissionUID": "HJSD135P2S7D8IU",
            "acceptedDocuments": [{"uuid": "F9D425P6DS7D8IU", "invoiceCodeNumber": "INV-001"}],
            "rejectedDocuments": [],
        }, status=202))

        result = service.submit_documents([make_item("INV-001")])

        assert isinstance(result, SubmissionResult)
        assert result.submission_uid == "HJSD135P2S7D8IU"
        assert result.accepted_count == 1
        assert result.find_accepted("INV-001").uuid == "F9D425P6DS7D8IU"

        call = transport.api_calls[0]
        assert call["method"] == "POST"
        assert call["url"].endswith("/api/v1.0/documentsubmissions")
        assert call["timeout"] == 30.0
        assert [d["codeNumber"] for d in call["json"]["documents"]] == ["INV-001"]

    def test_partial_rejection_is_not_an_error(self, service: SubmissionService, transport, caplog):
        """Should return rejected documents and log them"""
        transport.queue(json_response({
            "submissionUID": "HJSD135P2S7D8IU",
            "acceptedDocuments": [{"uuid": "F9D425P6DS7D8IU", "invoiceCodeNumber": "INV-001"}],
            "rejectedDocuments": [{
                "invoiceCodeNumber": "INV-002",
                "error": {"code": "BadArgument", "message": "Invalid", "details": [{"message": "Bad TIN"}]},
            }],
        }))

        with caplog.at_level("WARNING"):
            result = service.submit_documents([make_item("INV-001"), make_item("INV-002")])

        assert result.has_rejections
        assert result.rejected_documents[0].error_message == "Invalid; Bad TIN"
        assert "INV-002" in caplog.text

    def test_duplicate_code_numbers_never_reach_network(self, service: SubmissionService, transport):
        """Should fail validation before any request"""
        with pytest.raises(ValidationError):
            service.submit_documents([make_item("INV-001"), make_item("INV-001")])
        assert transport.calls == []

    def test_rate_limit_retried_then_exhausted(self, service: SubmissionService, transport, clock):
        """Should retry 429 three times in total, then fail"""
        transport.queue(*[json_response({}, status=429) for _ in range(3)])

        with pytest.raises(ApiError) as exc_info:
            service.submit_documents([make_item()])

        assert "Maximum retry attempts reached" in exc_info.value.message
        assert len(transport.api_calls) == 3
        assert len(clock.sleeps) == 2
        assert clock.sleeps[0] <= clock.sleeps[1]

    def test_network_failure_recovered(self, service: SubmissionService, transport):
        """Should retry a network failure"""
        transport.queue(
            NetworkError.connection_refused(),
            json_response({"submissionUID": "ABC123", "acceptedDocuments": [], "rejectedDocuments": []}),
        )
        assert service.submit_documents([make_item()]).submission_uid == "ABC123"

    def test_duplicate_submission_mapped(self, service: SubmissionService, transport):
        """Should map a duplicate submission response to ValidationError"""
        transport.queue(json_response(
            {"error": {"code": "DuplicateSubmission"}, "message": "DuplicateSubmission"}, status=422
        ))
        with pytest.raises(ValidationError) as exc_info:
            service.submit_documents([make_item()])
        assert "duplicate" in exc_info.value.errors
        assert len(transport.api_calls) == 1

    def test_invalid_result_format(self, service: SubmissionService, transport):
        """Should raise ApiError when the submission UID is missing"""
        transport.queue(json_response({"acceptedDocuments": []}))
        with pytest.raises(ApiError):
            service.submit_documents([make_item()])

    def test_get_submission_status(self, service: SubmissionService, transport):
        """Should parse the submission status"""
        transport.queue(json_response(status_payload(2)))

        status = service.get_submission_status("HJSD135P2S7D8IU", page_no=1, page_size=10)

        assert isinstance(status, SubmissionStatus)
        assert status.document_count == 2
        assert status.is_complete
        assert transport.api_calls[0]["params"] == {"pageNo": 1, "pageSize": 10}

    def test_invalid_submission_uid(self, service: SubmissionService, transport):
        """Should validate the submission UID locally"""
        with pytest.raises(ValidationError):
            service.get_submission_status("bad-uid")
        with pytest.raises(ValidationError):
            service.get_submission_status("HJSD135P2S7D8IU\n")
        assert transport.calls == []

    def test_polling_interval_enforced(self, service: SubmissionService, transport, clock):
        """Should refuse to poll the same submission within 3 seconds"""
        transport.queue(json_response(status_payload()), json_response(status_payload()))

        service.get_submission_status("HJSD135P2S7D8IU")
        clock.advance(1)
        with pytest.raises(RateLimitError) as exc_info:
            service.get_submission_status("HJSD135P2S7D8IU")
        assert exc_info.value.retry_after == pytest.approx(2.0)
        assert len(transport.api_calls) == 1

        clock.advance(2)
        service.get_submission_status("HJSD135P2S7D8IU")
        assert len(transport.api_calls) == 2

    def test_missing_status_field(self, service: SubmissionService, transport):
        """Should raise ApiError when a required field is missing"""
        payload = status_payload()
        del payload["overallStatus"]
        transport.queue(json_response(payload))
        with pytest.raises(ApiError):
            service.get_submission_status("HJSD135P2S7D8IU")

    def test_get_all_submission_documents(self, service: SubmissionService, transport, clock):
        """Should page until a short page, waiting between pages"""
        transport.queue(json_response(status_payload(100)), json_response(status_payload(5)))

        documents = service.get_all_submission_documents("HJSD135P2S7D8IU")

        assert len(documents) == 105
        assert [c["params"]["pageNo"] for c in transport.api_calls] == [1, 2]
        assert clock.sleeps == [3.0]

    def test_is_submission_complete(self):
        """Should treat valid, partially valid and invalid as complete"""
        assert SubmissionService.is_submission_complete({"overallStatus": "Partially Valid"})
        assert not SubmissionService.is_submission_complete({"overallStatus": "in progress"})
