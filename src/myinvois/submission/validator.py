"""
Submission batch validation and wire preparation

Batches are checked in a fixed order so the same invalid input always
yields the same error, and every check runs before any network call.
"""

import base64
import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Union

from lxml import etree

from myinvois.exceptions import ValidationError
from myinvois.models.enums import DocumentFormat
from myinvois.models.submission import SubmissionItem


MAX_SUBMISSION_SIZE = 5 * 1024 * 1024
MAX_DOCUMENT_SIZE = 300 * 1024
MAX_DOCUMENTS_PER_SUBMISSION = 100

CODE_NUMBER_PATTERN = re.compile(r"[A-Za-z0-9-]+")
DOCUMENT_HASH_PATTERN = re.compile(r"[A-Fa-f0-9]{64}")

REQUIRED_FIELDS = ("document", "documentHash", "codeNumber")

ItemInput = Union[SubmissionItem, Mapping[str, Any]]


def _content_size(content: Any) -> int:
    if content is None:
        return 0
    if isinstance(content, bytes):
        return len(content)
    return len(str(content).encode("utf-8"))


def _as_wire_mapping(item: ItemInput) -> Mapping[str, Any]:
    if isinstance(item, SubmissionItem):
        return {
            "document": item.document,
            "documentHash": item.document_hash,
            "codeNumber": item.code_number,
        }
    return item


class SubmissionValidator:
    """
    Stateless validator for submission batches

    Example:
        >>> validator = SubmissionValidator()
        >>> items = validator.validate_batch([SubmissionItem.from_content(doc, "INV-001")])
        >>> validator.prepare_item(items[0], DocumentFormat.JSON)["codeNumber"]
        'INV-001'
    """

    def validate_batch(self, items: Iterable[ItemInput]) -> List[SubmissionItem]:
        """
        Validate a batch of documents

        Items may be SubmissionItem objects or mappings with the keys
        ``document``, ``documentHash`` and ``codeNumber``.

        Returns:
            The batch as SubmissionItem objects, in caller order

        Raises:
            ValidationError: On the first failed check
        """
        documents = [_as_wire_mapping(item) for item in items]

        if not documents:
            raise ValidationError(
                "At least one document is required",
                errors={"documents": ["At least one document is required"]},
            )

        if len(documents) > MAX_DOCUMENTS_PER_SUBMISSION:
            message = f"Maximum of {MAX_DOCUMENTS_PER_SUBMISSION} documents per submission allowed"
            raise ValidationError(message, errors={"documents": [message]})

        total_size = sum(_content_size(doc.get("document")) for doc in documents)
        if total_size > MAX_SUBMISSION_SIZE:
            raise ValidationError(
                "Maximum submission size exceeded",
                errors={"size": ["Total submission size must not exceed 5MB"]},
            )

        validated = [self._validate_document(doc, index) for index, doc in enumerate(documents)]
        self._validate_unique_code_numbers(validated)
        return validated

    def _validate_document(self, document: Mapping[str, Any], index: int) -> SubmissionItem:
        for field_name in REQUIRED_FIELDS:
            if document.get(field_name) is None:
                message = f"Document at index {index} is missing required field: {field_name}"
                raise ValidationError(message, errors={field_name: [message]})

        content = document["document"]
        code_number = str(document["codeNumber"])
        document_hash = str(document["documentHash"])

        if _content_size(content) > MAX_DOCUMENT_SIZE:
            raise ValidationError(
                f"Document {code_number} exceeds maximum size",
                errors={"size": ["Individual document size must not exceed 300KB"]},
            )

        if not CODE_NUMBER_PATTERN.fullmatch(code_number):
            raise ValidationError(
                f"Invalid code number format for document {code_number}",
                errors={"codeNumber": ["Code number can only contain letters, numbers, and hyphens"]},
            )

        if not DOCUMENT_HASH_PATTERN.fullmatch(document_hash):
            raise ValidationError(
                f"Invalid hash format for document {code_number}",
                errors={"documentHash": ["Document hash must be a valid SHA-256 hash"]},
            )

        if _content_size(content) == 0:
            raise ValidationError(
                f"Empty document content for document {code_number}",
                errors={"document": ["Document content cannot be empty"]},
            )

        if not isinstance(content, (str, bytes)):
            content = str(content)

        return SubmissionItem(
            document=content, document_hash=document_hash, code_number=code_number
        )

    def _validate_unique_code_numbers(self, items: List[SubmissionItem]) -> None:
        seen = set()
        duplicates = []
        for item in items:
            if item.code_number in seen:
                duplicates.append(item.code_number)
            seen.add(item.code_number)

        if duplicates:
            raise ValidationError(
                f"Duplicate code numbers found: {', '.join(sorted(set(duplicates)))}",
                errors={
                    "codeNumbers": [
                        "Each document must have a unique code number within the submission"
                    ]
                },
            )

    def prepare_item(
        self, item: SubmissionItem, document_format: DocumentFormat = DocumentFormat.JSON
    ) -> Dict[str, str]:
        """
        Minify and base64-encode a validated item for the submission body

        The caller-supplied hash is sent unchanged.

        Raises:
            ValidationError: If the content is not well-formed JSON or XML
        """
        document_format = DocumentFormat(document_format)
        if document_format == DocumentFormat.JSON:
            canonical = minify_json(item.content_bytes)
        else:
            canonical = minify_xml(item.content_bytes)

        return {
            "format": document_format.value,
            "document": base64.b64encode(canonical).decode("ascii"),
            "documentHash": item.document_hash,
            "codeNumber": item.code_number,
        }


def minify_json(content: bytes) -> bytes:
    """Re-serialize JSON compactly, leaving slashes and non-ASCII unescaped"""
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ValidationError(
            "Invalid JSON content",
            errors={"document": ["Document content must be valid JSON"]},
            cause=e,
        ) from e
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def minify_xml(content: bytes) -> bytes:
    """Re-serialize XML without insignificant whitespace"""
    parser = etree.XMLParser(
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
    )
    try:
        root = etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise ValidationError(
            "Invalid XML content",
            errors={"document": ["Document content must be valid XML"]},
            cause=e,
        ) from e
    return etree.tostring(root.getroottree(), xml_declaration=True, encoding="UTF-8")
