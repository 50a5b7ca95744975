"""
Document type lookup
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from myinvois.client.api_client import ApiClient, HttpMethod
from myinvois.exceptions import ApiError, MyInvoisError, ValidationError
from myinvois.models.document_types import DocumentType, DocumentTypeVersion


DOCUMENT_TYPES_ENDPOINT = "/api/v1.0/documenttypes"


def _validate_id(value: Any, field_name: str, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(
            f"Invalid {label}",
            errors={field_name: [f"{label.capitalize()} must be a positive integer"]},
        )
    return value


class DocumentTypeService:
    """
    Reads document types and their versions

    Example:
        >>> types = DocumentTypeService(api_client)
        >>> invoice = types.find_document_type_by_code(1)
        >>> invoice.latest_version().version_number
        1.1
    """

    def __init__(self, api_client: ApiClient, logger: Optional[logging.Logger] = None) -> None:
        self.api_client = api_client
        self._logger = logger or logging.getLogger(__name__)

    def _get_result(self, path: str, description: str) -> Any:
        try:
            response = self.api_client.request(HttpMethod.GET, path)
        except MyInvoisError as e:
            self._logger.error(f"Failed to retrieve {description}: {e}")
            raise

        if "result" not in response:
            raise ApiError(f"Invalid response format from {description} endpoint", details=response)
        return response["result"]

    def get_document_types(self) -> List[DocumentType]:
        """Get all document types"""
        result = self._get_result(DOCUMENT_TYPES_ENDPOINT, "document types")
        if not isinstance(result, list):
            raise ApiError(
                "Invalid response format from document types endpoint",
                details={"result": result},
            )

        try:
            types = [DocumentType.model_validate(item) for item in result]
        except PydanticValidationError as e:
            raise ApiError(
                "Invalid response format from document types endpoint",
                cause=e,
                details={"result": result},
            ) from e

        self._logger.debug(f"Retrieved {len(types)} document type(s)")
        return types

    def get_document_type(self, document_type_id: int) -> DocumentType:
        """
        Get one document type

        Raises:
            ValidationError: Non-positive ID
            ApiError: Type not found or response malformed
        """
        _validate_id(document_type_id, "id", "document type ID")
        result = self._get_result(
            f"{DOCUMENT_TYPES_ENDPOINT}/{document_type_id}", "document type"
        )
        return self._parse(DocumentType, result, "document type")

    def get_document_type_version(
        self, document_type_id: int, version_id: int
    ) -> DocumentTypeVersion:
        """Get one version of a document type, including its schemas"""
        _validate_id(document_type_id, "id", "document type ID")
        _validate_id(version_id, "versionId", "version ID")
        result = self._get_result(
            f"{DOCUMENT_TYPES_ENDPOINT}/{document_type_id}/versions/{version_id}",
            "document type version",
        )
        return self._parse(DocumentTypeVersion, result, "document type version")

    def _parse(self, model, result: Any, description: str):
        if not isinstance(result, dict):
            raise ApiError(
                f"Invalid response format from {description} endpoint",
                details={"result": result},
            )
        try:
            return model.model_validate(result)
        except PydanticValidationError as e:
            raise ApiError(
                f"Invalid response format from {description} endpoint",
                cause=e,
                details=result,
            ) from e

    def find_document_type_by_code(self, invoice_type_code: int) -> Optional[DocumentType]:
        """Document type with the given invoice type code, or None"""
        for document_type in self.get_document_types():
            if document_type.invoice_type_code == int(invoice_type_code):
                return document_type
        return None

    def get_active_document_types(self, now: Optional[datetime] = None) -> List[DocumentType]:
        """Document types active at ``now`` (defaults to the current time)"""
        return [t for t in self.get_document_types() if t.is_active(now)]

