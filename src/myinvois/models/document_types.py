"""Document type and version models"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field

from myinvois.models.base import ApiModel
from myinvois.models.enums import DocumentTypeCode


def _is_active_window(
    active_from: datetime, active_to: Optional[datetime], now: Optional[datetime]
) -> bool:
    now = now or datetime.now(timezone.utc)
    if active_from.tzinfo is None:
        active_from = active_from.replace(tzinfo=timezone.utc)
    if active_to is not None and active_to.tzinfo is None:
        active_to = active_to.replace(tzinfo=timezone.utc)
    return active_from <= now and (active_to is None or active_to > now)


class WorkflowParameter(ApiModel):
    """Time limit applied to a document workflow step"""

    id: int
    parameter: str = Field(
        ..., description="submissionDuration, cancellationDuration or rejectionDuration"
    )
    value: int
    active_from: datetime = Field(..., alias="activeFrom")
    active_to: Optional[datetime] = Field(None, alias="activeTo")

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return _is_active_window(self.active_from, self.active_to, now)


class DocumentTypeVersion(ApiModel):
    """Published version of a document type"""

    id: int
    name: str
    description: Optional[str] = None
    active_from: datetime = Field(..., alias="activeFrom")
    active_to: Optional[datetime] = Field(None, alias="activeTo")
    version_number: float = Field(..., alias="versionNumber")
    status: str = Field(..., description="draft, published or deactivated")
    json_schema: Optional[str] = Field(None, alias="jsonSchema")
    xml_schema: Optional[str] = Field(None, alias="xmlSchema")

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.status == "published" and _is_active_window(
            self.active_from, self.active_to, now
        )


class DocumentType(ApiModel):
    """Document type with its versions and workflow parameters"""

    id: int
    invoice_type_code: int = Field(..., alias="invoiceTypeCode")
    description: str
    active_from: datetime = Field(..., alias="activeFrom")
    active_to: Optional[datetime] = Field(None, alias="activeTo")
    document_type_versions: List[DocumentTypeVersion] = Field(
        default_factory=list, alias="documentTypeVersions"
    )
    workflow_parameters: List[WorkflowParameter] = Field(
        default_factory=list, alias="workflowParameters"
    )

    @property
    def type_code(self) -> Optional[DocumentTypeCode]:
        try:
            return DocumentTypeCode(self.invoice_type_code)
        except ValueError:
            return None

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return _is_active_window(self.active_from, self.active_to, now)

    def active_versions(self, now: Optional[datetime] = None) -> List[DocumentTypeVersion]:
        return [v for v in self.document_type_versions if v.is_active(now)]

    def latest_version(self, now: Optional[datetime] = None) -> Optional[DocumentTypeVersion]:
        """Active version with the highest version number"""
        versions = self.active_versions(now)
        if not versions:
            return None
        return max(versions, key=lambda v: v.version_number)

    def find_version(self, version_number: float) -> Optional[DocumentTypeVersion]:
        for version in self.document_type_versions:
            if version.version_number == version_number:
                return version
        return None

    def get_workflow_parameter(
        self, name: str, now: Optional[datetime] = None
    ) -> Optional[WorkflowParameter]:
        """Active workflow parameter by name"""
        for param in self.workflow_parameters:
            if param.parameter == name and param.is_active(now):
                return param
        return None
