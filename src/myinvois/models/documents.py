"""Document retrieval, search and state models"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from myinvois.models.base import ApiModel
from myinvois.models.enums import DocumentStatus


class DocumentSummary(ApiModel):
    """Document as listed in submission status, search and recent results"""

    uuid: str = Field(..., description="Document UUID")
    submission_uid: Optional[str] = Field(None, alias="submissionUid")
    long_id: Optional[str] = Field(None, alias="longId")
    internal_id: Optional[str] = Field(None, alias="internalId")
    type_name: Optional[str] = Field(None, alias="typeName")
    type_version_name: Optional[str] = Field(None, alias="typeVersionName")
    issuer_tin: Optional[str] = Field(None, alias="issuerTin")
    issuer_name: Optional[str] = Field(None, alias="issuerName")
    receiver_id: Optional[str] = Field(None, alias="receiverId")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    date_time_issued: Optional[datetime] = Field(None, alias="dateTimeIssued")
    date_time_received: Optional[datetime] = Field(None, alias="dateTimeReceived")
    date_time_validated: Optional[datetime] = Field(None, alias="dateTimeValidated")
    total_excluding_tax: Optional[float] = Field(None, alias="totalExcludingTax")
    total_discount: Optional[float] = Field(None, alias="totalDiscount")
    total_net_amount: Optional[float] = Field(None, alias="totalNetAmount")
    total_payable_amount: Optional[float] = Field(None, alias="totalPayableAmount")
    status: str = Field(..., description="Document status")
    cancel_date_time: Optional[datetime] = Field(None, alias="cancelDateTime")
    reject_request_date_time: Optional[datetime] = Field(None, alias="rejectRequestDateTime")
    document_status_reason: Optional[str] = Field(None, alias="documentStatusReason")
    created_by_user_id: Optional[str] = Field(None, alias="createdByUserId")

    @property
    def is_invalid(self) -> bool:
        return self.status.lower() == DocumentStatus.INVALID.value.lower()


class ValidationStep(ApiModel):
    """One step of document validation"""

    name: str
    status: str
    error: Optional[Dict[str, Any]] = None


class ValidationResults(ApiModel):
    """Validation outcome of a document"""

    status: str
    validation_steps: List[ValidationStep] = Field(
        default_factory=list, alias="validationSteps"
    )

    @property
    def failed_steps(self) -> List[ValidationStep]:
        return [step for step in self.validation_steps if step.status == DocumentStatus.INVALID.value]


class DocumentDetails(DocumentSummary):
    """Document summary with validation results"""

    validation_results: Optional[ValidationResults] = Field(None, alias="validationResults")

    def get_validation_results(self) -> ValidationResults:
        """Validation results, or an empty result carrying the document status"""
        if self.validation_results is not None:
            return self.validation_results
        return ValidationResults(status=self.status, validation_steps=[])


class RawDocument(DocumentSummary):
    """Document with its original submitted content"""

    document: Optional[str] = Field(None, description="Raw document content")


class DocumentSearchResult(ApiModel):
    """Document as returned by search"""

    uuid: str
    submission_uid: Optional[str] = Field(None, alias="submissionUID")
    long_id: Optional[str] = Field(None, alias="longId")
    internal_id: Optional[str] = Field(None, alias="internalId")
    type_name: Optional[str] = Field(None, alias="typeName")
    type_version_name: Optional[str] = Field(None, alias="typeVersionName")
    issuer_tin: Optional[str] = Field(None, alias="issuerTin")
    issuer_name: Optional[str] = Field(None, alias="issuerName")
    receiver_id: Optional[str] = Field(None, alias="receiverId")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    date_time_issued: Optional[datetime] = Field(None, alias="dateTimeIssued")
    date_time_received: Optional[datetime] = Field(None, alias="dateTimeReceived")
    date_time_validated: Optional[datetime] = Field(None, alias="dateTimeValidated")
    total_sales: Optional[float] = Field(None, alias="totalSales")
    total_discount: Optional[float] = Field(None, alias="totalDiscount")
    net_amount: Optional[float] = Field(None, alias="netAmount")
    total: Optional[float] = None
    status: str
    cancel_date_time: Optional[datetime] = Field(None, alias="cancelDateTime")
    reject_request_date_time: Optional[datetime] = Field(None, alias="rejectRequestDateTime")
    document_status_reason: Optional[str] = Field(None, alias="documentStatusReason")
    created_by_user_id: Optional[str] = Field(None, alias="createdByUserId")
    supplier_tin: Optional[str] = Field(None, alias="supplierTIN")
    supplier_name: Optional[str] = Field(None, alias="supplierName")
    submission_channel: Optional[str] = Field(None, alias="submissionChannel")
    intermediary_name: Optional[str] = Field(None, alias="intermediaryName")
    intermediary_tin: Optional[str] = Field(None, alias="intermediaryTIN")
    buyer_name: Optional[str] = Field(None, alias="buyerName")
    buyer_tin: Optional[str] = Field(None, alias="buyerTIN")


class PageMetadata(ApiModel):
    """Paging metadata of list endpoints"""

    total_pages: Optional[int] = Field(None, alias="totalPages")
    total_count: Optional[int] = Field(None, alias="totalCount")
    has_next: Optional[bool] = Field(None, alias="hasNext")


class SearchResult(ApiModel):
    """One page of document search results"""

    documents: List[DocumentSearchResult] = Field(default_factory=list)
    metadata: PageMetadata = Field(default_factory=PageMetadata)


class RecentDocuments(ApiModel):
    """One page of recent documents"""

    result: List[DocumentSummary] = Field(default_factory=list)
    metadata: PageMetadata = Field(default_factory=PageMetadata)


class DocumentStateResponse(ApiModel):
    """Result of a reject or cancel request"""

    uuid: str
    status: str
