"""Submission status models"""

from datetime import datetime
from typing import List

from pydantic import Field

from myinvois.models.base import ApiModel
from myinvois.models.documents import DocumentSummary
from myinvois.models.enums import COMPLETED_SUBMISSION_STATUSES


class SubmissionStatus(ApiModel):
    """Processing status of a submission and a page of its documents"""

    submission_uid: str = Field(..., alias="submissionUid")
    document_count: int = Field(..., alias="documentCount")
    date_time_received: datetime = Field(..., alias="dateTimeReceived")
    overall_status: str = Field(..., alias="overallStatus")
    document_summary: List[DocumentSummary] = Field(..., alias="documentSummary")

    @property
    def is_complete(self) -> bool:
        """True once validation finished, successfully or not"""
        return self.overall_status.lower() in COMPLETED_SUBMISSION_STATUSES

    @property
    def invalid_documents(self) -> List[DocumentSummary]:
        return [doc for doc in self.document_summary if doc.is_invalid]
