"""Document submission models"""

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class SubmissionItem:
    """
    One document of a submission batch

    Attributes:
        document: Raw JSON or XML content
        document_hash: SHA-256 hex digest of the raw content
        code_number: Caller's internal reference, unique within a batch
    """
    document: Union[str, bytes]
    document_hash: str
    code_number: str

    @classmethod
    def from_content(cls, content: Union[str, bytes], code_number: str) -> "SubmissionItem":
        """Build an item, hashing the content with SHA-256"""
        raw = content.encode("utf-8") if isinstance(content, str) else content
        return cls(
            document=content,
            document_hash=hashlib.sha256(raw).hexdigest(),
            code_number=code_number,
        )

    @property
    def content_bytes(self) -> bytes:
        if isinstance(self.document, bytes):
            return self.document
        return self.document.encode("utf-8")

    @property
    def size(self) -> int:
        """Size of the raw content in bytes"""
        return len(self.content_bytes)


class AcceptedDocument(BaseModel):
    """Document accepted for validation"""

    uuid: str = Field(..., description="Document UUID assigned by MyInvois")
    invoice_code_number: str = Field(
        ..., alias="invoiceCodeNumber", description="Caller's code number"
    )

    model_config = {"populate_by_name": True, "frozen": True}


class RejectedDocument(BaseModel):
    """Document rejected at submission time"""

    invoice_code_number: str = Field(
        ..., alias="invoiceCodeNumber", description="Caller's code number"
    )
    error: Any = Field(None, description="Error object returned by MyInvois")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def error_message(self) -> str:
        if isinstance(self.error, dict):
            details = self.error.get("details") or []
            messages = [d.get("message") for d in details if isinstance(d, dict) and d.get("message")]
            head = self.error.get("message") or self.error.get("code") or "Unknown error"
            return "; ".join([str(head)] + messages)
        return str(self.error) if self.error is not None else "Unknown error"


class SubmissionResult(BaseModel):
    """
    Outcome of a submission

    A batch can be partially accepted; rejected documents are reported here
    rather than raised.
    """

    submission_uid: str = Field(
        ..., alias="submissionUID", description="Submission UID for status polling"
    )
    accepted_documents: List[AcceptedDocument] = Field(
        default_factory=list, alias="acceptedDocuments"
    )
    rejected_documents: List[RejectedDocument] = Field(
        default_factory=list, alias="rejectedDocuments"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def has_rejections(self) -> bool:
        return len(self.rejected_documents) > 0

    @property
    def accepted_count(self) -> int:
        return len(self.accepted_documents)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected_documents)

    def find_accepted(self, code_number: str) -> Optional[AcceptedDocument]:
        """Accepted document for a code number, if any"""
        for document in self.accepted_documents:
            if document.invoice_code_number == code_number:
                return document
        return None

    def to_wire(self) -> Dict[str, Any]:
        """Serialize back to the API's field names"""
        return self.model_dump(by_alias=True)
