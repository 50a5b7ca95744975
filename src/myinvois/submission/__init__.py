"""Submission batch validation"""

from myinvois.submission.validator import (
    MAX_DOCUMENT_SIZE,
    MAX_DOCUMENTS_PER_SUBMISSION,
    MAX_SUBMISSION_SIZE,
    SubmissionValidator,
    minify_json,
    minify_xml,
)

__all__ = [
    "MAX_DOCUMENT_SIZE",
    "MAX_DOCUMENTS_PER_SUBMISSION",
    "MAX_SUBMISSION_SIZE",
    "SubmissionValidator",
    "minify_json",
    "minify_xml",
]
