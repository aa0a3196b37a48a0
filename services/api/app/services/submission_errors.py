from __future__ import annotations

from packages.shared.schemas.submission import SubmissionStep


class SubmissionError(Exception):
    """Base class for failures of one order submission attempt."""

    step: SubmissionStep


class SubmissionValidationError(SubmissionError):
    step = SubmissionStep.VALIDATE

    def __init__(self, missing_fields: list[str]) -> None:
        super().__init__(f"Missing fields: {', '.join(missing_fields)}")
        self.missing_fields = missing_fields


class CustomerError(SubmissionError):
    step = SubmissionStep.CUSTOMER


class DraftError(SubmissionError):
    step = SubmissionStep.DRAFT


class FinalizeError(SubmissionError):
    step = SubmissionStep.FINALIZE

    def __init__(self, message: str, *, draft_id: str) -> None:
        super().__init__(message)
        self.draft_id = draft_id


class AnnotationError(SubmissionError):
    step = SubmissionStep.ANNOTATE
