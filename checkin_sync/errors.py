"""Error taxonomy for the check-in sync core."""
from __future__ import annotations


class CheckinSyncError(Exception):
    """Base class for check-in sync errors."""


class TransportError(CheckinSyncError, RuntimeError):
    """A remote dataset could not be fetched (network, HTTP status or payload)."""

    def __init__(self, dataset: str, message: str) -> None:
        super().__init__(f"{dataset}: {message}")
        self.dataset = dataset


class ParseError(CheckinSyncError, ValueError):
    """A timestamp or answer value could not be interpreted."""


class SubmissionNotFound(CheckinSyncError, LookupError):
    """No submission with the requested id is known."""

    def __init__(self, submission_id: int) -> None:
        super().__init__(f"Submission {submission_id} not found")
        self.submission_id = submission_id
