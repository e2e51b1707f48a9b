# onboard/core/errors.py
from typing import Optional


class OnboardError(Exception):
    """Base class for intake errors."""


class ConfigurationError(OnboardError):
    """A required configuration value is missing."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required env var: {name}")


class RecordStoreError(OnboardError):
    """The record store answered a create call with a non-success status."""

    def __init__(self, status_code: int, reason: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"Airtable error: {status_code} {reason} - {body}")


class SubmissionRejected(OnboardError):
    """Pre-submit validation failed; nothing was sent."""

    def __init__(self, message: str, section: Optional[int] = None):
        self.section = section
        super().__init__(message)


class SubmissionFailed(OnboardError):
    """The submit endpoint did not answer with a success status."""
