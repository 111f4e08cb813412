"""
Application-level exceptions.

Domain errors raised inside the pipeline and translated to HTTP status codes
by the API layer. Reasoning service failures are normally returned as
ReasoningFailure values; ReasoningServiceError is raised internally by the
adapter and caught at its boundary.
"""

from __future__ import annotations


class VisaPrepError(Exception):
    """Base class for all VisaPrep errors."""


class InvalidSubmissionError(VisaPrepError):
    """Client input is missing required fields or is otherwise unusable."""

    def __init__(self, message: str, hints: list[str] | None = None) -> None:
        super().__init__(message)
        self.hints = hints or []


class ReasoningServiceError(VisaPrepError):
    """The external reasoning service failed, timed out, or returned garbage."""


class SessionStateError(VisaPrepError):
    """An interview session operation is not allowed in its current state."""
