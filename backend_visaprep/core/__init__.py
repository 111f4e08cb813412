"""
Core utilities: shared exceptions and cross-cutting concerns.
"""

from backend_visaprep.core.exceptions import (
    InvalidSubmissionError,
    ReasoningServiceError,
    SessionStateError,
    VisaPrepError,
)

__all__ = [
    "InvalidSubmissionError",
    "ReasoningServiceError",
    "SessionStateError",
    "VisaPrepError",
]
