"""
AI engine package: adapter for the external reasoning service.

Result-or-failure interface over the OpenAI chat API, route prompts, and
rubric validation for routes that need it.
"""

from backend_visaprep.ai_engine.reasoning_service import (
    AnswerScoringRequest,
    InterviewEvaluationRequest,
    OpenAIReasoningService,
    ReasoningFailure,
    ReasoningResult,
    ReasoningService,
)
from backend_visaprep.ai_engine.rubric_validator import validate_reasoning_rubric

__all__ = [
    "AnswerScoringRequest",
    "InterviewEvaluationRequest",
    "OpenAIReasoningService",
    "ReasoningFailure",
    "ReasoningResult",
    "ReasoningService",
    "validate_reasoning_rubric",
]
