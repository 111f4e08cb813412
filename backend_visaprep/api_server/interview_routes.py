"""
FastAPI router: POST /score (per answer), POST /final-evaluation (end of interview).

Request bodies are camelCase JSON. The reasoning service is injected with
Depends(get_reasoning_service) so tests can override it.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend_visaprep.ai_engine import (
    InterviewEvaluationRequest,
    OpenAIReasoningService,
    ReasoningService,
)
from backend_visaprep.analysis_engine.aggregator import score_answer
from backend_visaprep.analysis_engine.models import (
    AnswerSubmission,
    BodyLanguageScore,
    InterviewContext,
    ScoreSummary,
    clamp_score,
)
from backend_visaprep.analysis_engine.weights import DEFAULT_ANSWER_WEIGHTS, answer_weights
from backend_visaprep.behavioral_memory import SessionMemory
from backend_visaprep.config import get_settings
from backend_visaprep.core.exceptions import InvalidSubmissionError
from backend_visaprep.decision_engine.engine import evaluate_final
from backend_visaprep.decision_engine.rubrics import DEFAULT_ROUTE
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["interview"])

SUBMISSION_HINTS = [
    "Send question and answer as non-empty strings.",
    "Include interviewContext with route, studentProfile and conversationHistory.",
    "transcriptionConfidence and languageConfidence must be between 0 and 1.",
]


def get_reasoning_service() -> ReasoningService:
    """Dependency: reasoning service built from settings (fails fast when no API key)."""
    return OpenAIReasoningService.from_settings(get_settings())


def zeroed_score_payload(message: str, hints: list[str], body_present: bool = True) -> dict[str, Any]:
    """400 body for /score: zero scores plus remediation hints; body weight 0 without telemetry."""
    return {
        "error": message,
        "hints": hints,
        "contentScore": 0,
        "speechScore": 0,
        "bodyScore": 0,
        "overall": 0,
        "categories": {"content": 0, "speech": 0, "bodyLanguage": 0},
        "weights": answer_weights(DEFAULT_ANSWER_WEIGHTS, body_present).to_dict(),
        "redFlags": [],
        "recommendations": [],
    }


# -----------------------------------------------------------------------------
# Request models
# -----------------------------------------------------------------------------

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BodyLanguagePayload(CamelModel):
    overall_score: float = Field(..., description="Posture/engagement score (0-100)")
    posture: dict[str, Any] | None = None
    gestures: dict[str, Any] | None = None
    expressions: dict[str, Any] | None = None


class ConversationTurnPayload(CamelModel):
    question: str = ""
    answer: str = ""
    timestamp: str | None = None
    question_type: str | None = None


class InterviewContextPayload(CamelModel):
    route: str = DEFAULT_ROUTE
    student_profile: dict[str, Any] = Field(default_factory=dict)
    conversation_history: list[ConversationTurnPayload] = Field(default_factory=list)

    def history(self) -> list[dict[str, Any]]:
        return [t.model_dump(by_alias=True, exclude_none=True) for t in self.conversation_history]


class ScoreRequest(CamelModel):
    """POST /score body."""

    question: str = Field(..., description="Interview question text")
    answer: str = Field(..., description="Transcribed answer")
    body_language: BodyLanguagePayload | None = None
    transcription_confidence: float | None = Field(
        None,
        ge=0,
        le=1,
        validation_alias=AliasChoices("transcriptionConfidence", "assemblyConfidence", "transcription_confidence"),
    )
    interview_context: InterviewContextPayload
    session_memory: dict[str, Any] | None = None
    language_code: str | None = None
    language_confidence: float | None = Field(None, ge=0, le=1)
    question_type: str | None = None

    def to_submission(self) -> AnswerSubmission:
        body = None
        if self.body_language is not None:
            body = BodyLanguageScore(
                overall_score=self.body_language.overall_score,
                posture=self.body_language.posture,
                gestures=self.body_language.gestures,
                expressions=self.body_language.expressions,
            )
        return AnswerSubmission(
            question=self.question,
            answer=self.answer,
            body_language=body,
            transcription_confidence=self.transcription_confidence,
            language_code=self.language_code,
            language_confidence=self.language_confidence,
            question_type=self.question_type,
        )

    def to_context(self) -> InterviewContext:
        return InterviewContext(
            route=self.interview_context.route,
            student_profile=self.interview_context.student_profile,
            conversation_history=self.interview_context.history(),
        )


class CategoriesPayload(CamelModel):
    content: float = 0
    speech: float = 0
    body_language: float = 0


class PerAnswerScorePayload(CamelModel):
    overall: float
    categories: CategoriesPayload = Field(default_factory=CategoriesPayload)

    def to_summary(self) -> ScoreSummary:
        return ScoreSummary(
            overall=clamp_score(self.overall),
            content=clamp_score(self.categories.content),
            speech=clamp_score(self.categories.speech),
            body_language=clamp_score(self.categories.body_language),
        )


class FinalEvaluationRequest(CamelModel):
    """POST /final-evaluation body."""

    route: str | None = None
    student_profile: dict[str, Any]
    conversation_history: list[ConversationTurnPayload]
    per_answer_scores: list[PerAnswerScorePayload] | None = None


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post("/score")
def score(body: ScoreRequest, service: ReasoningService = Depends(get_reasoning_service)) -> JSONResponse:
    """
    Score one transcribed answer.

    400 for empty/placeholder answers (zeroed scores and hints); 200 for every
    scored answer, including too-short and off-topic ones, which come back
    capped with a red flag.
    """
    try:
        evaluation = score_answer(
            body.to_submission(),
            body.to_context(),
            SessionMemory.from_dict(body.session_memory),
            service,
        )
    except InvalidSubmissionError as e:
        logger.info("score_rejected", reason=str(e))
        content = zeroed_score_payload(str(e), e.hints, body.body_language is not None)
        return JSONResponse(status_code=400, content=content)
    except Exception as e:
        logger.exception("score_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e
    return JSONResponse(status_code=evaluation.status_code, content=evaluation.to_dict())


@router.post("/final-evaluation")
def final_evaluation(
    body: FinalEvaluationRequest,
    service: ReasoningService = Depends(get_reasoning_service),
) -> JSONResponse:
    """Final decision for a completed interview. Always 200; failures degrade to a borderline default."""
    request = InterviewEvaluationRequest(
        route=body.route or DEFAULT_ROUTE,
        student_profile=body.student_profile,
        conversation_history=tuple(t.model_dump(by_alias=True, exclude_none=True) for t in body.conversation_history),
        per_answer_scores=tuple(s.to_summary() for s in body.per_answer_scores or ()),
    )
    report = evaluate_final(request, service)
    return JSONResponse(status_code=200, content=report.to_dict())
