"""
Data models for per-answer scoring.

Frozen dataclasses; every score stored here is already clamped to 0-100.
to_dict() renders the camelCase wire shape used by the HTTP API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def clamp_score(value: float, lo: float = 0.0, hi: float = 100.0) -> int:
    """Round and clamp a score to an integer in [lo, hi]."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = 0.0
    if v != v:  # NaN
        v = 0.0
    return int(round(max(lo, min(hi, v))))


class AnswerOutcome(str, Enum):
    """Which branch of the per-answer pipeline produced the score."""

    EMPTY = "empty"
    TOO_SHORT = "too_short"
    OFF_TOPIC = "off_topic"
    SCORED = "scored"


@dataclass(frozen=True)
class BodyLanguageScore:
    """
    Posture/engagement telemetry from the vision collaborator.

    Only overall_score is read by the pipeline; the sub-records are passed
    through untouched for display.
    """

    overall_score: float
    posture: dict[str, Any] | None = None
    gestures: dict[str, Any] | None = None
    expressions: dict[str, Any] | None = None


@dataclass(frozen=True)
class AnswerSubmission:
    """One transcribed answer plus optional telemetry; constructed per request."""

    question: str
    answer: str
    body_language: BodyLanguageScore | None = None
    transcription_confidence: float | None = None
    language_code: str | None = None
    language_confidence: float | None = None
    question_type: str | None = None


@dataclass(frozen=True)
class InterviewContext:
    route: str
    student_profile: dict[str, Any] = field(default_factory=dict)
    conversation_history: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RelevanceResult:
    score: int
    overlap: float
    key_terms: list[str]
    found_terms: list[str]
    missing_terms: list[str]
    penalty: int
    is_off_topic: bool
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "score": self.score,
            "overlap": round(self.overlap, 4),
            "keyTerms": list(self.key_terms),
            "foundTerms": list(self.found_terms),
            "missingTerms": list(self.missing_terms),
            "penalty": self.penalty,
            "isOffTopic": self.is_off_topic,
        }
        if self.warning:
            out["warning"] = self.warning
        return out


@dataclass(frozen=True)
class AnswerWeights:
    """Blend weights for content, speech and body; always sum to 1."""

    content: float
    speech: float
    body: float

    def to_dict(self) -> dict[str, float]:
        return {"content": self.content, "speech": self.speech, "body": self.body}


@dataclass(frozen=True)
class PerAnswerScore:
    """
    Final score for one answer. Created once, appended to the session's
    ordered score history, never mutated.
    """

    content_score: int
    speech_score: int
    body_score: int
    overall: int
    weights: AnswerWeights
    red_flags: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    def categories(self) -> dict[str, int]:
        return {
            "content": self.content_score,
            "speech": self.speech_score,
            "bodyLanguage": self.body_score,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "contentScore": self.content_score,
            "speechScore": self.speech_score,
            "bodyScore": self.body_score,
            "overall": self.overall,
            "categories": self.categories(),
            "weights": self.weights.to_dict(),
            "redFlags": list(self.red_flags),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class ScoreSummary:
    """Overall plus category scores of one answer, as consumed by the final evaluation."""

    overall: int
    content: int
    speech: int
    body_language: int

    @classmethod
    def from_score(cls, score: PerAnswerScore) -> "ScoreSummary":
        return cls(
            overall=score.overall,
            content=score.content_score,
            speech=score.speech_score,
            body_language=score.body_score,
        )
