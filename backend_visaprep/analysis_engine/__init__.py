"""
Analysis engine package: per-answer scoring.

Relevance checks, heuristic performance scoring, language and transcription
adjustments, weight redistribution. The aggregator that combines them with the
reasoning service lives in analysis_engine.aggregator.
"""

from backend_visaprep.analysis_engine.confidence import (
    ConfidenceAdjustment,
    apply_transcription_tolerance,
)
from backend_visaprep.analysis_engine.heuristics import (
    HeuristicResult,
    is_placeholder_answer,
    score_performance,
)
from backend_visaprep.analysis_engine.language_guard import LanguageCheck, check_language
from backend_visaprep.analysis_engine.models import (
    AnswerOutcome,
    AnswerSubmission,
    AnswerWeights,
    BodyLanguageScore,
    InterviewContext,
    PerAnswerScore,
    RelevanceResult,
    clamp_score,
)
from backend_visaprep.analysis_engine.relevance import check_relevance, relevance_feedback
from backend_visaprep.analysis_engine.weights import (
    DEFAULT_ANSWER_WEIGHTS,
    answer_weights,
    redistribute,
)

__all__ = [
    "AnswerOutcome",
    "AnswerSubmission",
    "AnswerWeights",
    "BodyLanguageScore",
    "ConfidenceAdjustment",
    "DEFAULT_ANSWER_WEIGHTS",
    "HeuristicResult",
    "InterviewContext",
    "LanguageCheck",
    "PerAnswerScore",
    "RelevanceResult",
    "answer_weights",
    "apply_transcription_tolerance",
    "check_language",
    "check_relevance",
    "clamp_score",
    "is_placeholder_answer",
    "redistribute",
    "relevance_feedback",
    "score_performance",
]
