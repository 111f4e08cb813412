"""
Answer score aggregator: one submission in, one PerAnswerScore out.

Order of evaluation:
  1. empty / placeholder answer -> EMPTY, all zeros (HTTP 400 upstream)
  2. fewer than MIN_WORD_COUNT words -> TOO_SHORT, content = speech = 0, body kept
  3. off-topic -> OFF_TOPIC, content <= 15, speech <= 50
  4. otherwise the reasoning service is tried once; on failure the heuristic
     content score minus the relevance penalty is used instead
  5. language penalty (multiplicative) on content
  6. transcription tolerance boost, route flag, once
  7. overall = round(sum(weight * category)), body weight redistributed when
     telemetry is missing

Short-circuits 1-3 never call the reasoning service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_visaprep.ai_engine import (
    AnswerScoringRequest,
    ReasoningFailure,
    ReasoningResult,
    ReasoningService,
    validate_reasoning_rubric,
)
from backend_visaprep.analysis_engine.confidence import (
    ConfidenceAdjustment,
    apply_transcription_tolerance,
)
from backend_visaprep.analysis_engine.heuristics import (
    HeuristicResult,
    is_placeholder_answer,
    score_performance,
)
from backend_visaprep.analysis_engine.language_guard import (
    RED_FLAG_NON_TARGET_LANGUAGE,
    LanguageCheck,
    check_language,
)
from backend_visaprep.analysis_engine.models import (
    AnswerOutcome,
    AnswerSubmission,
    InterviewContext,
    PerAnswerScore,
    RelevanceResult,
    clamp_score,
)
from backend_visaprep.analysis_engine.relevance import check_relevance, relevance_feedback
from backend_visaprep.analysis_engine.weights import answer_weights
from backend_visaprep.behavioral_memory import (
    ContradictionLevel,
    SessionMemory,
    check_contradiction,
    memory_facts,
    needs_follow_up,
    update_memory,
)
from backend_visaprep.config.settings import ScoringSettings, get_settings
from backend_visaprep.core.exceptions import InvalidSubmissionError
from backend_visaprep.decision_engine.rubrics import get_rubric
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

RED_FLAG_NO_ANSWER = "No answer provided"
RED_FLAG_TOO_SHORT = "Insufficient answer length"
RED_FLAG_OFF_TOPIC = "Answer does not address the question"
RED_FLAG_CONTRADICTION = {
    ContradictionLevel.MINOR: "Minor inconsistency with earlier answers",
    ContradictionLevel.MAJOR: "Major contradiction with earlier answers",
}

NO_ANSWER_MESSAGE = "No answer was detected. Please answer the question out loud and try again."
EMPTY_ANSWER_HINTS = (
    "Check that your microphone is connected and unmuted.",
    "Speak clearly for at least one full sentence.",
    "Answer the question directly with specific details.",
)
TOO_SHORT_RECOMMENDATIONS = (
    "Give a complete answer of at least two or three sentences.",
    "Add specific details: amounts, names, dates, course modules.",
)
DEFAULT_RECOMMENDATIONS = (
    "Address all parts of the question directly.",
    "Add specific numbers, names, and evidence.",
    "Reduce filler words and maintain a steady pace.",
)
DEFAULT_SUMMARY = "Good effort. Improve structure, reduce fillers, and add concrete details."

CONSISTENCY_BASELINE = {
    ContradictionLevel.NONE: 65,
    ContradictionLevel.MINOR: 45,
    ContradictionLevel.MAJOR: 25,
}


@dataclass(frozen=True)
class AnswerEvaluation:
    """Everything the /score endpoint returns for one answer."""

    outcome: AnswerOutcome
    score: PerAnswerScore
    rubric: dict[str, int]
    summary: str
    memory: SessionMemory
    diagnostics: dict[str, Any] = field(default_factory=dict)
    relevance: RelevanceResult | None = None
    language_warning: str | None = None
    message: str | None = None
    hints: tuple[str, ...] = ()

    @property
    def status_code(self) -> int:
        return 400 if self.outcome is AnswerOutcome.EMPTY else 200

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "rubric": dict(self.rubric),
            "summary": self.summary,
            **self.score.to_dict(),
            "relevanceCheck": self.relevance.to_dict() if self.relevance else None,
            "diagnostics": self.diagnostics,
            "sessionMemory": self.memory.to_dict(),
        }
        if self.language_warning:
            out["languageWarning"] = self.language_warning
        if self.message:
            out["error"] = self.message
            out["hints"] = list(self.hints)
        return out


def _unique(items: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(i for i in items if i))


def _heuristic_rubric(
    heuristic: HeuristicResult,
    relevance: RelevanceResult,
    contradiction: ContradictionLevel,
) -> dict[str, int]:
    content = heuristic.details.get("content", {})
    speech = heuristic.details.get("speech", {})
    return {
        "communication": clamp_score(speech.get("clarityScore", heuristic.speech)),
        "relevance": relevance.score,
        "specificity": clamp_score(content.get("accuracyScore", heuristic.content)),
        "consistency": CONSISTENCY_BASELINE[contradiction],
    }


def _empty_evaluation(
    submission: AnswerSubmission,
    context: InterviewContext,
    memory: SessionMemory,
) -> AnswerEvaluation:
    config = get_rubric(context.route)
    weights = answer_weights(config.answer_weights, submission.body_language is not None)
    score = PerAnswerScore(
        content_score=0,
        speech_score=0,
        body_score=0,
        overall=0,
        weights=weights,
        red_flags=(RED_FLAG_NO_ANSWER,),
        recommendations=EMPTY_ANSWER_HINTS,
    )
    logger.info("answer_rejected_empty", route=config.route)
    return AnswerEvaluation(
        outcome=AnswerOutcome.EMPTY,
        score=score,
        rubric={},
        summary=NO_ANSWER_MESSAGE,
        memory=memory,
        diagnostics={
            "outcome": AnswerOutcome.EMPTY.value,
            "usedReasoningService": False,
            "adjustments": [],
            "reasoningError": None,
        },
        message=NO_ANSWER_MESSAGE,
        hints=EMPTY_ANSWER_HINTS,
    )


def score_answer(
    submission: AnswerSubmission,
    context: InterviewContext,
    memory: SessionMemory | None = None,
    service: ReasoningService | None = None,
    settings: ScoringSettings | None = None,
) -> AnswerEvaluation:
    """
    Score one answer.

    Args:
        submission: transcript plus optional telemetry for one question.
        context: route, student profile and prior conversation.
        memory: facts from earlier answers in this session; not mutated.
        service: reasoning service; None means heuristics only.
        settings: scoring policy; defaults to get_settings().

    Returns:
        AnswerEvaluation carrying the PerAnswerScore, diagnostics and the
        updated SessionMemory for the caller to keep.

    Raises:
        InvalidSubmissionError: the question text is missing.
    """
    settings = settings or get_settings()
    memory = memory or SessionMemory()
    if not (submission.question or "").strip():
        raise InvalidSubmissionError(
            "Missing question text",
            hints=["Send the interview question the answer responds to."],
        )

    answer = submission.answer or ""
    if is_placeholder_answer(answer):
        return _empty_evaluation(submission, context, memory)

    config = get_rubric(context.route)
    heuristic = score_performance(
        answer,
        submission.body_language,
        submission.transcription_confidence,
        min_word_count=settings.min_word_count,
        missing_body_score=settings.missing_body_score,
    )
    relevance = check_relevance(submission.question, answer)
    language: LanguageCheck = check_language(
        submission.language_code,
        submission.language_confidence,
        target_language=settings.target_language,
        confidence_floor=settings.non_english_confidence_floor,
        penalty=settings.non_english_penalty,
    )
    contradiction = check_contradiction(memory, answer)
    follow_up, follow_up_reason = needs_follow_up(submission.question_type, answer, memory)
    updated_memory = update_memory(memory, answer, submission.question_type)
    weights = answer_weights(config.answer_weights, heuristic.body_present)

    red_flags: list[str] = []
    recommendations: list[str] = []
    adjustments: list[str] = []
    failure: ReasoningFailure | None = None
    reasoning: ReasoningResult | None = None
    boost = ConfidenceAdjustment(score=0, applied=False, original_score=0)
    body = heuristic.body_language if heuristic.body_present else 0

    if heuristic.too_short:
        outcome = AnswerOutcome.TOO_SHORT
        content, speech = 0, 0
        red_flags.append(RED_FLAG_TOO_SHORT)
        recommendations.extend(TOO_SHORT_RECOMMENDATIONS)
        adjustments.append("too_short")
    elif relevance.is_off_topic:
        outcome = AnswerOutcome.OFF_TOPIC
        content = clamp_score(min(settings.off_topic_content_cap, heuristic.content - relevance.penalty))
        speech = clamp_score(min(settings.off_topic_speech_cap, heuristic.speech))
        red_flags.append(RED_FLAG_OFF_TOPIC)
        recommendations.extend(relevance_feedback(relevance))
        adjustments.append("off_topic_cap")
    else:
        outcome = AnswerOutcome.SCORED
        speech = heuristic.speech
        result: ReasoningResult | ReasoningFailure
        if service is None:
            result = ReasoningFailure("not_configured", "no reasoning service")
        else:
            request = AnswerScoringRequest(
                question=submission.question,
                answer=answer,
                route=config.route,
                student_profile=context.student_profile,
                conversation_history=context.conversation_history,
                memory_facts=tuple(memory_facts(memory)),
                contradiction=contradiction.value,
            )
            try:
                result = service.score_answer(request)
            except Exception as e:
                logger.warning("reasoning_service_failed", route=config.route, error=str(e))
                result = ReasoningFailure("request_failed", str(e))
        if isinstance(result, ReasoningResult) and config.validate_reasoning_rubric:
            result = validate_reasoning_rubric(result, config)

        if isinstance(result, ReasoningResult):
            reasoning = result
            content = result.content_score
            red_flags.extend(result.red_flags)
            recommendations.extend(result.recommendations)
            adjustments.extend(result.corrections)
        else:
            failure = result
            content = clamp_score(heuristic.content - relevance.penalty)
            if relevance.penalty:
                adjustments.append("relevance_penalty")
            recommendations.extend(relevance_feedback(relevance))
            logger.info("answer_heuristic_fallback", route=config.route, reason=result.reason)

    if language.penalized and outcome is not AnswerOutcome.TOO_SHORT:
        content = clamp_score(language.apply(content))
        red_flags.append(RED_FLAG_NON_TARGET_LANGUAGE)
        adjustments.append("language_penalty")

    # too-short and off-topic answers are never boosted
    if outcome is AnswerOutcome.SCORED:
        boost = apply_transcription_tolerance(
            content,
            submission.transcription_confidence,
            enabled=config.transcription_tolerance,
            confidence_threshold=settings.asr_confidence_threshold,
            score_threshold=settings.asr_score_threshold,
            boost_percentage=settings.asr_boost_percentage,
        )
        content = boost.score
        if boost.applied:
            adjustments.append("transcription_boost")

    if contradiction is not ContradictionLevel.NONE:
        red_flags.append(RED_FLAG_CONTRADICTION[contradiction])
    if not heuristic.body_present:
        adjustments.append("body_weight_redistributed")

    content, speech, body = clamp_score(content), clamp_score(speech), clamp_score(body)
    overall = clamp_score(weights.content * content + weights.speech * speech + weights.body * body)

    if reasoning is not None:
        rubric = dict(reasoning.rubric)
        summary = reasoning.summary or DEFAULT_SUMMARY
    else:
        rubric = _heuristic_rubric(heuristic, relevance, contradiction)
        summary = " ".join(heuristic.notes) or DEFAULT_SUMMARY
    if not recommendations:
        recommendations.extend(DEFAULT_RECOMMENDATIONS)

    score = PerAnswerScore(
        content_score=content,
        speech_score=speech,
        body_score=body,
        overall=overall,
        weights=weights,
        red_flags=_unique(red_flags),
        recommendations=_unique(recommendations),
    )
    diagnostics = {
        "outcome": outcome.value,
        "route": config.route,
        "usedReasoningService": reasoning is not None,
        "reasoningError": failure.to_dict() if failure else None,
        "adjustments": adjustments,
        "transcriptionBoost": boost.to_dict() if boost.applied else {"applied": False},
        "languagePenaltyApplied": language.penalized,
        "contradiction": contradiction.value,
        "followUp": {"needed": follow_up, "reason": follow_up_reason},
        "heuristic": heuristic.to_dict(),
    }
    logger.info(
        "answer_scored",
        route=config.route,
        outcome=outcome.value,
        overall=overall,
        content=content,
        speech=speech,
        body=body,
        used_reasoning_service=reasoning is not None,
        adjustments=adjustments,
    )
    return AnswerEvaluation(
        outcome=outcome,
        score=score,
        rubric=rubric,
        summary=summary,
        memory=updated_memory,
        diagnostics=diagnostics,
        relevance=relevance,
        language_warning=language.warning,
    )
