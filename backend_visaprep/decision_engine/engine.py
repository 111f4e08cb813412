"""
Final decision engine: one FinalReport per completed interview.

Reasoning service first (route rubric prompt with the transcript and embedded
per-answer scores). Its numbers are clamped and run through the route's
threshold predicate; the predicate decides, not the model's own verdict.
Missing dimensions, unparseable output or a raising service fall through to
the heuristic tiers.

evaluate_final never raises: any exception yields the safe borderline report.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from backend_visaprep.ai_engine.reasoning_service import (
    InterviewEvaluationRequest,
    ReasoningFailure,
    ReasoningService,
    as_number,
)
from backend_visaprep.analysis_engine.models import clamp_score
from backend_visaprep.decision_engine.fallback import evaluate_from_scores, evaluate_from_transcript
from backend_visaprep.decision_engine.models import FinalReport, ReportSource
from backend_visaprep.decision_engine.rubrics import Decision, RubricConfig, get_rubric
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

MAX_FINAL_SUMMARY_CHARS = 1200
MAX_FINAL_LIST_ITEMS = 10

SAFE_DEFAULT_OVERALL = 60
SAFE_DEFAULT_SUMMARY = "Final AI evaluation failed. Returning conservative heuristic result."
SAFE_DEFAULT_RECOMMENDATIONS = (
    "Provide concrete details (numbers, names, evidence).",
    "Clarify finances (maintenance funds, 28-day rule) and accommodation plans.",
)


def safe_default_report() -> FinalReport:
    return FinalReport(
        decision=Decision.BORDERLINE,
        overall=SAFE_DEFAULT_OVERALL,
        dimensions={"communication": SAFE_DEFAULT_OVERALL, "credibility": SAFE_DEFAULT_OVERALL},
        summary=SAFE_DEFAULT_SUMMARY,
        strengths=(),
        weaknesses=(),
        recommendations=SAFE_DEFAULT_RECOMMENDATIONS,
        source=ReportSource.SAFE_DEFAULT,
    )


def _text_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())[:MAX_FINAL_LIST_ITEMS]


def report_from_reasoning(raw: Mapping[str, Any], config: RubricConfig) -> FinalReport | None:
    """Clamp a reasoning-service verdict to the report shape; None when incomplete."""
    raw_dims = raw.get("dimensions")
    if not isinstance(raw_dims, Mapping):
        logger.warning("reasoning_final_incomplete", route=config.route, missing=list(config.dimensions))
        return None

    dimensions: dict[str, int] = {}
    missing: list[str] = []
    for dim in config.dimensions:
        value = as_number(raw_dims.get(dim))
        if value is None:
            missing.append(dim)
        else:
            dimensions[dim] = clamp_score(value)
    overall_value = as_number(raw.get("overall"))
    if missing or overall_value is None:
        logger.warning(
            "reasoning_final_incomplete",
            route=config.route,
            missing=missing + ([] if overall_value is not None else ["overall"]),
        )
        return None

    overall = clamp_score(overall_value)
    decision = config.decide(overall, dimensions)
    claimed = str(raw.get("decision") or "").strip().lower()
    if claimed and claimed != decision.value:
        logger.info(
            "reasoning_decision_overridden",
            route=config.route,
            claimed=claimed,
            decision=decision.value,
            overall=overall,
            weakest=min(dimensions.values()),
        )

    summary = str(raw.get("summary") or "").strip()[:MAX_FINAL_SUMMARY_CHARS]
    return FinalReport(
        decision=decision,
        overall=overall,
        dimensions=dimensions,
        summary=summary or f"Final evaluation: {decision.value} with overall {overall}/100.",
        strengths=_text_list(raw.get("strengths")),
        weaknesses=_text_list(raw.get("weaknesses")),
        recommendations=_text_list(raw.get("recommendations")),
        source=ReportSource.REASONING_SERVICE,
    )


def _report_from_service(
    request: InterviewEvaluationRequest,
    service: ReasoningService,
    config: RubricConfig,
) -> FinalReport | None:
    """Reasoning-service report, or None so the heuristic tiers run."""
    try:
        raw = service.evaluate_interview(request)
        if isinstance(raw, ReasoningFailure):
            logger.info("final_reasoning_unavailable", route=config.route, reason=raw.reason)
            return None
        report = report_from_reasoning(raw, config)
    except Exception as e:
        logger.warning("final_reasoning_failed", route=config.route, error=str(e))
        return None
    if report is not None:
        logger.info(
            "final_evaluated",
            route=config.route,
            source=report.source.value,
            decision=report.decision.value,
            overall=report.overall,
        )
    return report


def evaluate_final(
    request: InterviewEvaluationRequest,
    service: ReasoningService | None = None,
) -> FinalReport:
    """
    Produce the final report for a completed interview.

    Order: reasoning service -> per-answer score averages -> transcript keywords.
    Any exception returns safe_default_report().
    """
    try:
        config = get_rubric(request.route)
        if service is not None:
            report = _report_from_service(request, service, config)
            if report is not None:
                return report

        if request.per_answer_scores:
            return evaluate_from_scores(config, request.per_answer_scores)
        return evaluate_from_transcript(config, request.conversation_history)
    except Exception:
        logger.exception("final_evaluation_failed", route=request.route)
        return safe_default_report()
