"""
Rubric validation for reasoning-service answers on routes that enable it (UK).

Two patterns are corrected:
  - all-zero rubric: a complete scoring failure, treated as a ReasoningFailure
    so the aggregator uses the heuristic path.
  - zero-domain-dimension: every domain dimension is 0 while the core
    dimensions average >= 60. Typical for factual questions ("which visa
    centre?") that the domain dimensions do not apply to; the content score is
    replaced with the core average.
"""

from __future__ import annotations

from dataclasses import replace

from backend_visaprep.ai_engine.reasoning_service import ReasoningFailure, ReasoningResult
from backend_visaprep.analysis_engine.models import clamp_score
from backend_visaprep.decision_engine.rubrics import CORE_ANSWER_DIMENSIONS, RubricConfig
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

CORE_AVERAGE_THRESHOLD = 60
ZERO_DIMENSION_PATTERN = "zero_dimension_pattern"


def core_average(rubric: dict[str, int]) -> float:
    return sum(rubric.get(d, 0) for d in CORE_ANSWER_DIMENSIONS) / len(CORE_ANSWER_DIMENSIONS)


def is_all_zero(rubric: dict[str, int]) -> bool:
    return all(v == 0 for v in rubric.values())


def has_zero_dimension_pattern(rubric: dict[str, int], config: RubricConfig) -> bool:
    domain = config.answer_domain_dimensions
    if not domain or not all(rubric.get(d, 0) == 0 for d in domain):
        return False
    return core_average(rubric) >= CORE_AVERAGE_THRESHOLD


def validate_reasoning_rubric(
    result: ReasoningResult,
    config: RubricConfig,
) -> ReasoningResult | ReasoningFailure:
    if is_all_zero(result.rubric):
        logger.warning("reasoning_rubric_all_zero", route=config.route, content_score=result.content_score)
        return ReasoningFailure("all_zero_rubric")

    if has_zero_dimension_pattern(result.rubric, config):
        corrected = clamp_score(core_average(result.rubric))
        logger.info(
            "reasoning_rubric_corrected",
            route=config.route,
            pattern=ZERO_DIMENSION_PATTERN,
            original_score=result.content_score,
            corrected_score=corrected,
        )
        return replace(
            result,
            content_score=corrected,
            corrections=result.corrections + (ZERO_DIMENSION_PATTERN,),
        )
    return result
