"""
Transcription-confidence tolerance.

Very low speech-to-text confidence can itself drag the content score down. For
routes that enable the rule, a low content score on a low-confidence transcript
gets a single fixed boost. The aggregator calls this exactly once per answer.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_visaprep.analysis_engine.models import clamp_score
from backend_visaprep.config.settings import (
    ASR_BOOST_PERCENTAGE,
    ASR_CONFIDENCE_THRESHOLD,
    ASR_SCORE_THRESHOLD,
)
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConfidenceAdjustment:
    score: int
    applied: bool
    original_score: int
    boost_amount: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "applied": self.applied,
            "originalScore": self.original_score,
            "boostedScore": self.score,
            "boostAmount": round(self.boost_amount, 2),
        }


def apply_transcription_tolerance(
    content_score: float,
    transcription_confidence: float | None,
    *,
    enabled: bool,
    confidence_threshold: float = ASR_CONFIDENCE_THRESHOLD,
    score_threshold: float = ASR_SCORE_THRESHOLD,
    boost_percentage: float = ASR_BOOST_PERCENTAGE,
) -> ConfidenceAdjustment:
    """Boost content by boost_percentage when confidence and score are both below threshold."""
    original = clamp_score(content_score)
    if (
        not enabled
        or transcription_confidence is None
        or transcription_confidence >= confidence_threshold
        or original >= score_threshold
    ):
        return ConfidenceAdjustment(score=original, applied=False, original_score=original)

    boost_amount = original * boost_percentage
    boosted = clamp_score(original + boost_amount)
    logger.info(
        "transcription_boost_applied",
        original_score=original,
        transcription_confidence=round(float(transcription_confidence), 3),
        boost_percentage=boost_percentage,
        boosted_score=boosted,
    )
    return ConfidenceAdjustment(score=boosted, applied=True, original_score=original, boost_amount=boost_amount)
