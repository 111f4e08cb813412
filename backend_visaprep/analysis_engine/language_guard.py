"""
Language guard: flat penalty for answers detected in a non-target language.

Non-graduated: any detection above the confidence floor halves the content
score, however certain the detector was.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_visaprep.config.settings import (
    NON_ENGLISH_CONFIDENCE_FLOOR,
    NON_ENGLISH_PENALTY,
    TARGET_LANGUAGE,
)
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

RED_FLAG_NON_TARGET_LANGUAGE = "Non-English language detected"


@dataclass(frozen=True)
class LanguageCheck:
    language_code: str | None
    confidence: float | None
    penalized: bool
    multiplier: float
    warning: str | None = None

    def apply(self, content_score: float) -> float:
        return content_score * self.multiplier


def _primary_subtag(code: str) -> str:
    return code.strip().lower().replace("_", "-").split("-")[0]


def check_language(
    language_code: str | None,
    language_confidence: float | None,
    *,
    target_language: str = TARGET_LANGUAGE,
    confidence_floor: float = NON_ENGLISH_CONFIDENCE_FLOOR,
    penalty: float = NON_ENGLISH_PENALTY,
) -> LanguageCheck:
    """Decide whether the detected language triggers the content penalty."""
    if not language_code or not language_code.strip():
        return LanguageCheck(language_code=None, confidence=language_confidence, penalized=False, multiplier=1.0)

    detected = _primary_subtag(language_code)
    confidence = float(language_confidence) if language_confidence is not None else 0.0
    if detected == _primary_subtag(target_language) or confidence <= confidence_floor:
        return LanguageCheck(language_code=detected, confidence=confidence, penalized=False, multiplier=1.0)

    multiplier = max(0.0, 1.0 - penalty)
    warning = (
        f"Answer appears to be in '{detected}' (confidence {confidence:.2f}); "
        f"the interview must be conducted in '{target_language}'. "
        f"Content score reduced by {int(round(penalty * 100))}%."
    )
    logger.info(
        "language_penalty_applied",
        language_code=detected,
        confidence=round(confidence, 3),
        multiplier=multiplier,
    )
    return LanguageCheck(
        language_code=detected,
        confidence=confidence,
        penalized=True,
        multiplier=multiplier,
        warning=warning,
    )
