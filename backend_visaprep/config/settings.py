"""
Scoring policy settings.

The thresholds below (short-answer floor, non-English confidence floor and
penalty, missing-telemetry body score, off-topic caps, transcription boost) are
tunable policy, not invariants. Each can be overridden from the environment;
get_settings() reads them once per process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from backend_visaprep.config.env import (
    get_openai_api_key,
    get_openai_base_url,
    get_openai_model,
    get_reasoning_timeout_sec,
    load_visaprep_env,
)

MIN_WORD_COUNT = 10
NON_ENGLISH_CONFIDENCE_FLOOR = 0.2
NON_ENGLISH_PENALTY = 0.5
TARGET_LANGUAGE = "en"
MISSING_BODY_SCORE = 25
OFF_TOPIC_CONTENT_CAP = 15
OFF_TOPIC_SPEECH_CAP = 50
ASR_CONFIDENCE_THRESHOLD = 0.5
ASR_SCORE_THRESHOLD = 40
ASR_BOOST_PERCENTAGE = 0.25


@dataclass(frozen=True)
class ScoringSettings:
    """Tunables for per-answer scoring and the reasoning service client."""

    min_word_count: int = MIN_WORD_COUNT
    non_english_confidence_floor: float = NON_ENGLISH_CONFIDENCE_FLOOR
    non_english_penalty: float = NON_ENGLISH_PENALTY
    target_language: str = TARGET_LANGUAGE
    missing_body_score: int = MISSING_BODY_SCORE
    off_topic_content_cap: int = OFF_TOPIC_CONTENT_CAP
    off_topic_speech_cap: int = OFF_TOPIC_SPEECH_CAP
    asr_confidence_threshold: float = ASR_CONFIDENCE_THRESHOLD
    asr_score_threshold: int = ASR_SCORE_THRESHOLD
    asr_boost_percentage: float = ASR_BOOST_PERCENTAGE

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    reasoning_timeout_sec: float = 20.0


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> ScoringSettings:
    """
    Return the current application settings.

    Returns:
        ScoringSettings built from defaults, .env and environment overrides.
    """
    load_visaprep_env()
    return ScoringSettings(
        min_word_count=_env_int("MIN_WORD_COUNT", MIN_WORD_COUNT),
        non_english_confidence_floor=_env_float("NON_ENGLISH_CONFIDENCE_FLOOR", NON_ENGLISH_CONFIDENCE_FLOOR),
        non_english_penalty=_env_float("NON_ENGLISH_PENALTY", NON_ENGLISH_PENALTY),
        target_language=(os.getenv("TARGET_LANGUAGE") or TARGET_LANGUAGE).strip().lower() or TARGET_LANGUAGE,
        missing_body_score=_env_int("MISSING_BODY_SCORE", MISSING_BODY_SCORE),
        off_topic_content_cap=_env_int("OFF_TOPIC_CONTENT_CAP", OFF_TOPIC_CONTENT_CAP),
        off_topic_speech_cap=_env_int("OFF_TOPIC_SPEECH_CAP", OFF_TOPIC_SPEECH_CAP),
        asr_confidence_threshold=_env_float("ASR_CONFIDENCE_THRESHOLD", ASR_CONFIDENCE_THRESHOLD),
        asr_score_threshold=_env_int("ASR_SCORE_THRESHOLD", ASR_SCORE_THRESHOLD),
        asr_boost_percentage=_env_float("ASR_BOOST_PERCENTAGE", ASR_BOOST_PERCENTAGE),
        openai_api_key=get_openai_api_key(),
        openai_model=get_openai_model(),
        openai_base_url=get_openai_base_url(),
        reasoning_timeout_sec=get_reasoning_timeout_sec(),
    )
