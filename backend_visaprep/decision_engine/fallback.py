"""
Heuristic final evaluation used when the reasoning service is unavailable.

Tier 1 (per-answer scores exist): average the already-penalized per-answer
categories. Speech maps to the route's speech dimensions, content to the rest.

Tier 2 (no per-answer scores): keyword/regex detectors over the concatenated
answers plus average answer length. Lower confidence, same dimension shape.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from backend_visaprep.analysis_engine.models import ScoreSummary, clamp_score
from backend_visaprep.decision_engine.models import FinalReport, ReportSource
from backend_visaprep.decision_engine.rubrics import ROUTE_UK_STUDENT, Decision, RubricConfig
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

CONTENT_TARGET = 70
SPEECH_TARGET = 70
BODY_TARGET = 50
SHORT_ANSWER_WORDS = 30
COMMUNICATION_BASE = 35
COMMUNICATION_SPAN = 60
COMMUNICATION_WORDS = 45

SIGNAL_PATTERNS: dict[str, re.Pattern[str]] = {
    "twenty_eight_day_rule": re.compile(r"28[-\s]?day", re.IGNORECASE),
    "maintenance_amount": re.compile(r"(?:£|pound|gbp)\s*1[5-9],?\d{3}|£\s*2[0-5],?\d{3}", re.IGNORECASE),
    "module_names": re.compile(
        r"(?:module|course|subject|unit).*?(?:analytics|management|engineering|computing|finance|marketing)",
        re.IGNORECASE,
    ),
    "work_hour_limit": re.compile(r"20\s*hours?|part[-\s]?time\s*work", re.IGNORECASE),
    "accommodation_detail": re.compile(
        r"(?:accommodation|housing|halls?|dorm|flat|room).*?(?:£|pound|\d+\s*(?:per|/)\s*(?:week|month))",
        re.IGNORECASE,
    ),
    "finance": re.compile(r"fund|finance|bank|maintenance|proof|statement|tuition|fees|sponsor", re.IGNORECASE),
    "course_fit": re.compile(r"course|module|university|ranking|curriculum|faculty|program", re.IGNORECASE),
    "accommodation": re.compile(r"accommodation|rent|housing|dorm|hostel|flat|room|living", re.IGNORECASE),
    "compliance": re.compile(r"\bcas\b|\bukvi\b|visa|rules|work|hours", re.IGNORECASE),
    "intent": re.compile(r"return|plans after|post-study|career|job|graduate route", re.IGNORECASE),
}


def transcript_signals(text: str) -> dict[str, bool]:
    return {name: bool(pattern.search(text)) for name, pattern in SIGNAL_PATTERNS.items()}


def weighted_overall(dimensions: Mapping[str, int], weights: Mapping[str, float]) -> int:
    total = sum(weights.get(d, 0.0) for d in dimensions)
    if total <= 0:
        return clamp_score(sum(dimensions.values()) / max(1, len(dimensions)))
    return clamp_score(sum(weights.get(d, 0.0) * v for d, v in dimensions.items()) / total)


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def evaluate_from_scores(config: RubricConfig, scores: Sequence[ScoreSummary]) -> FinalReport:
    """Tier 1: average the per-answer categories."""
    avg_content = _average([s.content for s in scores])
    avg_speech = _average([s.speech for s in scores])
    avg_body = _average([s.body_language for s in scores])
    avg_overall = _average([s.overall for s in scores])

    content, speech = clamp_score(avg_content), clamp_score(avg_speech)
    dimensions = {d: (speech if d in config.speech_dimensions else content) for d in config.dimensions}
    overall = clamp_score(avg_overall)
    decision = config.decide(overall, dimensions)

    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[str] = []
    if avg_content >= CONTENT_TARGET:
        strengths.append("Answers were specific and relevant to the questions.")
    else:
        weaknesses.append("Answer content lacked specific details.")
        recommendations.append("Improve answer content: add specific details, numbers, and concrete examples.")
    if avg_speech >= SPEECH_TARGET:
        strengths.append("Clear, fluent delivery.")
    else:
        weaknesses.append("Delivery was hesitant or unclear.")
        recommendations.append("Improve speech delivery: reduce filler words, speak more clearly.")
    if avg_body >= BODY_TARGET:
        strengths.append("Composed body language.")
    else:
        weaknesses.append("Body language appeared disengaged.")
        recommendations.append("Improve body language: maintain eye contact, sit upright, use open gestures.")

    verdict = {
        Decision.ACCEPTED: "Strong performance across content, speech, and body language.",
        Decision.REJECTED: "Significant weaknesses detected in answer quality and delivery.",
        Decision.BORDERLINE: "Mixed performance with room for improvement.",
    }[decision]
    logger.info(
        "final_from_per_answer_scores",
        route=config.route,
        answers=len(scores),
        overall=overall,
        decision=decision.value,
    )
    return FinalReport(
        decision=decision,
        overall=overall,
        dimensions=dimensions,
        summary=f"Based on per-answer analysis: average score {overall}/100 across {len(scores)} questions. {verdict}",
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        recommendations=tuple(recommendations),
        source=ReportSource.PER_ANSWER_SCORES,
    )


def _uk_dimensions(signals: Mapping[str, bool], communication: int) -> dict[str, int]:
    if signals["twenty_eight_day_rule"] and signals["maintenance_amount"]:
        financial = 75
    else:
        financial = 55 if signals["finance"] else 35
    return {
        "communication": communication,
        "courseAndUniversityFit": 72 if signals["module_names"] else (55 if signals["course_fit"] else 40),
        "financialRequirement": financial,
        "accommodationLogistics": 68 if signals["accommodation_detail"] else (50 if signals["accommodation"] else 35),
        "complianceCredibility": 70 if signals["work_hour_limit"] else (55 if signals["compliance"] else 40),
        "postStudyIntent": 62 if signals["intent"] else 45,
    }


def _usa_dimensions(signals: Mapping[str, bool], communication: int) -> dict[str, int]:
    return {
        "communication": communication,
        "content": 65 if signals["course_fit"] else 55,
        "financials": 70 if signals["finance"] else 50,
        "intent": 65 if signals["intent"] else 50,
    }


def _uk_recommendations(signals: Mapping[str, bool]) -> list[str]:
    recs = []
    if not (signals["twenty_eight_day_rule"] and signals["maintenance_amount"]):
        recs.append("State the exact maintenance amount (£18,000+ for London) and the 28-day bank balance rule.")
    if not signals["module_names"]:
        recs.append("Name at least 3 specific modules from your course syllabus.")
    if not signals["accommodation_detail"]:
        recs.append("Give a specific accommodation plan: location, cost per week or month, booked or planned.")
    if not signals["work_hour_limit"]:
        recs.append("Show you understand the 20 hours/week work limit during term time.")
    if not signals["intent"]:
        recs.append("State post-study plans (return home or Graduate Route) with specifics.")
    return recs


def _usa_recommendations(signals: Mapping[str, bool]) -> list[str]:
    recs = []
    if not signals["finance"]:
        recs.append("Explain funding with specific amounts, sponsor name, occupation and income.")
    if not signals["course_fit"]:
        recs.append("Link your program and university to your background and career goals.")
    if not signals["intent"]:
        recs.append("State concrete ties to your home country and return plans.")
    return recs


def evaluate_from_transcript(config: RubricConfig, history: Sequence[Mapping[str, Any]]) -> FinalReport:
    """Tier 2: keyword detectors plus average answer length."""
    answers = [str(turn.get("answer") or "") for turn in history]
    text = " ".join(answers)
    words = text.split()
    avg_len = len(words) / len(answers) if answers else 0.0
    signals = transcript_signals(text)

    communication = clamp_score(
        COMMUNICATION_BASE + min(COMMUNICATION_SPAN, (avg_len / COMMUNICATION_WORDS) * COMMUNICATION_SPAN)
    )
    if config.route == ROUTE_UK_STUDENT:
        dimensions = _uk_dimensions(signals, communication)
        recommendations = _uk_recommendations(signals)
    else:
        dimensions = _usa_dimensions(signals, communication)
        recommendations = _usa_recommendations(signals)
    if avg_len < SHORT_ANSWER_WORDS:
        recommendations.append("Give fuller, structured answers with concrete numbers and examples.")

    overall = weighted_overall(dimensions, config.dimension_weights)
    decision = config.decide(overall, dimensions)
    detected = [name.replace("_", " ") for name, hit in signals.items() if hit]
    logger.warning(
        "final_from_transcript_keywords",
        route=config.route,
        answers=len(answers),
        overall=overall,
        decision=decision.value,
    )
    return FinalReport(
        decision=decision,
        overall=overall,
        dimensions=dimensions,
        summary="Heuristic summary based on coverage of key topics, answer length, and credibility indicators.",
        strengths=tuple(f"Mentioned {d}." for d in detected),
        weaknesses=tuple(f"Weak {d}." for d, v in dimensions.items() if v < config.accept_min_dimension),
        recommendations=tuple(recommendations),
        source=ReportSource.TRANSCRIPT_KEYWORDS,
    )
