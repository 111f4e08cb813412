"""
Route-specific prompts for the reasoning service.

Wording is not part of any contract; only the JSON shapes requested here are
relied on by the response parsers.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from backend_visaprep.analysis_engine.models import ScoreSummary
from backend_visaprep.decision_engine.rubrics import ROUTE_UK_STUDENT, RubricConfig

ANSWER_CONTENT_FORMULA = {
    ROUTE_UK_STUDENT: (
        "contentScore = 0.20*communication + 0.15*relevance + 0.25*specificity + 0.15*consistency"
        " + 0.15*courseAndUniversityFit + 0.10*financialRequirement"
    ),
}
DEFAULT_CONTENT_FORMULA = (
    "contentScore = 0.25*communication + 0.20*relevance + 0.25*specificity + 0.15*consistency"
    " + 0.10*academicPreparedness + 0.05*financialCapability"
)

DIMENSION_GUIDANCE = {
    "communication": "structure, clarity, coherence; natural rather than coached",
    "relevance": "does the answer directly address the question asked",
    "specificity": "concrete amounts, names, modules, dates instead of generic phrases",
    "consistency": "agreement with facts stated earlier in the interview",
    "courseAndUniversityFit": "names specific modules and explains why this course fits",
    "financialRequirement": "specific maintenance amount and the 28-day bank balance rule",
    "complianceAndIntent": "20 hours/week work limit, CAS rules, clear post-study plan",
    "academicPreparedness": "why this program at this university, linked to background",
    "financialCapability": "specific amounts, sponsor identity, occupation and income",
    "intentToReturn": "concrete ties to the home country",
    "accommodationLogistics": "location, weekly or monthly cost, booked or planned",
    "complianceCredibility": "understands work rules, applied independently of an agent",
    "postStudyIntent": "clear plan after graduation without immigration intent",
    "content": "solid academic rationale for this program",
    "financials": "specific amounts and sponsor details",
    "intent": "strong home ties and concrete return plans",
}


def _profile_lines(profile: Mapping[str, Any]) -> str:
    return "\n".join(
        [
            f"Student: {profile.get('name') or 'Unknown'} from {profile.get('country') or 'Unknown'}",
            f"University: {profile.get('intendedUniversity') or 'Not specified'}",
            f"Field of Study: {profile.get('fieldOfStudy') or 'Not specified'}",
            f"Previous Education: {profile.get('previousEducation') or 'Not specified'}",
        ]
    )


def _dimension_lines(dimensions: Sequence[str]) -> str:
    return "\n".join(f"- {d} (0-100): {DIMENSION_GUIDANCE.get(d, '')}" for d in dimensions)


def answer_system_prompt(rubric: RubricConfig) -> str:
    return (
        f"You are a strict visa interview evaluator for the {rubric.label} route. "
        "Score one answer against the rubric below. Penalise vague, coached, evasive "
        "or off-topic answers heavily. Return STRICT JSON only, no markdown.\n\n"
        f"RUBRIC:\n{_dimension_lines(rubric.answer_dimensions)}\n\n"
        f"{ANSWER_CONTENT_FORMULA.get(rubric.route, DEFAULT_CONTENT_FORMULA)}"
    )


def build_answer_prompt(
    rubric: RubricConfig,
    question: str,
    answer: str,
    student_profile: Mapping[str, Any],
    conversation_history: Sequence[Mapping[str, Any]],
    memory_facts: Sequence[str] = (),
    contradiction: str = "none",
) -> str:
    history = "\n".join(
        f"Q: {h.get('question', '')}\nA: {h.get('answer', '')}" for h in conversation_history
    )
    memory = "\n".join(f"- {fact}" for fact in memory_facts) or "(nothing recorded yet)"
    warning = ""
    if contradiction != "none":
        warning = (
            f"\n\nCONTRADICTION DETECTED: {contradiction.upper()} inconsistency with earlier answers. "
            "Reduce the consistency score accordingly."
        )
    schema = {
        "rubric": {d: "<number 0-100>" for d in rubric.answer_dimensions},
        "summary": "<2-3 sentence evaluation>",
        "recommendations": ["<improvement>"],
        "redFlags": ["<red flag if any>"],
        "contentScore": "<number 0-100 from the formula>",
    }
    return (
        f"INTERVIEW CONTEXT:\nRoute: {rubric.route}\n{_profile_lines(student_profile)}\n\n"
        f"FACTS STATED EARLIER:\n{memory}\n\n"
        f"PREVIOUS CONVERSATION:\n{history or '(No previous questions)'}\n\n"
        f"QUESTION:\n{question}\n\nANSWER TO SCORE:\n{answer}{warning}\n\n"
        f"OUTPUT FORMAT:\n{json.dumps(schema, indent=2)}"
    )


def final_system_prompt(rubric: RubricConfig) -> str:
    red_flags = "\n".join(f"- {flag}" for flag in rubric.red_flags)
    return (
        f"You are a strict {rubric.label} officer making the FINAL assessment of a full "
        "interview. Score every dimension independently; one weak dimension must cap the "
        "outcome.\n\n"
        f"DIMENSIONS:\n{_dimension_lines(rubric.dimensions)}\n\n"
        f"THRESHOLDS: accepted when overall >= {rubric.accept_overall} and every dimension >= "
        f"{rubric.accept_min_dimension}; rejected when overall < {rubric.reject_overall} or any "
        f"dimension < {rubric.reject_min_dimension}; otherwise borderline.\n\n"
        f"MAJOR RED FLAGS:\n{red_flags}\n\nReturn STRICT JSON only, no markdown."
    )


def build_final_prompt(
    rubric: RubricConfig,
    student_profile: Mapping[str, Any],
    conversation_history: Sequence[Mapping[str, Any]],
    per_answer_scores: Sequence[ScoreSummary] = (),
) -> str:
    entries = []
    for i, turn in enumerate(conversation_history):
        entry = f"Q{i + 1}: {turn.get('question', '')}\nA{i + 1}: {turn.get('answer', '')}"
        if i < len(per_answer_scores):
            s = per_answer_scores[i]
            entry += (
                f"\n[Score: {s.overall}/100 (Content: {s.content}, Speech: {s.speech}, "
                f"Body: {s.body_language})]"
            )
        entries.append(entry)

    average_note = ""
    if per_answer_scores:
        avg = round(sum(s.overall for s in per_answer_scores) / len(per_answer_scores))
        average_note = f"\n\nPER-ANSWER AVERAGE SCORE: {avg}/100"

    transcript = "\n\n".join(entries) or "(empty)"
    schema = {
        "decision": "accepted | rejected | borderline",
        "overall": "<number 0-100>",
        "dimensions": {d: "<number 0-100>" for d in rubric.dimensions},
        "summary": "<2-3 sentence final assessment>",
        "strengths": ["<strength>"],
        "weaknesses": ["<weakness>"],
        "recommendations": ["<improvement>"],
    }
    return (
        f"STUDENT PROFILE:\n{_profile_lines(student_profile)}{average_note}\n\n"
        f"FULL INTERVIEW TRANSCRIPT:\n{transcript}\n\n"
        "Keep the decision consistent with the per-answer scores where provided.\n\n"
        f"OUTPUT FORMAT:\n{json.dumps(schema, indent=2)}"
    )
