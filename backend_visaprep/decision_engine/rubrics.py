"""
Route rubrics: per-country dimension lists, weights and the decision predicate.

One RubricConfig per route. The aggregator reads the per-answer settings
(answer weights, transcription tolerance, rubric validation); the final
decision engine reads the final dimensions, their fallback weights and the
threshold predicate. Unknown routes resolve to the US student route.

Acceptance gates on the weakest dimension as well as the overall score, so a
strong average cannot hide one disqualifying dimension.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from backend_visaprep.analysis_engine.models import AnswerWeights
from backend_visaprep.analysis_engine.weights import DEFAULT_ANSWER_WEIGHTS

ROUTE_USA_F1 = "usa_f1"
ROUTE_UK_STUDENT = "uk_student"
DEFAULT_ROUTE = ROUTE_USA_F1

CORE_ANSWER_DIMENSIONS = ("communication", "relevance", "specificity", "consistency")


class Decision(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BORDERLINE = "borderline"


@dataclass(frozen=True)
class RubricConfig:
    route: str
    label: str
    # final report
    dimensions: tuple[str, ...]
    dimension_weights: Mapping[str, float]
    speech_dimensions: tuple[str, ...]
    accept_overall: int
    accept_min_dimension: int
    reject_overall: int
    reject_min_dimension: int
    # per-answer
    answer_weights: AnswerWeights = DEFAULT_ANSWER_WEIGHTS
    answer_domain_dimensions: tuple[str, ...] = ()
    transcription_tolerance: bool = False
    validate_reasoning_rubric: bool = False
    red_flags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def answer_dimensions(self) -> tuple[str, ...]:
        return CORE_ANSWER_DIMENSIONS + self.answer_domain_dimensions

    def decide(self, overall: float, dimensions: Mapping[str, float]) -> Decision:
        """Threshold predicate on (overall, weakest dimension)."""
        values = [float(dimensions[d]) for d in self.dimensions if d in dimensions]
        weakest = min(values) if values else float(overall)
        if overall >= self.accept_overall and weakest >= self.accept_min_dimension:
            return Decision.ACCEPTED
        if overall < self.reject_overall or weakest < self.reject_min_dimension:
            return Decision.REJECTED
        return Decision.BORDERLINE


UK_STUDENT_RUBRIC = RubricConfig(
    route=ROUTE_UK_STUDENT,
    label="UK Student visa (pre-CAS credibility)",
    dimensions=(
        "communication",
        "courseAndUniversityFit",
        "financialRequirement",
        "accommodationLogistics",
        "complianceCredibility",
        "postStudyIntent",
    ),
    dimension_weights={
        "communication": 0.2,
        "courseAndUniversityFit": 0.2,
        "financialRequirement": 0.25,
        "accommodationLogistics": 0.15,
        "complianceCredibility": 0.1,
        "postStudyIntent": 0.1,
    },
    speech_dimensions=("communication", "complianceCredibility"),
    accept_overall=75,
    accept_min_dimension=70,
    reject_overall=60,
    reject_min_dimension=50,
    answer_domain_dimensions=("courseAndUniversityFit", "financialRequirement", "complianceAndIntent"),
    transcription_tolerance=True,
    validate_reasoning_rubric=True,
    red_flags=(
        "Cannot name 3+ course modules or program details",
        "No understanding of the 28-day bank balance rule",
        "Complete accommodation ignorance",
        "Work rule confusion (20 hours/week limit)",
        "Heavy agent dependency without independent knowledge",
        "Financial contradictions or vagueness",
    ),
)

USA_F1_RUBRIC = RubricConfig(
    route=ROUTE_USA_F1,
    label="US F1 student visa",
    dimensions=("communication", "content", "financials", "intent"),
    dimension_weights={"communication": 0.4, "content": 0.3, "financials": 0.2, "intent": 0.1},
    speech_dimensions=("communication",),
    accept_overall=75,
    accept_min_dimension=60,
    reject_overall=55,
    reject_min_dimension=40,
    answer_domain_dimensions=("academicPreparedness", "financialCapability", "intentToReturn"),
    red_flags=(
        "Financial vagueness (no specific amounts mentioned)",
        "Contradictions between answers",
        "Weak return intent with relatives in the US",
        "Cannot explain program fit beyond rankings",
    ),
)

RUBRICS: dict[str, RubricConfig] = {
    ROUTE_UK_STUDENT: UK_STUDENT_RUBRIC,
    ROUTE_USA_F1: USA_F1_RUBRIC,
}


def normalize_route(route: str | None) -> str:
    key = (route or "").strip().lower()
    return key if key in RUBRICS else DEFAULT_ROUTE


def get_rubric(route: str | None) -> RubricConfig:
    return RUBRICS[normalize_route(route)]
