"""
Final report model.

Created exactly once per interview, at finalization; immutable afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from backend_visaprep.decision_engine.rubrics import Decision


class ReportSource(str, Enum):
    """Which path produced the report."""

    REASONING_SERVICE = "reasoning_service"
    PER_ANSWER_SCORES = "per_answer_scores"
    TRANSCRIPT_KEYWORDS = "transcript_keywords"
    SAFE_DEFAULT = "safe_default"


@dataclass(frozen=True)
class FinalReport:
    decision: Decision
    overall: int
    dimensions: dict[str, int]
    summary: str
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    recommendations: tuple[str, ...]
    source: ReportSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.decision.value,
            "overall": self.overall,
            "dimensions": dict(self.dimensions),
            "summary": self.summary,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "recommendations": list(self.recommendations),
            "source": self.source.value,
        }
