"""
Interview session lifecycle: collecting -> finalizing -> reported.

Holds the ordered, append-only per-answer score list, the transcript and the
session memory for one interview. Callers serialize calls per session.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from backend_visaprep.ai_engine.reasoning_service import InterviewEvaluationRequest, ReasoningService
from backend_visaprep.analysis_engine.aggregator import AnswerEvaluation, score_answer
from backend_visaprep.analysis_engine.models import (
    AnswerOutcome,
    AnswerSubmission,
    InterviewContext,
    PerAnswerScore,
    ScoreSummary,
)
from backend_visaprep.behavioral_memory import SessionMemory
from backend_visaprep.config.settings import ScoringSettings
from backend_visaprep.core.exceptions import SessionStateError
from backend_visaprep.decision_engine.engine import evaluate_final
from backend_visaprep.decision_engine.models import FinalReport
from backend_visaprep.decision_engine.rubrics import normalize_route
from backend_visaprep.visaprep_logging import bind_session


class SessionState(str, Enum):
    COLLECTING = "collecting"
    FINALIZING = "finalizing"
    REPORTED = "reported"


class InterviewSession:
    def __init__(
        self,
        session_id: str,
        route: str | None,
        student_profile: dict[str, Any] | None = None,
        service: ReasoningService | None = None,
        settings: ScoringSettings | None = None,
    ) -> None:
        self.session_id = session_id
        self.route = normalize_route(route)
        self.student_profile = dict(student_profile or {})
        self.service = service
        self.settings = settings
        self.state = SessionState.COLLECTING
        self.memory = SessionMemory()
        self.report: FinalReport | None = None
        self._scores: list[PerAnswerScore] = []
        self._history: list[dict[str, Any]] = []
        self._log = bind_session(session_id).bind(route=self.route)

    @property
    def scores(self) -> tuple[PerAnswerScore, ...]:
        return tuple(self._scores)

    @property
    def history(self) -> tuple[dict[str, Any], ...]:
        return tuple(self._history)

    def _require(self, state: SessionState, action: str) -> None:
        if self.state is not state:
            raise SessionStateError(f"Cannot {action} while session is {self.state.value}")

    def record_answer(self, submission: AnswerSubmission) -> AnswerEvaluation:
        """Score one answer and append it. Empty answers are returned but not recorded."""
        self._require(SessionState.COLLECTING, "record an answer")
        evaluation = score_answer(
            submission,
            InterviewContext(
                route=self.route,
                student_profile=self.student_profile,
                conversation_history=list(self._history),
            ),
            self.memory,
            self.service,
            self.settings,
        )
        if evaluation.outcome is AnswerOutcome.EMPTY:
            self._log.info("session_answer_not_recorded", question_index=len(self._scores))
            return evaluation

        self._scores.append(evaluation.score)
        turn: dict[str, Any] = {"question": submission.question, "answer": submission.answer}
        if submission.question_type:
            turn["questionType"] = submission.question_type
        self._history.append(turn)
        self.memory = evaluation.memory
        self._log.info(
            "session_answer_recorded",
            question_index=len(self._scores) - 1,
            overall=evaluation.score.overall,
        )
        return evaluation

    def finalize(self) -> FinalReport:
        """Run the final evaluation once; the session is terminal afterwards."""
        self._require(SessionState.COLLECTING, "finalize")
        self.state = SessionState.FINALIZING
        self._log.info("session_finalizing", answers=len(self._scores))
        report = evaluate_final(
            InterviewEvaluationRequest(
                route=self.route,
                student_profile=self.student_profile,
                conversation_history=tuple(self._history),
                per_answer_scores=tuple(ScoreSummary.from_score(s) for s in self._scores),
            ),
            self.service,
        )
        self.report = report
        self.state = SessionState.REPORTED
        self._log.info("session_reported", decision=report.decision.value, overall=report.overall)
        return report
