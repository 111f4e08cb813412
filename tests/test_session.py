"""
Pytest tests for the interview session lifecycle.
"""

from __future__ import annotations

import pytest

from conftest import FakeReasoningService

COST_QUESTION = "What is the total cost of your studies and who is your sponsor?"
COST_ANSWER = "The total cost is $45,000 per year and my father will sponsor me fully from his savings."
PAYMENT_QUESTION = "How much does your program cost and who pays for it?"
PAYMENT_ANSWER = "The program cost is now $60,000 per year and my father pays it from his business income."


def _session(service, settings):
    from backend_visaprep.decision_engine.session import InterviewSession

    return InterviewSession(
        "session-1", "UK_STUDENT", {"name": "Asha", "country": "Nepal"}, service=service, settings=settings
    )


def _answer(question, answer, question_type=None):
    from backend_visaprep.analysis_engine.models import AnswerSubmission, BodyLanguageScore

    return AnswerSubmission(
        question=question,
        answer=answer,
        body_language=BodyLanguageScore(overall_score=75),
        question_type=question_type,
    )


def test_answers_accumulate_in_order(settings, make_result):
    service = FakeReasoningService(answer_result=make_result(70, route="uk_student"))
    session = _session(service, settings)
    assert session.route == "uk_student"

    session.record_answer(_answer(COST_QUESTION, COST_ANSWER, "financial"))
    session.record_answer(_answer(PAYMENT_QUESTION, PAYMENT_ANSWER, "financial"))

    assert len(session.scores) == 2
    assert [t["question"] for t in session.history] == [COST_QUESTION, PAYMENT_QUESTION]
    assert session.history[0]["questionType"] == "financial"
    assert session.memory.total_cost == 45000.0


def test_memory_carries_into_later_answers(settings, make_result):
    """Facts from answer 1 reach the reasoning request of answer 2 and flag the contradiction."""
    service = FakeReasoningService(answer_result=make_result(70, route="uk_student"))
    session = _session(service, settings)

    session.record_answer(_answer(COST_QUESTION, COST_ANSWER))
    second = session.record_answer(_answer(PAYMENT_QUESTION, PAYMENT_ANSWER))

    request = service.answer_calls[1]
    assert request.contradiction == "major"
    assert "Total cost: 45,000" in request.memory_facts
    assert request.conversation_history[0]["answer"] == COST_ANSWER
    assert "Major contradiction with earlier answers" in second.score.red_flags


def test_empty_answer_is_not_recorded(settings):
    from backend_visaprep.analysis_engine.models import AnswerOutcome

    session = _session(FakeReasoningService(), settings)
    evaluation = session.record_answer(_answer(COST_QUESTION, "[inaudible]"))
    assert evaluation.outcome is AnswerOutcome.EMPTY
    assert session.scores == ()
    assert session.history == ()


def test_finalize_uses_recorded_scores(settings, make_result):
    from backend_visaprep.decision_engine.session import SessionState

    service = FakeReasoningService(answer_result=make_result(70, route="uk_student"))
    session = _session(service, settings)
    session.record_answer(_answer(COST_QUESTION, COST_ANSWER))

    report = session.finalize()
    assert session.state is SessionState.REPORTED
    assert session.report is report
    assert report.source.value == "per_answer_scores"
    request = service.final_calls[0]
    assert request.route == "uk_student"
    assert request.per_answer_scores[0].overall == session.scores[0].overall


def test_finalized_session_rejects_further_calls(settings):
    from backend_visaprep.core.exceptions import SessionStateError

    session = _session(FakeReasoningService(), settings)
    session.finalize()
    with pytest.raises(SessionStateError):
        session.finalize()
    with pytest.raises(SessionStateError):
        session.record_answer(_answer(COST_QUESTION, COST_ANSWER))
