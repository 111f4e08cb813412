"""
Pytest tests for route rubrics and the final decision engine.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeReasoningService

UK_HISTORY = (
    {
        "question": "Which course will you study?",
        "answer": "I will study MSc Data Analytics at the University of Leeds and my course modules "
        "include machine learning and business analytics.",
    },
    {
        "question": "How will you fund your studies?",
        "answer": "My father sponsors me and I hold £18,000 for maintenance in the bank for the full 28-day period.",
    },
    {
        "question": "Where will you live and what are your plans?",
        "answer": "I will live in university halls at £150 per week and I know I can only work 20 hours per "
        "week in term time. After graduating I will return to Nepal for a career in analytics.",
    },
)


def _summaries(*rows):
    from backend_visaprep.analysis_engine.models import ScoreSummary

    return tuple(ScoreSummary(overall=o, content=c, speech=s, body_language=b) for o, c, s, b in rows)


def _request(route="uk_student", history=UK_HISTORY, scores=()):
    from backend_visaprep.ai_engine import InterviewEvaluationRequest

    return InterviewEvaluationRequest(route=route, conversation_history=history, per_answer_scores=scores)


# --- Rubrics ---


@pytest.mark.parametrize(
    "overall,weakest,expected",
    [
        (80, 75, "accepted"),
        (80, 69, "borderline"),
        (74, 75, "borderline"),
        (80, 45, "rejected"),
        (59, 75, "rejected"),
    ],
)
def test_uk_threshold_predicate(overall, weakest, expected):
    """UK: accept >= 75 with every dimension >= 70; reject < 60 or any dimension < 50."""
    from backend_visaprep.decision_engine.rubrics import get_rubric

    config = get_rubric("uk_student")
    dims = {d: 80 for d in config.dimensions}
    dims["financialRequirement"] = weakest
    assert config.decide(overall, dims).value == expected


def test_usa_threshold_predicate():
    from backend_visaprep.decision_engine.rubrics import get_rubric

    config = get_rubric("usa_f1")
    dims = {"communication": 80, "content": 60, "financials": 70, "intent": 65}
    assert config.decide(75, dims).value == "accepted"
    assert config.decide(70, dims).value == "borderline"
    assert config.decide(70, {**dims, "intent": 39}).value == "rejected"


def test_route_normalization():
    from backend_visaprep.decision_engine.rubrics import ROUTE_UK_STUDENT, ROUTE_USA_F1, get_rubric

    assert get_rubric(" UK_Student ").route == ROUTE_UK_STUDENT
    assert get_rubric("schengen").route == ROUTE_USA_F1
    assert get_rubric(None).route == ROUTE_USA_F1


def test_route_weights_sum_to_one():
    from backend_visaprep.decision_engine.rubrics import RUBRICS

    for config in RUBRICS.values():
        assert sum(config.dimension_weights.values()) == pytest.approx(1.0)
        assert set(config.dimension_weights) == set(config.dimensions)


# --- Tier 1: per-answer scores ---


def test_strong_uk_scores_are_accepted():
    """Averages of 80 on every category -> accepted from per-answer scores."""
    from backend_visaprep.decision_engine.engine import evaluate_final

    report = evaluate_final(_request(scores=_summaries((78, 80, 82, 70), (80, 82, 78, 70), (82, 78, 80, 70))))
    assert report.source.value == "per_answer_scores"
    assert report.decision.value == "accepted"
    assert report.overall == 80
    assert set(report.dimensions) == {
        "communication",
        "courseAndUniversityFit",
        "financialRequirement",
        "accommodationLogistics",
        "complianceCredibility",
        "postStudyIntent",
    }


def test_weak_speech_caps_decision_at_borderline():
    """Speech average 65 lands on the speech dimensions, below the 70 accept floor."""
    from backend_visaprep.decision_engine.engine import evaluate_final

    report = evaluate_final(_request(scores=_summaries((80, 80, 65, 70), (80, 80, 65, 70), (80, 80, 65, 70))))
    assert report.decision.value == "borderline"
    assert report.dimensions["communication"] == 65
    assert report.dimensions["complianceCredibility"] == 65
    assert report.dimensions["financialRequirement"] == 80
    assert "Delivery was hesitant or unclear." in report.weaknesses


# --- Tier 2: transcript keywords ---


def test_uk_transcript_keywords():
    from backend_visaprep.decision_engine.engine import evaluate_final

    report = evaluate_final(_request())
    assert report.source.value == "transcript_keywords"
    assert report.dimensions == {
        "communication": 68,
        "courseAndUniversityFit": 72,
        "financialRequirement": 75,
        "accommodationLogistics": 68,
        "complianceCredibility": 70,
        "postStudyIntent": 62,
    }
    assert report.overall == 70
    assert report.decision.value == "borderline"


def test_usa_transcript_without_detail_is_rejected():
    from backend_visaprep.decision_engine.engine import evaluate_final

    history = ({"question": "Why this university?", "answer": "Yes."},)
    report = evaluate_final(_request(route="usa_f1", history=history))
    assert report.decision.value == "rejected"
    assert report.dimensions["financials"] == 50
    assert any("fuller" in r for r in report.recommendations)


def test_transcript_signals():
    from backend_visaprep.decision_engine.fallback import transcript_signals

    signals = transcript_signals("I know the 28 day rule and need £18,000; I will work 20 hours.")
    assert signals["twenty_eight_day_rule"] is True
    assert signals["maintenance_amount"] is True
    assert signals["work_hour_limit"] is True
    assert signals["accommodation_detail"] is False


# --- Reasoning service path ---


def _uk_raw(**dims):
    base = {
        "communication": 80,
        "courseAndUniversityFit": 80,
        "financialRequirement": 80,
        "accommodationLogistics": 80,
        "complianceCredibility": 80,
        "postStudyIntent": 80,
    }
    base.update(dims)
    return {
        "decision": "accepted",
        "overall": 85,
        "dimensions": base,
        "summary": "Well prepared.",
        "strengths": ["Specific finances"],
        "weaknesses": [],
        "recommendations": [f"rec {i}" for i in range(15)],
    }


def test_reasoning_verdict_is_recomputed_from_thresholds():
    """A weak dimension overrides the model's own "accepted"."""
    from backend_visaprep.decision_engine.engine import evaluate_final

    service = FakeReasoningService(final_result=_uk_raw(financialRequirement=65))
    report = evaluate_final(_request(), service)
    assert report.source.value == "reasoning_service"
    assert report.decision.value == "borderline"
    assert report.overall == 85
    assert len(report.recommendations) == 10
    assert len(service.final_calls) == 1


def test_reasoning_values_are_clamped():
    from backend_visaprep.decision_engine.engine import evaluate_final

    raw = _uk_raw(communication=140)
    raw["overall"] = -3
    report = evaluate_final(_request(), FakeReasoningService(final_result=raw))
    assert report.dimensions["communication"] == 100
    assert report.overall == 0
    assert report.decision.value == "rejected"


def test_incomplete_reasoning_falls_back_to_scores():
    """A missing dimension discards the reasoning verdict."""
    from backend_visaprep.decision_engine.engine import evaluate_final

    raw = _uk_raw()
    del raw["dimensions"]["postStudyIntent"]
    report = evaluate_final(
        _request(scores=_summaries((80, 80, 80, 70))), FakeReasoningService(final_result=raw)
    )
    assert report.source.value == "per_answer_scores"


def test_report_from_reasoning_requires_overall():
    from backend_visaprep.decision_engine.engine import report_from_reasoning
    from backend_visaprep.decision_engine.rubrics import get_rubric

    raw = _uk_raw()
    raw.pop("overall")
    assert report_from_reasoning(raw, get_rubric("uk_student")) is None


def test_raising_service_falls_through_to_scores():
    """A service that raises is logged and the per-answer tier decides."""
    from backend_visaprep.decision_engine.engine import evaluate_final

    report = evaluate_final(
        _request(scores=_summaries((80, 80, 80, 70), (80, 80, 80, 70), (80, 80, 80, 70))),
        FakeReasoningService(final_result=RuntimeError("boom")),
    )
    assert report.source.value == "per_answer_scores"
    assert report.decision.value == "accepted"
    assert report.overall == 80


def test_raising_service_without_scores_uses_transcript():
    from backend_visaprep.decision_engine.engine import evaluate_final

    report = evaluate_final(_request(), FakeReasoningService(final_result=TimeoutError("slow")))
    assert report.source.value == "transcript_keywords"


def test_failing_fallback_yields_safe_default():
    from backend_visaprep.decision_engine.engine import SAFE_DEFAULT_SUMMARY, evaluate_final

    with patch(
        "backend_visaprep.decision_engine.engine.evaluate_from_scores",
        side_effect=RuntimeError("boom"),
    ):
        report = evaluate_final(
            _request(scores=_summaries((80, 80, 80, 70))),
            FakeReasoningService(final_result=RuntimeError("boom")),
        )
    assert report.source.value == "safe_default"
    assert report.decision.value == "borderline"
    assert report.overall == 60
    assert report.summary == SAFE_DEFAULT_SUMMARY
    assert report.to_dict()["dimensions"] == {"communication": 60, "credibility": 60}
