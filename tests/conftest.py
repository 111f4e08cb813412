"""
Pytest fixtures for VisaPrep tests. The reasoning service is replaced with an
in-memory fake so no test reaches the network.
"""

from __future__ import annotations

from typing import Any

import pytest

from backend_visaprep.ai_engine import ReasoningFailure, ReasoningResult

SPONSOR_QUESTION = "Who is your financial sponsor and how will you pay for your tuition?"
SPONSOR_ANSWER = (
    "My father is my financial sponsor. He is a civil engineer and he will pay my "
    "tuition of $45,000 per year from his savings and salary."
)
HOBBY_ANSWER = (
    "I really enjoy playing football and painting landscapes with my friends every "
    "weekend in the park near our house."
)


class FakeReasoningService:
    """Records requests and returns canned results; an Exception result is raised."""

    def __init__(self, answer_result: Any = None, final_result: Any = None) -> None:
        self.answer_result = answer_result or ReasoningFailure("not_configured")
        self.final_result = final_result or ReasoningFailure("not_configured")
        self.answer_calls: list[Any] = []
        self.final_calls: list[Any] = []

    def score_answer(self, request):
        self.answer_calls.append(request)
        if isinstance(self.answer_result, Exception):
            raise self.answer_result
        return self.answer_result

    def evaluate_interview(self, request):
        self.final_calls.append(request)
        if isinstance(self.final_result, Exception):
            raise self.final_result
        return self.final_result


def _make_result(content_score: int = 70, route: str = "usa_f1", **rubric: int) -> ReasoningResult:
    if route == "uk_student":
        base = {
            "communication": 70,
            "relevance": 70,
            "specificity": 70,
            "consistency": 70,
            "courseAndUniversityFit": 60,
            "financialRequirement": 60,
            "complianceAndIntent": 60,
        }
    else:
        base = {
            "communication": 70,
            "relevance": 70,
            "specificity": 70,
            "consistency": 70,
            "academicPreparedness": 60,
            "financialCapability": 60,
            "intentToReturn": 60,
        }
    base.update(rubric)
    return ReasoningResult(
        rubric=base,
        summary="Clear answer with specific figures.",
        recommendations=("Mention the sponsor's annual income.",),
        red_flags=(),
        content_score=content_score,
    )


@pytest.fixture
def make_result():
    """Factory for ReasoningResult values with a full route rubric."""
    return _make_result


@pytest.fixture
def fake_service():
    return FakeReasoningService()


@pytest.fixture
def settings():
    """Default scoring policy, independent of the process environment."""
    from backend_visaprep.config.settings import ScoringSettings

    return ScoringSettings()


@pytest.fixture
def client(fake_service):
    """FastAPI TestClient with the reasoning service dependency overridden by fake_service."""
    from fastapi.testclient import TestClient

    from backend_visaprep.api_server.interview_routes import get_reasoning_service
    from backend_visaprep.api_server.server import app

    app.dependency_overrides[get_reasoning_service] = lambda: fake_service
    yield TestClient(app)
    app.dependency_overrides.clear()
