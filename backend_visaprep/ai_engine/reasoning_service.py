"""
Reasoning service adapter: the external LLM scorer behind a result-or-failure interface.

Callers never see an exception from this module. Every call is a single
attempt with a timeout (no retries); not configured, transport errors, empty
content and unparseable JSON all come back as a ReasoningFailure value so the
pipeline can fall back to heuristics within the same request.

Parsed answers are clamped before they leave the adapter: rubric dimensions and
contentScore to 0-100, summary to 800 characters, list fields to 8 entries.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from openai import OpenAI

from backend_visaprep.ai_engine.prompts import (
    answer_system_prompt,
    build_answer_prompt,
    build_final_prompt,
    final_system_prompt,
)
from backend_visaprep.analysis_engine.models import ScoreSummary, clamp_score
from backend_visaprep.config.settings import ScoringSettings
from backend_visaprep.core.exceptions import ReasoningServiceError
from backend_visaprep.decision_engine.rubrics import CORE_ANSWER_DIMENSIONS, get_rubric
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

MAX_SUMMARY_CHARS = 800
MAX_LIST_ITEMS = 8
ANSWER_MAX_TOKENS = 1500
FINAL_MAX_TOKENS = 1200
TEMPERATURE = 0.3

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass(frozen=True)
class ReasoningFailure:
    reason: str
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason, "detail": self.detail}


@dataclass(frozen=True)
class ReasoningResult:
    rubric: dict[str, int]
    summary: str
    recommendations: tuple[str, ...]
    red_flags: tuple[str, ...]
    content_score: int
    corrections: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnswerScoringRequest:
    question: str
    answer: str
    route: str
    student_profile: Mapping[str, Any] = field(default_factory=dict)
    conversation_history: Sequence[Mapping[str, Any]] = ()
    memory_facts: tuple[str, ...] = ()
    contradiction: str = "none"


@dataclass(frozen=True)
class InterviewEvaluationRequest:
    route: str
    student_profile: Mapping[str, Any] = field(default_factory=dict)
    conversation_history: Sequence[Mapping[str, Any]] = ()
    per_answer_scores: tuple[ScoreSummary, ...] = ()


class ReasoningService(Protocol):
    def score_answer(self, request: AnswerScoringRequest) -> ReasoningResult | ReasoningFailure: ...

    def evaluate_interview(self, request: InterviewEvaluationRequest) -> dict[str, Any] | ReasoningFailure: ...


def as_number(value: Any) -> float | None:
    """Numeric value of an LLM field, or None for missing / non-numeric / bool."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    items = [str(v).strip() for v in value if v is not None and str(v).strip()]
    return tuple(items[:MAX_LIST_ITEMS])


def load_json_object(content: str) -> dict[str, Any] | None:
    """Parse a JSON object from model output, tolerating code fences and surrounding prose."""
    text = _FENCE_RE.sub("", (content or "").strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            data = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def parse_answer_response(content: str, route: str) -> ReasoningResult | ReasoningFailure:
    data = load_json_object(content)
    if data is None:
        return ReasoningFailure("unparseable_response", (content or "")[:200])

    content_score = as_number(data.get("contentScore"))
    if content_score is None:
        return ReasoningFailure("missing_content_score")

    raw_rubric = data.get("rubric") if isinstance(data.get("rubric"), dict) else {}
    rubric: dict[str, int] = {}
    for dim in get_rubric(route).answer_dimensions:
        value = as_number(raw_rubric.get(dim))
        if value is not None:
            rubric[dim] = clamp_score(value)
        elif dim in CORE_ANSWER_DIMENSIONS:
            rubric[dim] = 0

    return ReasoningResult(
        rubric=rubric,
        summary=str(data.get("summary") or "")[:MAX_SUMMARY_CHARS],
        recommendations=_string_list(data.get("recommendations")),
        red_flags=_string_list(data.get("redFlags")),
        content_score=clamp_score(content_score),
    )


class OpenAIReasoningService:
    """ReasoningService backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        timeout_sec: float = 20.0,
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout_sec = timeout_sec
        self._client = client

    @classmethod
    def from_settings(cls, settings: ScoringSettings) -> "OpenAIReasoningService":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_sec=settings.reasoning_timeout_sec,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_sec,
                max_retries=0,
            )
        return self._client

    def _complete(self, system: str, user: str, max_tokens: int) -> str:
        """One chat completion; raises ReasoningServiceError on any failure or empty content."""
        try:
            resp = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=TEMPERATURE,
                max_tokens=max_tokens,
            )
            content = (resp.choices[0].message.content or "").strip()
        except Exception as e:
            raise ReasoningServiceError(f"{type(e).__name__}: {e}") from e
        if not content:
            raise ReasoningServiceError("empty response content")
        return content

    def score_answer(self, request: AnswerScoringRequest) -> ReasoningResult | ReasoningFailure:
        if not self.configured:
            return ReasoningFailure("not_configured", "OPENAI_API_KEY is not set")
        rubric = get_rubric(request.route)
        try:
            content = self._complete(
                answer_system_prompt(rubric),
                build_answer_prompt(
                    rubric,
                    request.question,
                    request.answer,
                    request.student_profile,
                    request.conversation_history,
                    request.memory_facts,
                    request.contradiction,
                ),
                ANSWER_MAX_TOKENS,
            )
        except ReasoningServiceError as e:
            logger.warning("reasoning_service_failed", operation="score_answer", route=rubric.route, error=str(e))
            return ReasoningFailure("request_failed", str(e))

        result = parse_answer_response(content, rubric.route)
        if isinstance(result, ReasoningFailure):
            logger.warning("reasoning_response_invalid", operation="score_answer", route=rubric.route, reason=result.reason)
        return result

    def evaluate_interview(self, request: InterviewEvaluationRequest) -> dict[str, Any] | ReasoningFailure:
        if not self.configured:
            return ReasoningFailure("not_configured", "OPENAI_API_KEY is not set")
        rubric = get_rubric(request.route)
        try:
            content = self._complete(
                final_system_prompt(rubric),
                build_final_prompt(
                    rubric,
                    request.student_profile,
                    request.conversation_history,
                    request.per_answer_scores,
                ),
                FINAL_MAX_TOKENS,
            )
        except ReasoningServiceError as e:
            logger.warning("reasoning_service_failed", operation="evaluate_interview", route=rubric.route, error=str(e))
            return ReasoningFailure("request_failed", str(e))

        data = load_json_object(content)
        if data is None:
            logger.warning("reasoning_response_invalid", operation="evaluate_interview", route=rubric.route)
            return ReasoningFailure("unparseable_response", content[:200])
        return data
