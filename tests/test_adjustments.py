"""
Pytest tests for score adjustments: language guard, transcription tolerance, weight redistribution.
"""

from __future__ import annotations

import pytest


# --- Language guard ---


def test_non_target_language_halves_content():
    """Confident non-English detection -> multiplier 0.5 and a warning."""
    from backend_visaprep.analysis_engine.language_guard import check_language

    check = check_language("es", 0.9)
    assert check.penalized is True
    assert check.multiplier == 0.5
    assert check.apply(80) == 40
    assert check.warning and "'es'" in check.warning


def test_language_floor_is_strict():
    """Confidence must exceed the floor; at the floor nothing happens."""
    from backend_visaprep.analysis_engine.language_guard import check_language

    assert check_language("fr", 0.2).penalized is False
    assert check_language("fr", 0.21).penalized is True


@pytest.mark.parametrize("code", ["en", "en-US", "EN_gb", None, ""])
def test_target_language_or_missing_is_not_penalized(code):
    from backend_visaprep.analysis_engine.language_guard import check_language

    check = check_language(code, 0.99)
    assert check.penalized is False
    assert check.multiplier == 1.0


# --- Transcription tolerance ---


def test_transcription_boost_applies_once():
    """Confidence 0.3 and content 35 -> round(35 * 1.25) = 44."""
    from backend_visaprep.analysis_engine.confidence import apply_transcription_tolerance

    adj = apply_transcription_tolerance(35, 0.3, enabled=True)
    assert adj.applied is True
    assert adj.score == 44
    assert adj.original_score == 35
    assert adj.to_dict()["boostedScore"] == 44


@pytest.mark.parametrize(
    "content,confidence,enabled",
    [
        (35, 0.3, False),  # route without the rule
        (35, 0.5, True),  # confidence not below threshold
        (40, 0.3, True),  # score not below threshold
        (35, None, True),  # no confidence reported
    ],
)
def test_transcription_boost_conditions(content, confidence, enabled):
    from backend_visaprep.analysis_engine.confidence import apply_transcription_tolerance

    adj = apply_transcription_tolerance(content, confidence, enabled=enabled)
    assert adj.applied is False
    assert adj.score == content


# --- Weight redistribution ---


def test_missing_body_redistributes_to_content_and_speech():
    """Default 0.6/0.2/0.2 without body -> 0.75/0.25/0."""
    from backend_visaprep.analysis_engine.weights import redistribute

    w = redistribute({"content": 0.6, "speech": 0.2, "body": 0.2}, ["body"])
    assert w == {"content": 0.75, "speech": 0.25, "body": 0.0}


def test_redistribution_is_proportional_and_sums_to_one():
    from backend_visaprep.analysis_engine.weights import redistribute

    w = redistribute({"a": 0.5, "b": 0.3, "c": 0.2}, ["c"])
    assert w["a"] == pytest.approx(0.625)
    assert w["b"] == pytest.approx(0.375)
    assert w["c"] == 0.0
    assert sum(w.values()) == pytest.approx(1.0)


def test_redistribution_ignores_unknown_keys_and_all_missing():
    from backend_visaprep.analysis_engine.weights import redistribute

    base = {"content": 0.6, "speech": 0.2, "body": 0.2}
    assert redistribute(base, ["nothing"]) == base
    assert sum(redistribute(base, ["content", "speech", "body"]).values()) == pytest.approx(1.0)


def test_answer_weights_with_and_without_body():
    from backend_visaprep.analysis_engine.weights import DEFAULT_ANSWER_WEIGHTS, answer_weights

    present = answer_weights(DEFAULT_ANSWER_WEIGHTS, body_present=True)
    assert present == DEFAULT_ANSWER_WEIGHTS
    absent = answer_weights(DEFAULT_ANSWER_WEIGHTS, body_present=False)
    assert absent.body == 0
    assert absent.content + absent.speech == pytest.approx(1.0)
