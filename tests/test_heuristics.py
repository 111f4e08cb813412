"""
Pytest tests for the heuristic performance scorer.
"""

from __future__ import annotations

import pytest

from conftest import SPONSOR_ANSWER


@pytest.mark.parametrize("text", ["", "   ", "...", "?!", "[inaudible]", "[no response]", "(silence)", None])
def test_placeholder_answers(text):
    """Empty transcripts and STT placeholders are recognised."""
    from backend_visaprep.analysis_engine.heuristics import is_placeholder_answer

    assert is_placeholder_answer(text) is True


@pytest.mark.parametrize("text", ["yes", "None.", "nil", "N/A", "No answer", "[inaudible] my father", SPONSOR_ANSWER])
def test_real_words_are_not_placeholders(text):
    """Any spoken word goes down the word-count path, however short."""
    from backend_visaprep.analysis_engine.heuristics import is_placeholder_answer

    assert is_placeholder_answer(text) is False


def test_short_answer_zeroes_content_and_speech():
    """Under 10 words: content = speech = 0, body kept, too_short set."""
    from backend_visaprep.analysis_engine.heuristics import score_performance
    from backend_visaprep.analysis_engine.models import BodyLanguageScore

    result = score_performance("yes", BodyLanguageScore(overall_score=80))
    assert result.too_short is True
    assert result.content == 0
    assert result.speech == 0
    assert result.body_language == 80
    assert result.word_count == 1


def test_missing_body_scores_low_not_generous():
    """Missing telemetry scores MISSING_BODY_SCORE and is flagged as absent."""
    from backend_visaprep.analysis_engine.heuristics import score_performance
    from backend_visaprep.config.settings import MISSING_BODY_SCORE

    result = score_performance(SPONSOR_ANSWER, None)
    assert result.body_present is False
    assert result.body_language == MISSING_BODY_SCORE == 25
    assert any("telemetry unavailable" in n for n in result.notes)


def test_full_answer_scores_in_range():
    """A full answer gets integer scores in [0, 100] and blended sub-scores."""
    from backend_visaprep.analysis_engine.heuristics import score_performance
    from backend_visaprep.analysis_engine.models import BodyLanguageScore

    result = score_performance(SPONSOR_ANSWER, BodyLanguageScore(overall_score=120.4), 0.9)
    assert result.too_short is False
    for value in (result.content, result.speech, result.body_language):
        assert isinstance(value, int)
        assert 0 <= value <= 100
    assert result.body_language == 100
    content = result.details["content"]
    assert result.content == round(0.6 * content["accuracyScore"] + 0.4 * content["clarityScore"])
    speech = result.details["speech"]
    assert result.speech == round(
        0.5 * speech["fluencyScore"] + 0.3 * speech["clarityScore"] + 0.2 * speech["toneScore"]
    )


def test_fillers_lower_fluency():
    """Filler-heavy transcripts have lower fluency than clean ones."""
    from backend_visaprep.analysis_engine.heuristics import score_performance

    clean = score_performance(SPONSOR_ANSWER, None)
    filler = score_performance(
        "um so uh my father um is like my sponsor uh you know and um he will uh pay basically", None
    )
    assert filler.details["speech"]["fluencyScore"] < clean.details["speech"]["fluencyScore"]
    assert filler.metrics.filler_count > 0


def test_low_asr_confidence_lowers_speech_clarity():
    from backend_visaprep.analysis_engine.heuristics import score_performance

    high = score_performance(SPONSOR_ANSWER, None, 0.95)
    low = score_performance(SPONSOR_ANSWER, None, 0.2)
    assert low.details["speech"]["clarityScore"] < high.details["speech"]["clarityScore"]
