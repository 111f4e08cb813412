"""
Pytest tests for the relevance checker (key terms, overlap tiers, off-topic detection).
"""

from __future__ import annotations

from conftest import HOBBY_ANSWER, SPONSOR_ANSWER, SPONSOR_QUESTION


def test_key_terms_include_visa_terms_and_bigrams():
    """Visa vocabulary and visa bigrams are extracted; stopwords and question words are not."""
    from backend_visaprep.analysis_engine.relevance import extract_key_terms

    terms = extract_key_terms(SPONSOR_QUESTION)
    assert "financial" in terms
    assert "sponsor" in terms
    assert "tuition" in terms
    assert "financial sponsor" in terms
    assert "who" not in terms
    assert "your" not in terms


def test_prefix_match_and_exact_bigram():
    """Single terms match word prefixes; bigrams need the exact phrase."""
    from backend_visaprep.analysis_engine.relevance import calculate_overlap

    found, missing, overlap = calculate_overlap(
        ["study", "financial sponsor"], "I am studying because my sponsor is financial"
    )
    assert found == ["study"]
    assert missing == ["financial sponsor"]
    assert overlap == 0.5


def test_on_topic_answer_has_no_penalty():
    """An answer covering every question term is on-topic with no penalty."""
    from backend_visaprep.analysis_engine.relevance import check_relevance

    result = check_relevance(SPONSOR_QUESTION, SPONSOR_ANSWER)
    assert result.is_off_topic is False
    assert result.penalty == 0
    assert result.overlap == 1.0
    assert 0 <= result.score <= 100


def test_unrelated_answer_is_off_topic():
    """Zero term overlap and zero similarity -> off-topic with penalty 30."""
    from backend_visaprep.analysis_engine.relevance import check_relevance, relevance_feedback

    result = check_relevance(SPONSOR_QUESTION, HOBBY_ANSWER)
    assert result.is_off_topic is True
    assert result.penalty == 30
    assert result.score == 0
    assert result.warning
    feedback = relevance_feedback(result)
    assert any("does not address" in line for line in feedback)


def test_very_short_answer_gets_maximum_penalty():
    """Answers under 10 characters are off-topic with penalty 100."""
    from backend_visaprep.analysis_engine.relevance import check_relevance

    result = check_relevance(SPONSOR_QUESTION, "ok")
    assert result.is_off_topic is True
    assert result.penalty == 100


def test_question_without_key_terms_uses_similarity():
    """When the question has no extractable terms only similarity decides."""
    from backend_visaprep.analysis_engine.relevance import check_relevance

    result = check_relevance("Why?", "Because I like football and painting on weekends.")
    assert result.key_terms == []
    assert result.is_off_topic is True
    assert result.penalty == 50


def test_to_dict_uses_camel_case():
    """RelevanceResult.to_dict renders the wire keys."""
    from backend_visaprep.analysis_engine.relevance import check_relevance

    payload = check_relevance(SPONSOR_QUESTION, HOBBY_ANSWER).to_dict()
    assert payload["isOffTopic"] is True
    assert "foundTerms" in payload and "missingTerms" in payload
