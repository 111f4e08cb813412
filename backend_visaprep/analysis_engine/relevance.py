"""
Relevance checker: question/answer topical overlap and off-topic detection.

Key terms come from the question (visa-specific vocabulary, non-stopwords longer
than 3 characters, and bigrams around visa terms). The share of key terms found
in the answer is blended with a Jaccard-style word similarity:

    combined = 0.7 * overlap + 0.3 * similarity

Penalty tiers: combined < 0.1 -> off-topic (30); < 0.3 -> 10; < 0.5 -> 5.
Only the lowest tier marks an answer off-topic. No external calls.
"""

from __future__ import annotations

import re

from backend_visaprep.analysis_engine.models import RelevanceResult
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)

OFF_TOPIC_THRESHOLD = 0.1
PARTIAL_THRESHOLD = 0.3
FOCUS_THRESHOLD = 0.5

OFF_TOPIC_PENALTY = 30
PARTIAL_PENALTY = 10
FOCUS_PENALTY = 5

NO_TERMS_OFF_TOPIC_THRESHOLD = 0.1
NO_TERMS_WARNING_THRESHOLD = 0.2
NO_TERMS_PENALTY = 50

MIN_ANSWER_CHARS = 10
SHORT_ANSWER_PENALTY = 100

OVERLAP_WEIGHT = 0.7
SIMILARITY_WEIGHT = 0.3

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "you", "your", "i", "my", "me",
    "we", "our", "have", "had", "do", "does", "can", "could", "would",
    "should", "this", "these", "those", "what", "which", "who", "when",
    "where", "why", "how", "am", "been", "being", "or", "but", "if",
    "into", "through", "during", "before", "after", "above", "below",
    "up", "down", "out", "off", "over", "under", "again", "further",
    "then", "once", "here", "there", "all", "any", "both", "each",
    "few", "more", "most", "other", "some", "such", "no", "nor",
    "not", "only", "own", "same", "so", "than", "too", "very",
    "they", "them", "their", "she", "her", "him", "his", "were", "did",
    "about", "also", "just",
})

QUESTION_WORDS = frozenset({
    "why", "what", "how", "when", "where", "who", "which",
    "explain", "describe", "tell", "discuss", "elaborate",
})

VISA_TERMS = frozenset({
    "university", "college", "program", "course", "degree", "study", "studies",
    "major", "field", "academic", "education", "research",
    "financial", "funds", "money", "sponsor", "cost", "tuition", "fees",
    "family", "parents", "father", "mother", "ties", "return", "home",
    "career", "job", "work", "employment", "plan", "goal", "future",
    "visa", "student", "international", "country",
    "accommodation", "maintenance", "modules",
})

_NON_WORD_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, turn punctuation into spaces, collapse whitespace."""
    t = _NON_WORD_RE.sub(" ", (text or "").lower())
    return _SPACE_RE.sub(" ", t).strip()


def _words(text: str) -> list[str]:
    return [w for w in normalize_text(text).split(" ") if w]


def extract_key_terms(question: str) -> list[str]:
    """Salient question terms in first-seen order (visa terms, content words, visa bigrams)."""
    words = _words(question)
    terms: dict[str, None] = {}

    for w in words:
        if w in VISA_TERMS:
            terms.setdefault(w)
    for w in words:
        if w not in STOP_WORDS and len(w) > 3 and w not in QUESTION_WORDS:
            terms.setdefault(w)
    for first, second in zip(words, words[1:]):
        if first in STOP_WORDS or second in STOP_WORDS:
            continue
        if first in VISA_TERMS or second in VISA_TERMS:
            terms.setdefault(f"{first} {second}")

    return list(terms)


def calculate_overlap(key_terms: list[str], answer: str) -> tuple[list[str], list[str], float]:
    """
    Return (found, missing, overlap) for key terms in the answer.

    Single words match as prefixes ("study" matches "studying"); bigrams
    must appear as an exact phrase.
    """
    normalized = normalize_text(answer)
    found: list[str] = []
    missing: list[str] = []
    for term in key_terms:
        if " " in term:
            pattern = rf"\b{re.escape(term)}\b"
        else:
            pattern = rf"\b{re.escape(term)}\w*\b"
        if re.search(pattern, normalized):
            found.append(term)
        else:
            missing.append(term)
    overlap = len(found) / len(key_terms) if key_terms else 0.0
    return found, missing, overlap


def calculate_similarity(question: str, answer: str) -> float:
    """Share of answer content words that occur in the question, over the word union."""
    question_words = {w for w in _words(question) if w not in STOP_WORDS}
    answer_words = [w for w in _words(answer) if w not in STOP_WORDS]
    matches = sum(1 for w in answer_words if w in question_words)
    union = question_words | set(answer_words)
    if not union:
        return 0.0
    return min(1.0, matches / len(union))


def check_relevance(question: str, answer: str) -> RelevanceResult:
    """
    Estimate how well the answer addresses the question.

    Callers guard empty answers upstream; anything under MIN_ANSWER_CHARS is
    still reported as off-topic with the maximum penalty.
    """
    if not answer or len(answer.strip()) < MIN_ANSWER_CHARS:
        return RelevanceResult(
            score=0,
            overlap=0.0,
            key_terms=[],
            found_terms=[],
            missing_terms=[],
            penalty=SHORT_ANSWER_PENALTY,
            is_off_topic=True,
            warning="Answer is too short or empty",
        )

    key_terms = extract_key_terms(question)
    similarity = calculate_similarity(question, answer)

    if not key_terms:
        warn = similarity < NO_TERMS_WARNING_THRESHOLD
        return RelevanceResult(
            score=int(round(similarity * 100)),
            overlap=similarity,
            key_terms=[],
            found_terms=[],
            missing_terms=[],
            penalty=NO_TERMS_PENALTY if warn else 0,
            is_off_topic=similarity < NO_TERMS_OFF_TOPIC_THRESHOLD,
            warning="Answer may not be relevant to question" if warn else None,
        )

    found, missing, overlap = calculate_overlap(key_terms, answer)
    combined = OVERLAP_WEIGHT * overlap + SIMILARITY_WEIGHT * similarity

    is_off_topic = False
    penalty = 0
    warning: str | None = None
    if combined < OFF_TOPIC_THRESHOLD:
        is_off_topic = True
        penalty = OFF_TOPIC_PENALTY
        warning = "Answer appears to be off-topic or unrelated to the question"
    elif combined < PARTIAL_THRESHOLD:
        penalty = PARTIAL_PENALTY
        warning = "Answer is only partially relevant - missing key points from the question"
    elif combined < FOCUS_THRESHOLD:
        penalty = FOCUS_PENALTY
        warning = "Answer could be more directly focused on the question"

    if is_off_topic:
        logger.info(
            "relevance_off_topic",
            combined=round(combined, 3),
            key_terms=len(key_terms),
            found_terms=len(found),
        )

    return RelevanceResult(
        score=int(round(max(0.0, combined * 100 - penalty))),
        overlap=overlap,
        key_terms=key_terms,
        found_terms=found,
        missing_terms=missing,
        penalty=penalty,
        is_off_topic=is_off_topic,
        warning=warning,
    )


def relevance_feedback(result: RelevanceResult) -> list[str]:
    """User-facing feedback lines for a relevance result."""
    feedback: list[str] = []
    top_missing = ", ".join(result.missing_terms[:3])
    if result.is_off_topic:
        feedback.append("Your answer does not address the question asked.")
        if top_missing:
            feedback.append(f"Missing key topics: {top_missing}")
    elif result.penalty > 20:
        feedback.append("Your answer is partially relevant but misses important points.")
        if top_missing:
            feedback.append(f"Consider addressing: {top_missing}")
    elif result.penalty > 0:
        feedback.append("Try to focus more directly on the specific question asked.")
    return feedback
