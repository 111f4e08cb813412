"""
Heuristic performance scorer: content, speech and body sub-scores without any
external service.

Always available; the aggregator falls back to it when the reasoning service
fails and uses it for degenerate-input handling.

  content = 0.6 * accuracy + 0.4 * clarity
  speech  = 0.5 * fluency  + 0.3 * clarity + 0.2 * tone
  body    = telemetry overall_score, or MISSING_BODY_SCORE when telemetry is absent

Answers under the minimum word count get content = speech = 0.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from backend_visaprep.analysis_engine.models import BodyLanguageScore, clamp_score
from backend_visaprep.config.settings import MIN_WORD_COUNT, MISSING_BODY_SCORE

FILLERS = (
    "uh", "um", "erm", "uhm", "mmm", "hmm", "ah", "er", "like", "you know",
    "i mean", "sort of", "kind of", "basically", "actually", "literally",
    "right", "okay", "ok", "well", "so",
)

POSITIVE_WORDS = frozenset({
    "confident", "confidently", "prepared", "ready", "excited", "motivated",
    "enthusiastic", "committed", "strong", "clear", "focused", "passion",
    "passionate", "achieve", "achievement", "improve", "growth", "learn",
    "learning", "opportunity", "grateful", "thankful", "interest", "eager",
    "keen", "reliable", "capable", "responsible", "collaborate", "positive",
    "optimistic", "proactive",
})

READABILITY_TARGET = 70.0
TONE_TARGET = 0.35
DEFAULT_ASR_CONFIDENCE = 0.75
SHORT_CLARITY_WORDS = 20
SHORT_CLARITY_PENALTY = 15

_APOSTROPHE_RE = re.compile(r"[’']")
_NON_TEXT_RE = re.compile(r"[^a-z0-9'\s]+")
_SPACE_RE = re.compile(r"\s+")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_ALNUM_RE = re.compile(r"[a-z0-9]")
# whole-transcript STT markers such as "[inaudible]", "(no response)" or "<silence>"
_STT_MARKER_RE = re.compile(r"^[\[(<]\s*[a-z][a-z _-]*\s*[\])>]$")


@dataclass(frozen=True)
class TranscriptMetrics:
    words: int
    unique_words: int
    type_token_ratio: float
    sentences: int
    avg_sentence_length: float
    filler_count: int
    filler_rate: float
    repeated_bigram_rate: float
    readability_ease: float
    positivity: float


@dataclass(frozen=True)
class HeuristicResult:
    content: int
    speech: int
    body_language: int
    body_present: bool
    too_short: bool
    word_count: int
    metrics: TranscriptMetrics
    details: dict[str, Any] = field(default_factory=dict)
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": {
                "content": self.content,
                "speech": self.speech,
                "bodyLanguage": self.body_language,
            },
            "bodyPresent": self.body_present,
            "tooShort": self.too_short,
            "wordCount": self.word_count,
            "details": {**self.details, "notes": list(self.notes)},
        }


def normalize_transcript(text: str) -> str:
    t = _APOSTROPHE_RE.sub("'", (text or "").lower())
    t = _NON_TEXT_RE.sub(" ", t)
    return _SPACE_RE.sub(" ", t).strip()


def count_words(text: str) -> int:
    normalized = normalize_transcript(text)
    return len(normalized.split(" ")) if normalized else 0


def is_placeholder_answer(text: str | None) -> bool:
    """
    True for transcripts with no spoken content: empty, punctuation only
    ("..."), or a bracketed STT marker like "[inaudible]".

    Real words such as "None." are answers, however short.
    """
    if text is None:
        return True
    lowered = text.strip().lower()
    if not _ALNUM_RE.search(lowered):
        return True
    return _STT_MARKER_RE.match(lowered) is not None


def _split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split((text or "").strip()) if s.strip()]


def _syllables(word: str) -> int:
    w = re.sub(r"[^a-z]", "", word.lower())
    if not w:
        return 0
    base = w[:-1] if w.endswith("e") else w
    return max(1, len(_VOWEL_GROUP_RE.findall(base)))


def _flesch_reading_ease(text: str, words: list[str]) -> float:
    word_count = len(words) or 1
    sentence_count = max(1, len(_split_sentences(text)))
    syllables = sum(_syllables(w) for w in words)
    asl = word_count / sentence_count
    asw = syllables / word_count
    return max(0.0, min(100.0, 206.835 - 1.015 * asl - 84.6 * asw))


def _count_fillers(normalized: str) -> int:
    count = 0
    for filler in FILLERS:
        count += len(re.findall(rf"(?:^|(?<=\s)){re.escape(filler)}(?=\s|$)", normalized))
    return count


def _repeated_bigram_rate(words: list[str]) -> float:
    if len(words) < 4:
        return 0.0
    bigrams = [f"{a} {b}" for a, b in zip(words, words[1:])]
    freq: dict[str, int] = {}
    for b in bigrams:
        freq[b] = freq.get(b, 0) + 1
    repeats = sum(n - 1 for n in freq.values() if n > 1)
    return repeats / len(bigrams)


def _positivity(words: list[str]) -> float:
    if not words:
        return 0.0
    hits = len(POSITIVE_WORDS & set(words))
    return min(1.0, hits / max(8.0, len(words) / 50.0))


def analyze_transcript(transcript: str) -> TranscriptMetrics:
    normalized = normalize_transcript(transcript)
    words = normalized.split(" ") if normalized else []
    sentences = _split_sentences(transcript)
    fillers = _count_fillers(normalized)
    unique = len(set(words))
    return TranscriptMetrics(
        words=len(words),
        unique_words=unique,
        type_token_ratio=unique / len(words) if words else 0.0,
        sentences=len(sentences) or (1 if words else 0),
        avg_sentence_length=len(words) / len(sentences) if sentences else float(len(words)),
        filler_count=fillers,
        filler_rate=fillers / len(words) if words else 0.0,
        repeated_bigram_rate=_repeated_bigram_rate(words),
        readability_ease=_flesch_reading_ease(transcript, words),
        positivity=_positivity(words),
    )


def _content_details(metrics: TranscriptMetrics) -> tuple[int, int, float, list[str]]:
    """Return (accuracy, clarity, coverage, notes)."""
    notes: list[str] = []
    # no expected keywords at this layer: estimate coverage from length and repetition
    coverage = min(1.0, (metrics.words / 120) * (1 - metrics.repeated_bigram_rate)) * 0.8 + 0.1

    readability_closeness = 100 - min(100.0, abs(metrics.readability_ease - READABILITY_TARGET))
    if 10 <= metrics.avg_sentence_length <= 22:
        ideal_len = 100.0
    else:
        ideal_len = max(0.0, 100 - abs(metrics.avg_sentence_length - 16) * 6)
    clarity = round(0.65 * readability_closeness + 0.35 * ideal_len)

    if metrics.words < SHORT_CLARITY_WORDS:
        clarity = max(0, clarity - SHORT_CLARITY_PENALTY)
        notes.append("Response is quite short; add more detail to improve clarity and completeness.")

    return clamp_score(100 * coverage), clamp_score(clarity), coverage, notes


def _speech_details(metrics: TranscriptMetrics, asr_confidence: float | None) -> dict[str, Any]:
    notes: list[str] = []

    filler_penalty = min(60.0, metrics.filler_rate * 600)
    repetition_penalty = min(25.0, metrics.repeated_bigram_rate * 250)
    fluency = max(0.0, 95 - filler_penalty - repetition_penalty)
    if metrics.filler_rate > 0.05:
        notes.append("Reduce filler words (um/uh/like).")
    if metrics.repeated_bigram_rate > 0.05:
        notes.append("Avoid repeating phrases; vary wording.")

    tone_closeness = max(0.0, 1 - abs(metrics.positivity - TONE_TARGET) / 0.5)
    tone = round(60 + 40 * tone_closeness)
    if metrics.positivity < 0.1:
        notes.append("Adopt a slightly more positive, confident tone.")

    conf = DEFAULT_ASR_CONFIDENCE if asr_confidence is None else max(0.0, min(1.0, float(asr_confidence)))
    read_band = 100 - min(100.0, abs(metrics.readability_ease - READABILITY_TARGET))
    clarity = round(0.6 * (conf * 100) + 0.4 * read_band)
    if conf < 0.6:
        notes.append("Speak a bit more clearly or reduce background noise (transcription confidence was low).")

    return {
        "fluencyScore": clamp_score(fluency),
        "toneScore": clamp_score(tone),
        "clarityScore": clamp_score(clarity),
        "asrConfidence": conf,
        "notes": notes,
    }


def score_performance(
    transcript: str,
    body: BodyLanguageScore | None,
    transcription_confidence: float | None = None,
    *,
    min_word_count: int = MIN_WORD_COUNT,
    missing_body_score: int = MISSING_BODY_SCORE,
) -> HeuristicResult:
    """
    Deterministically score a transcript plus optional body telemetry.

    Missing telemetry scores missing_body_score (low, never a generous default);
    the aggregator additionally removes its weight from the blend.
    """
    metrics = analyze_transcript(transcript)
    accuracy, content_clarity, coverage, content_notes = _content_details(metrics)
    speech = _speech_details(metrics, transcription_confidence)

    content_score = clamp_score(0.6 * accuracy + 0.4 * content_clarity)
    speech_score = clamp_score(
        0.5 * speech["fluencyScore"] + 0.3 * speech["clarityScore"] + 0.2 * speech["toneScore"]
    )

    notes = list(content_notes) + list(speech["notes"])
    if body is None:
        body_score = clamp_score(missing_body_score)
        notes.append("Body-language telemetry unavailable; body score excluded from the blend.")
    else:
        body_score = clamp_score(body.overall_score)

    too_short = metrics.words < min_word_count
    if too_short:
        content_score = 0
        speech_score = 0
        notes.append(f"Answer has fewer than {min_word_count} words; content and speech are not scored.")

    return HeuristicResult(
        content=content_score,
        speech=speech_score,
        body_language=body_score,
        body_present=body is not None,
        too_short=too_short,
        word_count=metrics.words,
        metrics=metrics,
        details={
            "content": {
                "accuracyScore": accuracy,
                "clarityScore": content_clarity,
                "keywordCoverage": round(coverage, 4),
            },
            "speech": {k: v for k, v in speech.items() if k != "notes"},
            "transcript": {
                "words": metrics.words,
                "uniqueWords": metrics.unique_words,
                "sentences": metrics.sentences,
                "fillerRate": round(metrics.filler_rate, 4),
                "repeatedBigramRate": round(metrics.repeated_bigram_rate, 4),
                "readabilityEase": round(metrics.readability_ease, 2),
            },
        },
        notes=tuple(notes),
    )
