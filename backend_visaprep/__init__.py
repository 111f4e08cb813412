"""
Backend VisaPrep: answer evaluation and decision pipeline for visa interview practice.

Scores one transcribed answer at a time (relevance, heuristics, language and
transcription adjustments, optional reasoning service) and turns a finished
interview into an accepted / borderline / rejected report per route rubric.
"""

__version__ = "0.1.0"
