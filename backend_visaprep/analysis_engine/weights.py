"""
Weight redistribution for missing telemetry.

redistribute() zeroes the missing components and hands their mass to the
remaining components in proportion to their configured weights. With the
default 0.6 / 0.2 / 0.2 blend a missing body yields content 0.75, speech 0.25.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from backend_visaprep.analysis_engine.models import AnswerWeights

DEFAULT_ANSWER_WEIGHTS = AnswerWeights(content=0.6, speech=0.2, body=0.2)

_PRECISION = 4


def redistribute(weights: Mapping[str, float], missing_keys: Iterable[str]) -> dict[str, float]:
    """
    Return new weights with missing_keys set to 0 and their mass redistributed.

    Remaining weights keep their relative proportions and the result sums to 1.
    If nothing remains (or the remaining mass is 0) the input is returned
    normalized, unchanged in shape.
    """
    missing = {k for k in missing_keys if k in weights}
    total = sum(max(0.0, float(v)) for v in weights.values())
    remaining = {k: max(0.0, float(v)) for k, v in weights.items() if k not in missing}
    remaining_mass = sum(remaining.values())

    if not remaining or remaining_mass <= 0:
        if total <= 0:
            return {k: 0.0 for k in weights}
        return _normalized({k: max(0.0, float(v)) / total for k, v in weights.items()})

    out = {k: 0.0 for k in weights}
    for k, v in remaining.items():
        out[k] = v / remaining_mass
    return _normalized(out)


def _normalized(weights: dict[str, float]) -> dict[str, float]:
    """Round to fixed precision and push the rounding residue onto the largest weight."""
    rounded = {k: round(v, _PRECISION) for k, v in weights.items()}
    largest = max(rounded, key=lambda k: rounded[k])
    others = sum(v for k, v in rounded.items() if k != largest)
    rounded[largest] = round(1.0 - others, _PRECISION)
    return rounded


def answer_weights(base: AnswerWeights, body_present: bool) -> AnswerWeights:
    """Per-answer blend weights; body is excluded when its telemetry is missing."""
    missing = [] if body_present else ["body"]
    w = redistribute(base.to_dict(), missing)
    return AnswerWeights(content=w["content"], speech=w["speech"], body=w["body"])
