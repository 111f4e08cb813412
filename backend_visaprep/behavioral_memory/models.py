"""
Session memory: facts the applicant stated earlier in the same interview.

Owned by the caller (created at interview start, discarded at the end) and
passed into every scoring call. Values are frozen; updates return a new
SessionMemory and never overwrite a fact once recorded.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any


class ContradictionLevel(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"


@dataclass(frozen=True)
class SessionMemory:
    total_cost: float | None = None
    sponsor: str | None = None
    scholarship_amount: float | None = None
    loan_amount: float | None = None
    sponsor_occupation: str | None = None
    post_study_role: str | None = None
    target_country: str | None = None
    relatives_abroad: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SessionMemory":
        """Build from a client payload; unknown keys are ignored, legacy relatives_us accepted."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        if "relatives_us" in data and "relatives_abroad" not in values:
            values["relatives_abroad"] = bool(data.get("relatives_us"))
        for key in ("total_cost", "scholarship_amount", "loan_amount"):
            if key in values:
                try:
                    values[key] = float(values[key])
                except (TypeError, ValueError):
                    values.pop(key)
        if "relatives_abroad" in values:
            values["relatives_abroad"] = bool(values["relatives_abroad"])
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def is_empty(self) -> bool:
        return self == SessionMemory()
