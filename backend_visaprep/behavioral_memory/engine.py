"""
Session memory engine: fact extraction, contradiction checks, follow-up hints.

All deterministic regex extraction; no ML. update_memory is first-write-wins so
memory grows monotonically across the interview.
"""

from __future__ import annotations

import re
from dataclasses import replace

from backend_visaprep.behavioral_memory.models import ContradictionLevel, SessionMemory

MAJOR_CONTRADICTION_DELTA = 0.2
MINOR_CONTRADICTION_DELTA = 0.1
VAGUE_ANSWER_CHARS = 30
FINANCE_DETAIL_CHARS = 100

_NUM = r"(\d+(?:,\d{3})*(?:\.\d+)?)"
_CURRENCY_PATTERNS = (
    re.compile(rf"[$£€]\s*{_NUM}\s*k\b", re.IGNORECASE),
    re.compile(rf"[$£€]\s*{_NUM}"),
    re.compile(rf"\b(?:NPR|Rs\.?)\s*{_NUM}", re.IGNORECASE),
    re.compile(rf"{_NUM}\s*k\b", re.IGNORECASE),
    re.compile(rf"\b{_NUM}\b"),
)

_ROLE_PATTERNS = (
    re.compile(
        r"(?:work as|job as|position as|role as|become)\s+(?:an?\s+)?([a-z\s]+?)(?:\.|,|\bin\b|\bat\b|$)",
        re.IGNORECASE,
    ),
    re.compile(r"((?:software|data|business|marketing|financial|research)\s+(?:engineer|analyst|scientist|manager|developer))", re.IGNORECASE),
)

_OCCUPATION_RE = re.compile(r"(?:is an?|works as an?|works as|profession is)\s+([a-z\s]+?)(?:\.|,|$)", re.IGNORECASE)

_COUNTRIES = {
    "nepal": "nepal",
    "india": "india",
    "china": "china",
    "united kingdom": "UK",
    "england": "UK",
    "united states": "US",
    "america": "US",
}
_US_RE = re.compile(r"(?<![A-Za-z])(?:USA|US|U\.S\.A?\.?)(?![A-Za-z])")
_ABROAD_RE = re.compile(r"(?<![A-Za-z])(?:USA|US|UK|U\.S\.A?\.?|U\.K\.?)(?![A-Za-z])")
_ABROAD_NAME_RE = re.compile(r"america|britain|england|united states|united kingdom", re.IGNORECASE)


def extract_currency_numbers(text: str) -> list[float]:
    """All positive amounts in pattern order ($/£/€ with k, $/£/€, NPR, bare k, bare numbers)."""
    numbers: list[float] = []
    for pattern in _CURRENCY_PATTERNS:
        for match in pattern.finditer(text or ""):
            try:
                value = float(match.group(1).replace(",", ""))
            except ValueError:
                continue
            if match.group(0).lower().endswith("k"):
                value *= 1000
            if value > 0:
                numbers.append(value)
    return numbers


def _extract_role(text: str) -> str | None:
    for pattern in _ROLE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip().lower()
    return None


def _extract_sponsor(text: str) -> str | None:
    lower = text.lower()
    if "father" in lower:
        return "father"
    if "mother" in lower:
        return "mother"
    if "parents" in lower:
        return "parents"
    if re.search(r"\bself\b|myself", lower):
        return "self"
    if "uncle" in lower or "aunt" in lower:
        return "relative"
    return None


def _extract_country(text: str) -> str | None:
    lower = text.lower()
    for name, label in _COUNTRIES.items():
        if name in lower:
            return label
    if _US_RE.search(text):
        return "US"
    return None


def update_memory(memory: SessionMemory, answer: str, question_type: str | None = None) -> SessionMemory:
    """Return memory extended with facts from this answer; existing facts are kept."""
    text = answer or ""
    nums = extract_currency_numbers(text)
    first = nums[0] if nums else None
    updates: dict[str, object] = {}

    if first and re.search(r"total|year|tuition|cost", text, re.IGNORECASE) and memory.total_cost is None:
        updates["total_cost"] = first
    if first and re.search(r"scholar", text, re.IGNORECASE) and memory.scholarship_amount is None:
        updates["scholarship_amount"] = first
    if first and re.search(r"loan", text, re.IGNORECASE) and memory.loan_amount is None:
        updates["loan_amount"] = first
    if re.search(r"father|mother|self|sponsor|parent", text, re.IGNORECASE) and memory.sponsor is None:
        sponsor = _extract_sponsor(text)
        if sponsor:
            updates["sponsor"] = sponsor
    if (
        question_type == "financial"
        and memory.sponsor_occupation is None
        and re.search(r"business|engineer|doctor|teacher|occupation|profession|work", text, re.IGNORECASE)
    ):
        occ = _OCCUPATION_RE.search(text)
        if occ and occ.group(1).strip():
            updates["sponsor_occupation"] = occ.group(1).strip().lower()
    if re.search(r"after|graduate|post[- ]study|future|plan|career", text, re.IGNORECASE):
        if memory.post_study_role is None:
            role = _extract_role(text)
            if role:
                updates["post_study_role"] = role
        if memory.target_country is None:
            country = _extract_country(text)
            if country:
                updates["target_country"] = country
    if (
        not memory.relatives_abroad
        and re.search(r"relative|uncle|aunt|cousin|family", text, re.IGNORECASE)
        and (_ABROAD_RE.search(text) or _ABROAD_NAME_RE.search(text))
    ):
        updates["relatives_abroad"] = True

    return replace(memory, **updates) if updates else memory


def check_contradiction(memory: SessionMemory, answer: str) -> ContradictionLevel:
    """Compare the first amount in the answer with the remembered total cost."""
    nums = extract_currency_numbers(answer or "")
    if memory.total_cost and nums:
        delta = abs(nums[0] - memory.total_cost) / memory.total_cost
        if delta > MAJOR_CONTRADICTION_DELTA:
            return ContradictionLevel.MAJOR
        if delta > MINOR_CONTRADICTION_DELTA:
            return ContradictionLevel.MINOR
    return ContradictionLevel.NONE


def memory_facts(memory: SessionMemory) -> list[str]:
    """Human-readable fact lines for the reasoning service prompt."""
    facts: list[str] = []
    if memory.total_cost:
        facts.append(f"Total cost: {memory.total_cost:,.0f}")
    if memory.sponsor:
        facts.append(f"Sponsor: {memory.sponsor}")
    if memory.scholarship_amount:
        facts.append(f"Scholarship: {memory.scholarship_amount:,.0f}")
    if memory.loan_amount:
        facts.append(f"Loan: {memory.loan_amount:,.0f}")
    if memory.sponsor_occupation:
        facts.append(f"Sponsor occupation: {memory.sponsor_occupation}")
    if memory.post_study_role:
        facts.append(f"Career plan: {memory.post_study_role}")
    if memory.target_country:
        facts.append(f"Return destination: {memory.target_country}")
    if memory.relatives_abroad:
        facts.append("Has relatives in destination country: YES (RED FLAG)")
    return facts


def needs_follow_up(question_type: str | None, answer: str, memory: SessionMemory) -> tuple[bool, str | None]:
    """(needed, reason) for vague finance answers, contradictions and very short answers."""
    text = (answer or "").strip()
    if question_type == "financial" and not extract_currency_numbers(text) and len(text) < FINANCE_DETAIL_CHARS:
        return True, "finance_no_number"
    level = check_contradiction(memory, text)
    if level is not ContradictionLevel.NONE:
        return True, f"contradiction_{level.value}"
    if len(text) < VAGUE_ANSWER_CHARS:
        return True, "too_vague"
    return False, None
