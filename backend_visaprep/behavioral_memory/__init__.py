"""
Behavioral memory: facts accumulated across one interview session.

Feeds contradiction detection in later answers. The caller owns the value and
passes it into each scoring call; nothing here is module-level mutable state.
"""

from backend_visaprep.behavioral_memory.engine import (
    check_contradiction,
    extract_currency_numbers,
    memory_facts,
    needs_follow_up,
    update_memory,
)
from backend_visaprep.behavioral_memory.models import ContradictionLevel, SessionMemory

__all__ = [
    "ContradictionLevel",
    "SessionMemory",
    "check_contradiction",
    "extract_currency_numbers",
    "memory_facts",
    "needs_follow_up",
    "update_memory",
]
