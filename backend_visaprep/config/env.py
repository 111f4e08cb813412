"""
Environment variable loading for VisaPrep.

- OPENAI_API_KEY: reasoning service key (unset = reasoning service not configured)
- OPENAI_MODEL: chat model used for answer scoring and final evaluation
- OPENAI_BASE_URL: optional alternative endpoint (OpenAI-compatible)
- REASONING_TIMEOUT_SEC: per-call timeout; the call is never retried
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_visaprep/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SEC = 20.0


def load_visaprep_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    from dotenv import load_dotenv

    if _ENV_PATH.exists():
        load_dotenv(dotenv_path=_ENV_PATH, override=False)
    else:
        load_dotenv(override=False)


def get_openai_api_key() -> str:
    """Return OPENAI_API_KEY or "" when the reasoning service is not configured."""
    load_visaprep_env()
    return (os.getenv("OPENAI_API_KEY") or "").strip()


def get_openai_model() -> str:
    load_visaprep_env()
    return (os.getenv("OPENAI_MODEL") or DEFAULT_MODEL).strip() or DEFAULT_MODEL


def get_openai_base_url() -> str | None:
    load_visaprep_env()
    url = (os.getenv("OPENAI_BASE_URL") or "").strip()
    return url or None


def get_reasoning_timeout_sec() -> float:
    """
    Return REASONING_TIMEOUT_SEC as float.
    Invalid or non-positive values fall back to DEFAULT_TIMEOUT_SEC.
    """
    load_visaprep_env()
    raw = (os.getenv("REASONING_TIMEOUT_SEC") or "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SEC
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_TIMEOUT_SEC
