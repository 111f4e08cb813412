"""
Configuration management for Backend VisaPrep.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for scoring policy and reasoning service config.
"""

from backend_visaprep.config.settings import ScoringSettings, get_settings  # noqa: F401

__all__ = ["ScoringSettings", "get_settings"]
