"""
Structured logging for Backend VisaPrep.

JSON logs with timestamp, event_type and scoring context.
Use get_logger() in all pipeline modules for aggregation-friendly output.
"""

from backend_visaprep.visaprep_logging.logger import (
    bind_request_context,
    bind_session,
    clear_request_context,
    get_logger,
)

__all__ = ["bind_request_context", "bind_session", "clear_request_context", "get_logger"]
