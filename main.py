"""
Main entrypoint: run the VisaPrep scoring API with uvicorn.

Env: API_HOST, API_PORT, LOG_LEVEL, OPENAI_API_KEY (optional; heuristics only without it).

Equivalent: uvicorn backend_visaprep.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Load settings and serve the API in the main thread."""
    api_host = os.getenv("API_HOST", "0.0.0.0").strip()
    api_port = int(os.getenv("API_PORT", "8000").strip() or "8000")

    from backend_visaprep.config import get_settings

    settings = get_settings()
    if not settings.openai_api_key:
        logger.warning(
            "main_reasoning_service_unconfigured",
            message="OPENAI_API_KEY not set: answers are scored with heuristics only",
        )

    from backend_visaprep.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=api_host, port=api_port, model=settings.openai_model)
    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
