"""
FastAPI server: visa interview scoring API.

Mounts the interview router (POST /score, POST /final-evaluation) and
GET /health. Validation errors are returned as 400; on /score the body also
carries zeroed scores and remediation hints.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend_visaprep import __version__
from backend_visaprep.api_server.interview_routes import (
    SUBMISSION_HINTS,
    router as interview_router,
    zeroed_score_payload,
)
from backend_visaprep.api_server.middleware import register_request_logging
from backend_visaprep.visaprep_logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="VisaPrep Scoring API",
    description="Per-answer scoring and final decision for simulated visa interviews.",
    version=__version__,
)

app.include_router(interview_router)
register_request_logging(app)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors: 400, never 422."""
    errors = jsonable_encoder(exc.errors())
    logger.info("request_validation_failed", path=request.url.path, error_count=len(errors))
    if request.url.path.rstrip("/").endswith("/score"):
        raw = exc.body if isinstance(exc.body, dict) else {}
        body_present = raw.get("bodyLanguage", raw.get("body_language")) is not None
        content = zeroed_score_payload("Missing or invalid fields", SUBMISSION_HINTS, body_present)
        content["errors"] = errors
        return JSONResponse(status_code=400, content=content)
    return JSONResponse(status_code=400, content={"detail": "Missing or invalid fields", "errors": errors})


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
