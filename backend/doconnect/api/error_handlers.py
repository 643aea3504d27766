"""Error Handlers - global exception handlers for the DoConnect API.

Invariants:
    - DoConnectError -> structured JSON with error code, message, severity; logged with
      the ErrorContext ids (user, question, answer) when set
    - 401s carry a WWW-Authenticate Bearer challenge (error="invalid_token" when a
      token was sent but rejected)
    - RequestValidationError -> field-level error details (400)
    - Exception (catch-all) -> generic 500 that never leaks internal details

Design Decisions:
    - Three-layer handler: domain (DoConnectError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py to keep the app module down to wiring
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from doconnect.core.errors import DoConnectError, ErrorSeverity, InvalidTokenError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(DoConnectError)
    async def doconnect_error_handler(request: Request, exc: DoConnectError):
        """Handle all DoConnect domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(f"{exc.code}: {exc.message}", extra=_log_extra(request, exc))
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=_challenge_headers(exc),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }


def _log_extra(request: Request, exc: DoConnectError) -> dict:
    extra = {"error_code": exc.code, "path": request.url.path}
    for key in ("user_id", "question_id", "answer_id"):
        value = getattr(exc.context, key)
        if value is not None:
            extra[key] = value
    return extra


def _challenge_headers(exc: DoConnectError) -> dict[str, str] | None:
    """RFC 6750 challenge: bare "Bearer" when no token was sent, invalid_token otherwise."""
    if exc.http_status != 401:
        return None
    if isinstance(exc, InvalidTokenError) and exc.reason != "missing":
        return {"WWW-Authenticate": 'Bearer error="invalid_token"'}
    return {"WWW-Authenticate": "Bearer"}
