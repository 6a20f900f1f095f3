"""Error Handlers — every failure leaves the API as the same {"error": {...}} envelope.

Invariants:
    - FarmOpsError → its own http_status and to_response() body
    - RequestValidationError → 400 VALIDATION_ERROR, one detail per offending field
    - Anything else → 500 INTERNAL_ERROR without internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from farmops.core.errors import ErrorCategory, ErrorSeverity, FarmOpsError

logger = logging.getLogger(__name__)


def error_body(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    details: list | None = None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}


def validation_details(exc: RequestValidationError) -> list[dict]:
    """Split pydantic locations into where (body/query/...) and which field."""
    details = []
    for err in exc.errors():
        location, *field = [str(part) for part in err["loc"]] or ["request"]
        details.append({
            "location": location,
            "field": ".".join(field),
            "message": err["msg"],
            "type": err["type"],
        })
    return details


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(FarmOpsError)
    async def farmops_error_handler(request: Request, exc: FarmOpsError):
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = validation_details(exc)
        logger.warning(
            f"Invalid request on {request.url.path}: "
            f"{[d['location'] + ':' + d['field'] for d in details]}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                "VALIDATION_ERROR", "Invalid request data",
                ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details,
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.url.path}",
            exc_info=exc,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "INTERNAL_ERROR", "An unexpected error occurred",
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            ),
        )
