"""Error Handlers — one JSON error envelope for every failure the API returns.

Invariants:
    - Every error body is {"error": {code, message, category, severity, timestamp?, details?}}
    - 401 responses carry WWW-Authenticate: Bearer (clients drop the token and re-login)
    - Request validation failures are 400 VALIDATION_ERROR with one detail per field
    - Framework HTTP errors (unknown route, wrong method) use the same envelope
    - The catch-all never leaks internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skillsharp.core.errors import ErrorCategory, ErrorSeverity, SkillSharpError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", ErrorCategory.VALIDATION),
    status.HTTP_401_UNAUTHORIZED: ("AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION),
    status.HTTP_403_FORBIDDEN: ("PERMISSION_DENIED", ErrorCategory.AUTHORIZATION),
}


def register_error_handlers(app: FastAPI) -> None:
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _envelope(code: str, message: str, category: str, severity: str, **extra) -> dict:
    return {
        "error": {
            "code": code, "message": message,
            "category": category, "severity": severity, **extra,
        },
    }


def _auth_headers(status_code: int) -> dict | None:
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    return None


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SkillSharpError)
    async def skillsharp_error_handler(request: Request, exc: SkillSharpError):
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{exc.code}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=_auth_headers(exc.http_status),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Validation error on {request.url.path}: {len(exc.errors())} field(s)",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_envelope(
                "VALIDATION_ERROR", "Invalid request data",
                ErrorCategory.VALIDATION.value, ErrorSeverity.ERROR.value,
                details=[
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in exc.errors()
                ],
            ),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code, category = _HTTP_CODES.get(exc.status_code, ("HTTP_ERROR", ErrorCategory.INTERNAL))
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(code, message, category.value, ErrorSeverity.WARNING.value),
            headers=_auth_headers(exc.status_code) or getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: logs the traceback and answers with a bare 500."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(
                "INTERNAL_ERROR", "An unexpected error occurred",
                ErrorCategory.INTERNAL.value, ErrorSeverity.CRITICAL.value,
            ),
        )
