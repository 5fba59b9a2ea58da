import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from users_api.core.exceptions import APIError, AuthRejected

logger = logging.getLogger(__name__)


def error_envelope(status_code: int, message: str, error: str | None = None, headers=None) -> JSONResponse:
    """Build the {message, status, error?} body every failure uses"""
    content = {"message": message, "status": status_code}
    if error:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthRejected):
        headers = {"WWW-Authenticate": "Bearer"}
    return error_envelope(exc.status_code, exc.message, exc.error, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are client errors, reported as 400 rather than 422
    fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()} - {""})
    return error_envelope(
        400,
        "Validation error: Invalid data provided.",
        f"Invalid fields: {', '.join(fields)}" if fields else None,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Internal details stay in the log
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_envelope(500, "An unexpected error occurred.")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
