"""
Exception handlers that render every failure as ``{"error": "<message>"}``.

Domain errors get a default status here; routers that need a different
status for a specific endpoint raise ``HTTPException`` themselves.
Storage failures are logged with their cause and answered with a generic
message so query text never reaches the client.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog.exceptions import (
    AlreadyRegisteredError,
    BlogError,
    InvalidCredentialsError,
    NotAuthorizedError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[BlogError], int] = {
    NotFoundError: 404,
    NotAuthorizedError: 403,
    AlreadyRegisteredError: 422,
    InvalidCredentialsError: 422,
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "malformed request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(BlogError)
    async def _blog_error_handler(request: Request, exc: BlogError):
        for error_type, status_code in _STATUS_BY_ERROR.items():
            if isinstance(exc, error_type):
                return error_response(status_code, str(exc))
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, "internal server error")

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, "internal server error")
