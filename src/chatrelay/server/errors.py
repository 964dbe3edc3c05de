# src/chatrelay/server/errors.py
"""
Error handlers for the HTTP API.

Every error response has the body {"error": "<message>"}:
validation errors are 400, unknown sessions 404, backend failures 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..backends import BackendError
from ..relay import ChatValidationError
from ..sessions import SessionNotFoundError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Register the API's exception handlers on the app."""

    @app.exception_handler(ChatValidationError)
    async def validation_error_handler(
        request: Request, exc: ChatValidationError
    ) -> JSONResponse:
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"Invalid request: {location} {errors[0].get('msg', '')}".strip()
        else:
            message = "Invalid request"
        return error_response(400, message)

    @app.exception_handler(SessionNotFoundError)
    async def not_found_handler(
        request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return error_response(404, str(exc))

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
        logger.warning("Backend error on %s: %s", request.url.path, exc)
        return error_response(500, str(exc) or "AI error")
