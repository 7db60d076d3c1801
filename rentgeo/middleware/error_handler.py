"""Global error handling middleware.

This module provides centralized exception handling with
structured JSON responses and request tracking.
"""

import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from rentgeo.core.exceptions import AppException


def _error_response(request_id: str, status_code: int, error: str, details=None) -> JSONResponse:
    content = {"error": error, "request_id": request_id}
    if details is not None:
        content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"X-Request-ID": request_id},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Attach request IDs and convert unhandled exceptions to JSON 500s."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        except AppException as exc:
            logger.warning(f"Application error: {exc.message} [{request_id}]")
            return _error_response(request_id, exc.status_code, exc.message, exc.details)

        except Exception:
            logger.exception(f"Unhandled exception [{request_id}]")
            return _error_response(request_id, 500, "Internal server error")


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        if exc.status_code >= 500:
            # Cause was logged where it was wrapped; never echo it to callers
            logger.error(f"{exc.message} [{request_id}]")
        else:
            logger.info(f"{exc.status_code} {exc.message} [{request_id}]")
        return _error_response(request_id, exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        return _error_response(
            request_id,
            422,
            "Validation error",
            {"errors": jsonable_encoder(exc.errors())},
        )
