"""
Error handling middleware that converts exceptions to HTTP responses.

Store errors keep their own status code and message. Anything else becomes a
500 whose detail is only exposed when the application runs with debug on.
Every error response carries the request's X-Request-ID.
"""
import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from prompt_library.core.exceptions import PromptLibraryException
from prompt_library.core.logging import log_event

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    # Set by RequestLoggingMiddleware, which runs inside this middleware
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "")


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware to convert exceptions to appropriate HTTP responses."""

    def __init__(self, app: ASGIApp, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    def _error_response(self, request: Request, status_code: int, content: Dict[str, Any]) -> JSONResponse:
        response = JSONResponse(status_code=status_code, content=content)
        request_id = _request_id(request)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)

        except PromptLibraryException as e:
            log_event(
                level="WARNING" if e.status_code < 500 else "ERROR",
                logger="prompt_library.middleware.error_handling",
                function="dispatch",
                operation="http_request",
                event="application_error",
                message=f"Application error: {e.message}",
                context={
                    "status_code": e.status_code,
                    "error_type": type(e).__name__,
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return self._error_response(
                request,
                e.status_code,
                {"error": e.message, "status_code": e.status_code},
            )

        except Exception as e:
            log_event(
                level="ERROR",
                logger="prompt_library.middleware.error_handling",
                function="dispatch",
                operation="http_request",
                event="unexpected_error",
                message=f"Unexpected error: {e}",
                context={"path": request.url.path, "method": request.method},
                exc_info=e
            )
            content: Dict[str, Any] = {"error": "Internal server error", "status_code": 500}
            if self.debug:
                content["detail"] = str(e)
            return self._error_response(request, 500, content)
