# 📄 File: patient_api/api/middleware/error_handling.py
# 🧭 Purpose (Layman Explanation):
# Catches any error in the app and turns it into a consistent, readable error message, and
# stamps every response with an id and how long it took so problems can be traced.
# 🧪 Purpose (Technical Summary):
# Request correlation middleware plus the JSON error envelope
# {"error": {code, message, details, timestamp, request_id}} used by the application exception
# handler, the request validation handler and the catch-all for unhandled exceptions.
# 🔗 Dependencies:
# FastAPI, starlette BaseHTTPMiddleware, patient_api.shared.core.exceptions,
# patient_api.shared.utils.logging (request context)
# 🔄 Connected Modules / Calls From:
# patient_api.main (middleware and exception handler registration)

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import PatientPortalException
from patient_api.shared.utils.logging import log_context

from . import get_middleware_config

logger = logging.getLogger(__name__)


def error_envelope(
    request: Request,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        }
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware

    Assigns the request id (reusing an incoming X-Request-ID), binds it to the
    log context, adds X-Request-ID and X-Response-Time to every response, and
    converts anything the exception handlers did not handle into a 500 envelope.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.settings = get_settings()
        config = get_middleware_config("error_handling")
        self.request_id_header = config.get("request_id_header", "X-Request-ID")
        self.response_time_header = config.get("response_time_header", "X-Response-Time")

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(self.request_id_header) or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        with log_context(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                response = self._handle_exception(request, exc)

        response.headers[self.request_id_header] = request_id
        response.headers[self.response_time_header] = f"{time.perf_counter() - start_time:.3f}s"
        return response

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}: {exc}",
            exc_info=True,
        )

        details: Dict[str, Any] = {}
        if self.settings.DEBUG and not self.settings.is_production:
            details = {"exception_type": type(exc).__name__, "exception_message": str(exc)}

        return JSONResponse(
            status_code=500,
            content=error_envelope(request, "INTERNAL_SERVER_ERROR", "An internal server error occurred", details),
        )


async def patient_portal_exception_handler(request: Request, exc: PatientPortalException) -> JSONResponse:
    """Handle application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, exc.error_code, exc.message, jsonable_encoder(exc.details)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation failures."""
    return JSONResponse(
        status_code=422,
        content=error_envelope(
            request,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"validation_errors": jsonable_encoder(exc.errors())},
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (404, 405) in the same envelope."""
    code = "NOT_FOUND" if exc.status_code == 404 else f"HTTP_{exc.status_code}"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(request, code, str(exc.detail), {"path": request.url.path}),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PatientPortalException, patient_portal_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
