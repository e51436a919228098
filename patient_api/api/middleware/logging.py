# 📄 File: patient_api/api/middleware/logging.py
# 🧭 Purpose (Layman Explanation):
# Keeps a diary of every request made to the API: what was asked for, who asked, how it ended
# and how long it took.
# 🧪 Purpose (Technical Summary):
# Request logging middleware writing one structured record per request (method, path, status,
# duration, client, user) through PerformanceLogger, with slow request classification.
# 🔗 Dependencies:
# starlette BaseHTTPMiddleware, patient_api.shared.utils.logging
# 🔄 Connected Modules / Calls From:
# patient_api.main (middleware registration)

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from patient_api.shared.utils.logging import PerformanceLogger

from . import get_middleware_config, should_exclude_path

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware

    Request bodies are never logged; they carry passwords and health answers.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.performance_logger = PerformanceLogger(logger)
        self.slow_request_threshold = get_middleware_config("logging").get("slow_request_threshold", 2.0)

    async def dispatch(self, request: Request, call_next) -> Response:
        if should_exclude_path("logging", request.url.path):
            return await call_next(request)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"HTTP {request.method} {request.url.path} failed after {duration * 1000:.2f}ms: "
                f"{type(e).__name__}: {e}"
            )
            raise

        duration = time.perf_counter() - start_time
        self.performance_logger.log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration * 1000,
            extra={
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent", ""),
                "authenticated_user": getattr(request.state, "user_id", None),
                "performance": "slow" if duration > self.slow_request_threshold else "normal",
            },
        )
        return response
