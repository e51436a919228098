# 📄 File: patient_api/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# Tells hosting and monitoring tools whether the consultation service is up, and on request
# whether its database answers and how much CPU, memory and disk it is using.
# 🧪 Purpose (Technical Summary):
# Basic and detailed health endpoints: database connectivity through the connection manager
# and process/system resource usage through psutil.
# 🔗 Dependencies:
# FastAPI, psutil, patient_api.shared.infrastructure.database.connection
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, load balancers and uptime monitors

import logging
import platform
import sys
from datetime import datetime, timezone
from typing import Any, Dict

import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from patient_api.shared.config.settings import get_settings
from patient_api.shared.infrastructure.database.connection import database_health_check

logger = logging.getLogger(__name__)

health_router = APIRouter()

# Application start time for uptime calculation
_app_start_time = datetime.now(timezone.utc)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uptime_seconds() -> float:
    return (datetime.now(timezone.utc) - _app_start_time).total_seconds()


@health_router.get(
    "/health",
    summary="Basic Health Check",
    description="Basic health check endpoint for load balancers and monitoring",
)
async def health_check() -> JSONResponse:
    settings = get_settings()
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": _now(),
            "service": settings.SERVICE_NAME,
            "version": settings.APP_VERSION,
        }
    )


@health_router.get(
    "/health/detailed",
    summary="Detailed Health Check",
    description="Database connectivity plus process and system resource usage",
)
async def detailed_health_check() -> JSONResponse:
    """
    Comprehensive health check.

    Checks the database and collects system metrics. Returns 503 when the
    database is unreachable, 200 otherwise (``degraded`` when resources run high).
    """
    settings = get_settings()
    start_time = datetime.now(timezone.utc)
    overall_status = "healthy"
    components: Dict[str, Any] = {}

    db_health = await database_health_check()
    components["database"] = db_health
    if db_health["status"] != "healthy":
        overall_status = "unhealthy"

    try:
        system_metrics = _get_system_metrics()
        components["system"] = system_metrics
        if overall_status == "healthy" and (
            system_metrics["cpu_percent"] > 90
            or system_metrics["memory_percent"] > 90
            or system_metrics["disk_percent"] > 95
        ):
            overall_status = "degraded"
    except psutil.Error as e:
        logger.warning(f"System metrics unavailable: {e}")
        components["system"] = {"status": "error", "error": str(e), "timestamp": _now()}
        if overall_status == "healthy":
            overall_status = "degraded"

    components["process"] = _get_process_metrics()

    return JSONResponse(
        status_code=503 if overall_status == "unhealthy" else 200,
        content={
            "status": overall_status,
            "timestamp": _now(),
            "service": settings.SERVICE_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "uptime_seconds": _uptime_seconds(),
            "response_time_seconds": (datetime.now(timezone.utc) - start_time).total_seconds(),
            "components": components,
        }
    )


def _get_system_metrics() -> Dict[str, Any]:
    """Get basic system metrics"""
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage('/')

    return {
        "status": "healthy",
        "platform": platform.platform(),
        "python_version": sys.version.split()[0],
        "cpu_count": psutil.cpu_count(),
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": memory.percent,
        "disk_percent": (disk.used / disk.total) * 100,
        "timestamp": _now(),
    }


def _get_process_metrics() -> Dict[str, Any]:
    try:
        process = psutil.Process()
        with process.oneshot():
            return {
                "pid": process.pid,
                "cpu_percent": process.cpu_percent(),
                "memory_percent": process.memory_percent(),
                "memory_rss_bytes": process.memory_info().rss,
                "num_threads": process.num_threads(),
                "create_time": datetime.fromtimestamp(process.create_time(), timezone.utc).isoformat(),
            }
    except psutil.Error as e:
        logger.warning(f"Process metrics unavailable: {e}")
        return {"error": "Process metrics unavailable"}
