"""
VideoHub Health Check Routes
Liveness, database readiness, and process resources
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import sys
import psutil
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Dict, Any

from ..config import get_settings
from ..database import get_db
from ..logging_config import api_logger

router = APIRouter(prefix="/api/health", tags=["health"])

settings = get_settings()

START_TIME = datetime.now(timezone.utc)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_uptime() -> str:
    """Get system uptime as human-readable string"""
    delta = datetime.now(timezone.utc) - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_database(db: Session) -> Dict[str, Any]:
    """Round-trip a trivial query"""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy"}
    except SQLAlchemyError as e:
        api_logger.error("Database health check failed", error=e)
        return {
            "status": "unhealthy",
            "error": type(e).__name__,
        }


def check_system() -> Dict[str, Any]:
    """Check process resources"""
    memory = psutil.virtual_memory()
    return {
        "status": "healthy" if memory.percent < 90 else "warning",
        "cpu_percent": psutil.cpu_percent(interval=0.1),
        "memory_percent": memory.percent,
        "memory_available_gb": round(memory.available / (1024**3), 2),
        "python_version": sys.version.split()[0],
    }


# ============================================================
# ROUTES
# ============================================================

@router.get("")
def health(db: Session = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.
    Returns ok only when the database answers.
    """
    database = check_database(db)
    healthy = database["status"] == "healthy"
    return {
        "ok": healthy,
        "status": "healthy" if healthy else "unhealthy",
        "environment": settings.environment,
        "version": "1.0.0",
        "uptime": get_uptime(),
        "checks": {"database": database["status"]},
        "timestamp": _now(),
    }


@router.get("/full")
def health_full(db: Session = Depends(get_db)):
    """
    Full health check - detailed status of all components.
    Use for monitoring dashboards.
    """
    database = check_database(db)
    system = check_system()

    statuses = [database["status"], system["status"]]
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif "warning" in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    return {
        "ok": overall == "healthy",
        "status": overall,
        "uptime": get_uptime(),
        "started_at": START_TIME.isoformat(),
        "checks": {
            "database": database,
            "system": system,
        },
        "timestamp": _now(),
    }
