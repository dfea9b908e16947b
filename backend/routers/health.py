"""
Aether Intel - Health & Version Router

Endpoints:
- GET /api/version - Application version info
- GET /health - Liveness probe (database ping)
- GET /readiness - Readiness probe (database + analysis service configuration)
- GET /metrics - Prometheus exposition, or a JSON summary when disabled
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import Response

from ai_client import AnalysisClient
from brand_sources import get_all_source_status
from constants import __version__
from database import get_db
from dependencies import get_analysis_service
from metrics import CONTENT_TYPE_LATEST, METRICS_ENABLED, generate_latest, get_metrics_summary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def _database_ok(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


@router.get("/api/version")
async def get_version():
    """Return application version information."""
    return {"version": __version__, "name": "Aether Intel"}


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Liveness probe."""
    if _database_ok(db):
        return {"status": "healthy", "version": __version__}
    return JSONResponse(status_code=503, content={"status": "unhealthy"})


@router.get("/readiness")
async def readiness_check(
    db: Session = Depends(get_db),
    analysis_client: AnalysisClient = Depends(get_analysis_service),
):
    """Readiness probe.

    The database is critical (503 when down). A missing analysis key only
    degrades the service, since CRUD endpoints keep working without it.
    """
    checks = {
        "database": _database_ok(db),
        "analysis_service": analysis_client.is_configured,
    }
    for source in get_all_source_status():
        checks[f"brand_source_{source['source']}"] = source["is_configured"]

    critical_ok = checks["database"]
    if all(checks.values()):
        status_text = "ready"
    elif critical_ok:
        status_text = "degraded"
    else:
        status_text = "unhealthy"

    return JSONResponse(
        status_code=200 if critical_ok else 503,
        content={"status": status_text, "version": __version__, "checks": checks},
    )


@router.get("/metrics")
async def metrics_endpoint():
    """Prometheus text format when METRICS_ENABLED=true, else a JSON summary."""
    if METRICS_ENABLED:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
    return get_metrics_summary()
