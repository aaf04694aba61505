# backend/gasflow/routes/system.py
"""
System health endpoint.

Checks database connectivity and reports catalog/session counts for
deployment debugging.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import CylinderType, SessionToken
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        cylinder_types = db.session.query(CylinderType).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "cylinder_types": cylinder_types,
                "active_sessions": active_sessions,
            }
        }
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    database_health = check_database_health()
    http_status = 200 if database_health["status"] == "healthy" else 503

    return {
        "success": http_status == 200,
        "message": "Server is running" if http_status == 200 else "Server is degraded",
        "data": {
            "status": database_health["status"],
            "timestamp": to_utc_z(utcnow()),
            "checks": {"database": database_health},
        },
    }, http_status
