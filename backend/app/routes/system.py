# Overview: Unauthenticated liveness probe covering the database and the session table.

"""
Health Probe

GET /api/health answers 200 when every probe passes and 503 otherwise.
Each probe reports its own status and latency so a load balancer or an
operator can tell which dependency failed.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import CashPeriod, Member, SessionToken
from app.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api")


def _elapsed_ms(started: float) -> float:
    return round((time.time() - started) * 1000, 2)


def _run_probe(name: str, probe) -> dict:
    """Call probe() and wrap its details; a database error marks it unhealthy."""
    started = time.time()
    try:
        details = probe()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Health probe %s failed", name)
        return {"status": "unhealthy", "latency_ms": _elapsed_ms(started), "error": f"{name} unavailable"}
    return {"status": "healthy", "latency_ms": _elapsed_ms(started), "details": details}


def _database_details() -> dict:
    members = db.session.query(Member).filter(Member.deleted_at.is_(None)).count()
    active = db.session.query(CashPeriod.id).filter(CashPeriod.is_active.is_(True)).first()
    return {
        "members": members,
        "active_cash_period": active[0] if active else None,
    }


def _session_details() -> dict:
    now = utcnow()
    open_sessions = db.session.query(SessionToken).filter(SessionToken.is_revoked.is_(False))
    return {
        "active_sessions": open_sessions.filter(SessionToken.expires_at >= now).count(),
        "expired_pending_cleanup": open_sessions.filter(SessionToken.expires_at < now).count(),
    }


@system_bp.get("/health")
def health():
    started = time.time()
    checks = {
        "database": _run_probe("database", _database_details),
        "session_service": _run_probe("session_service", _session_details),
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": _elapsed_ms(started),
        "checks": checks,
    }
    return body, 200 if healthy else 503
