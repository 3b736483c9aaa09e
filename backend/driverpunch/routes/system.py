# backend/driverpunch/routes/system.py
"""
System health and version endpoints.
"""

import time
from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import User, Driver
from ..services import face_model_service

system_bp = Blueprint("system", __name__)

VERSION = "1.0.0"


def check_database_health() -> dict:
    start_time = time.time()
    try:
        users = db.session.query(User).count()
        drivers = db.session.query(Driver).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"users": users, "drivers": drivers},
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_face_models_health() -> dict:
    # Report only; loading happens on first /models request
    registry = face_model_service.registry
    return {
        "status": "healthy" if registry.is_loaded else "not_loaded",
        "details": registry.status(),
    }


@system_bp.get("/health")
def health_route():
    database = check_database_health()
    checks = {
        "database": database,
        "face_models": check_face_models_health(),
    }
    overall = "healthy" if database["status"] == "healthy" else "unhealthy"
    return jsonify({"status": overall, "checks": checks}), 200 if overall == "healthy" else 503


@system_bp.get("/version")
def version_route():
    return jsonify({"name": "driverpunch", "version": VERSION})
