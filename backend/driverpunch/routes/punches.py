# Overview: Flask API routes for punching in/out; parses input and returns JSON responses.

"""
Punch Routes

Drivers punch as themselves (User.driver_id). Admins may act for any
driver by passing driver_id.

Responses:
- 201 punch recorded; next_step == "return_form" after a punch-in
- 401 authorization failed (wrong PIN, face mismatch); retry freely
- 403 driver inactive
- 404 driver not in the directory
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..services import driver_service, punch_service
from ..services.face_service import FaceDescriptorError, validate_descriptor
from ..services.punch_service import PunchRejected, DriverUnavailable, PunchError


punches_bp = Blueprint("punches", __name__, url_prefix="/api/punches")


def _requested_driver_id(data: dict | None = None) -> str | None:
    if g.current_user.is_admin:
        return (data or {}).get("driver_id") or request.args.get("driver_id")
    return g.current_user.driver_id


def _resolve_driver(data: dict | None = None):
    driver_id = _requested_driver_id(data)
    if not driver_id:
        return None, (jsonify({"error": "driver_id is required"}), 400)
    driver = driver_service.get_driver_by_driver_id(driver_id)
    if not driver:
        return None, (jsonify({"error": "Driver not found"}), 404)
    return driver, None


@punches_bp.get("/status")
@require_auth
def punch_status_route():
    driver, error = _resolve_driver()
    if error:
        return error
    return jsonify(punch_service.punch_status(driver))


@punches_bp.get("")
@require_auth
def list_punches_route():
    limit = request.args.get("limit", type=int)
    if g.current_user.is_admin:
        driver_id = request.args.get("driver_id")
    else:
        driver_id = g.current_user.driver_id
        if not driver_id:
            return jsonify({"punch_logs": [], "count": 0})

    logs = punch_service.list_punches(driver_id=driver_id, limit=limit)
    return jsonify({"punch_logs": [log.to_dict() for log in logs], "count": len(logs)})


@punches_bp.post("/pin")
@require_auth
def punch_pin_route():
    """
    Request body:
    {
        "pin": "1234",
        "location": "Depot 3",   (optional)
        "driver_id": "DRV-001"   (admin only)
    }
    """
    data = request.get_json(silent=True) or {}
    driver, error = _resolve_driver(data)
    if error:
        return error

    try:
        result = punch_service.punch_with_pin(driver, data.get("pin"), location=data.get("location"))
        return jsonify(result.to_dict()), 201
    except PunchRejected as e:
        return jsonify(e.to_dict()), 401
    except DriverUnavailable as e:
        return jsonify({"error": str(e)}), 403
    except PunchError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record PIN punch")
        return jsonify({"error": "Internal server error"}), 500


@punches_bp.post("/face")
@require_auth
def punch_face_route():
    """
    Request body:
    {
        "descriptor": [128 numbers] | null,   // null: no face detected
        "location": "Depot 3",                (optional)
        "driver_id": "DRV-001"                (admin only)
    }
    """
    data = request.get_json(silent=True) or {}
    driver, error = _resolve_driver(data)
    if error:
        return error

    try:
        raw = data.get("descriptor")
        descriptor = validate_descriptor(raw) if raw is not None else None
        result = punch_service.punch_with_face(driver, descriptor, location=data.get("location"))
        return jsonify(result.to_dict()), 201
    except FaceDescriptorError as e:
        return jsonify({"error": str(e)}), 400
    except PunchRejected as e:
        return jsonify(e.to_dict()), 401
    except DriverUnavailable as e:
        return jsonify({"error": str(e)}), 403
    except PunchError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record face punch")
        return jsonify({"error": "Internal server error"}), 500
