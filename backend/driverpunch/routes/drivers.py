# Overview: Flask API routes for the driver directory; parses input and returns JSON responses.

"""
Driver Directory Routes

SECURITY: admin only. PINs and face descriptors are write-only; responses
carry has_pin / has_face flags instead.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_admin
from ..services import driver_service
from ..services.driver_service import DriverError, DriverNotFound
from ..services.face_service import FaceDescriptorError


drivers_bp = Blueprint("drivers", __name__, url_prefix="/api/drivers")


@drivers_bp.get("")
@require_auth
@require_admin
def list_drivers_route():
    search = request.args.get("search")
    include_inactive = request.args.get("include_inactive", "true").lower() != "false"
    drivers = driver_service.list_drivers(search=search, include_inactive=include_inactive)
    return jsonify({"drivers": [d.to_dict() for d in drivers], "count": len(drivers)})


@drivers_bp.post("")
@require_auth
@require_admin
def create_driver_route():
    """
    Request body:
    {
        "driver_id": "DRV-001",
        "name": "Sam Carter",
        "email": "sam@example.com",   (optional)
        "phone": "+1 555 0100",       (optional)
        "pin": "1234"                 (optional, 4-6 digits)
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        driver = driver_service.create_driver(
            driver_id=data.get("driver_id"),
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
            pin=data.get("pin"),
        )
        return jsonify({"driver": driver.to_dict()}), 201
    except DriverError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create driver")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.get("/<int:driver_pk>")
@require_auth
@require_admin
def get_driver_route(driver_pk: int):
    driver = driver_service.get_driver(driver_pk)
    if not driver:
        return jsonify({"error": "Driver not found"}), 404
    return jsonify({"driver": driver.to_dict()})


@drivers_bp.patch("/<int:driver_pk>")
@require_auth
@require_admin
def update_driver_route(driver_pk: int):
    data = request.get_json(silent=True) or {}
    updates = {k: data[k] for k in driver_service.UPDATABLE_FIELDS if k in data}
    try:
        driver = driver_service.update_driver(driver_pk, **updates)
        return jsonify({"driver": driver.to_dict()})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except DriverError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update driver")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.post("/<int:driver_pk>/deactivate")
@require_auth
@require_admin
def deactivate_driver_route(driver_pk: int):
    try:
        driver = driver_service.deactivate_driver(driver_pk)
        return jsonify({"driver": driver.to_dict()})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to deactivate driver")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.delete("/<int:driver_pk>")
@require_auth
@require_admin
def delete_driver_route(driver_pk: int):
    try:
        driver_service.delete_driver(driver_pk)
        return jsonify({"message": "Driver deleted"})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete driver")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.put("/<int:driver_pk>/pin")
@require_auth
@require_admin
def set_pin_route(driver_pk: int):
    data = request.get_json(silent=True) or {}
    try:
        driver = driver_service.set_pin(driver_pk, data.get("pin"))
        return jsonify({"driver": driver.to_dict()})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except DriverError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to set driver PIN")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.put("/<int:driver_pk>/face")
@require_auth
@require_admin
def enroll_face_route(driver_pk: int):
    """
    Enroll the descriptor captured in the browser.

    Request body: {"descriptor": [128 numbers]}
    """
    data = request.get_json(silent=True) or {}
    try:
        driver = driver_service.enroll_face(driver_pk, data.get("descriptor"))
        return jsonify({"driver": driver.to_dict()})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except FaceDescriptorError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to enroll driver face")
        return jsonify({"error": "Internal server error"}), 500


@drivers_bp.delete("/<int:driver_pk>/face")
@require_auth
@require_admin
def clear_face_route(driver_pk: int):
    try:
        driver = driver_service.clear_face(driver_pk)
        return jsonify({"driver": driver.to_dict()})
    except DriverNotFound as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to clear driver face")
        return jsonify({"error": "Internal server error"}), 500
