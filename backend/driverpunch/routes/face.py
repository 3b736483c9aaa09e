# Overview: Serves the face-api.js weights to the browser and reports load status.

from flask import Blueprint, jsonify, abort, send_from_directory

from ..services import face_model_service
from ..services.face_model_service import FaceModelError
from ..services.face_service import FACE_MATCH_THRESHOLD, DESCRIPTOR_LENGTH


face_bp = Blueprint("face", __name__)


@face_bp.get("/api/face/models/status")
def model_status_route():
    try:
        status = face_model_service.ensure_models_loaded()
    except FaceModelError as e:
        return jsonify({"loaded": False, "error": str(e)}), 503
    status.update({
        "threshold": FACE_MATCH_THRESHOLD,
        "descriptor_length": DESCRIPTOR_LENGTH,
    })
    return jsonify(status)


@face_bp.get("/models/<path:filename>")
def model_file_route(filename: str):
    try:
        face_model_service.ensure_models_loaded()
    except FaceModelError:
        return jsonify({"error": "Face recognition models unavailable"}), 503

    registry = face_model_service.registry
    if not registry.is_served_file(filename):
        abort(404)
    return send_from_directory(registry.model_dir, filename, max_age=86400)
