# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Identity Gate API routes

- sign-up: create an account (driver, or admin when enabled)
- sign-in: email/password -> bearer token
- sign-out: revoke the bearer token
- me: resolve the bearer token to the application user
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import AuthError
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/sign-up")
def sign_up_route():
    """
    Request body:
    {
        "email": "driver@example.com",
        "password": "secret1",
        "role": "driver",          // admin | driver
        "driver_id": "DRV-001"     // optional, driver accounts only
    }
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")
    role = data.get("role") or "driver"

    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.sign_up(email, password, role, data.get("driver_id"))
        return jsonify({"user": user.to_dict()}), 201
    except AuthError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/sign-in")
def sign_in_route():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        return jsonify({
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
            "message": "Sign-in successful",
        }), 200
    except Exception:
        current_app.logger.exception("Failed to sign in user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/sign-out")
def sign_out_route():
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    try:
        if not session_service.revoke_session(token):
            return jsonify({"error": "Invalid or expired token"}), 401
        return jsonify({"message": "Sign-out successful"}), 200
    except Exception:
        current_app.logger.exception("Failed to sign out user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()})
