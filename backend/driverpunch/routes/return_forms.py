# Overview: Flask API routes for return forms; parses input and returns JSON responses.

"""
Return Form Routes

WHY: A punch-in opens the return form step. Drivers submit itemized
returns; admins approve or reject them.

SECURITY:
- Drivers submit and read only their own forms
- Status decisions are admin only
"""

from flask import Blueprint, Response, request, jsonify, g, current_app

from ..decorators import require_auth, require_admin
from ..models.returns import STATUS_APPROVED, STATUS_REJECTED
from ..services import return_form_service, export_service
from ..services.return_form_service import ReturnFormError, ReturnFormNotFound, RETURN_FORM_STATUSES
from ..validation import ValidationError


return_forms_bp = Blueprint("return_forms", __name__, url_prefix="/api/return-forms")


def _visible_form(form_id: int):
    """The form, or None when missing or owned by another driver."""
    form = return_form_service.get_return_form(form_id)
    if not form:
        return None
    if not g.current_user.is_admin and form.driver_id != g.current_user.driver_id:
        return None
    return form


@return_forms_bp.post("")
@require_auth
def submit_return_form_route():
    """
    Request body:
    {
        "punch_log_id": 12,
        "items": [
            {"item_name": "Crate", "quantity": 2, "condition": "good", "notes": ""},
            {"item_name": "Scanner", "quantity": 1, "condition": "damaged"}
        ]
    }

    Any total sent by the client is ignored; total_items is recomputed.
    """
    data = request.get_json(silent=True) or {}
    punch_log_id = data.get("punch_log_id")
    if punch_log_id is None:
        return jsonify({"error": "punch_log_id is required"}), 400
    if isinstance(punch_log_id, bool) or not isinstance(punch_log_id, int):
        return jsonify({"error": "punch_log_id must be an integer"}), 400

    if g.current_user.is_admin:
        driver_id = None
    else:
        driver_id = g.current_user.driver_id
        if not driver_id:
            return jsonify({"error": "Account is not linked to a driver"}), 403

    try:
        form = return_form_service.submit_return_form(
            punch_log_id=punch_log_id,
            items=data.get("items"),
            driver_id=driver_id,
        )
        return jsonify({"return_form": form.to_dict()}), 201
    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except ReturnFormError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to submit return form")
        return jsonify({"error": "Internal server error"}), 500


@return_forms_bp.get("")
@require_auth
def list_return_forms_route():
    status = request.args.get("status")
    if status and status not in RETURN_FORM_STATUSES:
        return jsonify({"error": f"Invalid status. Must be one of: {', '.join(RETURN_FORM_STATUSES)}"}), 400

    if g.current_user.is_admin:
        driver_id = request.args.get("driver_id")
    else:
        driver_id = g.current_user.driver_id
        if not driver_id:
            return jsonify({"return_forms": [], "count": 0})

    forms = return_form_service.list_return_forms(
        driver_id=driver_id,
        status=status,
        limit=request.args.get("limit", type=int),
    )
    return jsonify({"return_forms": [f.to_dict() for f in forms], "count": len(forms)})


@return_forms_bp.get("/<int:form_id>")
@require_auth
def get_return_form_route(form_id: int):
    form = _visible_form(form_id)
    if not form:
        return jsonify({"error": "Return form not found"}), 404
    return jsonify({"return_form": form.to_dict()})


def _decide(form_id: int, status: str):
    try:
        form = return_form_service.set_status(form_id, status)
        return jsonify({"return_form": form.to_dict()})
    except ReturnFormNotFound as e:
        return jsonify({"error": str(e)}), 404
    except ReturnFormError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update return form status")
        return jsonify({"error": "Internal server error"}), 500


@return_forms_bp.post("/<int:form_id>/status")
@require_auth
@require_admin
def set_status_route(form_id: int):
    data = request.get_json(silent=True) or {}
    return _decide(form_id, data.get("status"))


@return_forms_bp.post("/<int:form_id>/approve")
@require_auth
@require_admin
def approve_route(form_id: int):
    return _decide(form_id, STATUS_APPROVED)


@return_forms_bp.post("/<int:form_id>/reject")
@require_auth
@require_admin
def reject_route(form_id: int):
    return _decide(form_id, STATUS_REJECTED)


@return_forms_bp.get("/<int:form_id>/export")
@require_auth
def export_route(form_id: int):
    form = _visible_form(form_id)
    if not form:
        return jsonify({"error": "Return form not found"}), 404
    return Response(
        export_service.render_document(form),
        mimetype="text/plain",
        headers={"Content-Disposition": f'attachment; filename="{export_service.export_filename(form)}"'},
    )


@return_forms_bp.get("/<int:form_id>/print")
@require_auth
def print_preview_route(form_id: int):
    form = _visible_form(form_id)
    if not form:
        return jsonify({"error": "Return form not found"}), 404
    return Response(export_service.render_document(form), mimetype="text/plain")
