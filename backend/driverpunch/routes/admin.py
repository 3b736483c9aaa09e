# Overview: Flask API routes for the admin dashboard; aggregates and live snapshot streams.

"""
Admin Dashboard Routes

- overview: headline counts
- search: drivers, punches and forms filtered by driver name or id
- stream/*: Server-Sent Events; every event carries the full current list
"""

import json
import queue

from flask import Blueprint, Response, request, jsonify, current_app, stream_with_context

from ..decorators import require_auth, require_admin
from ..services import dashboard_service, snapshot_service


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

STREAM_KEEPALIVE_SECONDS = 15

# Pushes are full snapshots; only the newest is kept per client
STREAM_QUEUE_SIZE = 1


@admin_bp.get("/overview")
@require_auth
@require_admin
def overview_route():
    return jsonify(dashboard_service.overview())


@admin_bp.get("/search")
@require_auth
@require_admin
def search_route():
    return jsonify(dashboard_service.search(request.args.get("q")))


def _sse(topic: str, snapshot: list[dict]) -> str:
    return f"event: {topic}\ndata: {json.dumps(snapshot)}\n\n"


def _offer_latest(events: queue.Queue, snapshot: list[dict]) -> None:
    """Queue snapshot, discarding older snapshots the client has not read yet."""
    while True:
        try:
            events.put_nowait(snapshot)
            return
        except queue.Full:
            try:
                events.get_nowait()
            except queue.Empty:
                pass


def _stream(topic: str) -> Response:
    events: queue.Queue = queue.Queue(maxsize=STREAM_QUEUE_SIZE)
    unsubscribe = snapshot_service.hub.subscribe(topic, lambda snapshot: _offer_latest(events, snapshot))
    initial = snapshot_service.hub.snapshot(topic)
    keepalive = current_app.config.get("STREAM_KEEPALIVE_SECONDS", STREAM_KEEPALIVE_SECONDS)

    def generate():
        try:
            yield _sse(topic, initial)
            while True:
                try:
                    snapshot = events.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                yield _sse(topic, snapshot)
        finally:
            unsubscribe()

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@admin_bp.get("/stream/return-forms")
@require_auth
@require_admin
def stream_return_forms_route():
    return _stream(snapshot_service.TOPIC_RETURN_FORMS)


@admin_bp.get("/stream/punch-logs")
@require_auth
@require_admin
def stream_punch_logs_route():
    return _stream(snapshot_service.TOPIC_PUNCH_LOGS)
