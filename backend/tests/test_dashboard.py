"""
Admin dashboard tests: overview counts, search and live snapshot streams.
"""

import queue
from datetime import datetime, timedelta

from driverpunch.models import PunchLog
from driverpunch.models.punches import PUNCH_IN, PUNCH_OUT, METHOD_PIN
from driverpunch.services import dashboard_service, punch_service, return_form_service, snapshot_service
from driverpunch.routes.admin import STREAM_QUEUE_SIZE, _offer_latest


NOW = datetime(2026, 3, 10, 15, 0, 0)


def _log(driver, punch_type, timestamp):
    return PunchLog(
        driver_id=driver.driver_id,
        driver_name=driver.name,
        punch_type=punch_type,
        timestamp=timestamp,
        method=METHOD_PIN,
    )


class TestOverview:
    def test_counts(self, db_session, driver, other_driver):
        other_driver.is_active = False
        db_session.add_all([
            _log(driver, PUNCH_IN, NOW - timedelta(days=1)),
            _log(driver, PUNCH_OUT, NOW - timedelta(hours=20)),
            _log(driver, PUNCH_IN, NOW - timedelta(hours=2)),
            _log(other_driver, PUNCH_IN, NOW - timedelta(hours=5)),
            _log(other_driver, PUNCH_OUT, NOW - timedelta(hours=1)),
        ])
        db_session.commit()

        stats = dashboard_service.overview(now=NOW)
        assert stats["total_drivers"] == 2
        assert stats["active_drivers"] == 1
        assert stats["today_punches"] == 3
        assert stats["today_punch_ins"] == 2
        assert stats["currently_punched_in"] == 1
        assert stats["pending_forms"] == 0

    def test_pending_forms_counted(self, db_session, driver):
        punch = punch_service.punch_with_pin(driver, "1234").punch_log
        form = return_form_service.submit_return_form(
            punch_log_id=punch.id, items=[{"item_name": "Crate", "quantity": 1}]
        )
        assert dashboard_service.overview()["pending_forms"] == 1

        return_form_service.set_status(form.id, "approved")
        assert dashboard_service.overview()["pending_forms"] == 0


class TestSearch:
    def test_filters_by_driver_name_or_id(self, db_session, driver, other_driver):
        db_session.add_all([_log(driver, PUNCH_IN, NOW), _log(other_driver, PUNCH_IN, NOW)])
        db_session.commit()

        by_name = dashboard_service.search("MORENO")
        assert [d["driver_id"] for d in by_name["drivers"]] == ["DRV-002"]
        assert [p["driver_id"] for p in by_name["punch_logs"]] == ["DRV-002"]

        by_id = dashboard_service.search("drv-001")
        assert [d["name"] for d in by_id["drivers"]] == ["Sam Carter"]

    def test_blank_term_returns_everything(self, db_session, driver, other_driver):
        assert len(dashboard_service.search("  ")["drivers"]) == 2

    def test_search_route(self, client, driver, admin_headers):
        resp = client.get("/api/admin/search?q=sam", headers=admin_headers)
        assert resp.status_code == 200
        assert len(resp.get_json()["drivers"]) == 1


class TestSnapshotStream:
    def test_stream_pushes_full_snapshots(self, client, db_session, driver, admin_headers):
        topic = snapshot_service.TOPIC_RETURN_FORMS
        resp = client.get("/api/admin/stream/return-forms", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "text/event-stream"
        assert snapshot_service.hub.subscriber_count(topic) == 1

        events = iter(resp.response)
        first = next(events).decode()
        assert first.startswith("event: return_forms\n")
        assert "data: []" in first

        punch = punch_service.punch_with_pin(driver, "1234").punch_log
        return_form_service.submit_return_form(
            punch_log_id=punch.id, items=[{"item_name": "Crate", "quantity": 2}]
        )
        update = next(events).decode()
        assert update.startswith("event: return_forms\n")
        assert '"total_items": 2' in update

        resp.close()
        assert snapshot_service.hub.subscriber_count(topic) == 0

    def test_slow_client_keeps_only_newest_snapshot(self):
        events = queue.Queue(maxsize=STREAM_QUEUE_SIZE)
        for n in range(5):
            _offer_latest(events, [{"id": n}])

        assert events.qsize() == 1
        assert events.get_nowait() == [{"id": 4}]

    def test_stream_is_admin_only(self, client, driver_headers):
        resp = client.get("/api/admin/stream/punch-logs", headers=driver_headers)
        assert resp.status_code == 403
