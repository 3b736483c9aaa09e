"""
Driver directory tests (admin only).
"""

import pytest

from driverpunch.models import Driver
from driverpunch.services import driver_service
from driverpunch.services.driver_service import DriverError, DriverNotFound


class TestDriverService:
    def test_create_hashes_pin(self, db_session):
        driver = driver_service.create_driver(
            driver_id="DRV-100", name="Jo Park", email=None, phone=None, pin="4321"
        )
        assert driver.has_pin is True
        assert driver.pin_hash != "4321"
        assert driver_service.verify_pin("4321", driver.pin_hash) is True
        assert driver_service.verify_pin("4320", driver.pin_hash) is False

    def test_duplicate_driver_id(self, db_session, driver):
        with pytest.raises(DriverError, match="already exists"):
            driver_service.create_driver(driver_id="DRV-001", name="Copy", email=None, phone=None, pin=None)

    @pytest.mark.parametrize("pin", ["12", "1234567", "12a4", "    "])
    def test_pin_format(self, pin):
        with pytest.raises(DriverError):
            driver_service.validate_pin(pin)

    def test_no_pin_never_verifies(self):
        assert driver_service.verify_pin("1234", None) is False

    def test_search_matches_name_or_id(self, db_session, driver, other_driver):
        assert [d.driver_id for d in driver_service.list_drivers(search="sam")] == ["DRV-001"]
        assert [d.driver_id for d in driver_service.list_drivers(search="drv-002")] == ["DRV-002"]
        # Ordered by name
        assert [d.name for d in driver_service.list_drivers()] == ["Alex Moreno", "Sam Carter"]

    def test_deactivated_hidden_when_active_only(self, db_session, driver, other_driver):
        driver_service.deactivate_driver(driver.id)
        active = driver_service.list_drivers(include_inactive=False)
        assert [d.driver_id for d in active] == ["DRV-002"]

    def test_update_rejects_unknown_fields(self, db_session, driver):
        with pytest.raises(DriverError):
            driver_service.update_driver(driver.id, pin_hash="x")

    @pytest.mark.parametrize("updates", [
        {"is_active": "false"},
        {"is_active": 0},
        {"name": 123},
        {"email": ["a@example.com"]},
        {"phone": 5550100},
    ])
    def test_update_rejects_wrong_types(self, db_session, driver, updates):
        with pytest.raises(DriverError):
            driver_service.update_driver(driver.id, **updates)
        db_session.refresh(driver)
        assert driver.is_active is True
        assert driver.name == "Sam Carter"

    def test_update_rejects_wrong_type_before_changing_anything(self, db_session, driver):
        with pytest.raises(DriverError):
            driver_service.update_driver(driver.id, phone="+1 555 0100", is_active="no")
        assert driver.phone is None

    def test_create_rejects_non_text_name(self, db_session):
        with pytest.raises(DriverError, match="name must be text"):
            driver_service.create_driver(driver_id="DRV-400", name=123)

    def test_missing_driver(self, db_session):
        with pytest.raises(DriverNotFound):
            driver_service.set_pin(999, "1234")

    def test_enroll_and_clear_face(self, db_session, driver):
        driver_service.enroll_face(driver.id, [0.05] * 128)
        assert driver.has_face is True
        assert driver.face_enrolled_at is not None

        driver_service.clear_face(driver.id)
        assert driver.has_face is False


class TestDriverRoutes:
    def test_admin_creates_and_lists(self, client, admin_headers):
        resp = client.post("/api/drivers", json={
            "driver_id": "DRV-200",
            "name": "Lee Quinn",
            "pin": "5678",
        }, headers=admin_headers)
        assert resp.status_code == 201
        body = resp.get_json()["driver"]
        assert body["has_pin"] is True
        assert "pin_hash" not in body
        assert "face_descriptor" not in body

        listing = client.get("/api/drivers?search=quinn", headers=admin_headers).get_json()
        assert listing["count"] == 1

    def test_driver_role_denied(self, client, driver_headers):
        assert client.get("/api/drivers", headers=driver_headers).status_code == 403

    def test_update_and_deactivate(self, client, driver, admin_headers):
        resp = client.patch(f"/api/drivers/{driver.id}", json={"phone": "+1 555 0100"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["driver"]["phone"] == "+1 555 0100"

        resp = client.post(f"/api/drivers/{driver.id}/deactivate", headers=admin_headers)
        assert resp.get_json()["driver"]["is_active"] is False

    def test_string_false_does_not_toggle_active(self, client, driver, admin_headers):
        client.post(f"/api/drivers/{driver.id}/deactivate", headers=admin_headers)

        resp = client.patch(f"/api/drivers/{driver.id}", json={"is_active": "false"}, headers=admin_headers)
        assert resp.status_code == 400

        body = client.get(f"/api/drivers/{driver.id}", headers=admin_headers).get_json()
        assert body["driver"]["is_active"] is False

    def test_non_text_name_is_400(self, client, driver, admin_headers):
        resp = client.patch(f"/api/drivers/{driver.id}", json={"name": 123}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "name must be text"

        resp = client.post("/api/drivers", json={"driver_id": "DRV-401", "name": 123}, headers=admin_headers)
        assert resp.status_code == 400

    def test_inactive_driver_cannot_punch(self, client, driver, admin_headers):
        client.post(f"/api/drivers/{driver.id}/deactivate", headers=admin_headers)
        resp = client.post(
            "/api/punches/pin", json={"pin": "1234", "driver_id": "DRV-001"}, headers=admin_headers
        )
        assert resp.status_code == 403

    def test_enroll_face_validates(self, client, driver, admin_headers):
        bad = client.put(f"/api/drivers/{driver.id}/face", json={"descriptor": [0.1] * 10}, headers=admin_headers)
        assert bad.status_code == 400

        good = client.put(f"/api/drivers/{driver.id}/face", json={"descriptor": [0.1] * 128}, headers=admin_headers)
        assert good.status_code == 200
        assert good.get_json()["driver"]["has_face"] is True

    def test_set_pin_validates(self, client, driver, admin_headers):
        assert client.put(f"/api/drivers/{driver.id}/pin", json={"pin": "12"}, headers=admin_headers).status_code == 400
        assert client.put(f"/api/drivers/{driver.id}/pin", json={"pin": "2468"}, headers=admin_headers).status_code == 200

    def test_delete(self, client, db_session, driver, admin_headers):
        driver_pk = driver.id
        assert client.delete(f"/api/drivers/{driver_pk}", headers=admin_headers).status_code == 200
        assert db_session.query(Driver).filter_by(id=driver_pk).count() == 0
        assert client.get(f"/api/drivers/{driver_pk}", headers=admin_headers).status_code == 404
