"""
Face decision rule tests: match iff euclidean distance < 0.4.
"""

import pytest

from driverpunch.models import PunchLog
from driverpunch.models.punches import METHOD_FACE, PUNCH_IN
from driverpunch.services import driver_service, punch_service
from driverpunch.services.face_service import (
    FACE_MATCH_THRESHOLD,
    FaceDescriptorError,
    compare_faces,
    euclidean_distance,
    is_face_match,
    validate_descriptor,
)
from driverpunch.services.punch_service import PunchRejected


def _descriptor(offset=0.0, base=0.1):
    """128 values; the first component is shifted so distance == offset."""
    values = [base] * 128
    values[0] += offset
    return values


@pytest.fixture
def enrolled_driver(db_session, driver):
    return driver_service.enroll_face(driver.id, _descriptor())


def test_identical_descriptors_match():
    stored = _descriptor()
    assert euclidean_distance(stored, stored) == 0.0
    assert is_face_match(stored, stored) is True


def test_threshold_is_exclusive():
    stored = _descriptor()
    result = compare_faces(_descriptor(offset=FACE_MATCH_THRESHOLD), stored)
    assert result.matched is False
    assert result.reason == "no_match"


def test_just_under_threshold_matches():
    result = compare_faces(_descriptor(offset=0.399), _descriptor())
    assert result.matched is True
    assert result.distance == pytest.approx(0.399)
    assert result.reason is None


@pytest.mark.parametrize("offset", [0.4, 0.55, 1.0, 3.0])
def test_distance_at_or_over_threshold_never_matches(offset):
    assert is_face_match(_descriptor(offset=offset), _descriptor()) is False


def test_distance_is_symmetric():
    a = _descriptor(offset=0.25)
    b = [0.1 + i * 0.001 for i in range(128)]
    assert euclidean_distance(a, b) == pytest.approx(euclidean_distance(b, a))


def test_not_enrolled_and_no_face_are_non_matches():
    assert compare_faces(_descriptor(), None).reason == "not_enrolled"
    assert compare_faces(None, _descriptor()).reason == "no_face_detected"
    assert compare_faces([], _descriptor()).reason == "no_face_detected"


def test_length_mismatch_raises():
    with pytest.raises(FaceDescriptorError):
        euclidean_distance([0.1] * 128, [0.1] * 64)


@pytest.mark.parametrize("value", [
    None,
    "0.1,0.2",
    [0.1] * 127,
    [0.1] * 127 + ["x"],
    [0.1] * 127 + [True],
    [0.1] * 127 + [float("nan")],
])
def test_validate_descriptor_rejects(value):
    with pytest.raises(FaceDescriptorError):
        validate_descriptor(value)


def test_validate_descriptor_coerces_ints():
    assert validate_descriptor([0] * 128) == [0.0] * 128


def test_result_payload_carries_threshold():
    payload = compare_faces(_descriptor(offset=0.55), _descriptor()).to_dict()
    assert payload["matched"] is False
    assert payload["threshold"] == 0.4
    assert payload["distance"] == pytest.approx(0.55)


class TestFacePunch:
    def test_match_records_face_punch(self, db_session, enrolled_driver):
        result = punch_service.punch_with_face(enrolled_driver, _descriptor(offset=0.1))
        assert result.punch_log.punch_type == PUNCH_IN
        assert result.punch_log.method == METHOD_FACE
        assert result.face.matched is True

    def test_mismatch_writes_nothing(self, db_session, enrolled_driver):
        with pytest.raises(PunchRejected) as exc:
            punch_service.punch_with_face(enrolled_driver, _descriptor(offset=0.55))

        assert str(exc.value) == "Face verification failed"
        assert exc.value.face.distance == pytest.approx(0.55)
        assert db_session.query(PunchLog).count() == 0

    def test_not_enrolled_refused(self, db_session, driver):
        with pytest.raises(PunchRejected) as exc:
            punch_service.punch_with_face(driver, _descriptor())
        assert exc.value.reason == "not_enrolled"

    def test_no_face_detected_refused(self, db_session, enrolled_driver):
        with pytest.raises(PunchRejected) as exc:
            punch_service.punch_with_face(enrolled_driver, None)
        assert exc.value.reason == "no_face_detected"


class TestFacePunchRoutes:
    def test_face_punch_route(self, client, enrolled_driver, driver_headers):
        resp = client.post(
            "/api/punches/face",
            json={"descriptor": _descriptor(offset=0.2), "location": "Gate B"},
            headers=driver_headers,
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["punch_log"]["method"] == "face"
        assert body["next_step"] == "return_form"
        assert body["face"]["matched"] is True

    def test_face_mismatch_route(self, client, db_session, enrolled_driver, driver_headers):
        resp = client.post(
            "/api/punches/face",
            json={"descriptor": _descriptor(offset=0.55)},
            headers=driver_headers,
        )
        assert resp.status_code == 401
        assert resp.get_json()["reason"] == "no_match"
        assert db_session.query(PunchLog).count() == 0

    def test_null_descriptor_means_no_face(self, client, enrolled_driver, driver_headers):
        resp = client.post("/api/punches/face", json={"descriptor": None}, headers=driver_headers)
        assert resp.status_code == 401
        assert resp.get_json()["reason"] == "no_face_detected"

    def test_malformed_descriptor_400(self, client, enrolled_driver, driver_headers):
        resp = client.post("/api/punches/face", json={"descriptor": [1, 2, 3]}, headers=driver_headers)
        assert resp.status_code == 400

    def test_model_status_unavailable_without_weights(self, client, db_session):
        resp = client.get("/api/face/models/status")
        assert resp.status_code == 503
        assert resp.get_json()["loaded"] is False
