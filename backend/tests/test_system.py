def test_health_reports_database_and_models(client, db_session, driver):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["details"]["drivers"] == 1
    assert body["checks"]["face_models"]["status"] == "not_loaded"


def test_version(client):
    assert client.get("/version").get_json() == {"name": "driverpunch", "version": "1.0.0"}


def test_cors_for_local_frontend(client, db_session):
    resp = client.get("/version", headers={"Origin": "http://localhost:3000"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

    resp = client.get("/version", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers
