def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "patient-consultation-api"


def test_detailed_health_checks_database(client):
    response = client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    body = response.json()
    assert body["components"]["database"]["status"] == "healthy"
    assert body["environment"] == "test"


def test_root_and_api_info(client):
    assert client.get("/").json()["api_base"] == "/api/v1"
    assert client.get("/api/v1/").json()["route_prefixes"]["payments"] == "/payments"


def test_request_id_is_echoed(client):
    response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Response-Time" in response.headers


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nothing-here", headers={"X-Request-ID": "req-404"})

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["request_id"] == "req-404"
    assert error["details"]["path"] == "/api/v1/nothing-here"


def test_invalid_body_uses_error_envelope(client, auth_headers):
    response = client.post(
        "/api/v1/payments/create-payment",
        headers=auth_headers("user-a"),
        json={"amount": -5},
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]["validation_errors"]


def test_cors_preflight_for_configured_origin(client):
    response = client.options(
        "/api/v1/payments/validate-discount",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
