def test_health_reports_room_counters(client, admin_password):
    token = client.app.state.room.state.current_token()
    with client.websocket_connect(f"/ws/{token}") as viewer:
        viewer.receive_json()
        with client.websocket_connect("/ws") as admin:
            admin.send_json({"type": "authenticate", "password": admin_password, "ackId": 1})
            admin.receive_json()
            admin.send_json({"type": "sendMessage", "text": "hello"})
            admin.receive_json()

            response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["connections"] == 2
    assert body["viewers"] == 1
    assert body["admins"] == 1
    assert body["messages"] == 1
    assert body["last_activity"] is not None
    assert body["expires_at"] is not None
    assert "timestamp" in body


def test_health_never_leaks_room_token(client):
    token = client.app.state.room.state.current_token()
    for path in ("/health", "/health/ready", "/health/live"):
        assert token not in client.get(path).text


def test_readiness_requires_armed_timer(client):
    assert client.get("/health/ready").json() == {"status": "ready"}

    client.app.state.room.shutdown()
    assert client.get("/health/ready").json() == {"status": "not_ready"}


def test_liveness(client):
    assert client.get("/health/live").json() == {"status": "alive"}
