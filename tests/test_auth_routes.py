from unittest.mock import Mock

from app.domain.exceptions import StoreUnavailableError

ADMIN_PASSWORD = "correct-horse"


def _login(client, password=ADMIN_PASSWORD, username="admin", **kwargs):
    return client.post("/auth/login", json={"adminId": username, "password": password}, **kwargs)


def test_login_success_starts_a_permanent_session(client, container):
    response = _login(client)

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["data"] == {"username": "admin"}
    assert body["message"] == "Login successful"
    assert "Expires=" in response.headers["Set-Cookie"]
    with client.session_transaction() as sess:
        assert sess["user"] == "admin"

    entry = container.activity_logger.list_recent()[0]
    assert (entry.actor, entry.action, entry.source_address) == ("admin", "LOGIN", "127.0.0.1")


def test_login_accepts_form_posts(client):
    response = client.post("/auth/login", data={"adminId": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200


def test_wrong_password_counts_down_then_blocks(client, container):
    first = _login(client, "wrong")
    second = _login(client, "wrong")
    third = _login(client, "wrong")
    fourth = _login(client)

    assert first.status_code == 401
    assert first.get_json()["message"] == "Invalid Account. 2 attempts remaining."
    assert first.get_json()["details"] == {"code": "INVALID_CREDENTIALS", "remaining_attempts": 2}
    assert second.get_json()["message"] == "Invalid Account. 1 attempts remaining."

    assert third.status_code == 429
    assert third.get_json()["message"] == "Too many failed attempts. You are BLOCKED for 5 minutes."
    assert third.headers["Retry-After"] == "300"

    assert fourth.status_code == 429
    assert fourth.get_json()["message"].startswith("Account Locked. Too many failed attempts. Try again in ")
    assert fourth.get_json()["details"]["code"] == "LOGIN_BLOCKED"
    with client.session_transaction() as sess:
        assert "user" not in sess

    actions = [e.action for e in container.activity_logger.list_recent()]
    assert actions == ["LOGIN_BLOCKED", "LOGIN_FAILED", "LOGIN_FAILED", "LOGIN_FAILED"]


def test_lockout_does_not_affect_other_addresses(client):
    for _ in range(3):
        _login(client, "wrong")

    response = _login(client, environ_base={"REMOTE_ADDR": "10.9.8.7"})

    assert response.status_code == 200


def test_missing_fields_are_a_failed_attempt(client):
    response = client.post("/auth/login", json={})
    assert response.status_code == 401
    assert response.get_json()["details"]["remaining_attempts"] == 2


def test_store_outage_returns_503_and_is_not_counted(client, container, monkeypatch):
    monkeypatch.setattr(
        container.auth_repo,
        "get_user_auth_by_username",
        Mock(side_effect=StoreUnavailableError("User store is unavailable")),
    )

    response = _login(client)

    assert response.status_code == 503
    assert response.get_json()["message"] == "Service temporarily unavailable"
    assert container.login_guard.state_for("127.0.0.1") is None


def test_logout_clears_session_and_audits(client, container):
    _login(client)

    response = client.get("/auth/logout")

    assert response.status_code == 200
    assert response.get_json()["data"] == {"logged_out": True}
    assert client.get("/api/logs").status_code == 401
    assert container.activity_logger.list_recent()[0].action == "LOGOUT"


def test_logout_without_session_is_harmless(client, container):
    response = client.get("/auth/logout")
    assert response.get_json()["data"] == {"logged_out": False}
    assert container.activity_logger.list_recent() == []


def test_session_timeout_endpoint(admin_client, container):
    response = admin_client.post("/api/session-timeout")

    assert response.status_code == 200
    entry = container.activity_logger.list_recent()[0]
    assert entry.action == "SESSION_TIMEOUT"
    assert entry.details == "System auto-logout due to inactivity"
    assert admin_client.get("/api/logs").status_code == 401
