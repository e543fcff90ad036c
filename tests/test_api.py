"""HTTP API tests: signup, login, device registration, media sessions."""


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_root_and_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"
    assert client.get("/health").json() == {"status": "ok"}


def test_end_to_end_viewer_flow(client, provider):
    r = client.post("/signup", json={"email": "a@x.com", "password": "secret1"})
    assert r.status_code == 200
    assert r.json() == {"ok": True}

    r = client.post("/login", json={"email": "a@x.com", "password": "secret1"})
    assert r.status_code == 200
    token = r.json()["token"]
    assert r.json()["ok"] is True

    r = client.post("/device/register", json={"deviceId": "iphone-7"}, headers=auth(token))
    assert r.status_code == 200
    assert r.json() == {"ok": True, "deviceId": "iphone-7"}

    r = client.get("/livekit-info", headers=auth(token))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["ok"] is True
    assert data["roomName"] == "room-iphone-7"
    assert data["wsUrl"] == provider.ws_url
    assert data["token"].startswith("media-token:")

    grant = provider.calls[0]
    assert grant.can_publish is False
    assert grant.can_subscribe is True


def test_login_token_resolves_to_new_account(client, broker, signup_and_login):
    token = signup_and_login("a@x.com", "secret1")
    account = broker.store.find_by_email("a@x.com")
    assert broker.tokens.verify(token) == account.id


def test_password_hash_never_returned(client, signup_and_login):
    token = signup_and_login()
    r = client.get("/me", headers=auth(token))
    assert r.status_code == 200
    body = r.json()
    assert body == {"ok": True, "id": body["id"], "email": "a@x.com", "deviceId": None}
    assert "passwordHash" not in r.text and "password_hash" not in r.text


def test_signup_duplicate_email(client, broker):
    client.post("/signup", json={"email": "a@x.com", "password": "secret1"})
    original_hash = broker.store.find_by_email("a@x.com").password_hash

    r = client.post("/signup", json={"email": "a@x.com", "password": "another"})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Email is already registered"}
    assert broker.store.find_by_email("a@x.com").password_hash == original_hash


def test_signup_missing_fields(client):
    for body in ({}, {"email": "a@x.com"}, {"password": "secret1"}, {"email": "", "password": "x"}):
        r = client.post("/signup", json=body)
        assert r.status_code == 400
        assert r.json()["ok"] is False
        assert r.json()["error"]


def test_signup_rejects_unknown_fields(client):
    r = client.post("/signup", json={"email": "a@x.com", "password": "secret1", "role": "admin"})
    assert r.status_code == 400
    assert r.json()["ok"] is False


def test_login_errors_do_not_reveal_email(client):
    client.post("/signup", json={"email": "a@x.com", "password": "secret1"})

    wrong_password = client.post("/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = client.post("/login", json={"email": "ghost@x.com", "password": "secret1"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {
        "ok": False,
        "error": "Invalid email or password",
    }


def test_device_register_requires_token(client):
    r = client.post("/device/register", json={"deviceId": "iphone-7"})
    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "Invalid or expired token"}


def test_invalid_tokens_share_one_message(client, broker, clock, signup_and_login):
    token = signup_and_login()
    responses = [
        client.get("/livekit-info"),
        client.get("/livekit-info", headers={"Authorization": "Basic abc"}),
        client.get("/livekit-info", headers=auth("not-a-jwt")),
        client.get("/livekit-info", headers=auth(broker.tokens.issue("acc_unknown"))),
    ]
    clock.advance(days=8)
    responses.append(client.get("/livekit-info", headers=auth(token)))

    for r in responses:
        assert r.status_code == 401
        assert r.json() == {"ok": False, "error": "Invalid or expired token"}


def test_device_register_missing_device_id(client, signup_and_login):
    token = signup_and_login()
    for body in ({}, {"deviceId": ""}):
        r = client.post("/device/register", json=body, headers=auth(token))
        assert r.status_code == 400
        assert r.json()["ok"] is False


def test_device_register_blank_device_id(client, signup_and_login):
    token = signup_and_login()
    r = client.post("/device/register", json={"deviceId": "   "}, headers=auth(token))
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "deviceId is required"}


def test_device_id_is_not_trimmed(client, signup_and_login):
    token = signup_and_login()
    r = client.post("/device/register", json={"deviceId": " dev-A "}, headers=auth(token))
    assert r.json() == {"ok": True, "deviceId": " dev-A "}
    assert client.get("/livekit-info", headers=auth(token)).json()["roomName"] == "room- dev-A "


def test_device_reregistration_changes_room(client, signup_and_login):
    token = signup_and_login()
    client.post("/device/register", json={"deviceId": "dev-A"}, headers=auth(token))
    first = client.post("/livekit-info", headers=auth(token)).json()
    client.post("/device/register", json={"deviceId": "dev-B"}, headers=auth(token))
    second = client.post("/livekit-info", headers=auth(token)).json()

    assert first["roomName"] == "room-dev-A"
    assert second["roomName"] == "room-dev-B"
    assert client.get("/me", headers=auth(token)).json()["deviceId"] == "dev-B"


def test_identity_token_survives_device_change(client, signup_and_login):
    token = signup_and_login()
    client.post("/device/register", json={"deviceId": "dev-A"}, headers=auth(token))
    client.post("/device/register", json={"deviceId": "dev-B"}, headers=auth(token))
    assert client.get("/me", headers=auth(token)).status_code == 200


def test_livekit_info_without_device(client, provider, signup_and_login):
    token = signup_and_login()
    r = client.get("/livekit-info", headers=auth(token))
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "No device registered. Register a device first."}
    assert provider.calls == []


def test_livekit_info_provider_error(client, provider, signup_and_login):
    token = signup_and_login()
    client.post("/device/register", json={"deviceId": "iphone-7"}, headers=auth(token))
    provider.fail = True

    r = client.get("/livekit-info", headers=auth(token))
    assert r.status_code == 500
    assert r.json() == {"ok": False, "error": "Media session provider unavailable"}
    assert len(provider.calls) == 1


def test_stream_url(client, signup_and_login):
    token = signup_and_login()
    r = client.get("/stream-url", headers=auth(token))
    assert r.status_code == 400
    assert r.json()["ok"] is False

    client.post("/device/register", json={"deviceId": "iphone-7"}, headers=auth(token))
    r = client.get("/stream-url", headers=auth(token))
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["deviceId"] == "iphone-7"
    assert data["streamUrl"].startswith("https://")


def test_accounts_are_isolated(client, signup_and_login):
    token_a = signup_and_login("a@x.com", "secret1")
    token_b = signup_and_login("b@x.com", "secret2")
    client.post("/device/register", json={"deviceId": "dev-A"}, headers=auth(token_a))

    assert client.get("/me", headers=auth(token_b)).json()["deviceId"] is None
    assert client.get("/livekit-info", headers=auth(token_b)).status_code == 400
