import base64
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import quote

from conftest import SEED_PASSWORD, login

from voicebox_api.db import SessionLocal
from voicebox_api.models.admin import AdminConfig
from voicebox_api.utils.admin_config import (
    ensure_admin_config,
    get_admin_config,
    reset_admin_password,
    verify_password_hash,
)
from voicebox_api.utils.auth import (
    PasswordChangeError,
    PasswordCheck,
    authenticate_password,
    change_admin_password,
    check_password,
)
from voicebox_api.utils.rate_limit import MAX_FAILS
from voicebox_api.utils.session_token import _sign, issue_session_token


def test_login_sets_session_cookie(client):
    resp = login(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["data"]["message"] == "Login successful"

    cookie = resp.headers["set-cookie"]
    lowered = cookie.lower()
    assert cookie.startswith("admin_session=")
    assert "httponly" in lowered
    assert "samesite=lax" in lowered
    assert "max-age=604800" in lowered
    assert "path=/" in lowered
    assert "secure" not in lowered


def test_cookie_is_secure_in_production(client, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    resp = login(client)
    assert resp.status_code == 200
    assert "secure" in resp.headers["set-cookie"].lower()


def test_login_with_wrong_password(client):
    resp = login(client, "not-the-password")
    assert resp.status_code == 401
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert "set-cookie" not in resp.headers


def test_login_trims_password(client):
    assert login(client, f"  {SEED_PASSWORD}\n").status_code == 200


def test_login_requires_password(client):
    resp = client.post("/api/admin/login", json={})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    resp = client.post("/api/admin/login", json={"password": "   "})
    assert resp.status_code == 400


def test_admin_endpoints_require_session(client):
    for method, path in (
            ("get", "/api/admin/voices"),
            ("get", "/api/admin/comments"),
            ("get", "/api/admin/password"),
            ("post", "/api/admin/logout"),
    ):
        resp = getattr(client, method)(path)
        assert resp.status_code == 401, path
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"


def test_session_cookie_grants_access(admin_client):
    resp = admin_client.get("/api/admin/voices")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_session_endpoint_reports_state(client):
    assert client.get("/api/admin/session").json()["data"]["authenticated"] is False
    login(client)
    assert client.get("/api/admin/session").json()["data"]["authenticated"] is True


def test_expired_or_forged_cookie_rejected(client):
    client.cookies.set("admin_session", issue_session_token(now_ms=0))
    assert client.get("/api/admin/voices").status_code == 401

    client.cookies.set("admin_session", "garbage.token")
    assert client.get("/api/admin/voices").status_code == 401


def test_url_encoded_cookie_accepted(client):
    token = issue_session_token()
    payload = base64.urlsafe_b64decode(token.split(".")[0] + "==").decode()
    padded = base64.b64encode(payload.encode()).decode() + "." + base64.b64encode(_sign(payload)).decode()
    client.cookies.set("admin_session", quote(padded, safe=""))
    assert client.get("/api/admin/voices").status_code == 200


def test_logout_clears_cookie(admin_client):
    resp = admin_client.post("/api/admin/logout")
    assert resp.status_code == 200
    assert resp.json()["data"]["message"] == "Logged out successfully"
    cookie = resp.headers["set-cookie"].lower()
    assert cookie.startswith("admin_session=")
    assert "max-age=0" in cookie


def test_repeated_failures_are_throttled(client):
    for _ in range(MAX_FAILS):
        assert login(client, "wrong-password").status_code == 401
    resp = login(client)
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "RATE_LIMITED"
    assert int(resp.headers["retry-after"]) > 0


def test_recovery_credential_only_when_configured(client, monkeypatch):
    assert login(client, "break-glass-999").status_code == 401
    monkeypatch.setenv("ADMIN_RECOVERY_PASSWORD", "break-glass-999")
    assert login(client, "break-glass-999").status_code == 200


def test_login_when_store_unavailable(client, broken_db, monkeypatch):
    resp = login(client)
    assert resp.status_code == 503
    body = resp.json()
    assert body["ok"] is False
    assert body["degraded"] is True
    assert body["error"]["code"] == "DB_CONNECTION"

    monkeypatch.setenv("ADMIN_RECOVERY_PASSWORD", "break-glass-999")
    assert login(client, "break-glass-999").status_code == 200


def test_password_status(admin_client, monkeypatch):
    monkeypatch.setenv("ADMIN_RECOVERY_PASSWORD", "break-glass-999")
    resp = admin_client.get("/api/admin/password")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["configured"] is True
    assert data["updatedAt"]
    assert data["recoveryEnabled"] is True
    assert data["minLength"] == 8


def test_change_password_flow(admin_client):
    resp = admin_client.post(
        "/api/admin/password",
        json={"currentPassword": SEED_PASSWORD, "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 200
    assert resp.json()["ok"] is True

    assert login(admin_client, SEED_PASSWORD).status_code == 401
    assert login(admin_client, "brand-new-pass").status_code == 200


def test_change_password_accepts_old_password_field(admin_client):
    resp = admin_client.post(
        "/api/admin/password",
        json={"oldPassword": SEED_PASSWORD, "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 200


def test_change_password_failures(admin_client, monkeypatch):
    resp = admin_client.post(
        "/api/admin/password",
        json={"currentPassword": "wrong-current", "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 401
    assert resp.json()["data"]["reason"] == "INCORRECT_CURRENT"

    resp = admin_client.post(
        "/api/admin/password",
        json={"currentPassword": SEED_PASSWORD, "newPassword": "short"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert resp.json()["data"]["reason"] == "TOO_SHORT"

    monkeypatch.setenv("ADMIN_RECOVERY_PASSWORD", "break-glass-999")
    resp = admin_client.post(
        "/api/admin/password",
        json={"currentPassword": SEED_PASSWORD, "newPassword": "break-glass-999"},
    )
    assert resp.status_code == 400
    assert resp.json()["data"]["reason"] == "RESERVED_VALUE"

    resp = admin_client.post("/api/admin/password", json={"currentPassword": SEED_PASSWORD})
    assert resp.status_code == 400


def test_change_password_storage_unavailable(client, broken_db):
    client.cookies.set("admin_session", issue_session_token())
    resp = client.post(
        "/api/admin/password",
        json={"currentPassword": SEED_PASSWORD, "newPassword": "brand-new-pass"},
    )
    assert resp.status_code == 503
    body = resp.json()
    assert body["degraded"] is True
    assert body["data"]["reason"] == "STORAGE_UNAVAILABLE"


def test_check_password_lazily_creates_record(db):
    assert get_admin_config(db) is None
    assert check_password(db, SEED_PASSWORD)
    assert get_admin_config(db) is not None
    assert authenticate_password(db, "nope-nope") is PasswordCheck.INVALID
    assert authenticate_password(db, "") is PasswordCheck.INVALID


def test_change_admin_password_function(db):
    assert change_admin_password(db, SEED_PASSWORD, "   1234567  ") is PasswordChangeError.TOO_SHORT
    assert change_admin_password(db, SEED_PASSWORD, "  padded-password ") is None
    assert check_password(db, "padded-password")


def test_ensure_admin_config_is_idempotent(db):
    first = ensure_admin_config(db)
    second = ensure_admin_config(db)
    assert first.password_hash == second.password_hash
    assert db.query(AdminConfig).count() == 1


def test_concurrent_bootstrap_creates_single_record():
    def bootstrap_once(_):
        session = SessionLocal()
        try:
            return ensure_admin_config(session).password_hash
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        hashes = list(pool.map(bootstrap_once, range(4)))

    assert len(set(hashes)) == 1
    session = SessionLocal()
    try:
        assert session.query(AdminConfig).count() == 1
    finally:
        session.close()


def test_reset_admin_password(db):
    ensure_admin_config(db)
    reset_admin_password(db, "operator-reset-1")
    entry = get_admin_config(db)
    assert verify_password_hash("operator-reset-1", entry.password_hash)
    assert not verify_password_hash(SEED_PASSWORD, entry.password_hash)
