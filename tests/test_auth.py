"""회원가입/로그인/로그아웃과 현재 사용자 조회를 검증하는 테스트입니다."""

from tests.conftest import auth_headers, signup


def test_signup_creates_identity_and_profile(client):
    data = signup(client, "Alice@Example.com", "alice", full_name="Alice Kim")
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    user = data["user"]
    assert user["email"] == "alice@example.com"
    assert user["profile"]["username"] == "alice"
    assert user["profile"]["user_id"] == user["user_id"]
    assert user["profile"]["rating"] == 0.0
    assert user["profile"]["skills_offered"] == []


def test_signup_duplicate_email(client):
    signup(client, "alice@example.com", "alice")
    resp = client.post(
        "/api/auth/signup",
        json={"email": "ALICE@example.com", "password": "secret123", "username": "alice2"},
    )
    assert resp.status_code == 409


def test_signup_duplicate_username(client):
    signup(client, "alice@example.com", "alice")
    resp = client.post(
        "/api/auth/signup",
        json={"email": "other@example.com", "password": "secret123", "username": "alice"},
    )
    assert resp.status_code == 409


def test_signup_requires_username(client):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "secret123", "username": "   "},
    )
    assert resp.status_code == 422
    assert "Username is required" in resp.text


def test_signup_rejects_short_password(client):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "123", "username": "alice"},
    )
    assert resp.status_code == 422


def test_login_success(client):
    signup(client, "alice@example.com", "alice")
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["profile"]["username"] == "alice"


def test_login_wrong_password(client):
    signup(client, "alice@example.com", "alice")
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401


def test_login_unknown_email(client):
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert resp.status_code == 401


def test_me_authenticated(client):
    signup(client, "alice@example.com", "alice")
    headers = auth_headers(client, "alice@example.com")
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"


def test_me_unauthenticated(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code in (401, 403)  # HTTPBearer raises 401 or 403 depending on version


def test_me_invalid_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_logout(client):
    signup(client, "alice@example.com", "alice")
    headers = auth_headers(client, "alice@example.com")
    resp = client.post("/api/auth/logout", headers=headers)
    assert resp.status_code == 200


def test_password_hash_roundtrip():
    from teamswap.services.auth_service import hash_password, verify_password

    stored = hash_password("secret123")
    salt_hex, hash_hex = stored.split(":")
    assert len(salt_hex) == 32 and hash_hex
    assert verify_password("secret123", stored)
    assert not verify_password("secret124", stored)
    assert not verify_password("secret123", "garbage")
