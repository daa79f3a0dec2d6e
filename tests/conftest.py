import os
import time

# 테스트에서는 해시 반복 횟수를 줄여 가입/로그인을 빠르게 한다.
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from teamswap.database import Base, get_db
from teamswap.main import app
from teamswap.gateway import change_feed

TEST_DB_URL = "sqlite:///./test_teamswap.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    for sub in list(change_feed._subscriptions):
        sub.cancel()


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


def signup(client, email: str, username: str, password: str = DEFAULT_PASSWORD, full_name: str = None) -> dict:
    resp = client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "username": username, "full_name": full_name},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def get_token(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email, password)}"}


@pytest.fixture
def seed_users(client):
    """owner/alice/bob/carol 네 명을 가입시키고 user_id 와 헤더를 돌려준다."""
    users = {}
    for name in ("owner", "alice", "bob", "carol"):
        email = f"{name}@example.com"
        data = signup(client, email, name)
        users[name] = {
            "user_id": data["user"]["user_id"],
            "email": email,
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }
    return users


def create_project(client, headers: dict, **overrides) -> dict:
    body = {
        "title": "Chat App",
        "description": "Realtime chat service",
        "category": "Web Development",
        "required_skills": ["Go"],
        "max_members": 5,
    }
    body.update(overrides)
    resp = client.post("/api/projects", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def apply(client, headers: dict, project_id: int, **overrides) -> dict:
    body = {"message": "참여하고 싶습니다.", "skills_offered": ["Go"]}
    body.update(overrides)
    resp = client.post(f"/api/projects/{project_id}/applications", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def wait_for_subscribers(count: int, timeout: float = 5.0) -> None:
    """다른 스레드에서 연 알림 스트림이 구독을 등록할 때까지 기다린다."""
    deadline = time.monotonic() + timeout
    while change_feed.subscriber_count() < count:
        assert time.monotonic() < deadline, "stream did not subscribe in time"
        time.sleep(0.01)
