"""과제 생성/목록/상세/상태 전이와 멤버 관리 흐름을 검증하는 테스트입니다."""

from teamswap.models.project import Project, ProjectMember
from tests.conftest import apply, create_project


def test_create_project_with_creator_membership(client, seed_users, db):
    owner = seed_users["owner"]
    data = create_project(client, owner["headers"], required_skills=["Go", " Go ", "React"])
    assert data["status"] == "active"
    assert data["member_count"] == 1
    assert data["is_owner"] is True
    assert data["is_member"] is True
    assert data["can_apply"] is False
    assert data["required_skills"] == ["Go", "React"]
    assert data["creator_username"] == "owner"

    members = db.query(ProjectMember).filter(ProjectMember.project_id == data["project_id"]).all()
    assert len(members) == 1
    assert members[0].role == "creator"
    assert members[0].user_id == owner["user_id"]


def test_create_project_validation(client, seed_users):
    headers = seed_users["owner"]["headers"]
    base = {"title": "X", "description": "Y", "category": "Web Development"}
    assert client.post("/api/projects", json={**base, "category": "Cooking"}, headers=headers).status_code == 422
    assert client.post("/api/projects", json={**base, "max_members": 1}, headers=headers).status_code == 422
    assert client.post("/api/projects", json={**base, "title": "  "}, headers=headers).status_code == 422
    assert client.post("/api/projects", json=base).status_code in (401, 403)


def test_categories(client):
    resp = client.get("/api/projects/categories")
    assert resp.status_code == 200
    assert "AI/ML" in resp.json()
    assert len(resp.json()) == 9


def test_list_projects_badges_per_viewer(client, seed_users):
    owner, alice, bob = seed_users["owner"], seed_users["alice"], seed_users["bob"]
    project = create_project(client, owner["headers"])
    apply(client, alice["headers"], project["project_id"])

    anon = client.get("/api/projects").json()
    assert anon[0]["can_apply"] is False
    assert anon[0]["is_owner"] is False

    as_alice = client.get("/api/projects", headers=alice["headers"]).json()[0]
    assert as_alice["is_applied"] is True
    assert as_alice["can_apply"] is False

    as_bob = client.get("/api/projects", headers=bob["headers"]).json()[0]
    assert as_bob["is_applied"] is False
    assert as_bob["can_apply"] is True

    as_owner = client.get("/api/projects", headers=owner["headers"]).json()[0]
    assert as_owner["is_owner"] is True
    assert as_owner["can_apply"] is False


def test_list_projects_search_and_category(client, seed_users):
    headers = seed_users["owner"]["headers"]
    create_project(client, headers, title="Chat App", required_skills=["Go"], category="Web Development")
    create_project(client, headers, title="Vision", description="Image tagging", required_skills=["Python"],
                   category="AI/ML")

    titles = [p["title"] for p in client.get("/api/projects", params={"search": "go"}).json()]
    assert titles == ["Chat App"]

    ai = client.get("/api/projects", params={"category": "AI/ML"}).json()
    assert [p["title"] for p in ai] == ["Vision"]

    assert len(client.get("/api/projects").json()) == 2


def test_list_projects_newest_first(client, seed_users):
    headers = seed_users["owner"]["headers"]
    first = create_project(client, headers, title="First")
    second = create_project(client, headers, title="Second")
    ids = [p["project_id"] for p in client.get("/api/projects").json()]
    assert ids == [second["project_id"], first["project_id"]]


def test_get_project_increments_views(client, seed_users):
    project = create_project(client, seed_users["owner"]["headers"])
    client.get(f"/api/projects/{project['project_id']}")
    resp = client.get(f"/api/projects/{project['project_id']}")
    assert resp.status_code == 200
    assert resp.json()["views_count"] == 2


def test_get_project_not_found(client):
    assert client.get("/api/projects/9999").status_code == 404


def test_discover_orders_by_views(client, seed_users):
    headers = seed_users["owner"]["headers"]
    quiet = create_project(client, headers, title="Quiet")
    popular = create_project(client, headers, title="Popular")
    for _ in range(3):
        client.get(f"/api/projects/{popular['project_id']}")
    client.get(f"/api/projects/{quiet['project_id']}")
    ids = [p["project_id"] for p in client.get("/api/projects/discover").json()]
    assert ids == [popular["project_id"], quiet["project_id"]]


def test_status_change_owner_only(client, seed_users):
    project = create_project(client, seed_users["owner"]["headers"])
    resp = client.patch(
        f"/api/projects/{project['project_id']}/status",
        json={"status": "paused"},
        headers=seed_users["alice"]["headers"],
    )
    assert resp.status_code == 403


def test_status_transitions(client, seed_users):
    headers = seed_users["owner"]["headers"]
    project = create_project(client, headers)
    url = f"/api/projects/{project['project_id']}/status"

    assert client.patch(url, json={"status": "paused"}, headers=headers).json()["status"] == "paused"
    assert client.patch(url, json={"status": "active"}, headers=headers).json()["status"] == "active"
    assert client.patch(url, json={"status": "cancelled"}, headers=headers).json()["status"] == "cancelled"
    # cancelled 는 종료 상태
    assert client.patch(url, json={"status": "active"}, headers=headers).status_code == 409
    assert client.patch(url, json={"status": "unknown"}, headers=headers).status_code == 422


def test_paused_project_hidden_and_closed_for_applications(client, seed_users):
    owner, alice = seed_users["owner"], seed_users["alice"]
    project = create_project(client, owner["headers"])
    client.patch(f"/api/projects/{project['project_id']}/status", json={"status": "paused"}, headers=owner["headers"])

    assert client.get("/api/projects").json() == []
    resp = client.post(
        f"/api/projects/{project['project_id']}/applications",
        json={"message": "hi"},
        headers=alice["headers"],
    )
    assert resp.status_code == 409


def test_completion_counts_and_notifies_members(client, seed_users, db):
    owner, alice = seed_users["owner"], seed_users["alice"]
    project = create_project(client, owner["headers"])
    application = apply(client, alice["headers"], project["project_id"])
    client.post(
        f"/api/applications/{application['application_id']}/review",
        json={"decision": "accepted"},
        headers=owner["headers"],
    )

    resp = client.patch(
        f"/api/projects/{project['project_id']}/status",
        json={"status": "completed"},
        headers=owner["headers"],
    )
    assert resp.status_code == 200

    assert client.get("/api/profiles/me", headers=owner["headers"]).json()["projects_completed"] == 1
    assert client.get("/api/profiles/me", headers=alice["headers"]).json()["projects_completed"] == 1
    types = [n["noti_type"] for n in client.get("/api/notifications", headers=alice["headers"]).json()]
    assert "project_update" in types


def test_members_leave_and_remove(client, seed_users, db):
    owner, alice, bob = seed_users["owner"], seed_users["alice"], seed_users["bob"]
    project = create_project(client, owner["headers"])
    pid = project["project_id"]
    for user in (alice, bob):
        application = apply(client, user["headers"], pid)
        client.post(
            f"/api/applications/{application['application_id']}/review",
            json={"decision": "accepted"},
            headers=owner["headers"],
        )

    members = client.get(f"/api/projects/{pid}/members").json()
    assert [m["username"] for m in members] == ["owner", "alice", "bob"]

    resp = client.post(f"/api/projects/{pid}/leave", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "left"

    assert client.delete(f"/api/projects/{pid}/members/{bob['user_id']}", headers=alice["headers"]).status_code == 403
    resp = client.delete(f"/api/projects/{pid}/members/{bob['user_id']}", headers=owner["headers"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "removed"

    assert [m["username"] for m in client.get(f"/api/projects/{pid}/members").json()] == ["owner"]
    db.expire_all()
    assert db.query(Project).filter(Project.project_id == pid).one().member_count == 1


def test_creator_cannot_leave(client, seed_users):
    owner = seed_users["owner"]
    project = create_project(client, owner["headers"])
    resp = client.post(f"/api/projects/{project['project_id']}/leave", headers=owner["headers"])
    assert resp.status_code == 409
    resp = client.delete(
        f"/api/projects/{project['project_id']}/members/{owner['user_id']}",
        headers=owner["headers"],
    )
    assert resp.status_code == 409


def test_left_member_can_rejoin_via_application(client, seed_users, db):
    owner, alice = seed_users["owner"], seed_users["alice"]
    pid = create_project(client, owner["headers"])["project_id"]
    first = apply(client, alice["headers"], pid)
    client.post(f"/api/applications/{first['application_id']}/review", json={"decision": "accepted"},
                headers=owner["headers"])
    client.post(f"/api/projects/{pid}/leave", headers=alice["headers"])

    second = apply(client, alice["headers"], pid)
    resp = client.post(f"/api/applications/{second['application_id']}/review", json={"decision": "accepted"},
                       headers=owner["headers"])
    assert resp.status_code == 200

    rows = db.query(ProjectMember).filter(
        ProjectMember.project_id == pid, ProjectMember.user_id == alice["user_id"],
    ).all()
    assert len(rows) == 1
    assert rows[0].status == "active"
    assert rows[0].left_at is None


def test_discover_stats(client, seed_users, db):
    owner, alice = seed_users["owner"], seed_users["alice"]
    chat = create_project(client, owner["headers"], title="Chat", required_skills=["Go"])
    create_project(client, owner["headers"], title="Vision", category="AI/ML", required_skills=["Python"])
    application = apply(client, alice["headers"], chat["project_id"])
    client.post(f"/api/applications/{application['application_id']}/review", json={"decision": "accepted"},
                headers=owner["headers"])
    db.query(Project).filter(Project.project_id == chat["project_id"]).update({"is_featured": True})
    db.commit()

    resp = client.get("/api/projects/discover/stats")
    assert resp.status_code == 200
    assert resp.json() == {"total": 2, "active_members": 3, "featured": 1}
    assert client.get("/api/projects/discover/stats", params={"category": "AI/ML"}).json() == {
        "total": 1, "active_members": 1, "featured": 0,
    }
    assert client.get("/api/projects/discover/stats", params={"search": "nothing"}).json()["total"] == 0
