"""TeamSwapClient(IdentityStore, ViewState 세대 가드)를 TestClient 주입으로 검증하는 테스트입니다."""

import threading

import pytest

from teamswap.client import NOTIFICATIONS_VIEW, SNAPSHOT_VIEW, TeamSwapClient, TeamSwapError, ViewState, _iter_events
from tests.conftest import wait_for_subscribers


@pytest.fixture
def api(client):
    return TeamSwapClient(http=client)


def _other(client):
    return TeamSwapClient(http=client)


def test_identity_store_sign_up_in_out(api):
    events = []
    unsubscribe = api.identity.on_change(events.append)

    identity = api.identity.sign_up("alice@example.com", "secret123", "alice")
    assert identity["profile"]["username"] == "alice"
    assert api.identity.current_identity()["user_id"] == identity["user_id"]
    assert api.my_profile()["username"] == "alice"

    api.identity.sign_out()
    assert api.identity.current_identity() is None
    assert api.identity.token is None

    api.identity.sign_in("alice@example.com", "secret123")
    unsubscribe()
    api.identity.sign_out()

    assert [e["user_id"] if e else None for e in events] == [identity["user_id"], None, identity["user_id"]]


def test_errors_raise_teamswap_error(api):
    with pytest.raises(TeamSwapError) as exc:
        api.identity.sign_in("nobody@example.com", "secret123")
    assert exc.value.status_code == 401

    with pytest.raises(TeamSwapError) as exc:
        api.my_profile()
    assert exc.value.status_code in (401, 403)


def test_end_to_end_apply_and_accept(client, api):
    api.identity.sign_up("owner@example.com", "secret123", "owner")
    project = api.create_project("Chat App", "Realtime chat", "Web Development", required_skills=["Go"],
                                 max_members=2)

    applicant = _other(client)
    applicant.identity.sign_up("alice@example.com", "secret123", "alice")
    listed = applicant.list_projects(search="go")
    assert listed[0]["can_apply"] is True
    application = applicant.apply(project["project_id"], message="hi", skills_offered=["Go"])

    assert [a["applicant_username"] for a in api.project_applications(project["project_id"])] == ["alice"]
    api.review_application(application["application_id"], "accepted")

    snapshot = applicant.refresh_snapshot()
    assert snapshot["member_project_ids"] == [project["project_id"]]
    assert [m["username"] for m in api.members(project["project_id"])] == ["owner", "alice"]

    late = _other(client)
    late.identity.sign_up("bob@example.com", "secret123", "bob")
    assert late.list_projects()[0]["can_apply"] is False
    with pytest.raises(TeamSwapError) as exc:
        late.apply(project["project_id"])
    assert exc.value.status_code == 409


def test_end_to_end_swap_race(client, api):
    api.identity.sign_up("alice@example.com", "secret123", "alice")
    swap = api.propose_swap("Python", "React")

    bob = _other(client)
    bob.identity.sign_up("bob@example.com", "secret123", "bob")
    accepted = bob.respond_swap(swap["swap_id"], "accept")
    assert accepted["responder_id"] == bob.identity.current_identity()["user_id"]

    carol = _other(client)
    carol.identity.sign_up("carol@example.com", "secret123", "carol")
    with pytest.raises(TeamSwapError) as exc:
        carol.respond_swap(swap["swap_id"], "accept")
    assert exc.value.status_code == 409

    assert api.unread_count() == 1
    assert api.notifications()[0]["noti_type"] == "skill_swap_accepted"
    assert api.mark_all_read() == 1
    assert api.unread_count() == 0


def test_view_state_drops_stale_generation():
    view = ViewState()
    first = view.begin("projects")
    second = view.begin("projects")

    assert view.apply("projects", second, ["new"]) is True
    # 먼저 시작했지만 늦게 도착한 응답은 무시된다.
    assert view.apply("projects", first, ["old"]) is False
    assert view.get("projects") == ["new"]


def test_view_state_drops_older_snapshot_version():
    view = ViewState()
    token = view.begin(SNAPSHOT_VIEW)
    assert view.apply(SNAPSHOT_VIEW, token, {"state_version": 5, "member_project_ids": [1]})

    token = view.begin(SNAPSHOT_VIEW)
    assert view.apply(SNAPSHOT_VIEW, token, {"state_version": 4, "member_project_ids": []}) is False
    assert view.get(SNAPSHOT_VIEW)["state_version"] == 5

    token = view.begin(SNAPSHOT_VIEW)
    assert view.apply(SNAPSHOT_VIEW, token, {"state_version": 5, "member_project_ids": [1]})


def test_view_state_invalidate_makes_in_flight_stale():
    view = ViewState()
    token = view.begin("swaps")
    view.invalidate()
    assert view.apply("swaps", token, ["late"]) is False
    assert view.get("swaps") is None


def test_sign_out_invalidates_views(api):
    api.identity.sign_up("alice@example.com", "secret123", "alice")
    assert api.refresh_snapshot()["state_version"] == 0
    api.identity.sign_out()
    assert api.view.get(SNAPSHOT_VIEW) is None


def test_respond_swap_rejects_unknown_decision(api):
    with pytest.raises(ValueError):
        api.respond_swap(1, "maybe")


def test_iter_events_groups_frames_and_skips_comments():
    lines = [
        ": connected", "",
        "event: notification", 'data: {"noti_id": 1}', "",
        ": keepalive", "",
        "data: plain", "",
    ]
    assert list(_iter_events(lines)) == [("notification", '{"noti_id": 1}'), ("message", "plain")]


def test_watch_notifications_refetches_on_push(client, api):
    api.identity.sign_up("owner@example.com", "secret123", "owner")
    project = api.create_project("Chat App", "Realtime chat", "Web Development", required_skills=["Go"])
    applicant = _other(client)
    applicant.identity.sign_up("alice@example.com", "secret123", "alice")

    pushes = []
    result = {}
    watcher = threading.Thread(
        target=lambda: result.update(count=api.watch_notifications(
            lambda items, row: pushes.append((items, row)), max_events=1,
        )),
        daemon=True,
    )
    watcher.start()
    wait_for_subscribers(1)
    application = applicant.apply(project["project_id"], message="hi", skills_offered=["Go"])

    watcher.join(timeout=10)
    assert not watcher.is_alive()
    assert result["count"] == 1
    items, row = pushes[0]
    assert row["noti_type"] == "project_application"
    assert row["related_id"] == application["application_id"]
    assert [n["noti_type"] for n in items] == ["project_application"]
    assert api.view.get(NOTIFICATIONS_VIEW) == items


def test_watch_notifications_requires_sign_in(api):
    with pytest.raises(TeamSwapError) as exc:
        api.watch_notifications(lambda items, row: None, max_events=1)
    assert exc.value.status_code in (401, 403)
