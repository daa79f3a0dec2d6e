"""행위자 권한 판단 헬퍼를 검증하는 테스트입니다."""

from types import SimpleNamespace

from teamswap.utils import permissions as perm

OWNER = SimpleNamespace(user_id=1)
ALICE = SimpleNamespace(user_id=2)
BOB = SimpleNamespace(user_id=3)


def test_project_owner_rights():
    project = SimpleNamespace(project_id=10, creator_id=OWNER.user_id)
    assert perm.is_project_owner(project, OWNER)
    assert perm.can_review_application(project, OWNER)
    assert perm.can_view_applications(project, OWNER)
    assert perm.can_manage_project(project, OWNER)
    assert not perm.can_apply_as(project, OWNER)

    assert perm.can_apply_as(project, ALICE)
    assert not perm.can_review_application(project, ALICE)
    assert not perm.can_manage_project(project, ALICE)


def test_withdraw_only_by_applicant():
    application = SimpleNamespace(applicant_id=ALICE.user_id)
    assert perm.can_withdraw_application(application, ALICE)
    assert not perm.can_withdraw_application(application, OWNER)


def test_swap_rights_pending():
    swap = SimpleNamespace(requester_id=ALICE.user_id, responder_id=None)
    assert perm.can_cancel_swap(swap, ALICE)
    assert not perm.can_respond_to_swap(swap, ALICE)
    assert perm.can_respond_to_swap(swap, BOB)
    assert not perm.is_swap_participant(swap, BOB)


def test_swap_rights_accepted():
    swap = SimpleNamespace(requester_id=ALICE.user_id, responder_id=BOB.user_id)
    assert perm.can_complete_swap(swap, ALICE)
    assert perm.can_complete_swap(swap, BOB)
    assert not perm.can_cancel_swap(swap, BOB)
    assert not perm.can_respond_to_swap(swap, BOB)
    assert not perm.can_complete_swap(swap, OWNER)


def test_active_membership_lookup(client, seed_users, db):
    from tests.conftest import create_project

    owner = seed_users["owner"]
    project = create_project(client, owner["headers"])
    assert perm.is_project_member(db, project["project_id"], owner["user_id"])
    assert not perm.is_project_member(db, project["project_id"], seed_users["alice"]["user_id"])
