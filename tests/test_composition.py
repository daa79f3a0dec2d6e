"""목록 필터/배지/지원 가능 여부 계산(순수 함수)을 검증하는 테스트입니다."""

from teamswap.utils.composition import (
    filter_projects,
    filter_swaps,
    normalize_skills,
    project_badges,
    project_stats,
    swap_flags,
    swap_stats,
)

PROJECTS = [
    {"project_id": 1, "creator_id": 10, "title": "Chat App", "description": "Realtime messaging",
     "category": "Web Development", "required_skills": ["Go"], "member_count": 1, "max_members": 3},
    {"project_id": 2, "creator_id": 11, "title": "Vision", "description": "Image tagging",
     "category": "AI/ML", "required_skills": ["Python"], "member_count": 2, "max_members": 2},
    {"project_id": 3, "creator_id": 12, "title": "Portfolio", "description": "Static site",
     "category": "Design", "required_skills": [], "member_count": 1, "max_members": 4},
]


def test_text_filter_matches_required_skill_case_insensitively():
    assert [p["title"] for p in filter_projects(PROJECTS, "go")] == ["Chat App"]
    assert [p["title"] for p in filter_projects(PROJECTS, "  IMAGE ")] == ["Vision"]
    assert filter_projects(PROJECTS, "nothing-matches") == []


def test_category_filter():
    assert [p["title"] for p in filter_projects(PROJECTS, category="AI/ML")] == ["Vision"]
    assert len(filter_projects(PROJECTS, category="")) == 3
    assert len(filter_projects(PROJECTS, None, None)) == 3


def test_combined_filters():
    assert filter_projects(PROJECTS, "go", "AI/ML") == []


def test_swap_filter():
    swaps = [
        {"swap_id": 1, "offered_skill": "Python", "requested_skill": "React", "message": None},
        {"swap_id": 2, "offered_skill": "Figma", "requested_skill": "Go", "message": "weekly call"},
    ]
    assert [s["swap_id"] for s in filter_swaps(swaps, "react")] == [1]
    assert [s["swap_id"] for s in filter_swaps(swaps, "WEEKLY")] == [2]
    assert len(filter_swaps(swaps, "")) == 2


def test_badges_for_applicant_member_owner():
    applied, member = {1}, {3}
    chat = project_badges(PROJECTS[0], 99, applied, member)
    assert chat == {"is_owner": False, "is_member": False, "is_applied": True, "can_apply": False}

    portfolio = project_badges(PROJECTS[2], 99, applied, member)
    assert portfolio["is_member"] is True
    assert portfolio["can_apply"] is False

    own = project_badges(PROJECTS[0], 10, set(), set())
    assert own["is_owner"] is True
    assert own["can_apply"] is False


def test_can_apply_requires_free_seat():
    assert project_badges(PROJECTS[1], 99, set(), set())["can_apply"] is False
    assert project_badges(PROJECTS[2], 99, set(), set())["can_apply"] is True


def test_swap_flags():
    pending = {"requester_id": 1, "responder_id": None, "status": "pending"}
    assert swap_flags(pending, 1) == {"is_requester": True, "is_responder": False, "can_respond": False}
    assert swap_flags(pending, 2)["can_respond"] is True

    accepted = {"requester_id": 1, "responder_id": 2, "status": "accepted"}
    assert swap_flags(accepted, 2)["is_responder"] is True
    assert swap_flags(accepted, 3)["can_respond"] is False


def test_normalize_skills():
    assert normalize_skills([" Go", "Go", "", None, "Rust "]) == ["Go", "Rust"]
    assert normalize_skills(None) == []


def test_project_stats_over_filtered_list():
    featured = [dict(p, is_featured=p["project_id"] == 2) for p in PROJECTS]
    assert project_stats(featured) == {"total": 3, "active_members": 4, "featured": 1}
    assert project_stats(filter_projects(featured, "go")) == {"total": 1, "active_members": 1, "featured": 0}
    assert project_stats([]) == {"total": 0, "active_members": 0, "featured": 0}


def test_swap_stats():
    swaps = [
        {"swap_id": 1, "status": "pending", "swap_type": "mentorship"},
        {"swap_id": 2, "status": "accepted", "swap_type": "one_time"},
        {"swap_id": 3, "status": "accepted", "swap_type": "mentorship"},
    ]
    assert swap_stats(swaps) == {"total": 3, "accepted": 2, "mentorship": 2}
    assert swap_stats([]) == {"total": 0, "accepted": 0, "mentorship": 0}
