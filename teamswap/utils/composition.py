"""목록 화면에서 쓰는 파생 상태(검색/카테고리 필터, 집계, 배지, 지원 가능 여부)를 계산하는 순수 헬퍼입니다.

ORM 객체와 API 응답 dict 모두를 입력으로 받는다.
"""

from typing import Any, Iterable, List, Optional, Set

from teamswap.constants import PROJECT_CATEGORIES
from teamswap.workflow import has_capacity


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in str(haystack).lower()


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def matches_project_query(project: Any, query: Optional[str]) -> bool:
    needle = normalize_query(query)
    if not needle:
        return True
    if _contains(_field(project, "title"), needle) or _contains(_field(project, "description"), needle):
        return True
    return any(_contains(skill, needle) for skill in _field(project, "required_skills") or [])


def matches_swap_query(swap: Any, query: Optional[str]) -> bool:
    needle = normalize_query(query)
    if not needle:
        return True
    return any(
        _contains(_field(swap, name), needle)
        for name in ("offered_skill", "requested_skill", "message")
    )


def is_known_category(category: Optional[str]) -> bool:
    return category in PROJECT_CATEGORIES


def matches_category(project: Any, category: Optional[str]) -> bool:
    if not category:
        return True
    return _field(project, "category") == category


def filter_projects(projects: Iterable[Any], query: Optional[str] = None, category: Optional[str] = None) -> List[Any]:
    return [
        p for p in projects
        if matches_project_query(p, query) and matches_category(p, category)
    ]


def filter_swaps(swaps: Iterable[Any], query: Optional[str] = None) -> List[Any]:
    return [s for s in swaps if matches_swap_query(s, query)]


def project_stats(projects: Iterable[Any]) -> dict:
    """탐색 화면 상단 집계: 조회된 과제 수, 활동 멤버 합계, 추천 과제 수."""
    projects = list(projects)
    return {
        "total": len(projects),
        "active_members": sum(int(_field(p, "member_count", 0) or 0) for p in projects),
        "featured": sum(1 for p in projects if _field(p, "is_featured")),
    }


def swap_stats(swaps: Iterable[Any]) -> dict:
    """탐색 화면 상단 집계: 조회된 스왑 수, 성사된(accepted) 스왑 수, 멘토링 스왑 수."""
    swaps = list(swaps)
    return {
        "total": len(swaps),
        "accepted": sum(1 for s in swaps if _field(s, "status") == "accepted"),
        "mentorship": sum(1 for s in swaps if _field(s, "swap_type") == "mentorship"),
    }


def project_badges(
    project: Any,
    viewer_id: int,
    applied_project_ids: Set[int],
    member_project_ids: Set[int],
) -> dict:
    project_id = _field(project, "project_id")
    is_owner = _field(project, "creator_id") == viewer_id
    is_member = project_id in member_project_ids
    is_applied = project_id in applied_project_ids
    can_apply = (
        not is_owner
        and not is_member
        and not is_applied
        and has_capacity(_field(project, "member_count", 0), _field(project, "max_members", 0))
    )
    return {
        "is_owner": is_owner,
        "is_member": is_member,
        "is_applied": is_applied,
        "can_apply": can_apply,
    }


def swap_flags(swap: Any, viewer_id: int) -> dict:
    requester_id = _field(swap, "requester_id")
    responder_id = _field(swap, "responder_id")
    is_requester = requester_id == viewer_id
    is_responder = responder_id is not None and responder_id == viewer_id
    can_respond = (
        not is_requester
        and not is_responder
        and _field(swap, "status") == "pending"
        and responder_id is None
    )
    return {
        "is_requester": is_requester,
        "is_responder": is_responder,
        "can_respond": can_respond,
    }


def normalize_skills(values: Optional[Iterable[str]]) -> List[str]:
    # 공백 제거 후 빈 값/중복을 버리고 입력 순서를 유지한다.
    seen: Set[str] = set()
    result: List[str] = []
    for value in values or []:
        text = str(value or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
    return result
