"""
지원/멤버십/스킬 스왑/과제 상태 전이 규칙입니다.

모든 함수는 순수 함수이며 DB에 접근하지 않는다. 주어진 현재 상태와 행위에 대해
다음 상태와 수반되는 쓰기(멤버십 생성, 알림 유형)를 결정하고, 거부 시 사유를 돌려준다.
행위자 권한(소유자 여부 등)은 teamswap.utils.permissions 에서 판단한다.

    application: pending → accepted | rejected | withdrawn
    swap:        pending → accepted | rejected | cancelled
                 accepted → completed | cancelled
    project:     active ⇄ paused, active | paused → completed | cancelled
    membership:  active → left | removed, left | removed → active
"""

from typing import List, NamedTuple, Optional, Tuple

from teamswap import constants as c


APPLICATION_TRANSITIONS = {
    c.APPLICATION_PENDING: [c.APPLICATION_ACCEPTED, c.APPLICATION_REJECTED, c.APPLICATION_WITHDRAWN],
}

SWAP_TRANSITIONS = {
    c.SWAP_PENDING: [c.SWAP_ACCEPTED, c.SWAP_REJECTED, c.SWAP_CANCELLED],
    c.SWAP_ACCEPTED: [c.SWAP_COMPLETED, c.SWAP_CANCELLED],
}

PROJECT_TRANSITIONS = {
    c.PROJECT_ACTIVE: [c.PROJECT_PAUSED, c.PROJECT_COMPLETED, c.PROJECT_CANCELLED],
    c.PROJECT_PAUSED: [c.PROJECT_ACTIVE, c.PROJECT_COMPLETED, c.PROJECT_CANCELLED],
}

MEMBER_TRANSITIONS = {
    c.MEMBER_ACTIVE: [c.MEMBER_LEFT, c.MEMBER_REMOVED],
    c.MEMBER_LEFT: [c.MEMBER_ACTIVE],
    c.MEMBER_REMOVED: [c.MEMBER_ACTIVE],
}

REVIEW_DECISIONS = (c.APPLICATION_ACCEPTED, c.APPLICATION_REJECTED)
SWAP_DECISIONS = ("accept", "reject")


class ReviewOutcome(NamedTuple):
    next_status: str
    creates_membership: bool
    noti_type: str


class SwapResponse(NamedTuple):
    next_status: str
    assigns_responder: bool
    noti_type: str


def can_transition(transitions: dict, current: str, new: str) -> Tuple[bool, str]:
    """Check whether ``current`` may move to ``new`` under the given table.

    Returns (can_transition: bool, reason: str)
    """
    allowed = transitions.get(current, [])
    if new not in allowed:
        return False, f"'{current}' 상태에서 '{new}' 상태로 변경할 수 없습니다."
    return True, ""


def get_allowed_transitions(transitions: dict, status: str) -> List[str]:
    return list(transitions.get(status, []))


def is_terminal_status(transitions: dict, status: str) -> bool:
    return not transitions.get(status)


def has_capacity(member_count: int, max_members: int) -> bool:
    return int(member_count or 0) < int(max_members or 0)


def check_apply(
    project_status: str,
    member_count: int,
    max_members: int,
    *,
    is_member: bool,
    has_pending: bool,
    was_rejected: bool,
) -> Tuple[bool, str]:
    if project_status != c.PROJECT_ACTIVE:
        return False, "모집 중인 과제가 아닙니다."
    if is_member:
        return False, "이미 과제 멤버입니다."
    if has_pending:
        return False, "이미 지원한 과제입니다."
    if was_rejected:
        return False, "거절된 지원은 다시 제출할 수 없습니다."
    if not has_capacity(member_count, max_members):
        return False, "모집 인원이 가득 찼습니다."
    return True, ""


def decide_review(current_status: str, decision: str) -> Tuple[Optional[ReviewOutcome], str]:
    """Decide the outcome of an owner's review of a pending application."""
    if decision not in REVIEW_DECISIONS:
        return None, f"지원할 수 없는 결정입니다: {decision}"
    ok, reason = can_transition(APPLICATION_TRANSITIONS, current_status, decision)
    if not ok:
        return None, reason
    if decision == c.APPLICATION_ACCEPTED:
        return ReviewOutcome(decision, True, c.NOTI_APPLICATION_ACCEPTED), ""
    return ReviewOutcome(decision, False, c.NOTI_APPLICATION_REJECTED), ""


def check_accept_into(project_status: str) -> Tuple[bool, str]:
    # 모집 중(active)이 아닌 과제에는 남아 있던 pending 지원도 수락할 수 없다.
    if project_status != c.PROJECT_ACTIVE:
        return False, f"'{project_status}' 상태의 과제에는 지원을 수락할 수 없습니다."
    return True, ""


def is_repeat_accept(current_status: str, decision: str) -> bool:
    # 이미 수락된 지원서를 다시 수락하는 요청은 멤버십을 추가로 만들지 않는 no-op 이다.
    return current_status == c.APPLICATION_ACCEPTED and decision == c.APPLICATION_ACCEPTED


def check_withdraw(current_status: str) -> Tuple[bool, str]:
    return can_transition(APPLICATION_TRANSITIONS, current_status, c.APPLICATION_WITHDRAWN)


def decide_swap_response(
    current_status: str,
    responder_id: Optional[int],
    decision: str,
) -> Tuple[Optional[SwapResponse], str]:
    if decision not in SWAP_DECISIONS:
        return None, f"지원할 수 없는 응답입니다: {decision}"
    if responder_id is not None:
        return None, "이미 다른 사용자가 수락한 스왑입니다."
    target = c.SWAP_ACCEPTED if decision == "accept" else c.SWAP_REJECTED
    ok, reason = can_transition(SWAP_TRANSITIONS, current_status, target)
    if not ok:
        return None, reason
    if target == c.SWAP_ACCEPTED:
        return SwapResponse(target, True, c.NOTI_SKILL_SWAP_ACCEPTED), ""
    # 거절 시 responder 는 비워 둔 채 종료 상태가 된다.
    return SwapResponse(target, False, c.NOTI_SKILL_SWAP_REJECTED), ""


def check_swap_complete(current_status: str) -> Tuple[bool, str]:
    return can_transition(SWAP_TRANSITIONS, current_status, c.SWAP_COMPLETED)


def check_swap_cancel(current_status: str) -> Tuple[bool, str]:
    return can_transition(SWAP_TRANSITIONS, current_status, c.SWAP_CANCELLED)


def check_swap_rating(current_status: str, existing_rating: Optional[int], rating: int) -> Tuple[bool, str]:
    if current_status != c.SWAP_COMPLETED:
        return False, "완료된 스왑만 평가할 수 있습니다."
    if existing_rating is not None:
        return False, "이미 평가를 남겼습니다."
    if not 1 <= int(rating) <= 5:
        return False, "평점은 1~5 사이여야 합니다."
    return True, ""


def check_project_status_change(current_status: str, new_status: str) -> Tuple[bool, str]:
    if new_status not in c.PROJECT_STATUSES:
        return False, f"알 수 없는 과제 상태입니다: {new_status}"
    return can_transition(PROJECT_TRANSITIONS, current_status, new_status)


def check_member_exit(role: str, current_status: str, new_status: str) -> Tuple[bool, str]:
    if role == c.ROLE_CREATOR:
        return False, "과제 생성자는 과제를 떠나거나 제거될 수 없습니다."
    return can_transition(MEMBER_TRANSITIONS, current_status, new_status)


def running_mean(current: float, count: int, value: int) -> float:
    total = float(current or 0.0) * int(count or 0) + value
    return round(total / (int(count or 0) + 1), 2)
