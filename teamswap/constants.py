"""도메인 전반에서 공유하는 상태/열거 문자열입니다. 저장 데이터와의 호환을 위해 값은 그대로 유지합니다."""

PROJECT_CATEGORIES = (
    "Web Development",
    "Mobile Development",
    "Data Science",
    "Design",
    "Marketing",
    "DevOps",
    "AI/ML",
    "Blockchain",
    "Other",
)

# Project
PROJECT_ACTIVE = "active"
PROJECT_COMPLETED = "completed"
PROJECT_PAUSED = "paused"
PROJECT_CANCELLED = "cancelled"
PROJECT_STATUSES = (PROJECT_ACTIVE, PROJECT_COMPLETED, PROJECT_PAUSED, PROJECT_CANCELLED)

MIN_PROJECT_MEMBERS = 2
DEFAULT_MAX_MEMBERS = 5

# ProjectMembership
ROLE_CREATOR = "creator"
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

MEMBER_ACTIVE = "active"
MEMBER_LEFT = "left"
MEMBER_REMOVED = "removed"

# ProjectApplication
APPLICATION_PENDING = "pending"
APPLICATION_ACCEPTED = "accepted"
APPLICATION_REJECTED = "rejected"
APPLICATION_WITHDRAWN = "withdrawn"

# SkillSwap
SWAP_PENDING = "pending"
SWAP_ACCEPTED = "accepted"
SWAP_REJECTED = "rejected"
SWAP_COMPLETED = "completed"
SWAP_CANCELLED = "cancelled"

MIN_SESSION_MINUTES = 30
MAX_SESSION_MINUTES = 180

# Notification
NOTI_PROJECT_APPLICATION = "project_application"
NOTI_APPLICATION_ACCEPTED = "application_accepted"
NOTI_APPLICATION_REJECTED = "application_rejected"
NOTI_SKILL_SWAP_REQUEST = "skill_swap_request"
NOTI_SKILL_SWAP_ACCEPTED = "skill_swap_accepted"
NOTI_SKILL_SWAP_REJECTED = "skill_swap_rejected"
NOTI_PROJECT_UPDATE = "project_update"
NOTI_SYSTEM = "system"
NOTIFICATION_TYPES = (
    NOTI_PROJECT_APPLICATION,
    NOTI_APPLICATION_ACCEPTED,
    NOTI_APPLICATION_REJECTED,
    NOTI_SKILL_SWAP_REQUEST,
    NOTI_SKILL_SWAP_ACCEPTED,
    NOTI_SKILL_SWAP_REJECTED,
    NOTI_PROJECT_UPDATE,
    NOTI_SYSTEM,
)
