"""서비스 레이어 패키지 초기화 모듈입니다."""

from teamswap.services import (
    notification_service,
    profile_service,
    auth_service,
    membership_service,
    project_service,
    application_service,
    skill_swap_service,
)
