"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./teamswap.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Password hashing (PBKDF2-SHA256)
    PASSWORD_HASH_ITERATIONS: int = 100_000
    PASSWORD_MIN_LENGTH: int = 6

    # 목록/알림 조회 기본 크기
    NOTIFICATION_FETCH_LIMIT: int = 10
    DISCOVER_LIMIT: int = 12

    # SSE keepalive 주기
    NOTIFICATION_STREAM_KEEPALIVE_SECONDS: float = 15.0

    class Config:
        # 실행 cwd와 무관하게 저장소 루트의 .env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
