"""FastAPI 애플리케이션 진입점. 미들웨어와 API 라우터를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from teamswap.config import settings
from teamswap.database import Base, engine
import teamswap.models  # noqa: F401 - 모델 import로 metadata 등록
from teamswap.routers import auth, profiles, projects, applications, skill_swaps, notifications
from teamswap.utils.schema_sync import sync_missing_schema_objects

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TeamSwap",
    description="프로젝트 팀 매칭과 스킬 스왑을 위한 협업 플랫폼 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(projects.router)
app.include_router(applications.router)
app.include_router(skill_swaps.router)
app.include_router(notifications.router)


@app.on_event("startup")
def ensure_schema():
    # 신규 기능 배포 시 누락된 테이블/컬럼/인덱스를 자동 생성합니다.
    Base.metadata.create_all(bind=engine)
    report = sync_missing_schema_objects(engine, Base.metadata)
    if report["columns"] or report["indexes"]:
        logger.info("[startup] schema synced columns=%s indexes=%s", report["columns"], report["indexes"])


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "TeamSwap"}
