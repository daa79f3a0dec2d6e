"""TeamSwap: 프로젝트 팀 매칭과 스킬 스왑 협업 플랫폼 백엔드."""

__version__ = "1.0.0"
