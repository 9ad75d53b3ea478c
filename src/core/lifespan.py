from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from core.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === 시작 ===
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION}")

    # 전역 채널은 프로세스당 하나 → 요청마다가 아니라 여기서 한 번만 설치
    interceptor = app.state.interceptor
    interceptor.start()
    logger.info(
        f"Error interceptor ready (status={interceptor.status_code}, "
        f"mask={[c.__name__ for c in interceptor.severity_mask]})"
    )

    yield

    # === 종료 ===
    interceptor.stop()
    logger.info("Shutting down")
