"""pytest 공용 fixture.

전역 훅을 건드리는 테스트는 매번 새 FailureChannelRegistry를 사용하여 격리된다.
- registry: 테스트 종료 시 설치돼 있으면 자동 복원
- interceptor: loguru 로거가 연결된 ErrorInterceptor (mask = UserWarning)
- client: 실패하는 라우트를 가진 테스트 앱의 TestClient
- log_records: loguru 레코드를 모으는 임시 sink
"""

import sys
import warnings
from pathlib import Path

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from loguru import logger
from starlette.requests import Request

# src/ 디렉토리를 import path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from core.channels import FailureChannelRegistry
from core.exceptions import AppException
from core.interceptor import ErrorInterceptor
from core.lifespan import lifespan
from core.middleware import ErrorInterceptorMiddleware


class ReportNotFound(AppException):
    error_code = "REPORT_NOT_FOUND"
    message = "리포트를 찾을 수 없습니다"


def make_request(path: str = "/reports/1") -> Request:
    """ASGI scope만으로 만든 최소 Request."""
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": [],
            "query_string": b"",
        }
    )


def build_app(interceptor: ErrorInterceptor) -> FastAPI:
    app = FastAPI(lifespan=lifespan)
    app.state.interceptor = interceptor
    app.add_middleware(ErrorInterceptorMiddleware, interceptor=interceptor)

    @app.get("/ok")
    def ok():
        return {"status": "ok"}

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    @app.get("/async-boom")
    async def async_boom():
        raise ValueError("async boom")

    @app.get("/reports/{report_id}")
    def get_report(report_id: int):
        raise ReportNotFound

    @app.get("/warn")
    def warn():
        warnings.warn("deprecated call", UserWarning)
        return {"status": "warned"}

    @app.get("/deprecated")
    def deprecated():
        warnings.warn("old api", DeprecationWarning)
        return {"status": "deprecated"}

    @app.get("/teapot")
    def teapot():
        raise HTTPException(status_code=418, detail="short and stout")

    return app


@pytest.fixture()
def registry():
    reg = FailureChannelRegistry()
    yield reg
    if reg.installed:
        reg.restore()


@pytest.fixture()
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture()
def interceptor(registry):
    return ErrorInterceptor(logger=logger, registry=registry, severity_mask=(UserWarning,))


@pytest.fixture()
def client(interceptor):
    """lifespan으로 인터셉터를 시작/종료하는 TestClient.

    경고 필터는 건드리지 않는다 (실제 프로세스와 같은 조건).
    """
    with TestClient(build_app(interceptor)) as c:
        yield c
