"""앱 조립(main.py) + 설정 기반 인터셉터 생성 테스트."""

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.exceptions import UnknownSeverity
from core.interceptor import create_interceptor
from core.renderers import SafeRenderer
from main import app


def test_health_reports_interceptor_state():
    with TestClient(app) as c:
        resp = c.get("/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["interceptor_started"] is True
    assert data["error_status_code"] == 404
    assert data["renderer"] == "message"


def test_create_interceptor_from_settings(registry):
    settings = Settings(
        ERROR_STATUS_CODE=500,
        ERROR_RENDERER="safe",
        ERROR_REPORTING=["Warning"],
        LOG_UNCAUGHT=False,
    )
    interceptor = create_interceptor(settings, registry=registry)

    assert interceptor.status_code == 500
    assert isinstance(interceptor.renderer, SafeRenderer)
    assert interceptor.severity_mask == (Warning,)
    assert interceptor.logger is None
    assert interceptor.registry is registry


def test_create_interceptor_rejects_unknown_severity(registry):
    with pytest.raises(UnknownSeverity):
        create_interceptor(Settings(ERROR_REPORTING=["Nope"]), registry=registry)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("ERROR_STATUS_CODE", "503")
    monkeypatch.setenv("ERROR_REPORTING", '["DeprecationWarning"]')

    settings = Settings()
    assert settings.ERROR_STATUS_CODE == 503
    assert settings.ERROR_REPORTING == ["DeprecationWarning"]
