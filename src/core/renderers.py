"""에러 응답 본문 렌더러.

렌더러 = (exc, request | None) → str | bytes 인 callable.
media_type 속성이 있으면 응답 Content-Type으로 쓰이고, 없으면 text/plain.
일반 함수도 그대로 ErrorInterceptor(renderer=...)에 넘길 수 있다.
"""

from starlette.requests import Request
from starlette.responses import JSONResponse

from core.exceptions import UnknownRenderer
from core.failure import failure_message


class MessageRenderer:
    """기본 렌더러: 실패 메시지를 그대로 본문으로 쓴다 (이스케이프 없음)."""

    media_type = "text/plain"

    def __call__(self, exc: BaseException, request: Request | None = None) -> str:
        return failure_message(exc)


class JSONRenderer:
    """{"error_code": "...", "message": "..."} 형식.

    AppException이 아니면 error_code는 예외 클래스 이름.
    요청 컨텍스트가 있으면 path를 함께 담는다.
    """

    media_type = JSONResponse.media_type

    def __call__(self, exc: BaseException, request: Request | None = None) -> bytes:
        body = {
            "error_code": getattr(exc, "error_code", type(exc).__name__),
            "message": failure_message(exc),
        }
        if request is not None:
            body["path"] = request.url.path
        return JSONResponse(content=body).body


class SafeRenderer:
    """운영 환경용: 내부 메시지를 숨기고 고정 문구만 내보낸다."""

    media_type = "text/plain"
    body = "Internal Server Error"

    def __call__(self, exc: BaseException, request: Request | None = None) -> str:
        return self.body


RENDERERS = {
    "message": MessageRenderer,
    "json": JSONRenderer,
    "safe": SafeRenderer,
}


def get_renderer(name: str):
    """설정 이름 → 렌더러 인스턴스."""
    try:
        return RENDERERS[name]()
    except KeyError:
        raise UnknownRenderer(f"지원하지 않는 렌더러입니다: {name}") from None
