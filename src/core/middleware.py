import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.interceptor import ErrorInterceptor

SLOW_THRESHOLD_MS = 500


class ErrorInterceptorMiddleware(BaseHTTPMiddleware):
    """나머지 요청 체인을 ErrorInterceptor로 감싸는 미들웨어.

    downstream 예외는 interceptor.process()가 응답으로 바꾼다.
    요청마다 한 줄씩 기록: 메서드, 경로, 클라이언트 IP, 상태코드, 처리시간(ms)
    실패가 응답으로 변환됐거나 500ms를 넘기면 WARNING 레벨로 기록.
    """

    def __init__(self, app: ASGIApp, interceptor: ErrorInterceptor):
        super().__init__(app)
        self.interceptor = interceptor

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()

        response = await self.interceptor.process(request, call_next)

        elapsed_ms = (time.perf_counter() - start) * 1000
        client_ip = request.client.host if request.client else "unknown"
        line = (
            f"{request.method} {request.url.path} | {client_ip} | "
            f"{response.status_code} | {elapsed_ms:.0f}ms"
        )

        failure = getattr(request.state, "failure", None)
        if failure is not None:
            logger.warning(f"{line} (intercepted {type(failure).__name__})")
        elif elapsed_ms > SLOW_THRESHOLD_MS:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)

        return response
