"""요청 파이프라인 에러 인터셉터.

두 경로의 실패를 HTTP 응답으로 바꾼다.
1. 요청 처리 중: process()가 downstream 예외를 잡아 응답으로 교체
2. 요청 밖(전역): start()로 설치한 훅이 경고 승격 / 미처리 예외 출력을 담당

설치/복원은 생성자가 아니라 start()/stop()으로 명시적으로 한다.
"""

import sys
import traceback
from typing import TYPE_CHECKING, Awaitable, Callable, TextIO

import loguru
from starlette.requests import Request
from starlette.responses import Response

from core.channels import ChannelHandlers, FailureChannelRegistry, channel_registry
from core.config import Settings
from core.exceptions import EscalatedError
from core.failure import FailureEvent
from core.renderers import MessageRenderer, get_renderer
from core.severity import SeverityMask, is_enabled, resolve_severity_mask

if TYPE_CHECKING:
    from loguru import Logger

CallNext = Callable[[Request], Awaitable[Response]]
Renderer = Callable[[BaseException, Request | None], str | bytes]

DEFAULT_STATUS_CODE = 404


class ErrorInterceptor:
    def __init__(
        self,
        renderer: Renderer | None = None,
        logger: "Logger | None" = None,
        status_code: int = DEFAULT_STATUS_CODE,
        severity_mask: SeverityMask = (Warning,),
        registry: FailureChannelRegistry = channel_registry,
        output: TextIO | None = None,
    ):
        self.renderer = renderer or MessageRenderer()
        self.logger = logger
        self.status_code = status_code
        self.severity_mask = severity_mask
        self.registry = registry
        # None이면 쓰는 시점의 sys.stdout
        self.output = output
        self._started = False

    # --- 수명 주기 ---

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """전역 경고/예외 채널에 자신을 등록한다. 기존 핸들러는 교체된다.

        mask에 포함된 카테고리는 경고 필터("default", "ignore")와 상관없이
        매번 훅까지 전달되도록 "always" 필터를 건다. stop()에서 원복된다.
        """
        self.registry.install(
            ChannelHandlers(
                showwarning=self._on_warning,
                excepthook=self._on_uncaught,
                threading_excepthook=self._on_thread_exception,
            ),
            owner=self,
            deliver=self.severity_mask,
        )
        self._started = True

    def stop(self) -> None:
        """start() 이전의 핸들러로 되돌린다. 시작하지 않았으면 아무 일도 없다."""
        if not self._started:
            return
        self.registry.restore()
        self._started = False

    def __enter__(self) -> "ErrorInterceptor":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # --- 요청 파이프라인 ---

    async def process(self, request: Request, call_next: CallNext) -> Response:
        """downstream을 호출하고, 예외가 나면 에러 응답으로 교체한다.

        재시도는 없다. 잡은 예외는 request.state.failure에 남긴다.
        취소/KeyboardInterrupt 같은 BaseException은 그대로 전파된다.
        """
        try:
            return await call_next(request)
        except Exception as exc:
            request.state.failure = exc
            return self.build_response(exc, request)

    # --- 런타임 에러(경고) 채널 ---

    def classify_runtime_error(
        self,
        severity: type[Warning],
        message: str | Warning,
        filename: str = "",
        lineno: int = 0,
    ) -> EscalatedError | None:
        """severity 검사 결과. None = 계속 진행, EscalatedError = 승격."""
        if not is_enabled(severity, self.severity_mask):
            return None
        return EscalatedError(str(message), severity, filename, lineno)

    def handle_runtime_error(
        self,
        severity: type[Warning],
        message: str | Warning,
        filename: str = "",
        lineno: int = 0,
    ) -> bool:
        """mask에 포함된 severity면 EscalatedError를 raise, 아니면 False."""
        failure = self.classify_runtime_error(severity, message, filename, lineno)
        if failure is not None:
            raise failure
        return False

    # --- 미처리 예외 채널 ---

    def emit_uncaught_exception(self, exc: BaseException) -> None:
        """최후의 경로: 로그 → 응답 생성 → 본문을 표준 출력에 직접 쓴다."""
        self.log(exc)
        response = self.build_response(exc, None)

        out = self.output or sys.stdout
        buffer = getattr(out, "buffer", None)
        if buffer is not None:
            # 렌더러가 준 bytes를 그대로 내보낸다
            out.flush()
            buffer.write(response.body)
            buffer.flush()
        else:
            out.write(response.body.decode(response.charset, errors="replace"))
            out.flush()

    # --- 응답 생성 ---

    def build_response(self, exc: BaseException, request: Request | None = None) -> Response:
        """고정 상태코드 + render() 본문. 로그는 남기지 않는다."""
        return Response(
            content=self.render(exc, request),
            status_code=self.status_code,
            media_type=getattr(self.renderer, "media_type", "text/plain"),
        )

    def render(self, exc: BaseException, request: Request | None = None) -> str | bytes:
        return self.renderer(exc, request)

    def log(self, exc: BaseException) -> None:
        if self.logger is None:
            return

        event = FailureEvent.from_exception(exc)
        try:
            self.logger.bind(**event.context()).opt(exception=exc).error(
                "Uncaught Exception: {}", event.message
            )
        except Exception as log_exc:
            # 로거 실패가 에러 처리 경로를 죽이면 안 된다
            print("Logging failed while reporting an uncaught exception:", file=sys.stderr)
            traceback.print_exception(log_exc, file=sys.stderr)

    # --- 전역 훅 어댑터 ---

    def _on_warning(self, message, category, filename, lineno, file=None, line=None):
        if not self.handle_runtime_error(category, message, filename, lineno):
            # 승격되지 않은 경고는 원래 핸들러가 평소처럼 출력한다
            saved = self.registry.saved
            if saved is not None:
                saved.showwarning(message, category, filename, lineno, file, line)

    def _on_uncaught(self, exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            saved = self.registry.saved
            if saved is not None:
                saved.excepthook(exc_type, exc, tb)
            return
        try:
            self.emit_uncaught_exception(exc)
        except Exception:
            # 출력에 실패하면 원래 예외를 이전 훅에 넘긴다
            saved = self.registry.saved
            if saved is None:
                raise
            saved.excepthook(exc_type, exc, tb)

    def _on_thread_exception(self, args):
        if args.exc_type is SystemExit:
            return
        if args.exc_value is None:
            saved = self.registry.saved
            if saved is not None:
                saved.threading_excepthook(args)
            return
        try:
            self.emit_uncaught_exception(args.exc_value)
        except Exception:
            saved = self.registry.saved
            if saved is None:
                raise
            saved.threading_excepthook(args)


def create_interceptor(
    settings: Settings,
    registry: FailureChannelRegistry = channel_registry,
) -> ErrorInterceptor:
    """설정값으로 인터셉터를 조립한다."""
    return ErrorInterceptor(
        renderer=get_renderer(settings.ERROR_RENDERER),
        logger=loguru.logger if settings.LOG_UNCAUGHT else None,
        status_code=settings.ERROR_STATUS_CODE,
        severity_mask=resolve_severity_mask(settings.ERROR_REPORTING),
        registry=registry,
    )
