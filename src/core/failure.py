"""캡처된 런타임 실패(FailureEvent).

실패를 잡은 순간 만들어지고, 로그 컨텍스트로 바로 소비된다.
따로 저장되지 않는다.
"""

import traceback
from dataclasses import dataclass
from enum import Enum

from core.exceptions import AppException, EscalatedError


class FailureKind(str, Enum):
    EXCEPTION = "exception"
    RUNTIME_ERROR = "runtime_error"


def failure_message(exc: BaseException) -> str:
    """사람이 읽는 실패 메시지. AppException은 message 필드를 우선한다."""
    if isinstance(exc, AppException):
        return exc.message
    return str(exc)


@dataclass(frozen=True)
class FailureEvent:
    kind: FailureKind
    message: str
    filename: str | None
    lineno: int | None
    exception: BaseException

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FailureEvent":
        """예외에서 FailureEvent를 만든다.

        - EscalatedError: 원래 경고의 파일/라인을 그대로 사용
        - 그 외: traceback의 가장 안쪽 프레임 위치 (없으면 None)
        """
        if isinstance(exc, EscalatedError):
            return cls(
                kind=FailureKind.RUNTIME_ERROR,
                message=failure_message(exc),
                filename=exc.filename or None,
                lineno=exc.lineno or None,
                exception=exc,
            )

        filename, lineno = None, None
        frames = traceback.extract_tb(exc.__traceback__)
        if frames:
            filename, lineno = frames[-1].filename, frames[-1].lineno

        return cls(
            kind=FailureKind.EXCEPTION,
            message=failure_message(exc),
            filename=filename,
            lineno=lineno,
            exception=exc,
        )

    def context(self) -> dict:
        """로그에 bind할 구조화 컨텍스트."""
        return {
            "failure_kind": self.kind.value,
            "failure_type": type(self.exception).__name__,
            "failure_file": self.filename,
            "failure_line": self.lineno,
        }
