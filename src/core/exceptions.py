"""인터셉터 전역 커스텀 예외 클래스.

AppException을 상속하면 JSONRenderer가 자동으로
{"error_code": "...", "message": "..."} 형식의 응답 본문을 만든다.
"""


class AppException(Exception):
    """앱 전역 베이스 예외.

    서브클래스에서 error_code, message를 클래스 변수로 정의하면
    렌더러가 해당 값을 읽어 응답 본문을 생성한다.
    """

    error_code: str = "INTERNAL_ERROR"
    message: str = "서버 내부 오류가 발생했습니다"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


# --- 런타임 에러 승격 ---


class EscalatedError(AppException):
    """severity mask에 걸린 경고를 예외로 승격한 것.

    원래 경고의 메시지, 카테고리(severity), 파일, 라인을 그대로 들고 있다.
    """

    error_code = "RUNTIME_ERROR"
    message = "런타임 경고가 예외로 승격되었습니다"

    def __init__(
        self,
        message: str,
        severity: type[Warning] = Warning,
        filename: str = "",
        lineno: int = 0,
    ):
        self.severity = severity
        self.filename = filename
        self.lineno = lineno
        super().__init__(message)


# --- 전역 채널 관련 ---


class ChannelsAlreadyInstalled(AppException):
    error_code = "CHANNELS_ALREADY_INSTALLED"
    message = "전역 에러 채널이 이미 설치되어 있습니다"


class ChannelsNotInstalled(AppException):
    error_code = "CHANNELS_NOT_INSTALLED"
    message = "설치된 전역 에러 채널이 없습니다"


# --- 설정 관련 ---


class UnknownRenderer(AppException):
    error_code = "UNKNOWN_RENDERER"
    message = "지원하지 않는 렌더러입니다"


class UnknownSeverity(AppException):
    error_code = "UNKNOWN_SEVERITY"
    message = "경고 카테고리가 아닌 severity입니다"
