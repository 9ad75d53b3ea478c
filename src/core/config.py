from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 앱 설정
    APP_NAME: str = "faultgate"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # 로깅
    LOG_LEVEL: str = "INFO"
    LOG_UNCAUGHT: bool = True

    # 에러 응답 설정
    ERROR_STATUS_CODE: int = 404
    ERROR_RENDERER: Literal["message", "json", "safe"] = "message"

    # 예외로 승격할 경고 카테고리 (builtins 이름)
    # "Warning"을 넣으면 모든 경고가 승격된다
    ERROR_REPORTING: list[str] = ["UserWarning", "RuntimeWarning"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
