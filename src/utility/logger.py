import sys

from loguru import logger


def setup_logger(level: str = "DEBUG"):
    """Loguru 기본 설정. 앱 시작 시 한 번 호출.

    인터셉터가 bind한 failure_* 필드는 record["extra"]에 담긴다.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=level.upper(),
    )
    return logger
