"""프로세스 전역 에러 채널 레지스트리.

파이썬에서 "요청 파이프라인 밖"의 실패가 흘러가는 단일 슬롯 훅:
- warnings.showwarning   : 런타임 경고 (severity = 경고 카테고리), warnings.filters 포함
- sys.excepthook         : 메인 스레드에서 아무도 안 잡은 예외
- threading.excepthook   : 다른 스레드에서 아무도 안 잡은 예외

세 슬롯 모두 프로세스에 하나씩만 존재하므로 install/restore는
요청마다가 아니라 앱 시작/종료 시 한 번만 호출해야 한다.
동시 install/restore는 호출하는 쪽에서 직렬화한다 (lock 없음).
"""

import sys
import threading
import warnings
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from core.exceptions import ChannelsAlreadyInstalled, ChannelsNotInstalled


@dataclass(frozen=True)
class ChannelHandlers:
    showwarning: Callable[..., Any]
    excepthook: Callable[..., Any]
    threading_excepthook: Callable[..., Any]


class FailureChannelRegistry:
    """전역 채널 설치/복원을 담당하는 싱글톤 서비스.

    install() 시점에 기존 핸들러를 스냅샷으로 저장하고,
    restore() 시점에 스냅샷을 그대로 되돌린다.
    """

    def __init__(self):
        self._saved: ChannelHandlers | None = None
        self._owner: object | None = None
        self._filters: warnings.catch_warnings | None = None

    @property
    def installed(self) -> bool:
        return self._saved is not None

    @property
    def owner(self) -> object | None:
        return self._owner

    @property
    def saved(self) -> ChannelHandlers | None:
        """install() 직전에 활성화돼 있던 핸들러."""
        return self._saved

    def current(self) -> ChannelHandlers:
        return ChannelHandlers(
            showwarning=warnings.showwarning,
            excepthook=sys.excepthook,
            threading_excepthook=threading.excepthook,
        )

    def install(
        self,
        handlers: ChannelHandlers,
        owner: object | None = None,
        deliver: tuple[type[Warning], ...] = (),
    ) -> None:
        """핸들러를 교체하고, deliver 카테고리는 필터와 무관하게 항상 훅까지 오게 한다.

        경고 필터("default", "ignore")는 showwarning보다 먼저 걸러내므로
        필터 목록도 catch_warnings로 함께 스냅샷/복원한다.
        """
        if self._saved is not None:
            raise ChannelsAlreadyInstalled

        self._filters = warnings.catch_warnings()
        self._filters.__enter__()
        for category in deliver:
            warnings.filterwarnings("always", category=category)

        self._saved = self.current()
        self._owner = owner
        self._apply(handlers)
        logger.debug(f"Failure channels installed (owner={type(owner).__name__})")

    def restore(self) -> None:
        if self._saved is None:
            raise ChannelsNotInstalled

        self._apply(self._saved)
        self._saved = None
        self._owner = None
        self._filters.__exit__(None, None, None)
        self._filters = None
        logger.debug("Failure channels restored")

    @staticmethod
    def _apply(handlers: ChannelHandlers) -> None:
        warnings.showwarning = handlers.showwarning
        sys.excepthook = handlers.excepthook
        threading.excepthook = handlers.threading_excepthook


channel_registry = FailureChannelRegistry()
