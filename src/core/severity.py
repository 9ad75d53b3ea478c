"""경고 카테고리 기반 severity mask.

severity = 경고 카테고리(Warning 서브클래스).
mask에 포함된 카테고리(또는 그 하위 카테고리)만 예외로 승격된다.
"""

import builtins

from core.exceptions import UnknownSeverity

SeverityMask = tuple[type[Warning], ...]


def resolve_severity_mask(names: list[str]) -> SeverityMask:
    """설정값의 카테고리 이름 목록 → Warning 클래스 튜플.

    예: ["UserWarning", "RuntimeWarning"] → (UserWarning, RuntimeWarning)
    """
    mask = []
    for name in names:
        category = getattr(builtins, name, None)
        if not (isinstance(category, type) and issubclass(category, Warning)):
            raise UnknownSeverity(f"경고 카테고리가 아닙니다: {name}")
        mask.append(category)
    return tuple(mask)


def is_enabled(severity: type[Warning], mask: SeverityMask) -> bool:
    return isinstance(severity, type) and issubclass(severity, mask)
