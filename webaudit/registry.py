"""
Registry of auditor factories.

Keys are the names used in configuration ("security", "seo", ...).
Registration order is execution order within an area.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from webaudit.config import AuditConfig, AuditorConfig
from webaudit.core.auditor import Auditor, AuditorContext
from webaudit.errors import ConfigurationError

logger = logging.getLogger(__name__)


AuditorFactory = Callable[[AuditorContext, AuditorConfig], Auditor]


class AuditorKind(Enum):
    """Класс проверки (используется для быстрого запуска)."""
    FUNCTIONAL = "functional"
    ACCESSIBILITY = "accessibility"
    SECURITY = "security"
    SEO = "seo"
    PERFORMANCE = "performance"
    NAVIGATION = "navigation"
    AREA = "area"


@dataclass(frozen=True)
class RegisteredAuditor:
    key: str
    factory: AuditorFactory
    kind: AuditorKind = AuditorKind.FUNCTIONAL

    def create(self, context: AuditorContext, config: AuditorConfig) -> Auditor:
        auditor = self.factory(context, config)
        if not isinstance(auditor, Auditor):
            raise TypeError(
                f"Factory for '{self.key}' returned {type(auditor).__name__}, "
                "which does not implement name()/category()/audit()"
            )
        return auditor


class AuditorRegistry:
    """Упорядоченное отображение key -> фабрика auditor'а."""

    def __init__(self, entries: Optional[Iterable[RegisteredAuditor]] = None):
        self._entries: Dict[str, RegisteredAuditor] = {}
        for entry in entries or []:
            self._entries[entry.key] = entry

    def register(
        self,
        key: str,
        factory: AuditorFactory,
        kind: AuditorKind = AuditorKind.FUNCTIONAL,
    ) -> None:
        """
        Зарегистрировать auditor.

        Повторная регистрация заменяет фабрику, сохраняя позицию.
        """
        if not key:
            raise ValueError("Auditor key must not be empty")
        if not callable(factory):
            raise TypeError(f"Auditor factory for '{key}' is not callable")
        if key in self._entries:
            logger.debug(f"Replacing auditor '{key}'")
        self._entries[key] = RegisteredAuditor(key=key, factory=factory, kind=kind)

    def get(self, key: str) -> Optional[RegisteredAuditor]:
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return list(self._entries)

    def subset(self, keys: Iterable[str]) -> "AuditorRegistry":
        """Новый реестр только с указанными ключами (в порядке регистрации)."""
        wanted = set(keys)
        return AuditorRegistry(e for k, e in self._entries.items() if k in wanted)

    def of_kind(self, *kinds: AuditorKind) -> List[str]:
        return [k for k, e in self._entries.items() if e.kind in kinds]

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[RegisteredAuditor]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def validate_against(self, config: AuditConfig) -> None:
        """
        Проверить, что каждый auditor из конфигурации зарегистрирован.

        Raises:
            ConfigurationError: если в конфигурации есть неизвестный ключ
        """
        unknown = [key for key in config.auditors if key not in self._entries]
        if unknown:
            raise ConfigurationError(
                f"Unknown auditor(s) in configuration: {', '.join(unknown)}. "
                f"Registered: {', '.join(self._entries) or 'none'}"
            )


def default_registry() -> AuditorRegistry:
    """Реестр со всеми встроенными auditors."""
    from webaudit.auditors import BUILTIN_AUDITORS

    registry = AuditorRegistry()
    for key, factory, kind in BUILTIN_AUDITORS:
        registry.register(key, factory, kind)
    return registry
