"""
Auditor contract, recorder and lifecycle.

An auditor is anything with name(), category() and an async audit().
Issues and metrics are never returned from audit(): they go through an
IssueRecorder, which applies defaults and the per-auditor filters.
execute_auditor() wraps the whole lifecycle in one error boundary, so a
failing check turns into an issue instead of aborting the run.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import httpx
from bs4 import BeautifulSoup

from webaudit.config import AuditConfig, AuditorConfig
from webaudit.core.models import AuditArea, Category, Issue, Metrics, Severity, Status

logger = logging.getLogger(__name__)


@runtime_checkable
class Auditor(Protocol):
    """Минимальный интерфейс проверки."""

    def name(self) -> str:
        ...

    def category(self) -> Category:
        ...

    async def audit(self) -> None:
        ...


@dataclass
class AuditorContext:
    """
    Общий контекст auditors одной области.

    Создаётся заново для каждой области. config только для чтения.
    """

    config: AuditConfig
    area: AuditArea
    client: Optional[httpx.AsyncClient] = None
    headless: bool = True
    results: List[Issue] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)

    @property
    def url(self) -> str:
        return self.config.url_for(self.area)


@dataclass
class AuditorOutcome:
    """Результат одного запуска auditor'а."""

    name: str
    issues: List[Issue]
    metrics: Metrics
    duration_ms: float
    failed: bool = False
    timed_out: bool = False


_ISSUE_FIELDS = {
    "title", "description", "severity", "category", "status", "rule_id",
    "component", "file", "line", "column", "evidence", "suggestion", "documentation",
}


class IssueRecorder:
    """
    Буфер issues и metrics одного auditor'а.

    Заполняет поля по умолчанию и отбрасывает issues,
    не проходящие фильтры AuditorConfig.
    """

    def __init__(
        self,
        owner_name: str,
        owner_category: Category,
        config: Optional[AuditorConfig] = None,
    ):
        self.owner_name = owner_name
        self.owner_category = owner_category
        self.config = config or AuditorConfig(enabled=True)
        self.issues: List[Issue] = []
        self.metrics = Metrics()

    def reset(self) -> None:
        """Очистить буферы перед запуском."""
        self.issues = []
        self.metrics = Metrics()

    def _new_id(self) -> str:
        slug = self.owner_name.lower().replace(" ", "-")
        return f"{slug}-{uuid.uuid4().hex[:12]}"

    def add_issue(self, **fields: Any) -> Optional[Issue]:
        """
        Добавить issue.

        Отсутствующие поля: id (уникальный), timestamp, severity=LOW,
        category=категория auditor'а, status=FAIL. Переданный id
        сохраняется как rule_id.

        Returns:
            Добавленный Issue или None, если он отфильтрован
        """
        if "id" in fields:
            fields.setdefault("rule_id", fields.pop("id"))

        unknown = set(fields) - _ISSUE_FIELDS
        if unknown:
            raise TypeError(f"Unknown issue fields: {', '.join(sorted(unknown))}")

        issue = Issue(
            id=self._new_id(),
            title=fields.pop("title", None) or "Untitled Issue",
            description=fields.pop("description", None) or "",
            severity=Severity.parse(fields.pop("severity", None) or Severity.LOW),
            category=Category(fields.pop("category", None) or self.owner_category),
            status=Status(fields.pop("status", None) or Status.FAIL),
            timestamp=datetime.now(timezone.utc),
            auditor=self.owner_name,
            **fields,
        )

        if not self.should_report(issue):
            return None

        self.issues.append(issue)
        return issue

    def should_report(self, issue: Issue) -> bool:
        """Проверить issue по настройкам auditor'а."""
        if not self.config.enabled:
            return False

        if self.config.severity is not None and issue.severity < self.config.severity:
            return False

        location = issue.location
        if location:
            for pattern in self.config.exclude:
                if pattern in location:
                    return False

            if self.config.include and not any(p in location for p in self.config.include):
                return False

        return True

    def add_metrics(self, groups: Mapping[str, Any]) -> None:
        """Shallow merge метрик. Отключённый auditor метрик не даёт."""
        if not self.config.enabled:
            return
        self.metrics.update(groups)

    def results(self) -> Dict[str, Any]:
        return {"issues": list(self.issues), "metrics": self.metrics}

    def summary(self) -> Dict[str, int]:
        """Количество issues по серьёзности."""
        counts = {"total": len(self.issues)}
        for severity in Severity:
            counts[severity.value] = 0
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts


async def _maybe_call(auditor: Any, hook: str) -> None:
    method = getattr(auditor, hook, None)
    if method is None:
        return
    result = method()
    if asyncio.iscoroutine(result):
        await result


class _DeadlineExceeded(Exception):
    """Истёк timeout, заданный движком (не timeout запроса внутри auditor'а)."""


async def _audit_within(auditor: Auditor, timeout_seconds: Optional[float]) -> None:
    if not timeout_seconds:
        await auditor.audit()
        return

    own_error: Optional[BaseException] = None

    async def guarded() -> None:
        nonlocal own_error
        try:
            await auditor.audit()
        except (asyncio.TimeoutError, TimeoutError) as e:
            own_error = e

    try:
        await asyncio.wait_for(guarded(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise _DeadlineExceeded() from None

    # Собственный TimeoutError auditor'а обрабатывается как обычная ошибка
    if own_error is not None:
        raise own_error


def _resolve_name(auditor: Auditor, recorder: IssueRecorder) -> str:
    try:
        return auditor.name()
    except Exception as e:
        logger.warning(f"{recorder.owner_name}: name() failed: {e}")
        return recorder.owner_name


async def execute_auditor(
    auditor: Auditor,
    recorder: IssueRecorder,
    timeout_seconds: Optional[float] = None,
) -> AuditorOutcome:
    """
    Запустить auditor с error handling и timeout.

    initialize() -> audit() -> cleanup(). Исключение в audit() (в том
    числе собственный TimeoutError) даёт один CRITICAL issue со статусом
    ERROR. Превышение timeout_seconds даёт один HIGH issue. Уже
    записанные issues и metrics сохраняются.
    """
    name = _resolve_name(auditor, recorder)
    log = logging.getLogger(f"webaudit.{recorder.owner_name}")
    start_time = time.perf_counter()
    failed = False
    timed_out = False

    recorder.reset()
    try:
        await _maybe_call(auditor, "initialize")
        await _audit_within(auditor, timeout_seconds)

    except _DeadlineExceeded:
        timed_out = failed = True
        log.error(f"{name} timed out after {timeout_seconds}s")
        recorder.add_issue(
            title="Audit timeout",
            description=f"{name} exceeded timeout of {timeout_seconds} seconds",
            severity=Severity.HIGH,
            status=Status.ERROR,
            suggestion=f"Increase the auditor timeout or optimize {name}",
            evidence={"timeout_seconds": timeout_seconds},
        )

    except Exception as e:
        failed = True
        log.error(f"{name} failed with exception: {e}", exc_info=True)
        recorder.add_issue(
            title="Audit error",
            description=f"Failed to complete audit: {type(e).__name__}: {e}",
            severity=Severity.CRITICAL,
            status=Status.ERROR,
            evidence={"exception_type": type(e).__name__, "exception_message": str(e)},
        )

    finally:
        try:
            await _maybe_call(auditor, "cleanup")
        except Exception as e:
            log.warning(f"Cleanup of {name} failed: {e}")

    duration_ms = (time.perf_counter() - start_time) * 1000
    log.debug(f"Completed {name}: {len(recorder.issues)} issues, duration={duration_ms:.2f}ms")

    return AuditorOutcome(
        name=name,
        issues=list(recorder.issues),
        metrics=recorder.metrics,
        duration_ms=duration_ms,
        failed=failed,
        timed_out=timed_out,
    )


class BaseAuditor:
    """
    Базовый класс для встроенных auditors.

    Не обязателен: любой объект с name()/category()/audit() можно запустить
    через execute_auditor() со своим IssueRecorder.
    """

    key = "auditor"

    def __init__(self, context: AuditorContext, config: Optional[AuditorConfig] = None):
        self.context = context
        self.recorder = IssueRecorder(self.key, self.category(), config)
        self.logger = logging.getLogger(f"webaudit.{self.key}")

    def name(self) -> str:
        raise NotImplementedError

    def category(self) -> Category:
        raise NotImplementedError

    async def audit(self) -> None:
        raise NotImplementedError

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        pass

    @property
    def config(self) -> AuditorConfig:
        return self.recorder.config

    @property
    def area(self) -> AuditArea:
        return self.context.area

    @property
    def url(self) -> str:
        return self.context.url

    @property
    def client(self) -> Optional[httpx.AsyncClient]:
        return self.context.client

    def add_issue(self, **fields: Any) -> Optional[Issue]:
        return self.recorder.add_issue(**fields)

    def add_metrics(self, groups: Mapping[str, Any]) -> None:
        self.recorder.add_metrics(groups)

    def rule(self, name: str, default=None):
        """Значение правила из AuditorConfig.rules."""
        return self.config.rules.get(name, default)

    def threshold(self, name: str, default: float) -> float:
        return self.config.threshold.get(name, default)

    @staticmethod
    def parse_html(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    async def fetch(self, url: Optional[str] = None, method: str = "GET", **kwargs) -> Optional[httpx.Response]:
        """
        Загрузить страницу общим HTTP клиентом.

        Returns:
            Response или None, если клиента нет или запрос не удался
        """
        if self.client is None:
            self.logger.warning(f"{self.name()}: no HTTP client available")
            return None
        try:
            return await self.client.request(method, url or self.url, **kwargs)
        except httpx.HTTPError as e:
            self.logger.warning(f"{self.name()}: request to {url or self.url} failed: {e}")
            return None

    async def run(self, timeout_seconds: Optional[float] = None) -> AuditorOutcome:
        """Запустить полный жизненный цикл."""
        return await execute_auditor(self, self.recorder, timeout_seconds)
