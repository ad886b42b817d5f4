"""
Core data models for audit system.
"""

import copy
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional


class Severity(Enum):
    """Уровень серьёзности проблемы (упорядочен от INFO к CRITICAL)."""
    INFO = "info"          # Информационное сообщение
    LOW = "low"            # Незначительная проблема или улучшение
    MEDIUM = "medium"      # Проблема средней важности
    HIGH = "high"          # Серьёзная проблема, требует исправления
    CRITICAL = "critical"  # Область не работает или работает неправильно

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value) -> "Severity":
        """Получить Severity из строки или вернуть как есть."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown severity '{value}', expected one of: "
                f"{', '.join(s.value for s in _SEVERITY_ORDER)}"
            ) from None

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [
    Severity.INFO,
    Severity.LOW,
    Severity.MEDIUM,
    Severity.HIGH,
    Severity.CRITICAL,
]


class Category(Enum):
    """Категория проблемы (вид проверки, не зависит от серьёзности)."""
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    SEO = "seo"
    SECURITY = "security"
    BEST_PRACTICES = "best_practices"
    UI_UX = "ui_ux"
    FUNCTIONALITY = "functionality"


class Status(Enum):
    """Результат отдельной проверки."""
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"
    ERROR = "error"        # Сама проверка сломалась
    SKIPPED = "skipped"
    INFO = "info"          # Информационный, без оценки


SEVERITY_EMOJI = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🟢",
    Severity.INFO: "ℹ️",
}


@dataclass(frozen=True)
class Issue:
    """Проблема, найденная в ходе аудита. После создания не изменяется."""

    id: str
    title: str
    description: str
    severity: Severity
    category: Category
    status: Status
    timestamp: datetime
    rule_id: Optional[str] = None  # Стабильный идентификатор проверки
    auditor: Optional[str] = None
    component: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    evidence: Any = None
    suggestion: Optional[str] = None
    documentation: Optional[str] = None

    @property
    def location(self) -> Optional[str]:
        """Местоположение для include/exclude фильтров: файл или компонент."""
        return self.file or self.component

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "id": self.id,
            "rule_id": self.rule_id,
            "auditor": self.auditor,
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "category": self.category.value,
            "status": self.status.value,
            "component": self.component,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "evidence": self.evidence,
            "suggestion": self.suggestion,
            "documentation": self.documentation,
            "timestamp": self.timestamp.isoformat(),
        }


class MergePolicy(Enum):
    """Как объединять значения одной группы метрик из разных источников."""
    OVERWRITE = "overwrite"    # Последняя запись побеждает (по ключу)
    ACCUMULATE = "accumulate"  # Числа суммируются, остальное перезаписывается


# Счётчики ссылок складываются между областями; остальные группы
# описывают состояние и перезаписываются.
DEFAULT_MERGE_POLICIES: Dict[str, MergePolicy] = {
    "navigation": MergePolicy.ACCUMULATE,
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Metrics:
    """
    Разреженный набор именованных групп метрик.

    Пример: {"performance": {"loadTime": 120}, "seo": {"hasTitle": True}}.
    Внутри группы запись затрагивает только переданные ключи.
    """

    def __init__(self, groups: Optional[Mapping[str, Any]] = None):
        self._groups: Dict[str, Any] = {}
        if groups:
            self.update(groups)

    def update(self, groups: Mapping[str, Any]) -> None:
        """Shallow merge: более поздние ключи перезаписывают ранние в той же группе."""
        self._merge(groups, {})

    def merge(
        self,
        other: "Metrics",
        policies: Optional[Mapping[str, MergePolicy]] = None,
    ) -> None:
        """Объединить другой набор метрик с учётом политики каждой группы."""
        if policies is None:
            policies = DEFAULT_MERGE_POLICIES
        self._merge(other.to_dict(), policies)

    def _merge(self, groups: Mapping[str, Any], policies: Mapping[str, MergePolicy]) -> None:
        for name, values in groups.items():
            if not isinstance(values, Mapping):
                # Скалярная (пользовательская) метрика заменяется целиком
                self._groups[name] = copy.deepcopy(values)
                continue

            current = self._groups.get(name)
            if not isinstance(current, dict):
                current = {}
                self._groups[name] = current

            policy = policies.get(name, MergePolicy.OVERWRITE)
            for key, value in values.items():
                if (
                    policy is MergePolicy.ACCUMULATE
                    and _is_number(value)
                    and _is_number(current.get(key))
                ):
                    current[key] = current[key] + value
                else:
                    current[key] = copy.deepcopy(value)

    def get(self, name: str, default=None):
        return self._groups.get(name, default)

    def __contains__(self, name) -> bool:
        return name in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __bool__(self) -> bool:
        return bool(self._groups)

    def __eq__(self, other) -> bool:
        if isinstance(other, Metrics):
            return self._groups == other._groups
        if isinstance(other, Mapping):
            return self._groups == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Metrics({self._groups!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Копия групп (изменение результата не влияет на Metrics)."""
        return copy.deepcopy(self._groups)


@dataclass
class AuditArea:
    """Область (страница/маршрут) для аудита. Это конфигурация, не состояние."""

    name: str
    path: str
    description: Optional[str] = None
    priority: Optional[int] = None
    components: List[str] = field(default_factory=list)
    routes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditArea":
        return cls(
            name=data["name"],
            path=data.get("path", "/"),
            description=data.get("description"),
            priority=data.get("priority"),
            components=list(data.get("components") or []),
            routes=list(data.get("routes") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "description": self.description,
            "priority": self.priority,
            "components": list(self.components),
            "routes": list(self.routes),
        }


@dataclass
class AreaSummary:
    """Количество проблем области по статусу."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    warnings: int = 0
    errors: int = 0
    skipped: int = 0
    info: int = 0

    @classmethod
    def from_issues(cls, issues: List[Issue]) -> "AreaSummary":
        summary = cls(total=len(issues))
        for issue in issues:
            if issue.status is Status.PASS:
                summary.passed += 1
            elif issue.status is Status.FAIL:
                summary.failed += 1
            elif issue.status is Status.WARNING:
                summary.warnings += 1
            elif issue.status is Status.ERROR:
                summary.errors += 1
            elif issue.status is Status.SKIPPED:
                summary.skipped += 1
            else:
                summary.info += 1
        return summary

    @property
    def graded(self) -> int:
        """Проблемы, участвующие в оценке (все, кроме skipped)."""
        return self.total - self.skipped

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "warnings": self.warnings,
            "errors": self.errors,
            "skipped": self.skipped,
            "info": self.info,
        }


def round_half_up(value: float) -> int:
    """Округление 0.5 вверх (встроенный round() округляет к чётному)."""
    return int(math.floor(value + 0.5))


def area_score(summary: AreaSummary) -> int:
    """
    Оценка области 0..100.

    round(passed / graded * 100); область без проблем получает 100.
    """
    if summary.graded <= 0:
        return 100
    return round_half_up(summary.passed / summary.graded * 100)


def overall_score(scores: List[int]) -> int:
    """Невзвешенное среднее оценок областей."""
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


@dataclass
class AreaResult:
    """Результат аудита одной области."""

    id: str
    timestamp: datetime
    duration_ms: float
    area: AuditArea
    issues: List[Issue]
    metrics: Metrics
    summary: AreaSummary
    score: int

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
            "area": self.area.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "metrics": self.metrics.to_dict(),
            "summary": self.summary.to_dict(),
            "score": self.score,
        }


@dataclass
class ReportSummary:
    """Сводка по серьёзности для всего запуска."""

    areas: int = 0
    total_issues: int = 0
    critical_issues: int = 0
    high_issues: int = 0
    medium_issues: int = 0
    low_issues: int = 0
    info_issues: int = 0
    overall_score: int = 0

    @classmethod
    def from_results(cls, results: List[AreaResult]) -> "ReportSummary":
        summary = cls(areas=len(results))
        for result in results:
            for issue in result.issues:
                summary.total_issues += 1
                if issue.severity is Severity.CRITICAL:
                    summary.critical_issues += 1
                elif issue.severity is Severity.HIGH:
                    summary.high_issues += 1
                elif issue.severity is Severity.MEDIUM:
                    summary.medium_issues += 1
                elif issue.severity is Severity.LOW:
                    summary.low_issues += 1
                else:
                    summary.info_issues += 1
        summary.overall_score = overall_score([r.score for r in results])
        return summary

    def count(self, severity: Severity) -> int:
        return {
            Severity.CRITICAL: self.critical_issues,
            Severity.HIGH: self.high_issues,
            Severity.MEDIUM: self.medium_issues,
            Severity.LOW: self.low_issues,
            Severity.INFO: self.info_issues,
        }[severity]

    def to_dict(self) -> Dict[str, int]:
        return {
            "areas": self.areas,
            "total_issues": self.total_issues,
            "critical_issues": self.critical_issues,
            "high_issues": self.high_issues,
            "medium_issues": self.medium_issues,
            "low_issues": self.low_issues,
            "info_issues": self.info_issues,
            "overall_score": self.overall_score,
        }


@dataclass
class AuditReport:
    """Итоговый отчёт аудита."""

    id: str
    project_name: str
    project_version: Optional[str]
    timestamp: datetime
    duration_ms: float
    environment: Dict[str, str]
    results: List[AreaResult]
    global_metrics: Metrics
    summary: ReportSummary

    def issues(self) -> Iterator[Issue]:
        for result in self.results:
            yield from result.issues

    def issues_by_category(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self.issues():
            counts[issue.category.value] = counts.get(issue.category.value, 0) + 1
        return counts

    def get_critical_issues(self) -> List[Issue]:
        """Получить только критические проблемы."""
        return [i for i in self.issues() if i.severity is Severity.CRITICAL]

    def get_high_issues(self) -> List[Issue]:
        """Получить проблемы высокой важности."""
        return [i for i in self.issues() if i.severity is Severity.HIGH]

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "id": self.id,
            "project_name": self.project_name,
            "project_version": self.project_version,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
            "environment": dict(self.environment),
            "results": [result.to_dict() for result in self.results],
            "global_metrics": self.global_metrics.to_dict(),
            "summary": self.summary.to_dict(),
        }
