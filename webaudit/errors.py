"""
Exceptions raised by the audit system.

Auditor-local failures never show up here: they are converted into
issues by the auditor lifecycle. Everything below aborts the run.
"""

from typing import List, Optional, Sequence


class AuditError(Exception):
    """Базовое исключение системы аудита."""


class ConfigurationError(AuditError):
    """Конфигурация невалидна (обнаруживается до запуска auditors)."""


class AreaNotFoundError(AuditError):
    """Запрошенная область не найдена в конфигурации."""

    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = list(available)
        super().__init__(
            f'Area "{name}" not found. Available areas: {", ".join(self.available)}'
        )


class AuditRunError(AuditError):
    """
    Сбой на уровне запуска.

    Содержит результаты областей, завершённых до сбоя.
    """

    def __init__(self, message: str, partial_results: Optional[List] = None):
        super().__init__(message)
        self.partial_results = partial_results or []


class ReportWriteError(AuditRunError):
    """Не удалось сохранить отчёт на диск."""

    def __init__(self, path, cause: Exception, report=None):
        self.path = path
        self.cause = cause
        self.report = report
        partial = list(report.results) if report is not None else []
        super().__init__(f"Failed to write report to {path}: {cause}", partial)
