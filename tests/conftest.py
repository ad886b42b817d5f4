"""
Pytest configuration and fixtures for the audit system.

Использование:
    pytest tests/ -v
"""

from typing import Callable, Dict, List, Optional

import pytest

from webaudit.config import AuditConfig, AuditorConfig, CIConfig, ReportingConfig
from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import AuditArea, Category, Severity, Status
from webaudit.registry import AuditorKind, AuditorRegistry


# ═══════════════════════════════════════════════════════
# FAKE AUDITORS
# ═══════════════════════════════════════════════════════

class ScriptedAuditor(BaseAuditor):
    """Auditor, выполняющий заранее заданный сценарий."""

    key = "scripted"
    label = "Scripted Auditor"
    own_category = Category.FUNCTIONALITY
    issues: List[dict] = []
    metrics: List[dict] = []
    error: Optional[Exception] = None
    calls: List[str] = []

    def name(self) -> str:
        return self.label

    def category(self) -> Category:
        return self.own_category

    async def audit(self) -> None:
        self.calls.append(f"{self.key}:{self.area.name}")
        for fields in self.issues:
            self.add_issue(**fields)
        for groups in self.metrics:
            self.add_metrics(groups)
        if self.error is not None:
            raise self.error


def scripted(
    key: str,
    issues: Optional[List[dict]] = None,
    metrics: Optional[List[dict]] = None,
    error: Optional[Exception] = None,
    calls: Optional[List[str]] = None,
    category: Category = Category.FUNCTIONALITY,
):
    """Создать класс ScriptedAuditor с нужным сценарием."""
    return type(
        f"Scripted_{key}",
        (ScriptedAuditor,),
        {
            "key": key,
            "label": f"{key.capitalize()} Auditor",
            "own_category": category,
            "issues": issues or [],
            "metrics": metrics or [],
            "error": error,
            "calls": calls if calls is not None else [],
        },
    )


def issue(status: Status = Status.FAIL, severity: Severity = Severity.LOW, **extra) -> dict:
    fields = {"title": f"{status.value} check", "status": status, "severity": severity}
    fields.update(extra)
    return fields


# ═══════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════

def make_config(
    tmp_path,
    auditors: Dict[str, AuditorConfig],
    areas: Optional[List[AuditArea]] = None,
    ci: Optional[CIConfig] = None,
) -> AuditConfig:
    return AuditConfig(
        base_url="http://testserver",
        areas=areas or [AuditArea(name="Dashboard", path="/")],
        auditors=auditors,
        reporting=ReportingConfig(output_dir=tmp_path / "reports"),
        ci=ci,
        project_name="Test Project",
        auditor_timeout_seconds=5.0,
    )


def make_registry(*entries) -> AuditorRegistry:
    """entries: (key, factory) или (key, factory, kind)."""
    registry = AuditorRegistry()
    for entry in entries:
        key, factory = entry[0], entry[1]
        kind = entry[2] if len(entry) > 2 else AuditorKind.FUNCTIONAL
        registry.register(key, factory, kind)
    return registry


def no_client(config) -> None:
    return None


@pytest.fixture
def areas() -> List[AuditArea]:
    return [
        AuditArea(name="Dashboard", path="/"),
        AuditArea(name="Library", path="/library"),
        AuditArea(name="Academy", path="/academy"),
    ]


@pytest.fixture
def client_factory() -> Callable:
    return no_client
