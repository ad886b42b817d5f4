"""
Audit runner: configures engines for the three run modes.

- run()           - all areas, all enabled auditors
- run_for_area()  - one area (case-insensitive), all enabled auditors
- run_quick()     - all areas, reduced set of fast auditors

Area and quick runs use a temporary engine with a narrowed copy of the
configuration, so repeated calls do not affect each other.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from rich.console import Console

from webaudit.config import AuditConfig, AuditorConfig, get_audit_config
from webaudit.core.models import AuditReport
from webaudit.engine import AuditEngine, CIVerdict, ClientFactory
from webaudit.errors import AreaNotFoundError
from webaudit.registry import AuditorKind, AuditorRegistry, default_registry
from webaudit.reports.generator import ReportGenerator

logger = logging.getLogger(__name__)


# Быстрый набор: функциональные проверки, доступность и безопасность.
# performance и navigation сюда не входят.
QUICK_KINDS = (AuditorKind.FUNCTIONAL, AuditorKind.ACCESSIBILITY, AuditorKind.SECURITY)

CATEGORY_RECOMMENDATIONS: Dict[str, List[str]] = {
    "security": [
        "Implement security headers",
        "Enable HTTPS everywhere",
        "Add CSRF protection",
    ],
    "accessibility": [
        "Fix color contrast issues",
        "Add proper ARIA labels",
        "Ensure keyboard navigation",
    ],
    "performance": [
        "Optimize images and assets",
        "Reduce JavaScript bundle size",
        "Implement lazy loading",
    ],
    "functionality": [
        "Fix broken links",
        "Improve error handling",
        "Add loading states",
    ],
    "ui_ux": [
        "Fix layout issues",
        "Improve mobile responsiveness",
        "Add user feedback",
    ],
    "seo": [
        "Write unique titles and meta descriptions",
        "Serve robots.txt and a sitemap",
    ],
}


def health_status(report: AuditReport) -> str:
    """Общее состояние проекта по оценке и критическим проблемам."""
    score = report.summary.overall_score
    critical = report.summary.critical_issues

    if score >= 90 and critical == 0:
        return "EXCELLENT"
    if score >= 75 and critical == 0:
        return "GOOD"
    if score >= 60 or critical <= 2:
        return "NEEDS IMPROVEMENT"
    return "CRITICAL"


def generate_recommendations(report: AuditReport, limit: int = 3) -> List[Dict[str, object]]:
    """Рекомендации для категорий с наибольшим числом проблем."""
    counts = Counter(report.issues_by_category())
    recommendations = []
    for category, count in counts.most_common(limit):
        recommendations.append({
            "category": category,
            "issues": count,
            "actions": CATEGORY_RECOMMENDATIONS.get(category, [])[:2],
        })
    return recommendations


class AuditRunner:
    """Запуск аудита в одном из режимов."""

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        registry: Optional[AuditorRegistry] = None,
        client_factory: Optional[ClientFactory] = None,
        writer: Optional[ReportGenerator] = None,
        persist: bool = True,
    ):
        self.config = config if config is not None else get_audit_config()
        self.registry = registry if registry is not None else default_registry()
        self.client_factory = client_factory
        self.writer = writer
        self.persist = persist

        self.engine = self._build_engine(self.config, self.registry)
        self.last_engine: Optional[AuditEngine] = None

    def _build_engine(self, config: AuditConfig, registry: AuditorRegistry) -> AuditEngine:
        return AuditEngine(
            config,
            registry=registry,
            client_factory=self.client_factory,
            writer=self.writer,
            persist=self.persist,
        )

    @property
    def last_verdict(self) -> CIVerdict:
        if self.last_engine is None:
            return CIVerdict()
        return self.last_engine.verdict

    async def run(self) -> AuditReport:
        """Полный аудит."""
        self.last_engine = self.engine
        return await self.engine.run()

    def find_area(self, area_name: str):
        for area in self.config.areas:
            if area.name.lower() == area_name.lower():
                return area
        raise AreaNotFoundError(area_name, [a.name for a in self.config.areas])

    async def run_for_area(self, area_name: str) -> AuditReport:
        """
        Аудит одной области.

        Raises:
            AreaNotFoundError: область не найдена (до запуска auditors и записи файлов)
        """
        area = self.find_area(area_name)
        config = self.config.replace(areas=[area])

        engine = self._build_engine(config, self.registry)
        self.last_engine = engine
        return await engine.run()

    async def run_quick(self) -> AuditReport:
        """Быстрый аудит только auditors из QUICK_KINDS."""
        keys = self.registry.of_kind(*QUICK_KINDS)
        auditors = {}
        for key in keys:
            base = self.config.auditors.get(key) or AuditorConfig()
            auditors[key] = AuditorConfig(
                enabled=True,
                severity=base.severity,
                include=list(base.include),
                exclude=list(base.exclude),
                rules=dict(base.rules),
                threshold=dict(base.threshold),
            )

        config = self.config.replace(auditors=auditors)
        registry = self.registry.subset(keys)

        logger.info(f"⚡ Running quick audit ({', '.join(registry.keys())})")
        engine = self._build_engine(config, registry)
        self.last_engine = engine
        return await engine.run()

    def get_config(self) -> AuditConfig:
        return self.config

    def update_config(self, **changes) -> None:
        """Заменить конфигурацию и пересоздать основной engine."""
        self.config = self.config.replace(**changes)
        self.engine = self._build_engine(self.config, self.registry)

    def print_final_summary(self, report: AuditReport, console=None) -> None:
        """Итоговое состояние и рекомендации."""
        console = console or Console()
        status = health_status(report)
        emoji = {
            "EXCELLENT": "🌟",
            "GOOD": "✅",
            "NEEDS IMPROVEMENT": "⚠️",
            "CRITICAL": "🔴",
        }[status]

        console.print(f"\n{emoji} Overall health: [bold]{status}[/]")

        s = report.summary
        if s.critical_issues:
            console.print(f"  🔴 Fix {s.critical_issues} critical issue(s) immediately")
        if s.high_issues:
            console.print(f"  🟠 Address {s.high_issues} high severity issue(s) within 24-48 hours")

        for rec in generate_recommendations(report):
            console.print(f"  • {rec['category']}: {rec['issues']} issues")
            for action in rec["actions"]:
                console.print(f"      - {action}")
