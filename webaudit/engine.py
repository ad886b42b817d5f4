"""
Audit engine: drives every enabled auditor over every configured area.

Features:
- Sequential execution (areas in configured order, auditors in
  registration order) so reports diff cleanly between runs
- Error isolation per auditor and per area
- Per-area and overall scoring
- Report persistence and CI pass/fail policy
"""

import logging
import platform
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

import httpx

from webaudit import __version__
from webaudit.config import AuditConfig, AuditorConfig, CIConfig, validate_config
from webaudit.core.auditor import AuditorContext, IssueRecorder, execute_auditor
from webaudit.core.models import (
    AreaResult,
    AreaSummary,
    AuditArea,
    AuditReport,
    Issue,
    Metrics,
    ReportSummary,
    area_score,
)
from webaudit.errors import AuditError, AuditRunError
from webaudit.registry import AuditorFactory, AuditorKind, AuditorRegistry
from webaudit.reports.generator import ReportGenerator

logger = logging.getLogger(__name__)


ClientFactory = Callable[[AuditConfig], Optional[httpx.AsyncClient]]


def default_client_factory(config: AuditConfig) -> httpx.AsyncClient:
    """HTTP клиент, общий для всех auditors одного запуска."""
    return httpx.AsyncClient(
        timeout=config.request_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": f"webaudit/{__version__}"},
    )


@dataclass
class CIVerdict:
    """Результат проверки CI условий."""

    failed: bool = False
    reasons: List[str] = field(default_factory=list)


def evaluate_ci(report: AuditReport, ci: Optional[CIConfig]) -> CIVerdict:
    """
    Проверить CI условия.

    Все условия проверяются, даже если первое уже сработало,
    чтобы в логе были видны все причины.
    """
    verdict = CIVerdict()
    if ci is None:
        return verdict

    summary = report.summary

    if ci.fail_on_critical and summary.critical_issues > 0:
        verdict.reasons.append(f"{summary.critical_issues} critical issue(s) found")

    if ci.fail_on_high and summary.high_issues > 0:
        verdict.reasons.append(f"{summary.high_issues} high severity issue(s) found")

    if ci.fail_threshold is not None and summary.overall_score < ci.fail_threshold:
        verdict.reasons.append(
            f"score {summary.overall_score}% below threshold {ci.fail_threshold}%"
        )

    for reason in verdict.reasons:
        logger.error(f"❌ CI FAILURE: {reason}")

    verdict.failed = bool(verdict.reasons)
    return verdict


def environment_snapshot(config: AuditConfig) -> dict:
    return {
        "python": platform.python_version(),
        "implementation": platform.python_implementation(),
        "os": f"{platform.system()} {platform.release()}",
        "webaudit": __version__,
        "headless": str(config.headless).lower(),
    }


class AuditEngine:
    """Оркестратор аудита."""

    def __init__(
        self,
        config: AuditConfig,
        registry: Optional[AuditorRegistry] = None,
        client_factory: Optional[ClientFactory] = None,
        writer: Optional[ReportGenerator] = None,
        persist: bool = True,
    ):
        """
        Args:
            config: Конфигурация аудита (не изменяется)
            registry: Реестр auditors (по умолчанию пустой)
            client_factory: Фабрика HTTP клиента (None вместо клиента = без сети)
            writer: Генератор отчётов (по умолчанию из config.reporting)
            persist: Сохранять ли отчёт на диск
        """
        self.config = config
        self.registry = registry if registry is not None else AuditorRegistry()
        self.client_factory = client_factory or default_client_factory
        self.writer = writer
        self.persist = persist

        self.partial_results: List[AreaResult] = []
        self.report: Optional[AuditReport] = None
        self.saved_paths: List[str] = []
        self.verdict = CIVerdict()

    def register_auditor(
        self,
        key: str,
        factory: AuditorFactory,
        kind: AuditorKind = AuditorKind.FUNCTIONAL,
    ) -> None:
        self.registry.register(key, factory, kind)

    async def audit_area(
        self,
        area: AuditArea,
        client: Optional[httpx.AsyncClient] = None,
    ) -> AreaResult:
        """Запустить все включённые auditors для одной области."""
        start_time = time.perf_counter()
        issues: List[Issue] = []
        metrics = Metrics()

        logger.info(f"Auditing area {area.name} ({self.config.url_for(area)})")

        context = AuditorContext(
            config=self.config,
            area=area,
            client=client,
            headless=self.config.headless,
        )

        entries = list(self.registry)
        for i, entry in enumerate(entries, 1):
            auditor_config: Optional[AuditorConfig] = self.config.auditor_config(entry.key)
            if auditor_config is None or not auditor_config.enabled:
                logger.debug(f"  [{i}/{len(entries)}] Skipping {entry.key} (disabled)")
                continue

            try:
                auditor = entry.create(context, auditor_config)
                recorder = getattr(auditor, "recorder", None)
                if not isinstance(recorder, IssueRecorder):
                    recorder = IssueRecorder(entry.key, auditor.category(), auditor_config)
            except Exception as e:
                logger.error(f"  ✗ Could not create {entry.key} auditor: {e}", exc_info=True)
                continue

            try:
                outcome = await execute_auditor(
                    auditor, recorder, self.config.auditor_timeout_seconds
                )
            except Exception as e:
                logger.error(f"  ✗ {entry.key} auditor crashed: {e}", exc_info=True)
                continue

            issues.extend(outcome.issues)
            metrics.update(outcome.metrics.to_dict())
            context.results.extend(outcome.issues)
            context.metrics.update(outcome.metrics.to_dict())

            status = "❌ ERROR" if outcome.failed else "✅ DONE"
            logger.info(
                f"  [{i}/{len(entries)}] {status} {outcome.name} - "
                f"{len(outcome.issues)} issues ({outcome.duration_ms:.0f}ms)"
            )

        summary = AreaSummary.from_issues(issues)
        now = datetime.now(timezone.utc)
        return AreaResult(
            id=f"{area.name}-{now.strftime('%Y%m%d%H%M%S%f')}",
            timestamp=now,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            area=area,
            issues=issues,
            metrics=metrics,
            summary=summary,
            score=area_score(summary),
        )

    def build_report(self, results: List[AreaResult], duration_ms: float) -> AuditReport:
        """Собрать итоговый отчёт из результатов областей."""
        global_metrics = Metrics()
        for result in results:
            global_metrics.merge(result.metrics, self.config.metric_policies)

        timestamp = datetime.now(timezone.utc)
        return AuditReport(
            id=f"audit-{timestamp.strftime('%Y%m%dT%H%M%S%f')}",
            project_name=self.config.project_name,
            project_version=self.config.project_version,
            timestamp=timestamp,
            duration_ms=duration_ms,
            environment=environment_snapshot(self.config),
            results=list(results),
            global_metrics=global_metrics,
            summary=ReportSummary.from_results(results),
        )

    async def run(self) -> AuditReport:
        """
        Запустить полный аудит.

        Raises:
            ConfigurationError: конфигурация невалидна (до запуска auditors)
            AuditRunError: сбой запуска; partial_results содержит готовые области
            ReportWriteError: отчёт не удалось сохранить
        """
        validate_config(self.config)
        self.registry.validate_against(self.config)

        enabled = [k for k in self.registry.keys() if k in self.config.enabled_auditors()]
        logger.info(
            f"Starting audit: {len(self.config.areas)} areas, "
            f"{len(enabled)} enabled auditors ({', '.join(enabled)})"
        )

        start_time = time.perf_counter()
        results: List[AreaResult] = []
        self.partial_results = results

        client = self.client_factory(self.config)
        try:
            for area in self.config.areas:
                results.append(await self.audit_area(area, client))
        except AuditError:
            raise
        except Exception as e:
            logger.error(f"Audit aborted: {e}", exc_info=True)
            raise AuditRunError(f"Audit aborted: {e}", partial_results=list(results)) from e
        finally:
            if client is not None:
                await client.aclose()

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.report = self.build_report(results, duration_ms)

        if self.persist:
            writer = self.writer or ReportGenerator(self.config.reporting.output_dir)
            self.saved_paths = writer.write(self.report, self.config.reporting.format)

        self._log_summary(self.report)
        self.verdict = evaluate_ci(self.report, self.config.ci)
        return self.report

    def _log_summary(self, report: AuditReport) -> None:
        s = report.summary
        logger.info(
            f"Audit complete: score {s.overall_score}%, {s.total_issues} issues "
            f"(critical={s.critical_issues}, high={s.high_issues}, medium={s.medium_issues}, "
            f"low={s.low_issues}, info={s.info_issues})"
        )
        for path in self.saved_paths:
            logger.info(f"  Report: {path}")
