"""
Performance auditor: page load time against configurable thresholds.
"""

import time

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status


class PerformanceAuditor(BaseAuditor):
    """Проверка времени загрузки страницы."""

    key = "performance"

    def name(self) -> str:
        return "Performance Auditor"

    def category(self) -> Category:
        return Category.PERFORMANCE

    async def audit(self) -> None:
        slow_ms = self.threshold("slowMs", 3000)
        moderate_ms = self.threshold("moderateMs", 1500)

        start = time.perf_counter()
        response = await self.fetch()
        load_time = round((time.perf_counter() - start) * 1000)

        if response is None:
            self.add_issue(
                id="perf-no-response",
                title="Page Did Not Respond",
                description=f"No response from {self.url}",
                severity=Severity.HIGH,
                status=Status.SKIPPED,
            )
            return

        if load_time > slow_ms:
            self.add_issue(
                id="perf-slow-load",
                title="Slow Page Load",
                description=f"Page took {load_time}ms to load (should be < {slow_ms:.0f}ms)",
                severity=Severity.HIGH,
                suggestion="Optimize page load time",
            )
        elif load_time > moderate_ms:
            self.add_issue(
                id="perf-moderate-load",
                title="Moderate Page Load Time",
                description=f"Page took {load_time}ms to load",
                severity=Severity.MEDIUM,
                status=Status.WARNING,
                suggestion="Consider performance optimizations",
            )
        else:
            self.add_issue(
                id="perf-load-time",
                title="Page Load Time OK",
                description=f"Page loaded in {load_time}ms",
                severity=Severity.INFO,
                status=Status.PASS,
            )

        self.add_metrics({
            "performance": {
                "loadTime": load_time,
                "bundleSize": len(response.content),
            }
        })
