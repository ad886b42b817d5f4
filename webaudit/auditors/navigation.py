"""
Navigation auditor: main page status and reachability of sibling areas.
"""

import time
from typing import List

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status


class NavigationAuditor(BaseAuditor):
    """Проверка навигации между областями."""

    key = "navigation"

    def name(self) -> str:
        return "Navigation Auditor"

    def category(self) -> Category:
        return Category.FUNCTIONALITY

    def navigation_paths(self) -> List[str]:
        """Пути остальных областей из конфигурации."""
        return [a.path for a in self.context.config.areas if a.path != self.area.path]

    async def audit(self) -> None:
        main = await self.fetch()
        if main is None or not main.is_success:
            status = main.status_code if main is not None else 0
            self.add_issue(
                id="nav-main-page-error",
                title=f"Main page returns error: {status or 'no response'}",
                description=f"The main page {self.url} returned status {status}",
                severity=Severity.CRITICAL if status in (0, 404) else Severity.HIGH,
                suggestion="Ensure the page is accessible and returns a 200 status",
            )

        slow_ms = self.threshold("slowMs", 3000)
        base_url = self.context.config.base_url.rstrip("/")
        paths = self.navigation_paths()
        broken: List[str] = []
        redirects: List[str] = []
        slow: List[str] = []

        for path in paths:
            start = time.perf_counter()
            response = await self.fetch(f"{base_url}{path}")
            elapsed = (time.perf_counter() - start) * 1000

            if response is None or response.status_code >= 400:
                broken.append(path)
            elif response.history:
                redirects.append(path)
            if elapsed > slow_ms:
                slow.append(path)

        if broken:
            self.add_issue(
                id="nav-broken-links",
                title="Broken navigation links found",
                description=f"Found {len(broken)} broken links: {', '.join(broken)}",
                severity=Severity.HIGH,
                suggestion="Fix or remove broken links",
                evidence={"brokenLinks": broken},
            )

        if redirects:
            self.add_issue(
                id="nav-redirects",
                title="Navigation links with redirects",
                description=f"Found {len(redirects)} links with redirects: {', '.join(redirects)}",
                severity=Severity.MEDIUM,
                status=Status.WARNING,
                suggestion="Update links to point directly to final destination",
                evidence={"redirects": redirects},
            )

        if slow:
            self.add_issue(
                id="nav-slow-links",
                title="Slow navigation response times",
                description=f"Found {len(slow)} links slower than {slow_ms:.0f}ms: {', '.join(slow)}",
                severity=Severity.MEDIUM,
                category=Category.PERFORMANCE,
                status=Status.WARNING,
                suggestion="Optimize server response times for these pages",
                evidence={"slowLinks": slow},
            )

        if paths and not broken:
            self.add_issue(
                id="nav-links-ok",
                title="Navigation links reachable",
                description=f"All {len(paths)} sibling areas responded",
                severity=Severity.INFO,
                status=Status.PASS,
            )

        self.add_metrics({
            "navigation": {
                "totalLinks": len(paths),
                "brokenLinks": len(broken),
                "redirects": len(redirects),
                "slowLinks": len(slow),
            }
        })
