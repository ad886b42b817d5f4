"""
Component auditor: basic page structure (navigation, main area, H1).
"""

from bs4 import BeautifulSoup

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status


class ComponentAuditor(BaseAuditor):
    """Проверка базовых UI компонентов страницы."""

    key = "component"

    def name(self) -> str:
        return "Component Auditor"

    def category(self) -> Category:
        return Category.UI_UX

    async def audit(self) -> None:
        response = await self.fetch()

        if response is None or not response.is_success:
            status = response.status_code if response is not None else "no response"
            self.add_issue(
                id="component-page-error",
                title="Page Load Error",
                description=f"Failed to load page at {self.url} ({status})",
                severity=Severity.HIGH,
                suggestion="Check if page is accessible",
            )
            return

        self.check_basic_components(self.parse_html(response.text))

    def check_basic_components(self, soup: BeautifulSoup) -> None:
        page = self.area.name

        if soup.find("nav") is None and soup.find(attrs={"role": "navigation"}) is None:
            self.add_issue(
                id="component-no-navigation",
                title="Missing Navigation",
                description=f"No navigation element found on {page}",
                severity=Severity.MEDIUM,
                status=Status.WARNING,
                component="nav",
                suggestion="Add navigation element to page",
            )

        if soup.find("main") is None and soup.find(attrs={"role": "main"}) is None:
            self.add_issue(
                id="component-no-main",
                title="Missing Main Content Area",
                description=f"No main content area found on {page}",
                severity=Severity.LOW,
                status=Status.WARNING,
                component="main",
                suggestion="Add main element for better structure",
            )

        h1_count = len(soup.find_all("h1"))
        if h1_count == 0:
            self.add_issue(
                id="component-no-h1",
                title="Missing H1 Heading",
                description=f"No H1 heading found on {page}",
                severity=Severity.MEDIUM,
                category=Category.ACCESSIBILITY,
                status=Status.WARNING,
                component="h1",
                suggestion="Add H1 heading for better SEO and accessibility",
            )
        else:
            self.add_issue(
                id="component-h1",
                title="H1 Heading Present",
                description=f"{h1_count} H1 heading(s) found on {page}",
                severity=Severity.INFO,
                status=Status.PASS,
                component="h1",
            )
