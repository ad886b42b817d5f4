"""
Area-specific auditors.

Each one only acts on its own area and checks that the page renders the
components that area is expected to have. A component counts as present
when an element has the marker as its id or data-testid, or as one of
its classes.
"""

from typing import Dict, List, Tuple

from bs4 import BeautifulSoup

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status

# marker -> (metric key, human name, severity when missing)
ComponentSpec = Dict[str, Tuple[str, str, Severity]]


def has_component(soup: BeautifulSoup, marker: str) -> bool:
    for attr in ("id", "data-testid"):
        if soup.find(attrs={attr: marker}) is not None:
            return True
    return soup.find(class_=marker) is not None


class AreaContentAuditor(BaseAuditor):
    """Проверка наличия ожидаемых компонентов области."""

    area_name = ""
    metric_group = ""
    components: ComponentSpec = {}

    def category(self) -> Category:
        return Category.FUNCTIONALITY

    def applies(self) -> bool:
        return self.area.name.lower() == self.area_name.lower()

    async def audit(self) -> None:
        if not self.applies():
            return

        response = await self.fetch()
        if response is None or not response.is_success:
            status = response.status_code if response is not None else "no response"
            self.add_issue(
                id=f"{self.key}-not-accessible",
                title=f"{self.area_name} not accessible",
                description=f"{self.area_name} returned status {status}",
                severity=Severity.CRITICAL,
                suggestion=f"Ensure {self.area_name} is accessible to authenticated users",
            )
            return

        soup = self.parse_html(response.text)
        found: Dict[str, bool] = {}
        missing: List[str] = []

        for marker, (metric_key, label, severity) in self.components.items():
            present = has_component(soup, marker)
            found[metric_key] = present
            if present:
                self.add_issue(
                    id=f"{self.key}-{marker}",
                    title=f"{label} present",
                    description=f"{self.area_name} renders {label.lower()}",
                    severity=Severity.INFO,
                    status=Status.PASS,
                    component=marker,
                )
            else:
                missing.append(label)
                self.add_issue(
                    id=f"{self.key}-{marker}",
                    title=f"Missing {label.lower()}",
                    description=f"No {label.lower()} found on {self.area_name}",
                    severity=severity,
                    status=Status.FAIL if severity >= Severity.HIGH else Status.WARNING,
                    component=marker,
                    suggestion=f"Add {label.lower()} to {self.area_name}",
                )

        self.add_metrics({self.metric_group: found})
        if missing:
            self.logger.info(f"{self.area_name}: missing {', '.join(missing)}")


class DashboardAuditor(AreaContentAuditor):
    """Проверка функциональности dashboard."""

    key = "dashboard"
    area_name = "Dashboard"
    metric_group = "dashboard"
    components = {
        "statistics": ("hasStatistics", "Statistics widgets", Severity.HIGH),
        "quick-actions": ("hasQuickActions", "Quick actions", Severity.MEDIUM),
        "notifications": ("hasNotifications", "Notifications panel", Severity.LOW),
        "activity": ("hasActivityFeed", "Activity feed", Severity.LOW),
        "user-profile": ("hasUserProfile", "User profile summary", Severity.MEDIUM),
    }

    def name(self) -> str:
        return "Dashboard Auditor"


class LibraryAuditor(AreaContentAuditor):
    """Проверка функциональности библиотеки."""

    key = "library"
    area_name = "Library"
    metric_group = "library"
    components = {
        "search": ("hasSearch", "Search", Severity.HIGH),
        "filters": ("hasFilters", "Filters", Severity.MEDIUM),
        "categories": ("hasCategories", "Categories", Severity.MEDIUM),
        "pagination": ("hasPagination", "Pagination", Severity.LOW),
        "sort": ("hasSorting", "Sorting", Severity.LOW),
        "favorites": ("hasFavorites", "Favorites", Severity.INFO),
    }

    def name(self) -> str:
        return "Library Auditor"
