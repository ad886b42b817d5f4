"""
SEO auditor: title and meta description, robots.txt and sitemap.
"""

from typing import Optional

from bs4 import BeautifulSoup

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status


class SEOAuditor(BaseAuditor):
    """Проверка мета-тегов и служебных файлов."""

    key = "seo"

    def name(self) -> str:
        return "SEO Auditor"

    def category(self) -> Category:
        return Category.SEO

    async def audit(self) -> None:
        response = await self.fetch()
        if response is None or not response.is_success:
            self.add_issue(
                id="seo-page-unavailable",
                title="Page unavailable for SEO audit",
                description=f"Could not load {self.url}",
                severity=Severity.LOW,
                status=Status.SKIPPED,
            )
            return

        soup = self.parse_html(response.text)
        title = self.page_title(soup)
        description = self.meta_description(soup)

        if title is None:
            self.add_issue(
                id="seo-no-title",
                title="Missing title tag",
                description="Page has no <title>",
                severity=Severity.HIGH,
                suggestion="Add a unique, descriptive title (30-60 characters)",
            )
        elif not 30 <= len(title) <= 60:
            self.add_issue(
                id="seo-title-length",
                title="Title length out of range",
                description=f"Title is {len(title)} characters (recommended 30-60)",
                severity=Severity.LOW,
                status=Status.WARNING,
                evidence={"title": title},
            )
        else:
            self.add_issue(
                id="seo-title",
                title="Title tag OK",
                description=f"Title is {len(title)} characters",
                severity=Severity.INFO,
                status=Status.PASS,
            )

        if description is None:
            self.add_issue(
                id="seo-no-description",
                title="Missing meta description",
                description="Page has no meta description",
                severity=Severity.MEDIUM,
                suggestion="Add a meta description (120-160 characters)",
            )
        elif not 120 <= len(description) <= 160:
            self.add_issue(
                id="seo-description-length",
                title="Meta description length out of range",
                description=f"Meta description is {len(description)} characters (recommended 120-160)",
                severity=Severity.LOW,
                status=Status.WARNING,
            )

        base_url = self.context.config.base_url.rstrip("/")
        robots = await self.fetch(f"{base_url}/robots.txt")
        sitemap = await self.fetch(f"{base_url}/sitemap.xml")
        has_robots = robots is not None and robots.is_success
        has_sitemap = sitemap is not None and sitemap.is_success

        if not has_robots:
            self.add_issue(
                id="seo-no-robots",
                title="robots.txt not found",
                description=f"{base_url}/robots.txt is not available",
                severity=Severity.LOW,
                status=Status.WARNING,
                suggestion="Serve a robots.txt file",
            )

        self.add_metrics({
            "seo": {
                "hasTitle": title is not None,
                "titleLength": len(title) if title else 0,
                "hasMetaDescription": description is not None,
                "descriptionLength": len(description) if description else 0,
                "robots": has_robots,
                "sitemap": has_sitemap,
            }
        })

    @staticmethod
    def page_title(soup: BeautifulSoup) -> Optional[str]:
        if soup.title is None:
            return None
        return soup.title.get_text(strip=True) or None

    @staticmethod
    def meta_description(soup: BeautifulSoup) -> Optional[str]:
        tag = soup.find("meta", attrs={"name": "description"})
        if tag is None:
            return None
        return (tag.get("content") or "").strip() or None
