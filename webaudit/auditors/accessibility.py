"""
Accessibility auditor: document language, image alternatives,
form labels and page title.
"""

from typing import List

from bs4 import BeautifulSoup

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status

# Поля, которым подпись не нужна
UNLABELLED_INPUT_TYPES = ("hidden", "submit", "button", "image", "reset")


def unlabelled_fields(soup: BeautifulSoup) -> List[str]:
    """Имена полей формы без <label for>, обёртки <label> или aria-атрибутов."""
    labelled = {label.get("for") for label in soup.find_all("label") if label.get("for")}
    fields = []
    for tag in soup.find_all(["input", "select", "textarea"]):
        if (tag.get("type") or "text").lower() in UNLABELLED_INPUT_TYPES:
            continue
        if tag.get("aria-label") or tag.get("aria-labelledby"):
            continue
        if tag.get("id") in labelled or tag.find_parent("label") is not None:
            continue
        fields.append(tag.get("name") or tag.get("id") or tag.name)
    return fields


class AccessibilityAuditor(BaseAuditor):
    """Базовые проверки доступности (WCAG A)."""

    key = "accessibility"

    def name(self) -> str:
        return "Accessibility Auditor"

    def category(self) -> Category:
        return Category.ACCESSIBILITY

    async def audit(self) -> None:
        response = await self.fetch()
        if response is None or not response.is_success:
            self.add_issue(
                id="a11y-page-unavailable",
                title="Page unavailable for accessibility audit",
                description=f"Could not load {self.url}",
                severity=Severity.LOW,
                status=Status.SKIPPED,
            )
            return

        soup = self.parse_html(response.text)
        violations = 0
        warnings = 0

        html_tag = soup.find("html")
        if html_tag is None or not html_tag.get("lang"):
            violations += 1
            self.add_issue(
                id="a11y-no-lang",
                title="Missing document language",
                description="The <html> element has no lang attribute",
                severity=Severity.MEDIUM,
                component="html",
                suggestion='Add lang attribute, e.g. <html lang="en">',
                documentation="https://www.w3.org/WAI/WCAG21/Understanding/language-of-page",
            )

        images = soup.find_all("img")
        missing_alt = [img for img in images if img.get("alt") is None]
        if missing_alt:
            violations += len(missing_alt)
            self.add_issue(
                id="a11y-img-alt",
                title="Images without alt text",
                description=f"{len(missing_alt)} of {len(images)} images have no alt attribute",
                severity=Severity.HIGH,
                component="img",
                evidence={"images": [img.get("src") for img in missing_alt][:10]},
                suggestion="Provide alt text for informative images and alt=\"\" for decorative ones",
                documentation="https://www.w3.org/WAI/WCAG21/Understanding/non-text-content",
            )
        elif images:
            self.add_issue(
                id="a11y-img-alt",
                title="All images have alt text",
                description=f"{len(images)} images checked",
                severity=Severity.INFO,
                status=Status.PASS,
                component="img",
            )

        unlabelled = unlabelled_fields(soup)
        if unlabelled:
            warnings += len(unlabelled)
            self.add_issue(
                id="a11y-form-labels",
                title="Form fields without labels",
                description=f"{len(unlabelled)} form field(s) have no associated label",
                severity=Severity.MEDIUM,
                status=Status.WARNING,
                component="form",
                evidence={"fields": unlabelled},
                suggestion="Associate each field with a <label for> or aria-label",
            )

        if soup.title is None or not soup.title.get_text(strip=True):
            violations += 1
            self.add_issue(
                id="a11y-no-title",
                title="Missing page title",
                description="The page has no non-empty <title>",
                severity=Severity.MEDIUM,
                component="title",
                suggestion="Add a descriptive <title>",
            )

        self.add_metrics({
            "accessibility": {
                "violations": violations,
                "warnings": warnings,
                "wcagLevel": "A",
            }
        })
