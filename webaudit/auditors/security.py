"""
Security auditor: HTTPS and response security headers.
"""

from webaudit.core.auditor import BaseAuditor
from webaudit.core.models import Category, Severity, Status

REQUIRED_HEADERS = [
    "strict-transport-security",
    "x-content-type-options",
    "x-frame-options",
]


class SecurityAuditor(BaseAuditor):
    """Базовые проверки безопасности."""

    key = "security"

    def name(self) -> str:
        return "Security Auditor"

    def category(self) -> Category:
        return Category.SECURITY

    async def audit(self) -> None:
        url = self.url
        if url.startswith("http://") and not self._is_local(url):
            self.add_issue(
                id="security-no-https",
                title="No HTTPS",
                description="Site is not using HTTPS protocol",
                severity=Severity.CRITICAL,
                suggestion="Enable HTTPS for all pages",
            )

        response = await self.fetch(method="HEAD")
        if response is None:
            return

        missing = []
        for header in self.rule("requiredHeaders", REQUIRED_HEADERS):
            if header not in response.headers:
                missing.append(header)
                self.add_issue(
                    id=f"security-missing-{header}",
                    title=f"Missing Security Header: {header}",
                    description=f"The security header {header} is not set",
                    severity=Severity.HIGH,
                    suggestion=f"Add {header} header to responses",
                )
            else:
                self.add_issue(
                    id=f"security-header-{header}",
                    title=f"Security Header Present: {header}",
                    description=f"{header}: {response.headers[header]}",
                    severity=Severity.INFO,
                    status=Status.PASS,
                )

        self.add_metrics({"security": {"missingHeaders": len(missing)}})

    @staticmethod
    def _is_local(url: str) -> bool:
        return "://localhost" in url or "://127.0.0.1" in url
