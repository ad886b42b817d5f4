"""
Built-in auditors.

Contains:
- ComponentAuditor - базовая структура страницы
- NavigationAuditor - доступность страниц и ссылок
- PerformanceAuditor - время загрузки
- AccessibilityAuditor - базовые проверки доступности
- SecurityAuditor - HTTPS и заголовки безопасности
- SEOAuditor - мета-теги и robots.txt
- DashboardAuditor, LibraryAuditor - проверки конкретных областей
"""

from webaudit.auditors.accessibility import AccessibilityAuditor
from webaudit.auditors.areas import DashboardAuditor, LibraryAuditor
from webaudit.auditors.component import ComponentAuditor
from webaudit.auditors.navigation import NavigationAuditor
from webaudit.auditors.performance import PerformanceAuditor
from webaudit.auditors.security import SecurityAuditor
from webaudit.auditors.seo import SEOAuditor
from webaudit.registry import AuditorKind

# Порядок регистрации = порядок выполнения внутри области
BUILTIN_AUDITORS = [
    ("component", ComponentAuditor, AuditorKind.FUNCTIONAL),
    ("navigation", NavigationAuditor, AuditorKind.NAVIGATION),
    ("performance", PerformanceAuditor, AuditorKind.PERFORMANCE),
    ("accessibility", AccessibilityAuditor, AuditorKind.ACCESSIBILITY),
    ("security", SecurityAuditor, AuditorKind.SECURITY),
    ("seo", SEOAuditor, AuditorKind.SEO),
    ("dashboard", DashboardAuditor, AuditorKind.AREA),
    ("library", LibraryAuditor, AuditorKind.AREA),
]

__all__ = [
    "AccessibilityAuditor",
    "ComponentAuditor",
    "DashboardAuditor",
    "LibraryAuditor",
    "NavigationAuditor",
    "PerformanceAuditor",
    "SEOAuditor",
    "SecurityAuditor",
    "BUILTIN_AUDITORS",
]
