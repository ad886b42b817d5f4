"""
Configuration for audit system.

Only the base URL and the headless toggle come from the environment
(AUDIT_BASE_URL, HEADLESS); everything else is explicit configuration.
"""

import copy
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from webaudit.core.models import AuditArea, MergePolicy, Severity, DEFAULT_MERGE_POLICIES
from webaudit.errors import ConfigurationError


DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_OUTPUT_DIR = "audit-reports"
DEFAULT_CI_THRESHOLD = 80


class EnvSettings(BaseSettings):
    """Настройки из окружения."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    audit_base_url: Optional[str] = None
    headless: bool = True


class ReportFormat(Enum):
    """Формат сохраняемого отчёта."""
    JSON = "json"
    HTML = "html"
    MARKDOWN = "markdown"
    ALL = "all"

    def expand(self) -> List["ReportFormat"]:
        """Конкретные форматы для записи."""
        if self is ReportFormat.ALL:
            return [ReportFormat.JSON, ReportFormat.HTML, ReportFormat.MARKDOWN]
        return [self]


@dataclass
class AuditorConfig:
    """Настройки отдельного auditor'а."""

    enabled: bool = True
    severity: Optional[Severity] = None  # Минимальная серьёзность для отчёта
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    rules: Dict[str, Any] = field(default_factory=dict)
    threshold: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditorConfig":
        severity = data.get("severity")
        try:
            parsed = Severity.parse(severity) if severity is not None else None
        except ValueError as e:
            raise ConfigurationError(str(e)) from None
        return cls(
            enabled=bool(data.get("enabled", True)),
            severity=parsed,
            include=list(data.get("include") or []),
            exclude=list(data.get("exclude") or []),
            rules=dict(data.get("rules") or {}),
            threshold=dict(data.get("threshold") or {}),
        )


@dataclass
class ReportingConfig:
    """Настройки отчётов."""

    format: ReportFormat = ReportFormat.ALL
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if not isinstance(self.format, ReportFormat):
            try:
                self.format = ReportFormat(str(self.format).lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown report format '{self.format}', expected one of: "
                    f"{', '.join(f.value for f in ReportFormat)}"
                ) from None


@dataclass
class CIConfig:
    """Условия провала для CI."""

    fail_on_critical: bool = False
    fail_on_high: bool = False
    fail_threshold: Optional[float] = None  # Процент 0..100


def _default_auditors() -> Dict[str, AuditorConfig]:
    return {
        key: AuditorConfig(enabled=True)
        for key in (
            "component", "navigation", "performance", "accessibility",
            "security", "seo", "dashboard", "library",
        )
    }


DEFAULT_AREAS: List[Dict[str, str]] = [
    {"name": "Dashboard", "path": "/", "description": "Main dashboard and overview page"},
    {"name": "Library", "path": "/library", "description": "Library and educational resources"},
    {"name": "Academy", "path": "/academy", "description": "Courses and learning materials"},
    {"name": "Cases", "path": "/cases", "description": "Cases and scenarios"},
    {"name": "Archive", "path": "/archive", "description": "Historical records and past materials"},
    {"name": "Profile", "path": "/profile", "description": "User profile and settings"},
]


@dataclass
class AuditConfig:
    """Конфигурация системы аудита."""

    # === Target ===
    base_url: str = DEFAULT_BASE_URL
    areas: List[AuditArea] = field(
        default_factory=lambda: [AuditArea.from_dict(a) for a in DEFAULT_AREAS]
    )

    # === Auditors ===
    auditors: Dict[str, AuditorConfig] = field(default_factory=_default_auditors)

    # === Reporting / CI ===
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    ci: Optional[CIConfig] = None

    # === Report metadata ===
    project_name: str = "Web Application"
    project_version: Optional[str] = None

    # === Execution Settings ===
    headless: bool = True
    auditor_timeout_seconds: Optional[float] = 60.0
    request_timeout_seconds: float = 10.0

    metric_policies: Dict[str, MergePolicy] = field(
        default_factory=lambda: dict(DEFAULT_MERGE_POLICIES)
    )

    def enabled_auditors(self) -> List[str]:
        return [key for key, cfg in self.auditors.items() if cfg.enabled]

    def auditor_config(self, key: str) -> Optional[AuditorConfig]:
        return self.auditors.get(key)

    def url_for(self, area: AuditArea) -> str:
        return f"{self.base_url.rstrip('/')}{area.path}"

    def replace(self, **changes) -> "AuditConfig":
        """Копия конфигурации с изменениями (исходная не меняется)."""
        clone = copy.deepcopy(self)
        return dataclasses.replace(clone, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditConfig":
        """
        Создать конфигурацию из словаря.

        Принимает как snake_case, так и camelCase ключи
        (baseUrl, outputDir, failOnCritical, ...).
        """
        defaults = cls()

        areas = data.get("areas")
        auditors = data.get("auditors")
        reporting = data.get("reporting") or {}
        ci = data.get("ci")

        config = cls(
            base_url=_pick(data, "base_url", "baseUrl", default=defaults.base_url),
            areas=[AuditArea.from_dict(a) for a in areas] if areas is not None else defaults.areas,
            auditors=(
                {key: AuditorConfig.from_dict(value or {}) for key, value in auditors.items()}
                if auditors is not None
                else defaults.auditors
            ),
            reporting=ReportingConfig(
                format=reporting.get("format", ReportFormat.ALL.value),
                output_dir=_pick(reporting, "output_dir", "outputDir", default=DEFAULT_OUTPUT_DIR),
            ),
            ci=(
                CIConfig(
                    fail_on_critical=bool(_pick(ci, "fail_on_critical", "failOnCritical", default=False)),
                    fail_on_high=bool(_pick(ci, "fail_on_high", "failOnHigh", default=False)),
                    fail_threshold=_pick(ci, "fail_threshold", "failThreshold", default=None),
                )
                if ci is not None
                else None
            ),
            project_name=_pick(data, "project_name", "projectName", default=defaults.project_name),
            project_version=_pick(data, "project_version", "projectVersion", default=None),
            headless=bool(data.get("headless", defaults.headless)),
            auditor_timeout_seconds=_pick(
                data, "auditor_timeout_seconds", "auditorTimeoutSeconds",
                default=defaults.auditor_timeout_seconds,
            ),
        )

        policies = _pick(data, "metric_policies", "metricPolicies", default=None)
        if policies:
            try:
                config.metric_policies.update(
                    {group: MergePolicy(value) for group, value in policies.items()}
                )
            except ValueError as e:
                raise ConfigurationError(f"Invalid metric merge policy: {e}") from None

        return config


def _pick(data: Mapping[str, Any], *keys: str, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


def load_config_file(path) -> AuditConfig:
    """Загрузить конфигурацию из JSON файла."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from None

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return AuditConfig.from_dict(data)


# === Environment presets ===

PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {
        "ci": CIConfig(fail_on_critical=False, fail_on_high=False, fail_threshold=0),
    },
    "production": {
        "ci": CIConfig(fail_on_critical=True, fail_on_high=True, fail_threshold=80),
    },
    "ci": {
        "ci": CIConfig(fail_on_critical=True, fail_on_high=True, fail_threshold=75),
        "reporting": ReportingConfig(format=ReportFormat.JSON, output_dir=Path("ci-reports")),
    },
}


def get_audit_config(
    environment: Optional[str] = None,
    settings: Optional[EnvSettings] = None,
) -> AuditConfig:
    """
    Получить конфигурацию для окружения.

    Args:
        environment: development / production / ci (None = только значения по умолчанию)
        settings: Настройки окружения (по умолчанию читаются из env)
    """
    if settings is None:
        settings = EnvSettings()

    config = AuditConfig(
        ci=CIConfig(fail_on_critical=True, fail_on_high=False, fail_threshold=70),
        headless=settings.headless,
    )
    if settings.audit_base_url:
        config.base_url = settings.audit_base_url

    if environment is not None:
        if environment not in PRESETS:
            raise ConfigurationError(
                f"Unknown environment '{environment}'. Available: {', '.join(PRESETS)}"
            )
        config = config.replace(**copy.deepcopy(PRESETS[environment]))

    return config


def validate_config(config: AuditConfig) -> None:
    """
    Проверить конфигурацию до запуска auditors.

    Raises:
        ConfigurationError: если конфигурация невалидна
    """
    if not config.base_url:
        raise ConfigurationError("baseUrl is required in audit configuration")

    if not config.areas:
        raise ConfigurationError("At least one area must be defined for audit")

    names = [area.name.lower() for area in config.areas]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate area names: {', '.join(duplicates)}")

    if not config.enabled_auditors():
        raise ConfigurationError("At least one auditor must be enabled")

    for key, auditor_cfg in config.auditors.items():
        if auditor_cfg.severity is not None and not isinstance(auditor_cfg.severity, Severity):
            raise ConfigurationError(f"Auditor '{key}' has invalid severity: {auditor_cfg.severity!r}")

    if config.ci is not None and config.ci.fail_threshold is not None:
        threshold = config.ci.fail_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ConfigurationError(f"CI failThreshold must be a number, got {threshold!r}")
        if threshold < 0 or threshold > 100:
            raise ConfigurationError("CI failThreshold must be between 0 and 100")

    if config.auditor_timeout_seconds is not None and config.auditor_timeout_seconds <= 0:
        raise ConfigurationError("auditor_timeout_seconds must be positive")
