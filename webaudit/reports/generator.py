"""
Report generator for audit results.

Writes:
- JSON reports for machine processing
- HTML reports for browsing
- Markdown reports for documentation
and prints a console summary.
"""

from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from webaudit.config import ReportFormat
from webaudit.core.models import AuditReport, SEVERITY_EMOJI
from webaudit.errors import ReportWriteError
from webaudit.reports.renderers import (
    SEVERITY_DISPLAY_ORDER,
    render_html,
    render_json,
    render_markdown,
)


EXTENSIONS: Dict[ReportFormat, str] = {
    ReportFormat.JSON: "json",
    ReportFormat.HTML: "html",
    ReportFormat.MARKDOWN: "md",
}

RENDERERS = {
    ReportFormat.JSON: render_json,
    ReportFormat.HTML: render_html,
    ReportFormat.MARKDOWN: render_markdown,
}


def report_basename(report: AuditReport) -> str:
    """Имя файла без расширения: ISO timestamp (UTC как Z) с ':' и '.' заменёнными на '-'."""
    stamp = report.timestamp.isoformat().replace("+00:00", "Z")
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"audit-report-{stamp}"


class ReportGenerator:
    """Генератор отчётов аудита."""

    def __init__(self, output_dir: Optional[Path] = None, console: Optional[Console] = None):
        """
        Args:
            output_dir: Директория для сохранения отчётов (по умолчанию audit-reports/)
            console: Rich console для сводки
        """
        self.output_dir = Path(output_dir or "audit-reports")
        self.console = console or Console()

    def write(self, report: AuditReport, fmt=ReportFormat.ALL) -> List[str]:
        """
        Сохранить отчёт в запрошенных форматах.

        Returns:
            Пути к созданным файлам

        Raises:
            ReportWriteError: если директорию или файл не удалось записать
        """
        if not isinstance(fmt, ReportFormat):
            fmt = ReportFormat(fmt)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReportWriteError(self.output_dir, e, report) from e

        basename = report_basename(report)
        paths = []
        for concrete in fmt.expand():
            filepath = self.output_dir / f"{basename}.{EXTENSIONS[concrete]}"
            content = RENDERERS[concrete](report)
            try:
                with open(filepath, "w", encoding="utf-8") as f:
                    f.write(content)
            except OSError as e:
                raise ReportWriteError(filepath, e, report) from e
            paths.append(str(filepath))

        return paths

    def print_summary(self, report: AuditReport) -> None:
        """Вывести краткую сводку в консоль."""
        s = report.summary

        self.console.rule("AUDIT SUMMARY")
        self.console.print(f"Overall Score: [bold]{s.overall_score}%[/]")
        self.console.print(f"Total Issues: {s.total_issues}")
        self.console.print(f"Duration: {report.duration_ms / 1000:.2f}s")

        severity_table = Table(title="By Severity")
        severity_table.add_column("Severity")
        severity_table.add_column("Count", justify="right")
        for severity in SEVERITY_DISPLAY_ORDER:
            severity_table.add_row(
                f"{SEVERITY_EMOJI[severity]} {severity.value.capitalize()}",
                str(s.count(severity)),
            )
        self.console.print(severity_table)

        area_table = Table(title="Areas")
        area_table.add_column("Area")
        area_table.add_column("Path")
        area_table.add_column("Issues", justify="right")
        area_table.add_column("Score", justify="right")
        for result in report.results:
            area_table.add_row(
                result.area.name,
                result.area.path,
                str(result.summary.total),
                f"{result.score}%",
            )
        self.console.print(area_table)
