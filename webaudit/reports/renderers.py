"""
Report renderers.

Pure functions over an AuditReport: they never touch auditors and
never modify the report. Output is deterministic for a given report.
"""

import json
from html import escape
from typing import List

from webaudit.core.models import SEVERITY_EMOJI, AreaResult, AuditReport, Issue, Severity


SEVERITY_COLORS = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#ca8a04",
    "low": "#65a30d",
    "info": "#0891b2",
}

# От самой серьёзной к наименее серьёзной
SEVERITY_DISPLAY_ORDER = [
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
]


def render_json(report: AuditReport) -> str:
    """Полная сериализация отчёта."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False, default=str)


def _timestamp(report: AuditReport) -> str:
    return report.timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip()


def _duration(report: AuditReport) -> str:
    return f"{report.duration_ms / 1000:.2f}s"


# === HTML ===

_HTML_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; background: #f5f5f5; }
    .container { max-width: 1200px; margin: 0 auto; padding: 20px; }
    header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 40px 0; margin-bottom: 30px; }
    h1 { font-size: 2.5em; margin-bottom: 10px; }
    .meta { opacity: 0.9; }
    .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(180px, 1fr)); gap: 20px; margin-bottom: 30px; }
    .summary-card { background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .summary-card h3 { color: #666; font-size: 0.9em; margin-bottom: 10px; text-transform: uppercase; }
    .summary-card .value { font-size: 2em; font-weight: bold; }
    .summary-card.score { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; }
    .summary-card.score h3 { color: white; }
    .area { background: white; margin-bottom: 20px; border-radius: 8px; overflow: hidden; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .area-header { padding: 20px; border-bottom: 1px solid #eee; display: flex; justify-content: space-between; align-items: center; }
    .area-path { color: #666; }
    .area-score { font-size: 1.5em; font-weight: bold; color: #667eea; }
    .issues { padding: 20px; }
    .no-issues { color: #65a30d; }
    .issue { padding: 15px; margin-bottom: 10px; border-left: 4px solid; border-radius: 4px; background: #f9f9f9; }
    .issue-header { display: flex; justify-content: space-between; margin-bottom: 10px; }
    .issue-title { font-weight: bold; }
    .issue-meta { color: #888; font-size: 0.85em; margin-bottom: 6px; }
    .severity { padding: 2px 8px; border-radius: 4px; color: white; font-size: 0.85em; text-transform: uppercase; }
    .issue-description { color: #666; margin-bottom: 10px; }
    .issue-suggestion { padding: 10px; background: #e7f3ff; border-radius: 4px; margin-top: 10px; }
    footer { text-align: center; padding: 40px 0; color: #666; }
"""


def _severity_css() -> str:
    rules = []
    for severity in SEVERITY_DISPLAY_ORDER:
        color = SEVERITY_COLORS[severity.value]
        rules.append(f"    .issue.{severity.value} {{ border-color: {color}; }}")
        rules.append(f"    .severity.{severity.value} {{ background: {color}; }}")
    return "\n".join(rules)


def _html_issue(issue: Issue) -> List[str]:
    sev = issue.severity.value
    lines = [
        f'<div class="issue {sev}">',
        '  <div class="issue-header">',
        f'    <div class="issue-title">{escape(issue.title)}</div>',
        f'    <span class="severity {sev}">{sev}</span>',
        "  </div>",
    ]
    meta = [f"{escape(issue.category.value)}", f"{escape(issue.status.value)}"]
    if issue.auditor:
        meta.append(escape(issue.auditor))
    if issue.location:
        location = issue.location if issue.line is None else f"{issue.location}:{issue.line}"
        meta.append(f"<code>{escape(location)}</code>")
    lines.append(f'  <div class="issue-meta">{" · ".join(meta)}</div>')
    if issue.description:
        lines.append(f'  <div class="issue-description">{escape(issue.description)}</div>')
    if issue.suggestion:
        lines.append(f'  <div class="issue-suggestion">💡 {escape(issue.suggestion)}</div>')
    if issue.documentation:
        href = escape(issue.documentation, quote=True)
        lines.append(f'  <div class="issue-docs"><a href="{href}">Documentation</a></div>')
    lines.append("</div>")
    return lines


def _html_area(result: AreaResult) -> List[str]:
    lines = [
        '<section class="area">',
        '  <div class="area-header">',
        "    <div>",
        f"      <h2>{escape(result.area.name)}</h2>",
        f'      <p class="area-path">{escape(result.area.path)}</p>',
        "    </div>",
        f'    <div class="area-score">{result.score}%</div>',
        "  </div>",
        '  <div class="issues">',
    ]
    if not result.issues:
        lines.append('    <p class="no-issues">✅ No issues found!</p>')
    for issue in result.issues:
        lines.extend("    " + line for line in _html_issue(issue))
    lines.append("  </div>")
    lines.append("</section>")
    return lines


def render_html(report: AuditReport) -> str:
    """Самодостаточный HTML документ со встроенными стилями."""
    s = report.summary
    version = f" v{escape(report.project_version)}" if report.project_version else ""

    cards = [
        ("score", "Overall Score", f"{s.overall_score}%", None),
        ("", "Total Issues", str(s.total_issues), None),
    ]
    for severity in SEVERITY_DISPLAY_ORDER:
        cards.append(("", severity.value.capitalize(), str(s.count(severity)), SEVERITY_COLORS[severity.value]))

    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"  <title>Audit Report - {escape(report.project_name)}</title>",
        "  <style>",
        _HTML_STYLE.strip("\n"),
        _severity_css(),
        "  </style>",
        "</head>",
        "<body>",
        "  <header>",
        '    <div class="container">',
        "      <h1>🔍 Audit Report</h1>",
        '      <div class="meta">',
        f"        <p>{escape(report.project_name)}{version}</p>",
        f"        <p>Generated: {_timestamp(report)}</p>",
        f"        <p>Duration: {_duration(report)}</p>",
        "      </div>",
        "    </div>",
        "  </header>",
        '  <div class="container">',
        '    <div class="summary">',
    ]
    for css, label, value, color in cards:
        style = f' style="color: {color}"' if color else ""
        classes = f"summary-card {css}".strip()
        lines.append(f'      <div class="{classes}">')
        lines.append(f"        <h3>{label}</h3>")
        lines.append(f'        <div class="value"{style}>{value}</div>')
        lines.append("      </div>")
    lines.append("    </div>")

    for result in report.results:
        lines.extend("    " + line for line in _html_area(result))

    lines.extend([
        "  </div>",
        "  <footer>",
        f"    <p>Generated by webaudit {escape(report.environment.get('webaudit', ''))}</p>",
        "  </footer>",
        "</body>",
        "</html>",
    ])
    return "\n".join(lines) + "\n"


# === Markdown ===

def _md_issue(issue: Issue) -> List[str]:
    lines = [
        f"### {SEVERITY_EMOJI[issue.severity]} {issue.title}",
        "",
        f"**Severity:** {issue.severity.value.upper()}  ",
        f"**Category:** {issue.category.value}  ",
        f"**Status:** {issue.status.value}",
    ]
    if issue.location:
        location = issue.location if issue.line is None else f"{issue.location}:{issue.line}"
        lines[-1] += "  "
        lines.append(f"**Location:** `{location}`")
    lines.append("")
    if issue.description:
        lines.append(issue.description)
        lines.append("")
    if issue.suggestion:
        lines.append(f"> 💡 **Suggestion:** {issue.suggestion}")
        lines.append("")
    if issue.documentation:
        lines.append(f"[Documentation]({issue.documentation})")
        lines.append("")
    return lines


def render_markdown(report: AuditReport) -> str:
    """Markdown отчёт: заголовок на область, подзаголовок на issue."""
    s = report.summary
    version = f" v{report.project_version}" if report.project_version else ""

    lines = [
        f"# Audit Report - {report.project_name}{version}",
        "",
        f"**Generated:** {_timestamp(report)}  ",
        f"**Duration:** {_duration(report)}  ",
        f"**Overall Score:** {s.overall_score}%",
        "",
        "## Summary",
        "",
        f"- **Areas:** {s.areas}",
        f"- **Total Issues:** {s.total_issues}",
    ]
    for severity in SEVERITY_DISPLAY_ORDER:
        lines.append(
            f"- {SEVERITY_EMOJI[severity]} **{severity.value.capitalize()}:** {s.count(severity)}"
        )
    lines.append("")

    for result in report.results:
        lines.append(f"## {result.area.name} (Score: {result.score}%)")
        lines.append("")
        lines.append(f"`{result.area.path}`")
        lines.append("")
        if not result.issues:
            lines.append("✅ No issues found!")
            lines.append("")
            continue
        for issue in result.issues:
            lines.extend(_md_issue(issue))

    lines.append("---")
    lines.append(f"*Report generated by webaudit {report.environment.get('webaudit', '')}*")
    return "\n".join(lines) + "\n"
