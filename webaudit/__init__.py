"""
Web Application Audit System

Pluggable audit engine for web application areas:
- Independent auditors (component, navigation, performance,
  accessibility, security, SEO, area-specific checks)
- Per-area and global health scores
- JSON / HTML / Markdown reports
- Pass/fail gates for CI pipelines

Usage:
    python -m webaudit --full
"""

__version__ = "1.0.0"
