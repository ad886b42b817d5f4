"""
CLI interface for the web application audit.

Usage:
    python -m webaudit --full                      # Full audit (default)
    python -m webaudit --quick                     # Quick audit (critical checks only)
    python -m webaudit --area Dashboard            # Single area
    python -m webaudit --ci                        # Strict CI mode
    python -m webaudit --url https://example.com --json
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from webaudit.config import (
    DEFAULT_CI_THRESHOLD,
    AuditConfig,
    CIConfig,
    ReportFormat,
    get_audit_config,
    load_config_file,
)
from webaudit.errors import AuditError, ConfigurationError
from webaudit.reports.generator import ReportGenerator
from webaudit.runner import AuditRunner

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(verbose: bool = False, quiet: bool = False):
    """Настроить логирование."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True,
    )


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Парсинг аргументов командной строки."""
    parser = argparse.ArgumentParser(
        prog='webaudit',
        description='Web Application Audit Tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run full audit
  python -m webaudit --full

  # Quick audit (component, accessibility, security)
  python -m webaudit --quick

  # Single area
  python -m webaudit --area Dashboard

  # CI mode: exit 1 on critical/high issues or score below threshold
  python -m webaudit --ci

  # Custom URL with JSON output only
  python -m webaudit --url http://custom.com --json

Environment Variables:
  AUDIT_BASE_URL    Base URL for audit (default: http://localhost:3000)
  HEADLESS          Run browser in headless mode (default: true)
        """
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        '--full',
        action='store_true',
        help='Run full audit with all enabled auditors (default)'
    )
    mode_group.add_argument(
        '--quick',
        action='store_true',
        help='Run quick audit with critical checks only'
    )
    mode_group.add_argument(
        '--area',
        metavar='NAME',
        help='Run audit for a specific area'
    )

    parser.add_argument(
        '--ci',
        action='store_true',
        help='Enable CI mode with strict failure conditions'
    )
    parser.add_argument(
        '--url',
        help='Base URL for audit'
    )
    parser.add_argument(
        '--output',
        metavar='DIR',
        help='Output directory for reports (default: audit-reports)'
    )
    parser.add_argument(
        '--config',
        metavar='FILE',
        help='JSON configuration file'
    )
    parser.add_argument(
        '--env',
        choices=['development', 'production', 'ci'],
        help='Configuration preset'
    )

    # Output format
    format_group = parser.add_mutually_exclusive_group()
    format_group.add_argument('--json', action='store_true', help='Save report in JSON format only')
    format_group.add_argument('--html', action='store_true', help='Save report in HTML format only')
    format_group.add_argument('--markdown', '--md', action='store_true', help='Save report in Markdown format only')

    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Verbose output'
    )

    args = parser.parse_args(argv)

    if not any([args.full, args.quick, args.area]):
        args.full = True

    return args


def build_config(args) -> AuditConfig:
    """Собрать конфигурацию из пресета, файла и флагов."""
    if args.config:
        config = load_config_file(args.config)
        has_ci_section = config.ci is not None
    else:
        config = get_audit_config(args.env)
        has_ci_section = args.env is not None

    changes = {}
    if args.url:
        changes['base_url'] = args.url

    reporting = dataclasses.replace(config.reporting)
    if args.output:
        reporting.output_dir = Path(args.output)
    if args.json:
        reporting.format = ReportFormat.JSON
    elif args.html:
        reporting.format = ReportFormat.HTML
    elif args.markdown:
        reporting.format = ReportFormat.MARKDOWN
    changes['reporting'] = reporting

    if args.ci:
        if not has_ci_section:
            changes['ci'] = CIConfig(
                fail_on_critical=True,
                fail_on_high=True,
                fail_threshold=DEFAULT_CI_THRESHOLD,
            )
    else:
        # Вне CI режима результаты не влияют на код выхода
        changes['ci'] = None

    return config.replace(**changes)


async def run(args) -> int:
    """Запустить аудит и вернуть код выхода."""
    config = build_config(args)
    runner = AuditRunner(config)

    if args.area:
        report = await runner.run_for_area(args.area)
    elif args.quick:
        report = await runner.run_quick()
    else:
        report = await runner.run()

    if not args.ci or args.verbose:
        ReportGenerator(config.reporting.output_dir).print_summary(report)
        runner.print_final_summary(report)

    if args.verbose:
        for result in report.results:
            top = [i for i in result.issues if i.severity.value in ('critical', 'high')][:3]
            for issue in top:
                print(f"  {result.area.name}: [{issue.severity.value}] {issue.title}")

    verdict = runner.last_verdict
    if args.ci and verdict.failed:
        for reason in verdict.reasons:
            print(f"❌ Audit failed: {reason}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция."""
    env_path = Path.cwd() / '.env'
    if env_path.exists():
        load_dotenv(env_path)

    args = parse_args(argv)
    setup_logging(args.verbose, quiet=args.ci)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.warning("⚠️  Audit interrupted by user")
        return EXIT_FAILURE
    except ConfigurationError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except AuditError as e:
        logger.error(f"❌ Audit failed with error: {e}")
        print(f"❌ Audit failed with error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
