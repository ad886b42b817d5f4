"""
Тесты AuditEngine: оценки, порядок, изоляция ошибок, отчёты и CI.
"""

import json
from datetime import datetime, timedelta

import pytest

from conftest import issue, make_config, make_registry, no_client, scripted
from webaudit.config import AuditorConfig, CIConfig, ReportFormat
from webaudit.core.auditor import IssueRecorder
from webaudit.core.models import (
    AreaResult,
    AreaSummary,
    AuditArea,
    Category,
    Metrics,
    MergePolicy,
    Severity,
    Status,
    area_score,
)
from webaudit.engine import AuditEngine, evaluate_ci
from webaudit.errors import AuditRunError, ConfigurationError, ReportWriteError


def engine_for(tmp_path, registry, auditors, **kwargs):
    areas = kwargs.pop("areas", None)
    ci = kwargs.pop("ci", None)
    config = make_config(tmp_path, auditors, areas=areas, ci=ci)
    return AuditEngine(config, registry=registry, client_factory=no_client, **kwargs)


# ═══════════════════════════════════════════════════════
# SCORING
# ═══════════════════════════════════════════════════════

class TestScoring:

    @pytest.mark.asyncio
    async def test_silent_auditor_scores_100(self, tmp_path):
        registry = make_registry(("quiet", scripted("quiet")))
        engine = engine_for(tmp_path, registry, {"quiet": AuditorConfig()}, persist=False)

        report = await engine.run()

        assert report.results[0].score == 100
        assert report.summary.overall_score == 100
        assert report.summary.total_issues == 0

    @pytest.mark.asyncio
    async def test_dashboard_scenario(self, tmp_path):
        registry = make_registry((
            "dash",
            scripted("dash", issues=[
                issue(Status.PASS, Severity.INFO),
                issue(Status.PASS, Severity.INFO),
                issue(Status.FAIL, Severity.HIGH),
                issue(Status.WARNING, Severity.MEDIUM),
            ]),
        ))
        engine = engine_for(tmp_path, registry, {"dash": AuditorConfig()}, persist=False)

        report = await engine.run()
        result = report.results[0]

        assert result.summary.total == 4
        assert result.summary.passed == 2
        assert result.summary.failed == 1
        assert result.summary.warnings == 1
        assert result.score == 50
        assert report.summary.overall_score == 50
        assert report.summary.high_issues == 1

    @pytest.mark.asyncio
    async def test_overall_is_mean_of_areas(self, tmp_path, areas):
        registry = make_registry(("mixed", scripted("mixed", issues=[issue(Status.PASS), issue(Status.FAIL)])))
        engine = engine_for(tmp_path, registry, {"mixed": AuditorConfig()}, areas=areas, persist=False)

        report = await engine.run()

        assert [r.score for r in report.results] == [50, 50, 50]
        assert report.summary.overall_score == 50
        assert report.summary.total_issues == 6


# ═══════════════════════════════════════════════════════
# ORDER AND ENABLEMENT
# ═══════════════════════════════════════════════════════

class TestExecution:

    @pytest.mark.asyncio
    async def test_disabled_auditor_contributes_nothing(self, tmp_path):
        calls = []
        registry = make_registry(
            ("on", scripted("on", issues=[issue()], calls=calls)),
            ("off", scripted("off", issues=[issue(severity=Severity.CRITICAL)],
                             metrics=[{"off": {"x": 1}}], calls=calls)),
        )
        engine = engine_for(
            tmp_path, registry,
            {"on": AuditorConfig(), "off": AuditorConfig(enabled=False)},
            persist=False,
        )

        report = await engine.run()

        assert calls == ["on:Dashboard"]
        assert report.summary.critical_issues == 0
        assert "off" not in report.global_metrics

    @pytest.mark.asyncio
    async def test_unconfigured_auditor_is_skipped(self, tmp_path):
        calls = []
        registry = make_registry(
            ("a", scripted("a", calls=calls)),
            ("b", scripted("b", calls=calls)),
        )
        engine = engine_for(tmp_path, registry, {"a": AuditorConfig()}, persist=False)

        await engine.run()

        assert calls == ["a:Dashboard"]

    @pytest.mark.asyncio
    async def test_areas_then_registration_order(self, tmp_path, areas):
        calls = []
        registry = make_registry(
            ("second", scripted("second", calls=calls)),
            ("first", scripted("first", calls=calls)),
        )
        engine = engine_for(
            tmp_path, registry,
            {"first": AuditorConfig(), "second": AuditorConfig()},
            areas=areas, persist=False,
        )

        report = await engine.run()

        assert calls == [
            "second:Dashboard", "first:Dashboard",
            "second:Library", "first:Library",
            "second:Academy", "first:Academy",
        ]
        assert [r.area.name for r in report.results] == ["Dashboard", "Library", "Academy"]

    @pytest.mark.asyncio
    async def test_failing_auditor_does_not_stop_others(self, tmp_path):
        calls = []
        registry = make_registry(
            ("broken", scripted("broken", error=RuntimeError("boom"), calls=calls)),
            ("healthy", scripted("healthy", issues=[issue(Status.PASS)], calls=calls)),
        )
        engine = engine_for(
            tmp_path, registry,
            {"broken": AuditorConfig(), "healthy": AuditorConfig()},
            persist=False,
        )

        report = await engine.run()

        assert calls == ["broken:Dashboard", "healthy:Dashboard"]
        assert report.summary.critical_issues == 1
        assert report.results[0].summary.errors == 1
        assert report.results[0].summary.passed == 1

    @pytest.mark.asyncio
    async def test_failing_name_does_not_abort_run(self, tmp_path, areas):
        calls = []

        class BadName(scripted("badname", calls=calls)):
            def name(self):
                raise RuntimeError("boom")

        registry = make_registry(
            ("badname", BadName),
            ("healthy", scripted("healthy", issues=[issue(Status.PASS)], calls=calls)),
        )
        engine = engine_for(
            tmp_path, registry,
            {"badname": AuditorConfig(), "healthy": AuditorConfig()},
            areas=areas, persist=False,
        )

        report = await engine.run()

        assert len(report.results) == 3
        assert calls.count("healthy:Library") == 1
        assert all(r.summary.passed == 1 for r in report.results)

    @pytest.mark.asyncio
    async def test_factory_failure_is_skipped(self, tmp_path):
        def bad_factory(context, config):
            raise RuntimeError("cannot build")

        registry = make_registry(
            ("bad", bad_factory),
            ("good", scripted("good", issues=[issue(Status.PASS)])),
        )
        engine = engine_for(
            tmp_path, registry,
            {"bad": AuditorConfig(), "good": AuditorConfig()},
            persist=False,
        )

        report = await engine.run()

        assert report.summary.total_issues == 1
        assert report.results[0].score == 100

    @pytest.mark.asyncio
    async def test_register_auditor(self, tmp_path):
        engine = engine_for(tmp_path, make_registry(), {"late": AuditorConfig()}, persist=False)
        engine.register_auditor("late", scripted("late", issues=[issue(Status.PASS)]))

        report = await engine.run()

        assert report.summary.total_issues == 1

    @pytest.mark.asyncio
    async def test_metrics_shallow_merge_within_area(self, tmp_path):
        registry = make_registry(
            ("one", scripted("one", metrics=[{"performance": {"fcp": 100, "lcp": 200}}])),
            ("two", scripted("two", metrics=[{"performance": {"lcp": 250}}])),
        )
        engine = engine_for(
            tmp_path, registry,
            {"one": AuditorConfig(), "two": AuditorConfig()},
            persist=False,
        )

        report = await engine.run()

        assert report.results[0].metrics.get("performance") == {"fcp": 100, "lcp": 250}

    @pytest.mark.asyncio
    async def test_navigation_metrics_accumulate_across_areas(self, tmp_path, areas):
        registry = make_registry(("nav", scripted("nav", metrics=[{"navigation": {"brokenLinks": 1}}])))
        engine = engine_for(tmp_path, registry, {"nav": AuditorConfig()}, areas=areas, persist=False)
        engine.config.metric_policies["navigation"] = MergePolicy.ACCUMULATE

        report = await engine.run()

        assert report.global_metrics.get("navigation") == {"brokenLinks": 3}

    @pytest.mark.asyncio
    async def test_unknown_auditor_key_is_config_error(self, tmp_path):
        calls = []
        registry = make_registry(("known", scripted("known", calls=calls)))
        engine = engine_for(
            tmp_path, registry,
            {"known": AuditorConfig(), "typo": AuditorConfig()},
            persist=False,
        )

        with pytest.raises(ConfigurationError, match="typo"):
            await engine.run()
        assert calls == []

    @pytest.mark.asyncio
    async def test_unexpected_failure_keeps_partial_results(self, tmp_path, areas):
        registry = make_registry(("a", scripted("a", issues=[issue(Status.PASS)])))
        engine = engine_for(tmp_path, registry, {"a": AuditorConfig()}, areas=areas, persist=False)

        original = engine.audit_area

        async def flaky(area, client=None):
            if area.name == "Academy":
                raise RuntimeError("disk on fire")
            return await original(area, client)

        engine.audit_area = flaky

        with pytest.raises(AuditRunError) as exc_info:
            await engine.run()

        assert [r.area.name for r in exc_info.value.partial_results] == ["Dashboard", "Library"]


# ═══════════════════════════════════════════════════════
# PERSISTENCE
# ═══════════════════════════════════════════════════════

class TestPersistence:

    @pytest.mark.asyncio
    async def test_all_formats_written(self, tmp_path):
        registry = make_registry(("a", scripted("a", issues=[issue(Status.FAIL, Severity.HIGH)])))
        engine = engine_for(tmp_path, registry, {"a": AuditorConfig()})

        report = await engine.run()

        files = sorted(p.name for p in (tmp_path / "reports").iterdir())
        assert len(files) == 3
        assert {f.rsplit(".", 1)[1] for f in files} == {"json", "html", "md"}
        assert all(f.startswith("audit-report-") for f in files)
        assert all(f.rsplit(".", 1)[0].endswith("Z") for f in files)
        assert report.timestamp.utcoffset() == timedelta(0)
        assert len(engine.saved_paths) == 3

        json_path = next(p for p in engine.saved_paths if p.endswith(".json"))
        with open(json_path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["summary"]["overall_score"] == report.summary.overall_score

    @pytest.mark.asyncio
    async def test_single_format(self, tmp_path):
        registry = make_registry(("a", scripted("a")))
        engine = engine_for(tmp_path, registry, {"a": AuditorConfig()})
        engine.config.reporting.format = ReportFormat.MARKDOWN

        await engine.run()

        files = list((tmp_path / "reports").iterdir())
        assert len(files) == 1
        assert files[0].suffix == ".md"

    @pytest.mark.asyncio
    async def test_unwritable_output_dir(self, tmp_path):
        blocker = tmp_path / "reports"
        blocker.write_text("not a directory")

        registry = make_registry(("a", scripted("a", issues=[issue(Status.PASS)])))
        engine = engine_for(tmp_path, registry, {"a": AuditorConfig()})

        with pytest.raises(ReportWriteError) as exc_info:
            await engine.run()

        assert exc_info.value.report is not None
        assert len(exc_info.value.partial_results) == 1


# ═══════════════════════════════════════════════════════
# CI
# ═══════════════════════════════════════════════════════

def report_with(tmp_path, results):
    engine = AuditEngine(make_config(tmp_path, {"a": AuditorConfig()}))
    return engine.build_report(results, 1.0)


def area_result(score_issues):
    recorder = IssueRecorder("a", Category.FUNCTIONALITY)
    for status, severity in score_issues:
        recorder.add_issue(title="t", status=status, severity=severity)
    summary = AreaSummary.from_issues(recorder.issues)
    return AreaResult(
        id="r", timestamp=datetime.now(), duration_ms=1.0,
        area=AuditArea("Dashboard", "/"), issues=recorder.issues,
        metrics=Metrics(), summary=summary, score=area_score(summary),
    )


class TestCI:

    def test_critical_fails_when_enabled(self, tmp_path):
        report = report_with(tmp_path, [area_result([
            (Status.FAIL, Severity.CRITICAL),
        ] + [(Status.PASS, Severity.INFO)] * 9)])

        verdict = evaluate_ci(report, CIConfig(fail_on_critical=True))

        assert verdict.failed
        assert "critical" in verdict.reasons[0]

    def test_score_above_threshold_passes(self, tmp_path):
        # 17 из 20 = 85%
        issues = [(Status.PASS, Severity.INFO)] * 17 + [(Status.FAIL, Severity.HIGH)] * 3
        report = report_with(tmp_path, [area_result(issues)])
        assert report.summary.overall_score == 85

        verdict = evaluate_ci(report, CIConfig(fail_on_critical=False, fail_on_high=False, fail_threshold=80))

        assert not verdict.failed
        assert verdict.reasons == []

    def test_all_reasons_collected(self, tmp_path):
        report = report_with(tmp_path, [area_result([
            (Status.FAIL, Severity.CRITICAL),
            (Status.FAIL, Severity.HIGH),
        ])])

        verdict = evaluate_ci(report, CIConfig(True, True, 80))

        assert verdict.failed
        assert len(verdict.reasons) == 3

    def test_no_ci_config_never_fails(self, tmp_path):
        report = report_with(tmp_path, [area_result([(Status.FAIL, Severity.CRITICAL)])])
        assert not evaluate_ci(report, None).failed

    @pytest.mark.asyncio
    async def test_engine_sets_verdict(self, tmp_path):
        registry = make_registry(("a", scripted("a", issues=[issue(Status.FAIL, Severity.CRITICAL)])))
        engine = engine_for(
            tmp_path, registry, {"a": AuditorConfig()},
            ci=CIConfig(fail_on_critical=True), persist=False,
        )

        await engine.run()

        assert engine.verdict.failed
