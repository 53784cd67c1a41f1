"""Tests for report assembly and rendering."""

from rootcause.context.models import ErrorClass
from rootcause.context.parser import parse
from rootcause.report.builder import SUGGESTED_FIXES, build, render_markdown
from rootcause.trace.classifier import classify
from rootcause.trace.tracer import trace
from tests.samples import CRASH_CONTEXT, DEPENDENCY_CONTEXT, DOUBLE_SUBMIT_CONTEXT


def run(raw, issue_id=""):
    record = parse(raw, issue_id=issue_id)
    chain = trace(record)
    return build(record, chain, classify(chain))


class TestBuild:
    def test_every_class_has_a_fix(self):
        assert set(SUGGESTED_FIXES) == set(ErrorClass)

    def test_single_step_report(self):
        report = run(CRASH_CONTEXT, issue_id="42")
        assert report.issue_id == "42"
        assert report.error_class is ErrorClass.CRASH
        assert len(report.evidence) == 1
        assert "crash site is the root cause" in report.statement
        assert report.suggested_fix == SUGGESTED_FIXES[ErrorClass.CRASH]

    def test_evidence_chain_is_ordered(self):
        report = run(DEPENDENCY_CONTEXT, issue_id="FRONTEND-7A")
        assert report.error_class is ErrorClass.DEPENDENCY_FAILURE
        assert report.evidence[0].evidence.startswith("frame renderItems")
        assert report.evidence[-1].evidence.startswith("breadcrumb [20] http")
        assert "503" in report.evidence[-1].description
        assert "trust boundary" in report.statement

    def test_anomalies_in_report(self):
        report = run(DOUBLE_SUBMIT_CONTEXT)
        assert report.error_class is ErrorClass.CONCURRENCY
        assert report.anomalies
        assert "double submission" in report.statement

    def test_json_dump(self):
        data = run(CRASH_CONTEXT).model_dump(mode="json")
        assert data["error_class"] == "crash"
        assert data["evidence"][0]["evidence"].startswith("frame Avatar")


class TestRenderMarkdown:
    def test_sections(self):
        text = render_markdown(run(DOUBLE_SUBMIT_CONTEXT, issue_id="FRONTEND-3K"))
        assert text.startswith("# Root cause: issue FRONTEND-3K")
        assert "**Class:** Concurrency" in text
        assert "## Evidence chain" in text
        assert "## Concurrency anomalies" in text
        assert "## Suggested fix" in text

    def test_no_anomaly_section_when_clean(self):
        text = render_markdown(run(CRASH_CONTEXT))
        assert text.startswith("# Root cause\n")
        assert "## Concurrency anomalies" not in text
