"""Fetch -> Parse -> Trace -> Classify -> Report for one issue."""

import logging

from rootcause.config import Settings, get_settings
from rootcause.context.fetcher import fetch, normalize_issue_id
from rootcause.context.models import RawContext, Report
from rootcause.context.parser import parse
from rootcause.report.builder import build
from rootcause.trace.classifier import classify
from rootcause.trace.tracer import trace

logger = logging.getLogger(__name__)


def analyze_context(raw: RawContext, issue_id: str = "", settings: Settings | None = None) -> Report:
    """Run the pipeline from already fetched context onward."""
    settings = settings or get_settings()
    record = parse(raw, issue_id=issue_id)
    chain = trace(
        record,
        boundary_categories=settings.boundary_categories,
        anomaly_threshold=settings.anomaly_threshold,
    )
    error_class = classify(chain)
    logger.info("Issue %s classified as %s", issue_id or "<local>", error_class.value)
    return build(record, chain, error_class)


def analyze(issue: str, settings: Settings | None = None) -> Report:
    """Analyze an issue by ID or URL.

    Any RootCauseError propagates unchanged; no partial report is produced.
    """
    settings = settings or get_settings()
    issue_id = normalize_issue_id(issue)
    raw = fetch(issue_id, settings)
    return analyze_context(raw, issue_id=issue_id, settings=settings)
