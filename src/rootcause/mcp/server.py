"""FastMCP server exposing root-cause analysis to AI coding agents."""

from mcp.server.fastmcp import FastMCP

from rootcause.errors import RootCauseError
from rootcause.pipeline import analyze, analyze_context

mcp = FastMCP("rootcause")


@mcp.tool()
def analyze_issue(issue: str) -> dict | str:
    """Trace an error-tracker issue back to its root cause.

    Fetches the issue's diagnostic context (error, stack frames, breadcrumbs,
    tags) with the external CLI, walks the breadcrumbs backward from the
    crash site and classifies the failure as crash, concurrency,
    data-integrity, configuration or dependency-failure.

    Args:
        issue: Issue ID (e.g. "12345678" or "FRONTEND-3K") or full issue URL
    """
    try:
        report = analyze(issue)
    except RootCauseError as exc:
        return f"Analysis failed: {exc}"
    return report.model_dump(mode="json")


@mcp.tool()
def analyze_raw_context(context: str, issue_id: str = "") -> dict | str:
    """Trace already fetched diagnostic context back to its root cause.

    Use this when the issue context was obtained some other way (pasted by
    the user, saved to a file) and only needs parsing and tracing.

    Args:
        context: Markdown diagnostic context with an error line, stack frames,
            a Breadcrumbs section and a Tags section
        issue_id: Optional issue ID to label the report with
    """
    try:
        report = analyze_context(context, issue_id=issue_id)
    except RootCauseError as exc:
        return f"Analysis failed: {exc}"
    return report.model_dump(mode="json")
