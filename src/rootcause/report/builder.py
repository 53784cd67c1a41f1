"""Root-cause report assembly and markdown rendering.

Pure and side-effect free: takes the record, the trace chain and the
assigned class and returns a Report (or a markdown string). Always produces
a best-effort report, even for a single-step chain.
"""

from rootcause.context.models import (
    DiagnosticRecord,
    EvidenceEntry,
    ErrorClass,
    Report,
    TraceChain,
)

SUGGESTED_FIXES = {
    ErrorClass.CRASH: (
        "Guard the value at the crash site: check for the missing or wrongly typed value "
        "before it is used, and add a test that reproduces the failing input."
    ),
    ErrorClass.CONCURRENCY: (
        "Make the operation idempotent: disable the trigger while a request is in flight, "
        "send an idempotency key, and handle the duplicate-key response as success."
    ),
    ErrorClass.DATA_INTEGRITY: (
        "Validate the payload where it enters the application and align producer and "
        "consumer on one schema version; handle unknown values explicitly."
    ),
    ErrorClass.CONFIGURATION: (
        "Validate required configuration at startup and fail fast with a clear message "
        "instead of reading an absent value at request time."
    ),
    ErrorClass.DEPENDENCY_FAILURE: (
        "Handle the dependency's error response: check the status before using the body, "
        "surface a degraded state, and add a timeout or retry policy where it is safe."
    ),
}


def _statement(chain: TraceChain, error_class: ErrorClass) -> str:
    origin = chain.origin
    terminal = chain.terminal
    parts = [f"{chain.error_message} surfaced at {origin.evidence.describe()}."]

    if len(chain) == 1:
        parts.append("No earlier event could be tied to the failing value, so the crash site is the root cause.")
    else:
        parts.append(
            f"Tracing {len(chain) - 1} upstream event(s) back in time leads to "
            f"{terminal.evidence.describe()}: {terminal.description}."
        )
        if chain.boundary_reached:
            parts.append("Tracing stopped at a trust boundary; the value originated outside the application.")

    if chain.anomalies:
        first = chain.anomalies[0]
        parts.append(
            f"Found {len(chain.anomalies)} duplicate event pair(s) in quick succession "
            f"(first: {first.describe()}), which points to a double submission."
        )

    parts.append(f"Classified as {error_class.label}.")
    return " ".join(parts)


def build(record: DiagnosticRecord, chain: TraceChain, error_class: ErrorClass) -> Report:
    """Assemble the root-cause statement, the evidence chain and the fix description."""
    return Report(
        issue_id=record.issue_id,
        error_type=record.error_type,
        error_message=record.error_message,
        error_class=error_class,
        statement=_statement(chain, error_class),
        suggested_fix=SUGGESTED_FIXES[error_class],
        evidence=[
            EvidenceEntry(description=step.description, evidence=step.evidence.describe())
            for step in chain.steps
        ],
        anomalies=[a.describe() for a in chain.anomalies],
    )


def render_markdown(report: Report) -> str:
    lines: list[str] = []

    title = f"Root cause: issue {report.issue_id}" if report.issue_id else "Root cause"
    lines.append(f"# {title}")
    lines.append("")
    lines.append(f"**Error:** `{report.error_type}` {report.error_message}".rstrip())
    lines.append("")
    lines.append(f"**Class:** {report.error_class.label}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(report.statement)
    lines.append("")

    lines.append("## Evidence chain")
    lines.append("")
    for i, entry in enumerate(report.evidence, start=1):
        lines.append(f"{i}. {entry.description}")
        lines.append(f"   - {entry.evidence}")
    lines.append("")

    if report.anomalies:
        lines.append("## Concurrency anomalies")
        lines.append("")
        for anomaly in report.anomalies:
            lines.append(f"- {anomaly}")
        lines.append("")

    lines.append("## Suggested fix")
    lines.append("")
    lines.append(report.suggested_fix)
    lines.append("")

    return "\n".join(lines)
