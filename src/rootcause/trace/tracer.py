"""Walk a diagnostic record upstream from the crash site to its origin."""

import logging
import re
from collections.abc import Iterable, Sequence

from rootcause.config import (
    ABSENT_VALUE_PATTERN,
    CONFIG_ACCESS_PATTERN,
    CONFIG_READ_CATEGORIES,
    DEFAULT_ANOMALY_THRESHOLD,
    DEFAULT_BOUNDARY_CATEGORIES,
    STATE_UPDATE_PATTERN,
)
from rootcause.context.models import (
    Breadcrumb,
    BreadcrumbCategory,
    ConcurrencyAnomaly,
    DiagnosticRecord,
    EvidenceRef,
    Frame,
    TraceChain,
    TraceStep,
)

logger = logging.getLogger(__name__)

# 'id', "user_id", `STRIPE_KEY`
IMPLICATED_PATTERN = re.compile(r"""['"`](?P<token>[A-Za-z_$][\w.$-]*)['"`]""")

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def find_origin_frame(record: DiagnosticRecord) -> Frame:
    """Innermost in-app frame, scanning down from the top of the stack."""
    for frame in reversed(record.frames):
        if frame.in_app:
            return frame
    return record.frames[-1]


def implicated_values(message: str) -> set[str]:
    return {m.group("token") for m in IMPLICATED_PATTERN.finditer(message or "")}


def _duplicate_key(crumb: Breadcrumb) -> tuple[str, ...] | None:
    if crumb.category is BreadcrumbCategory.UI:
        return (crumb.kind, " ".join(crumb.summary.lower().split()))
    if crumb.category is BreadcrumbCategory.HTTP:
        parts = crumb.summary.split()
        if len(parts) >= 2 and parts[0].upper() in MUTATING_METHODS:
            return (crumb.kind, parts[0].upper(), parts[1])
    return None


def find_anomalies(breadcrumbs: Sequence[Breadcrumb], threshold: int) -> list[ConcurrencyAnomaly]:
    """Find repeated user actions or writes closer together than ``threshold``.

    Only UI events and mutating HTTP requests are compared; repeated reads
    are normal polling.
    """
    anomalies = []
    last_seen: dict[tuple[str, ...], Breadcrumb] = {}
    for crumb in breadcrumbs:
        key = _duplicate_key(crumb)
        if key is None:
            continue
        previous = last_seen.get(key)
        if previous is not None and crumb.ordinal - previous.ordinal < threshold:
            anomalies.append(ConcurrencyAnomaly(first=previous, second=crumb))
        last_seen[key] = crumb
    return anomalies


def is_config_read(crumb: Breadcrumb) -> bool:
    """A console or lifecycle event that reads configuration or the environment."""
    return crumb.category.value in CONFIG_READ_CATEGORIES and bool(CONFIG_ACCESS_PATTERN.search(crumb.summary))


def _describe_boundary(crumb: Breadcrumb) -> str:
    if crumb.category is BreadcrumbCategory.HTTP:
        if crumb.is_error_response:
            return (
                f"External dependency answered {crumb.status_code} to {crumb.summary}; "
                "the failure originates outside the application"
            )
        return f"Value entered the application from an external response: {crumb.summary}"
    return f"Trust boundary at {crumb.kind} event '{crumb.summary}'; earlier state is not traced"


def _describe_producer(crumb: Breadcrumb, implicated: set[str]) -> str | None:
    """Say what a breadcrumb established about the implicated value, if anything."""
    text = crumb.summary
    if crumb.category is BreadcrumbCategory.HTTP:
        if crumb.is_error_response:
            return f"Request {text} failed with {crumb.status_code}"
        return f"Response to {text} supplied data used downstream"
    if is_config_read(crumb):
        if ABSENT_VALUE_PATTERN.search(text):
            return f"Configuration read returned no value: {text}"
        return f"Configuration read: {text}"
    if STATE_UPDATE_PATTERN.search(text):
        return f"State update produced the value later used: {text}"
    mentioned = sorted(t for t in implicated if re.search(rf"(?<![\w$]){re.escape(t)}(?![\w$])", text))
    if mentioned:
        return f"Event touched implicated value {', '.join(repr(t) for t in mentioned)}: {text}"
    return None


def trace(
    record: DiagnosticRecord,
    *,
    boundary_categories: Iterable[str] | None = None,
    anomaly_threshold: int | None = None,
) -> TraceChain:
    """Build the chain from the crash site back to the inferred root cause.

    The first step is the innermost in-app frame. Breadcrumbs are then walked
    backward in time; each one that plausibly produced the implicated value
    is appended. The walk stops at the first trust-boundary breadcrumb, which
    becomes the terminal step.
    """
    boundaries = {
        str(c).lower()
        for c in (DEFAULT_BOUNDARY_CATEGORIES if boundary_categories is None else boundary_categories)
    }
    threshold = DEFAULT_ANOMALY_THRESHOLD if anomaly_threshold is None else anomaly_threshold

    origin = find_origin_frame(record)
    headline = f"{record.error_type}: {record.error_message}" if record.error_message else record.error_type
    steps = [TraceStep(description=f"{headline} raised at {origin.describe()}", evidence=EvidenceRef.to_frame(origin))]

    implicated = implicated_values(record.error_message)
    boundary_reached = False
    for crumb in reversed(record.breadcrumbs):
        if crumb.category.value in boundaries:
            steps.append(TraceStep(description=_describe_boundary(crumb), evidence=EvidenceRef.to_breadcrumb(crumb)))
            boundary_reached = True
            break
        description = _describe_producer(crumb, implicated)
        if description:
            steps.append(TraceStep(description=description, evidence=EvidenceRef.to_breadcrumb(crumb)))

    anomalies = find_anomalies(record.breadcrumbs, threshold)
    for anomaly in anomalies:
        logger.debug("Concurrency anomaly: %s", anomaly.describe())

    logger.debug(
        "Traced %d steps for %s (boundary reached: %s)",
        len(steps),
        record.issue_id or "record",
        boundary_reached,
    )
    return TraceChain(
        steps=tuple(steps),
        anomalies=tuple(anomalies),
        tags=dict(record.tags),
        error_message=headline,
        boundary_reached=boundary_reached,
    )
