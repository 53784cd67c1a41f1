"""Parse raw CLI output into a DiagnosticRecord.

The collaborator CLI emits markdown: an error line near the top, then
``## Stack Trace``, ``## Breadcrumbs`` and ``## Tags`` sections. Frame lines
are recognised anywhere outside the breadcrumb and tag sections so that
contexts without headings still parse.
"""

import logging
import re

from rootcause.context.models import (
    Breadcrumb,
    BreadcrumbCategory,
    DiagnosticRecord,
    Frame,
    RawContext,
)
from rootcause.errors import ParseError, ParseErrorKind

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#{1,6}\s+(?P<title>.+?)\s*#*\s*$")

ERROR_LINE_PATTERN = re.compile(
    r"^[-*\s]*(?:\*\*|`)?(?P<type>[A-Za-z_][\w.]*(?:Error|Exception|Fault|Panic|Rejection)|Error)"
    r"(?:\*\*|`)?:\s*(?P<message>.+)$"
)

# "> src/app.py:42 in handler", "at handler (src/app.js:42:7)", "File \"x.py\", line 3, in f"
FRAME_PATTERN = re.compile(
    r"^\s*(?P<marker>>\s*)?(?:[-+*]\s+)?"
    r"(?:at\s+(?:(?P<func_at>[^\s()]+)\s+\()?)?"
    r"(?P<location>[\w./\\@~+-]+\.\w+:\d+)(?::\d+)?\)?"
    r"(?:\s+in\s+(?P<func_in>[^\s\[(]+))?"
    r"(?P<rest>.*)$"
)
PY_FRAME_PATTERN = re.compile(
    r'^\s*(?P<marker>>\s*)?(?:[-+*]\s+)?File\s+"(?P<path>[^"]+)",\s+line\s+(?P<line>\d+)(?:,\s+in\s+(?P<func>\S+))?(?P<rest>.*)$'
)
IN_APP_ANNOTATION = re.compile(r"[\[(]\s*in[- ]app\s*[\])]", re.IGNORECASE)

BREADCRUMB_PATTERN = re.compile(
    r"^\s*[-*]?\s*\[(?P<ordinal>\d+)\]\s+(?P<kind>[\w.-]+)\s*:?\s*(?P<summary>.*)$"
)
# Final status codes only; 1xx never ends a request
STATUS_PATTERNS = [
    # "POST /api/orders 500 Internal Server Error"
    re.compile(r"^\s*(?:GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)\s+\S+\s+(?P<code>[2-5]\d{2})\b", re.IGNORECASE),
    # "[500]", "(404)"
    re.compile(r"[\[(]\s*(?P<code>[2-5]\d{2})\s*[\])]"),
    re.compile(r"status(?:[ _]code)?\s*[=:]?\s*(?P<code>[2-5]\d{2})\b", re.IGNORECASE),
    re.compile(r"(?:->|=>)\s*(?P<code>[2-5]\d{2})\b"),
    re.compile(r"\s(?P<code>[2-5]\d{2})\s*$"),
]

TAG_LIST_PATTERN = re.compile(r"^\s*(?:[-*]\s*)?`?(?P<key>[\w.:-]+?)`?\s*(?::|=)\s*(?P<value>.*)$")
TAG_TABLE_PATTERN = re.compile(r"^\s*\|\s*`?(?P<key>[^|`]+?)`?\s*\|\s*(?P<value>[^|]*?)\s*\|\s*$")
TABLE_SEPARATOR = re.compile(r"^\s*\|[\s:|-]+\|\s*$")

CATEGORY_ALIASES = {
    "navigation": BreadcrumbCategory.NAVIGATION,
    "nav": BreadcrumbCategory.NAVIGATION,
    "http": BreadcrumbCategory.HTTP,
    "fetch": BreadcrumbCategory.HTTP,
    "xhr": BreadcrumbCategory.HTTP,
    "ui": BreadcrumbCategory.UI,
    "console": BreadcrumbCategory.CONSOLE,
    "log": BreadcrumbCategory.CONSOLE,
    "default": BreadcrumbCategory.CONSOLE,
    "lifecycle": BreadcrumbCategory.LIFECYCLE,
    "app": BreadcrumbCategory.LIFECYCLE,
}

STACK, BREADCRUMBS, TAGS, OTHER = "stack", "breadcrumbs", "tags", "other"


def _section_for(title: str) -> str:
    title = title.lower()
    if "breadcrumb" in title:
        return BREADCRUMBS
    if title.startswith("tag"):
        return TAGS
    if "stack" in title or "frame" in title or "exception" in title or "traceback" in title:
        return STACK
    return OTHER


def normalize_category(kind: str) -> BreadcrumbCategory:
    """Map a raw breadcrumb label such as ``ui.click`` onto the closed category set."""
    lowered = kind.lower()
    if lowered in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[lowered]
    if "lifecycle" in lowered:
        return BreadcrumbCategory.LIFECYCLE
    prefix = lowered.split(".", 1)[0]
    if prefix in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[prefix]
    logger.debug("Unknown breadcrumb category %r, treating as console", kind)
    return BreadcrumbCategory.CONSOLE


def parse_status_code(summary: str) -> int | None:
    for pattern in STATUS_PATTERNS:
        match = pattern.search(summary)
        if match:
            return int(match.group("code"))
    return None


def parse_frame(line: str) -> Frame | None:
    match = PY_FRAME_PATTERN.match(line)
    if match:
        return Frame(
            location=f"{match.group('path')}:{match.group('line')}",
            in_app=bool(match.group("marker")) or bool(IN_APP_ANNOTATION.search(match.group("rest"))),
            function=match.group("func"),
        )
    match = FRAME_PATTERN.match(line)
    if not match:
        return None
    return Frame(
        location=match.group("location"),
        in_app=bool(match.group("marker")) or bool(IN_APP_ANNOTATION.search(match.group("rest"))),
        function=match.group("func_at") or match.group("func_in"),
    )


def parse_breadcrumb(line: str) -> Breadcrumb | None:
    match = BREADCRUMB_PATTERN.match(line)
    if not match:
        return None
    kind = match.group("kind")
    summary = match.group("summary").strip()
    category = normalize_category(kind)
    return Breadcrumb(
        ordinal=int(match.group("ordinal")),
        category=category,
        kind=kind,
        summary=summary,
        status_code=parse_status_code(summary) if category is BreadcrumbCategory.HTTP else None,
    )


def parse_tag(line: str) -> tuple[str, str] | None:
    if TABLE_SEPARATOR.match(line):
        return None
    match = TAG_TABLE_PATTERN.match(line) or TAG_LIST_PATTERN.match(line)
    if not match:
        return None
    key = match.group("key").strip()
    value = match.group("value").strip().strip("`")
    if key.lower() in ("key", "tag", "name") and value.lower() == "value":
        return None  # table header
    return key, value


def parse(raw: RawContext, issue_id: str = "") -> DiagnosticRecord:
    """Parse raw context text into a DiagnosticRecord.

    Raises ParseError(MALFORMED_CONTEXT) when no stack frame can be found.
    """
    section = OTHER
    error_type: str | None = None
    error_message = ""
    frames: list[Frame] = []
    breadcrumbs: list[Breadcrumb] = []
    tags: dict[str, str] = {}

    for line in (raw or "").splitlines():
        if not line.strip():
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            section = _section_for(heading.group("title"))
            continue

        if section == BREADCRUMBS:
            crumb = parse_breadcrumb(line)
            if crumb:
                breadcrumbs.append(crumb)
            continue

        if section == TAGS:
            tag = parse_tag(line)
            if tag:
                tags[tag[0]] = tag[1]
            continue

        frame = parse_frame(line)
        if frame:
            frames.append(frame)
            continue

        if error_type is None:
            match = ERROR_LINE_PATTERN.match(line)
            if match:
                error_type = match.group("type")
                error_message = match.group("message").strip().rstrip("*`").strip()

    if not frames:
        raise ParseError(
            ParseErrorKind.MALFORMED_CONTEXT,
            "No stack frames found in context" + (f" for issue {issue_id}" if issue_id else ""),
        )

    ordinals = [b.ordinal for b in breadcrumbs]
    if ordinals != sorted(ordinals):
        logger.warning("Breadcrumbs out of order; sorting by ordinal")
        breadcrumbs.sort(key=lambda b: b.ordinal)

    record = DiagnosticRecord(
        issue_id=issue_id,
        error_type=error_type or "UnknownError",
        error_message=error_message,
        frames=tuple(frames),
        breadcrumbs=tuple(breadcrumbs),
        tags=tags,
    )
    logger.debug(
        "Parsed %s: %d frames (%d in-app), %d breadcrumbs, %d tags",
        issue_id or "context",
        len(record.frames),
        len(record.in_app_frames),
        len(record.breadcrumbs),
        len(record.tags),
    )
    return record
