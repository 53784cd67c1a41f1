"""Fetch raw diagnostic context for an issue from the external CLI."""

import logging
import os
import re
import subprocess
import sys
from pathlib import Path
from urllib.parse import urlsplit

from rootcause.config import NOT_FOUND_PATTERN, Settings, get_settings
from rootcause.context.models import RawContext
from rootcause.errors import FetchError, FetchErrorKind, InvalidIssueId

logger = logging.getLogger(__name__)

ISSUE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def normalize_issue_id(value: str) -> str:
    """Turn an issue ID or issue URL into a bare issue ID.

    For URLs the ID is the path segment after ``/issues/``; trailing slashes
    and query strings are dropped, so ``.../issues/12345678/?project=123``
    becomes ``12345678``.
    """
    value = (value or "").strip()
    if "/issues/" in value:
        path = urlsplit(value).path if "://" in value else value.split("?", 1)[0]
        _, _, rest = path.partition("/issues/")
        value = rest.split("/", 1)[0].split("?", 1)[0]
    value = value.strip("/")

    if not value or not ISSUE_ID_PATTERN.match(value):
        raise InvalidIssueId(value)
    return value


def build_command(issue_id: str, settings: Settings) -> list[str]:
    args = [a.format(issue_id=issue_id, org=settings.org or "") for a in settings.cli_args]
    return [settings.cli_binary, *args]


def fetch(issue_id: str, settings: Settings | None = None) -> RawContext:
    """Run the collaborator CLI once and return its standard output.

    Raises FetchError: AUTH_MISSING before anything is launched when a
    credential is absent, NOT_FOUND when the tool reports no such issue, and
    UNAVAILABLE for every other failure (including timeouts).
    """
    settings = settings or get_settings()

    missing = []
    if not settings.auth_token:
        missing.append("SENTRY_AUTH_TOKEN")
    if not settings.org:
        missing.append("SENTRY_ORG")
    if missing:
        raise FetchError(
            FetchErrorKind.AUTH_MISSING,
            f"Missing credentials in environment: {', '.join(missing)}",
            issue_id=issue_id,
        )

    cmd = build_command(issue_id, settings)
    environment = os.environ.copy()
    environment.update({"SENTRY_AUTH_TOKEN": settings.auth_token, "SENTRY_ORG": settings.org})
    logger.debug("Fetching issue %s: %s", issue_id, " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=settings.fetch_timeout_seconds,
            check=False,
            env=environment,
        )
    except subprocess.TimeoutExpired:
        raise FetchError(
            FetchErrorKind.UNAVAILABLE,
            f"{settings.cli_binary} timed out after {settings.fetch_timeout_seconds}s",
            issue_id=issue_id,
        ) from None
    except OSError as exc:
        raise FetchError(
            FetchErrorKind.UNAVAILABLE,
            f"Could not run {settings.cli_binary}: {exc}",
            issue_id=issue_id,
        ) from exc

    if result.returncode != 0:
        output = f"{result.stdout or ''}\n{result.stderr or ''}".strip()
        if NOT_FOUND_PATTERN.search(output):
            raise FetchError(
                FetchErrorKind.NOT_FOUND,
                f"Issue {issue_id} not found",
                issue_id=issue_id,
            )
        detail = output.splitlines()[-1] if output else "no output"
        raise FetchError(
            FetchErrorKind.UNAVAILABLE,
            f"{settings.cli_binary} exited with code {result.returncode}: {detail}",
            issue_id=issue_id,
        )

    logger.debug("Fetched %d bytes of context for issue %s", len(result.stdout), issue_id)
    return result.stdout


def read_context(source: Path | str) -> RawContext:
    """Load previously saved context from a file, or stdin for ``-``."""
    if str(source) == "-":
        return sys.stdin.read()
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FetchError(FetchErrorKind.NOT_FOUND, f"Context file not found: {path}") from None
    except OSError as exc:
        raise FetchError(FetchErrorKind.UNAVAILABLE, f"Could not read {path}: {exc}") from exc
