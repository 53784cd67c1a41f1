"""Error taxonomy for a single analysis run.

Every error is fatal to the run: it propagates out of the pipeline unchanged
and the caller reports it verbatim, with no partial report.
"""

from enum import Enum


class RootCauseError(Exception):
    """Base class for all analysis failures."""


class InvalidIssueId(RootCauseError):
    """The issue reference could not be turned into an identifier."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Not a valid issue ID or issue URL: {value!r}")


class FetchErrorKind(str, Enum):
    NOT_FOUND = "not-found"
    AUTH_MISSING = "auth-missing"
    UNAVAILABLE = "unavailable"


class FetchError(RootCauseError):
    """The external diagnostic CLI could not produce context for an issue."""

    def __init__(self, kind: FetchErrorKind, message: str, *, issue_id: str | None = None):
        self.kind = kind
        self.issue_id = issue_id
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


class ParseErrorKind(str, Enum):
    MALFORMED_CONTEXT = "malformed-context"


class ParseError(RootCauseError):
    """Fetched context could not be turned into a usable record."""

    def __init__(self, kind: ParseErrorKind, message: str):
        self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"
