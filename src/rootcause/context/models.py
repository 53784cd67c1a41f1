"""Data models for diagnostic records, trace chains and reports."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Raw markdown/text emitted by the collaborator CLI
RawContext = str


class BreadcrumbCategory(str, Enum):
    NAVIGATION = "navigation"
    HTTP = "http"
    UI = "ui"
    CONSOLE = "console"
    LIFECYCLE = "lifecycle"


class ErrorClass(str, Enum):
    CRASH = "crash"
    CONCURRENCY = "concurrency"
    DATA_INTEGRITY = "data-integrity"
    CONFIGURATION = "configuration"
    DEPENDENCY_FAILURE = "dependency-failure"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class Frame(BaseModel):
    """One entry in a call stack."""

    model_config = ConfigDict(frozen=True)

    location: str = Field(description="File and line, e.g. src/app.py:42")
    in_app: bool = Field(default=False, description="Application code rather than third-party")
    function: str | None = None

    def describe(self) -> str:
        if self.function:
            return f"{self.function} ({self.location})"
        return self.location


class Breadcrumb(BaseModel):
    """A timestamped event recorded before the error."""

    model_config = ConfigDict(frozen=True)

    ordinal: int = Field(description="Monotonically increasing position in time")
    category: BreadcrumbCategory
    kind: str = Field(description="Category label as emitted, e.g. ui.click")
    summary: str = ""
    status_code: int | None = None

    @property
    def is_error_response(self) -> bool:
        return self.status_code is not None and not 200 <= self.status_code < 300

    def describe(self) -> str:
        return f"[{self.ordinal}] {self.kind}: {self.summary}"


class DiagnosticRecord(BaseModel):
    """Normalized diagnostic context for one issue."""

    model_config = ConfigDict(frozen=True)

    issue_id: str = ""
    error_type: str
    error_message: str
    frames: tuple[Frame, ...] = Field(description="Outermost call first")
    breadcrumbs: tuple[Breadcrumb, ...] = ()
    tags: dict[str, str] = Field(default_factory=dict)

    @property
    def in_app_frames(self) -> list[Frame]:
        return [f for f in self.frames if f.in_app]


class EvidenceRef(BaseModel):
    """Pointer from a trace step to the frame or breadcrumb it rests on."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["frame", "breadcrumb"]
    frame: Frame | None = None
    breadcrumb: Breadcrumb | None = None

    @classmethod
    def to_frame(cls, frame: Frame) -> "EvidenceRef":
        return cls(kind="frame", frame=frame)

    @classmethod
    def to_breadcrumb(cls, breadcrumb: Breadcrumb) -> "EvidenceRef":
        return cls(kind="breadcrumb", breadcrumb=breadcrumb)

    @property
    def text(self) -> str:
        """Searchable text of the referenced evidence."""
        if self.breadcrumb is not None:
            return f"{self.breadcrumb.kind} {self.breadcrumb.summary}"
        if self.frame is not None:
            return f"{self.frame.function or ''} {self.frame.location}".strip()
        return ""

    def describe(self) -> str:
        if self.breadcrumb is not None:
            return f"breadcrumb {self.breadcrumb.describe()}"
        if self.frame is not None:
            return f"frame {self.frame.describe()}"
        return "no evidence"


class TraceStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    evidence: EvidenceRef


class ConcurrencyAnomaly(BaseModel):
    """Two identical events closer together than the anomaly threshold."""

    model_config = ConfigDict(frozen=True)

    first: Breadcrumb
    second: Breadcrumb

    @property
    def gap(self) -> int:
        return self.second.ordinal - self.first.ordinal

    def describe(self) -> str:
        return (
            f"duplicate {self.first.kind} events at {self.first.ordinal} and "
            f"{self.second.ordinal} ({self.gap} apart): {self.first.summary}"
        )


class TraceChain(BaseModel):
    """Ordered trace from the crash site back to the inferred root cause."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[TraceStep, ...]
    anomalies: tuple[ConcurrencyAnomaly, ...] = ()
    tags: dict[str, str] = Field(default_factory=dict)
    error_message: str = ""
    boundary_reached: bool = False

    @property
    def terminal(self) -> TraceStep:
        return self.steps[-1]

    @property
    def origin(self) -> TraceStep:
        return self.steps[0]

    def __len__(self) -> int:
        return len(self.steps)


class EvidenceEntry(BaseModel):
    description: str
    evidence: str


class Report(BaseModel):
    """Human-readable outcome of one analysis run."""

    issue_id: str
    error_type: str
    error_message: str
    error_class: ErrorClass
    statement: str
    suggested_fix: str
    evidence: list[EvidenceEntry] = Field(default_factory=list)
    anomalies: list[str] = Field(default_factory=list)
