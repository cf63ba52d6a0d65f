"""Core data models for prune-overrides."""

from dataclasses import dataclass, field
from enum import Enum


class Verdict(str, Enum):
    """Outcome of analyzing a single override."""

    REDUNDANT = "redundant"
    REQUIRED = "required"


@dataclass(frozen=True)
class OverrideResult:
    """Result of analyzing one override.

    ``before`` and ``after`` hold the minimum resolved version across every
    install location, with and without the override. ``None`` means the
    package is absent from the tree (or, for ``after``, that npm failed).
    """

    name: str
    override_value: str
    before: str | None
    after: str | None
    verdict: Verdict
    reason: str


@dataclass
class AnalysisReport:
    """Aggregate result of one analysis run."""

    total: int
    redundant: int
    required: int
    results: list[OverrideResult]
    duration: int = 0  # milliseconds
    project_name: str = ""

    @classmethod
    def from_results(
        cls, results: list[OverrideResult], duration: int = 0, project_name: str = ""
    ) -> "AnalysisReport":
        """Build a report, deriving the counts from ``results``."""
        return cls(
            total=len(results),
            redundant=sum(1 for r in results if r.verdict == Verdict.REDUNDANT),
            required=sum(1 for r in results if r.verdict == Verdict.REQUIRED),
            results=list(results),
            duration=duration,
            project_name=project_name,
        )

    @property
    def redundant_names(self) -> list[str]:
        return [r.name for r in self.results if r.verdict == Verdict.REDUNDANT]

    @property
    def required_names(self) -> list[str]:
        return [r.name for r in self.results if r.verdict == Verdict.REQUIRED]


@dataclass
class InstallResult:
    """Outcome of one npm invocation."""

    success: bool
    command: str
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False


@dataclass
class DiffEntry:
    """A package path whose version differs between two lockfiles."""

    package_path: str
    package_name: str
    before_version: str | None
    after_version: str | None
    change: str  # added, removed, changed


@dataclass
class AnalyzerOptions:
    """Options for a batch analysis run."""

    cwd: str
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    verbose: bool = False
    timeout: float | None = None
