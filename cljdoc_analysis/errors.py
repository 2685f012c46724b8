"""Error taxonomy for the analysis pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class AnalysisPipelineError(RuntimeError):
    """Base class for fatal pipeline failures.

    Every error carries the stage that failed and, when known, the project
    under analysis so callers can decide whether to retry the whole run.
    """

    stage = "pipeline"

    def __init__(self, message: str, *, project: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = message
        self.project = project

    def attach_project(self, project: str) -> "AnalysisPipelineError":
        """Record the project identity if the raising stage did not know it."""
        if self.project is None:
            self.project = project
        return self

    def __str__(self) -> str:
        if self.project:
            return f"[{self.stage} {self.project}] {self.detail}"
        return f"[{self.stage}] {self.detail}"


class PreconditionError(AnalysisPipelineError):
    """Raised when a required pipeline input is missing."""

    stage = "precondition"


class AcquisitionError(AnalysisPipelineError):
    """Raised when the archive or metadata descriptor cannot be fetched."""

    stage = "acquire"


class UnpackError(AnalysisPipelineError):
    """Raised when the archive cannot be extracted."""

    stage = "unpack"


class SandboxError(AnalysisPipelineError):
    """Raised when the isolated analysis environment cannot be constructed."""

    stage = "sandbox"


class PersistError(AnalysisPipelineError):
    """Raised when the record cannot be written or exported."""

    stage = "persist"


class PlatformAnalysisError(AnalysisPipelineError):
    """Raised when the external analysis routine fails for a platform."""

    stage = "analyze"

    def __init__(
        self, message: str, *, platform: str, project: Optional[str] = None
    ) -> None:
        super().__init__(f"{platform}: {message}", project=project)
        self.platform = platform


class ResultValidationError(AnalysisPipelineError):
    """Raised when the assembled record does not conform to the result schema."""

    stage = "validate"

    def __init__(
        self,
        message: str,
        *,
        issues: Sequence[str] = (),
        project: Optional[str] = None,
    ) -> None:
        issues = list(issues)
        if issues:
            message = message + ": " + "; ".join(issues)
        super().__init__(message, project=project)
        self.issues = issues


__all__ = [
    "AcquisitionError",
    "AnalysisPipelineError",
    "PersistError",
    "PlatformAnalysisError",
    "PreconditionError",
    "ResultValidationError",
    "SandboxError",
    "UnpackError",
]
