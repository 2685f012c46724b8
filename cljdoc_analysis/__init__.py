"""Analysis of published Clojure artifacts into validated API records."""

from .errors import (
    AcquisitionError,
    AnalysisPipelineError,
    PersistError,
    PlatformAnalysisError,
    PreconditionError,
    ResultValidationError,
    SandboxError,
    UnpackError,
)
from .pipeline import AnalysisPipeline

__all__ = [
    "AcquisitionError",
    "AnalysisPipeline",
    "AnalysisPipelineError",
    "PersistError",
    "PlatformAnalysisError",
    "PreconditionError",
    "ResultValidationError",
    "SandboxError",
    "UnpackError",
]
