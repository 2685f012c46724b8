"""Core data models shared across the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ArtifactRef:
    """Identity and locations of the artifact under analysis."""

    project: str
    group_id: str
    artifact_id: str
    version: str
    archive_location: str
    metadata_location: str

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}/{self.artifact_id}"


@dataclass(frozen=True)
class LocalArchive:
    """An archive available on local disk.

    ``downloaded`` is True when the pipeline fetched the file itself and
    therefore owns (and later deletes) it.
    """

    path: Path
    downloaded: bool


@dataclass(frozen=True)
class PinnedDependency:
    """A version-exact library the analysis routine needs inside the sandbox."""

    name: str
    version: str
    exclusions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SandboxSpec:
    """Everything needed to construct an isolated analysis environment."""

    pinned: Tuple[PinnedDependency, ...]
    target: Tuple[str, str]
    visible_directories: Tuple[Path, ...]


@dataclass(frozen=True)
class ProjectOverride:
    """Explicit analysis settings for a single project."""

    platforms: Optional[Tuple[str, ...]] = None
    namespaces: Optional[Tuple[str, ...]] = None


@dataclass
class AnalysisOutcome:
    """Result of a completed pipeline run."""

    result_path: Path
    record: Dict[str, Any]
    platforms: Tuple[str, ...]
    exported_path: Optional[Path] = None
    namespaces: Optional[Tuple[str, ...]] = None
