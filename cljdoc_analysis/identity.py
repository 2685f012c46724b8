"""Project identity parsing and the path conventions derived from it."""

from __future__ import annotations

from pathlib import Path

from .errors import PreconditionError
from .models import ArtifactRef

RESULT_FILENAME = "cljdoc.json"


def normalize_project(project: str) -> str:
    """Return ``group/artifact``; bare names use the artifact as group."""
    project = project.strip()
    if "/" in project:
        group, _, artifact = project.partition("/")
        return f"{group}/{artifact}"
    return f"{project}/{project}"


def group_id(project: str) -> str:
    return normalize_project(project).split("/", 1)[0]


def artifact_id(project: str) -> str:
    return normalize_project(project).split("/", 1)[1]


def _is_path_segment(value: str) -> bool:
    # group, artifact and version each become one directory of the result path
    return value not in ("", ".", "..") and not any(sep in value for sep in ("/", "\\"))


def make_artifact_ref(
    project: str | None,
    version: str | None,
    archive_location: str | None,
    metadata_location: str | None,
) -> ArtifactRef:
    """Validate raw inputs and build an :class:`ArtifactRef`.

    All four inputs are required, and group, artifact and version must each be
    a single path segment. Nothing touches the filesystem until they have been
    checked.
    """
    required = {
        "project": project,
        "version": version,
        "jar": archive_location,
        "pom": metadata_location,
    }
    missing = [name for name, value in required.items() if not (value or "").strip()]
    if missing:
        raise PreconditionError(
            f"missing required input(s): {', '.join(missing)}",
            project=(project or None),
        )
    normalized = normalize_project(str(project))
    group, artifact = normalized.split("/", 1)
    if not (_is_path_segment(group) and _is_path_segment(artifact)):
        raise PreconditionError(f"invalid project identifier '{project}'", project=project)
    version = str(version).strip()
    if not _is_path_segment(version):
        raise PreconditionError(f"invalid version '{version}'", project=normalized)
    return ArtifactRef(
        project=normalized,
        group_id=group,
        artifact_id=artifact,
        version=version,
        archive_location=str(archive_location).strip(),
        metadata_location=str(metadata_location).strip(),
    )


def result_relpath(ref: ArtifactRef) -> Path:
    """Relative location of the persisted record for ``ref``."""
    return Path(ref.group_id) / ref.artifact_id / ref.version / RESULT_FILENAME


def working_dir_prefix(ref: ArtifactRef) -> str:
    raw = f"cljdoc-{ref.group_id}-{ref.artifact_id}-{ref.version}-"
    return raw.replace("/", "-").replace("\\", "-")


__all__ = [
    "RESULT_FILENAME",
    "artifact_id",
    "group_id",
    "make_artifact_ref",
    "normalize_project",
    "result_relpath",
    "working_dir_prefix",
]
