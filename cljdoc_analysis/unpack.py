"""Archive extraction and removal of content that pollutes analysis."""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path

from .acquire import fetch_archive
from .errors import UnpackError
from .logging import get_logger

# Some projects ship their compiled `out` directories (usually under public/)
# inside the jar. NOTE: this also removes sources of libraries whose group is
# `public`.
BUILD_OUTPUT_DIR = "public"
DEPENDENCY_MANIFEST = "deps.cljs"

_logger = get_logger("unpack")


def _normalized_name(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")


def _is_within_directory(base_dir: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(base_dir.resolve())
        return True
    except ValueError:
        return False


def extract_archive(archive: Path, target_dir: Path) -> None:
    """Extract every entry of ``archive`` into ``target_dir``, refusing Zip Slip paths."""
    target = target_dir.resolve()
    target.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            members = zf.infolist()
            for member in members:
                dest = target / _normalized_name(member.filename)
                if not _is_within_directory(target, dest):
                    raise UnpackError(f"archive entry escapes target directory: {member.filename}")

            for member in members:
                norm = _normalized_name(member.filename)
                if not norm:
                    continue
                out_path = target / norm
                if member.is_dir() or norm.endswith("/"):
                    out_path.mkdir(parents=True, exist_ok=True)
                    continue
                out_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member, "r") as src, out_path.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise UnpackError(f"corrupt archive {archive}: {exc}") from exc
    except OSError as exc:
        raise UnpackError(f"failed to extract {archive}: {exc}") from exc


def remove_polluting_content(target_dir: Path) -> None:
    """Delete bundled build output and the top-level ClojureScript deps manifest."""
    build_output = target_dir / BUILD_OUTPUT_DIR
    if build_output.is_dir():
        _logger.info("Deleting %s/ dir", BUILD_OUTPUT_DIR)
        shutil.rmtree(build_output)

    manifest = target_dir / DEPENDENCY_MANIFEST
    if manifest.is_file():
        _logger.info("Deleting %s", DEPENDENCY_MANIFEST)
        manifest.unlink()


def unpack_archive(archive: Path, target_dir: Path) -> Path:
    """Extract ``archive`` into ``target_dir`` and clean it for analysis."""
    _logger.info("Unpacking %s", archive)
    extract_archive(archive, target_dir)
    remove_polluting_content(target_dir)
    return target_dir


def copy_jar_contents(location: str, target_dir: Path, *, timeout: float = 60.0) -> Path:
    """Acquire the archive at ``location`` and unpack it into ``target_dir``.

    A downloaded archive is deleted after extraction; a local one is left alone.
    """
    local = fetch_archive(location, target_dir, timeout=timeout)
    try:
        unpack_archive(local.path, target_dir)
    finally:
        if local.downloaded:
            local.path.unlink(missing_ok=True)
    return target_dir


__all__ = [
    "BUILD_OUTPUT_DIR",
    "DEPENDENCY_MANIFEST",
    "copy_jar_contents",
    "extract_archive",
    "remove_polluting_content",
    "unpack_archive",
]
