"""Writing the validated record to its deterministic location."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Mapping

from .errors import PersistError
from .logging import get_logger

_logger = get_logger("persist")


def serialize_result(record: Mapping[str, Any]) -> str:
    return json.dumps(record, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def persist_result(record: Mapping[str, Any], base_dir: Path, relpath: Path) -> Path:
    """Write ``record`` to ``base_dir / relpath`` and return the file path."""
    path = base_dir / relpath
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(serialize_result(record), encoding="utf-8")
    except OSError as exc:
        raise PersistError(f"failed to write {path}: {exc}") from exc
    _logger.info("Wrote analysis result to %s", path)
    return path


def export_result(path: Path, output_dir: Path, relpath: Path) -> Path:
    """Copy a persisted result into a caller-managed output tree."""
    destination = output_dir / relpath
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, destination)
    except OSError as exc:
        raise PersistError(f"failed to export {path} to {destination}: {exc}") from exc
    _logger.debug("Exported analysis result to %s", destination)
    return destination


__all__ = ["export_result", "persist_result", "serialize_result"]
