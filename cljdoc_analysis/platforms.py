"""Deciding which platforms (and namespaces) of a project to analyze."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from .identity import normalize_project
from .models import ProjectOverride

CLJ = "clj"
CLJS = "cljs"
KNOWN_PLATFORMS: Tuple[str, ...] = (CLJ, CLJS)

_PLATFORMS_BY_SUFFIX: Dict[str, Tuple[str, ...]] = {
    ".clj": (CLJ,),
    ".cljs": (CLJS,),
    ".cljc": (CLJ, CLJS),
}

DEFAULT_OVERRIDES: Dict[str, ProjectOverride] = {
    "re-frame/re-frame": ProjectOverride(platforms=(CLJS,)),
    "reagent/reagent": ProjectOverride(platforms=(CLJS,)),
    "yada/yada": ProjectOverride(
        namespaces=(
            "yada.yada",
            "yada.resource",
            "yada.context",
            "yada.handler",
            "yada.request-body",
            "yada.body",
            "yada.multipart",
            "yada.security",
        )
    ),
}


def merge_overrides(
    *tables: Mapping[str, ProjectOverride],
) -> Dict[str, ProjectOverride]:
    """Combine override tables; later tables win per project."""
    merged: Dict[str, ProjectOverride] = {}
    for table in tables:
        for project, override in table.items():
            merged[normalize_project(project)] = override
    return merged


def lookup_override(
    project: str, table: Mapping[str, ProjectOverride]
) -> Optional[ProjectOverride]:
    """Return the override registered for ``project``, if any."""
    key = normalize_project(project)
    override = table.get(key)
    if override is not None:
        return override
    for candidate, value in table.items():
        if normalize_project(candidate) == key:
            return value
    return None


def infer_platforms_from_src_dir(src_dir: Path) -> Tuple[str, ...]:
    """Infer platforms from the source file suffixes found under ``src_dir``."""
    found: set[str] = set()
    for _dirpath, _dirnames, filenames in os.walk(src_dir):
        for filename in filenames:
            found.update(_PLATFORMS_BY_SUFFIX.get(Path(filename).suffix, ()))
        if len(found) == len(KNOWN_PLATFORMS):
            break
    return tuple(platform for platform in KNOWN_PLATFORMS if platform in found)


def resolve_platforms(
    project: str, src_dir: Path, table: Mapping[str, ProjectOverride]
) -> Tuple[str, ...]:
    """Explicit override first, structural inference otherwise. Never merged."""
    override = lookup_override(project, table)
    if override is not None and override.platforms is not None:
        return tuple(dict.fromkeys(override.platforms))
    return infer_platforms_from_src_dir(src_dir)


def resolve_namespaces(
    project: str, table: Mapping[str, ProjectOverride]
) -> Optional[Tuple[str, ...]]:
    override = lookup_override(project, table)
    if override is None:
        return None
    return override.namespaces


__all__ = [
    "CLJ",
    "CLJS",
    "DEFAULT_OVERRIDES",
    "KNOWN_PLATFORMS",
    "infer_platforms_from_src_dir",
    "lookup_override",
    "merge_overrides",
    "resolve_namespaces",
    "resolve_platforms",
]
