"""Configuration loading for cljdoc analysis (.cljdoc-analysis.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .identity import normalize_project
from .models import ProjectOverride

CONFIG_FILENAME = ".cljdoc-analysis.yml"

ENV_CLOJURE_KEYS = ("CLJDOC_ANALYSIS_CLOJURE",)
ENV_JAVA_KEYS = ("CLJDOC_ANALYSIS_JAVA",)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SandboxConfig:
    """How the isolated analysis environment is built and invoked."""

    clojure_executable: str = "clojure"
    java_executable: str = "java"
    analysis_main: str = "cljdoc.analysis.runner"
    extra_paths: List[str] = field(default_factory=list)
    env_passthrough: List[str] = field(default_factory=list)


@dataclass
class DownloadConfig:
    """Remote archive/descriptor transfer settings."""

    timeout: float = 60.0


@dataclass
class AnalysisSettings:
    """Per-platform dispatch settings."""

    max_workers: int = 1


@dataclass
class AnalysisConfig:
    """Represents the settings defined in .cljdoc-analysis.yml."""

    root: Path
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    overrides: Dict[str, ProjectOverride] = field(default_factory=dict)


def default_config(root: Path | None = None) -> AnalysisConfig:
    """Return defaults with environment overrides applied."""
    config = AnalysisConfig(root=(root or Path.cwd()).resolve())
    _apply_env(config.sandbox)
    return config


def load_config(config_path: Path) -> AnalysisConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return default_config(root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    sandbox = SandboxConfig()
    sandbox_data = _as_dict(data.get("sandbox"))
    if sandbox_data:
        sandbox.clojure_executable = (
            _as_str(sandbox_data.get("clojure_executable")) or sandbox.clojure_executable
        )
        sandbox.java_executable = (
            _as_str(sandbox_data.get("java_executable")) or sandbox.java_executable
        )
        sandbox.analysis_main = _as_str(sandbox_data.get("analysis_main")) or sandbox.analysis_main
        sandbox.extra_paths = _as_str_list(sandbox_data.get("extra_paths"))
        sandbox.env_passthrough = _as_str_list(sandbox_data.get("env_passthrough"))
    _apply_env(sandbox)

    download = DownloadConfig()
    download_data = _as_dict(data.get("download"))
    if "timeout" in download_data:
        timeout = _as_float(download_data.get("timeout"))
        if timeout is None or timeout <= 0:
            raise ConfigError("download.timeout must be a positive number")
        download.timeout = timeout

    analysis = AnalysisSettings()
    analysis_data = _as_dict(data.get("analysis"))
    if "max_workers" in analysis_data:
        workers = _as_int(analysis_data.get("max_workers"))
        if workers is None or workers < 1:
            raise ConfigError("analysis.max_workers must be an integer >= 1")
        analysis.max_workers = workers

    overrides = parse_overrides(data.get("overrides"))

    return AnalysisConfig(
        root=root,
        sandbox=sandbox,
        download=download,
        analysis=analysis,
        overrides=overrides,
    )


def parse_overrides(value: Any) -> Dict[str, ProjectOverride]:
    """Parse the ``overrides`` mapping into normalised :class:`ProjectOverride` entries."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("overrides must be a mapping of project -> settings")

    overrides: Dict[str, ProjectOverride] = {}
    for project, raw in value.items():
        if not isinstance(project, str) or not project.strip():
            raise ConfigError(f"Invalid override key: {project!r}")
        entry = _as_dict(raw)
        platforms = _optional_tuple(entry.get("platforms"))
        namespaces = _optional_tuple(entry.get("namespaces"))
        overrides[normalize_project(project)] = ProjectOverride(
            platforms=platforms, namespaces=namespaces
        )
    return overrides


def _apply_env(sandbox: SandboxConfig) -> None:
    clojure = _first_env_value(ENV_CLOJURE_KEYS)
    if clojure:
        sandbox.clojure_executable = clojure
    java = _first_env_value(ENV_JAVA_KEYS)
    if java:
        sandbox.java_executable = java


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _optional_tuple(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    items = _as_str_list(value)
    return tuple(dict.fromkeys(items))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AnalysisConfig",
    "AnalysisSettings",
    "CONFIG_FILENAME",
    "ConfigError",
    "DownloadConfig",
    "SandboxConfig",
    "default_config",
    "load_config",
    "parse_overrides",
]
