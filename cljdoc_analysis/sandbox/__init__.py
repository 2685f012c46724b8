"""Isolated analysis environments."""

from .deps import PINNED_DEPENDENCIES, render_deps_edn, sandbox_dependencies
from .environment import Sandbox, SandboxBuilder, build_sandbox_env

__all__ = [
    "PINNED_DEPENDENCIES",
    "Sandbox",
    "SandboxBuilder",
    "build_sandbox_env",
    "render_deps_edn",
    "sandbox_dependencies",
]
