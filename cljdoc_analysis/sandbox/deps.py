"""The pinned dependency set loaded into every analysis sandbox."""

from __future__ import annotations

import json
from typing import Iterable, List, Tuple

from ..identity import normalize_project
from ..models import PinnedDependency, SandboxSpec

# This is what is loaded into the sandbox used for analysis. It is also the
# set of libraries we cannot document in versions other than these.
PINNED_DEPENDENCIES: Tuple[PinnedDependency, ...] = (
    PinnedDependency("org.clojure/clojure", "1.9.0"),
    PinnedDependency("org.clojure/java.classpath", "0.2.2"),
    PinnedDependency("org.clojure/tools.namespace", "0.2.11"),
    # codox depends on an old ClojureScript which fails with Clojure 1.9
    PinnedDependency("org.clojure/clojurescript", "1.10.238"),
    # dev-dependencies of popular libraries (manifold, pedestal interceptors)
    PinnedDependency("org.clojure/core.async", "RELEASE"),
    PinnedDependency("org.clojure/tools.logging", "RELEASE"),
    PinnedDependency(
        "codox/codox",
        "0.10.3",
        exclusions=("enlive/enlive", "hiccup/hiccup", "org.pegdown/pegdown"),
    ),
)


def sandbox_dependencies(spec: SandboxSpec) -> List[PinnedDependency]:
    """Return the pinned set plus the target; the target wins on a name clash."""
    target_name, target_version = spec.target
    target = PinnedDependency(normalize_project(target_name), target_version)
    deps = [dep for dep in spec.pinned if normalize_project(dep.name) != target.name]
    deps.append(target)
    return deps


def _edn_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _edn_symbols(names: Iterable[str]) -> str:
    return "[" + " ".join(normalize_project(name) for name in names) + "]"


def render_deps_edn(spec: SandboxSpec) -> str:
    """Render a deterministic ``deps.edn`` for ``spec``.

    Source directories are placed on the classpath directly, so ``:paths`` is
    always empty.
    """
    lines = []
    for dep in sandbox_dependencies(spec):
        coordinate = f":mvn/version {_edn_string(dep.version)}"
        if dep.exclusions:
            coordinate += f" :exclusions {_edn_symbols(dep.exclusions)}"
        lines.append(f"  {normalize_project(dep.name)} {{{coordinate}}}")
    body = "\n".join(lines)
    return "{:paths []\n :deps\n {\n" + body + "\n }}\n"


__all__ = ["PINNED_DEPENDENCIES", "render_deps_edn", "sandbox_dependencies"]
