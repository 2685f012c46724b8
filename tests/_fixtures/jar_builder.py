"""Helpers for building throwaway jars and stand-in sandboxes in tests."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from cljdoc_analysis.models import SandboxSpec


def build_jar(path: Path, files: Mapping[str, str]) -> Path:
    """Write a zip archive at ``path`` containing ``name -> contents`` entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def fake_doc_tree(src_dir: Path, platform: str) -> List[Dict[str, Any]]:
    """Deterministic doc tree listing one namespace per matching source file."""
    suffixes = {"clj": (".clj", ".cljc"), "cljs": (".cljs", ".cljc")}[platform]
    namespaces = []
    for source in sorted(src_dir.rglob("*")):
        if source.suffix not in suffixes:
            continue
        rel = source.relative_to(src_dir).with_suffix("")
        name = ".".join(rel.parts).replace("_", "-")
        namespaces.append(
            {
                "name": name,
                "doc": None,
                "publics": [
                    {
                        "name": "hello",
                        "type": "var",
                        "arglists": [["x"]],
                        "doc": f"Says hello on {platform}.",
                        "file": rel.with_suffix(source.suffix).as_posix(),
                        "line": 1,
                    }
                ],
            }
        )
    return namespaces


class FakeSandbox:
    """Stand-in for :class:`cljdoc_analysis.sandbox.Sandbox` that needs no JVM."""

    def __init__(self, spec: SandboxSpec, root: Path, fail_on: Sequence[str] = ()) -> None:
        self.spec = spec
        self.root = root
        self.fail_on = set(fail_on)
        self.calls: List[Tuple[Optional[Tuple[str, ...]], Path, str]] = []
        self.closed = False

    def analyze(self, namespaces, src_dir: Path, platform: str) -> Any:
        self.calls.append((tuple(namespaces) if namespaces is not None else None, src_dir, platform))
        if platform in self.fail_on:
            raise RuntimeError(f"boom while analyzing {platform}")
        return fake_doc_tree(src_dir, platform)

    def close(self) -> None:
        self.closed = True


class FakeSandboxBuilder:
    """Records sandbox construction requests and hands out :class:`FakeSandbox` instances."""

    def __init__(self, *, fail_on: Sequence[str] = (), error: Exception | None = None) -> None:
        self.fail_on = fail_on
        self.error = error
        self.built: List[FakeSandbox] = []

    def build(self, spec: SandboxSpec, workdir: Path) -> FakeSandbox:
        if self.error is not None:
            raise self.error
        sandbox = FakeSandbox(spec, workdir / "sandbox", fail_on=self.fail_on)
        self.built.append(sandbox)
        return sandbox


__all__ = ["FakeSandbox", "FakeSandboxBuilder", "build_jar", "fake_doc_tree"]
