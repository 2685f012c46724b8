"""Construction and use of isolated analysis environments."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..config import SandboxConfig
from ..errors import PlatformAnalysisError, SandboxError
from ..logging import get_logger
from ..models import SandboxSpec
from .deps import render_deps_edn

CommandRunner = Callable[..., str]

# Variables a sandboxed process may see; everything else in the host
# environment (CLASSPATH, CLJ_CONFIG, JAVA_TOOL_OPTIONS, ...) is dropped.
BASE_ENV_PASSTHROUGH = ("PATH", "HOME", "JAVA_HOME", "LANG")


def build_sandbox_env(
    extra: Iterable[str] = (), source: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Return the scrubbed environment handed to sandboxed subprocesses."""
    source = os.environ if source is None else source
    allowed = list(BASE_ENV_PASSTHROUGH) + [key for key in extra if key]
    return {key: source[key] for key in allowed if key in source}


def _default_runner(
    args: Sequence[str],
    cwd: Path,
    env: Optional[Mapping[str, str]] = None,
    capture_output: bool = False,
) -> str:
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        env=dict(env) if env is not None else None,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout if capture_output else ""


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip()
        return f"exit code {exc.returncode}: {stderr}" if stderr else f"exit code {exc.returncode}"
    return str(exc)


class Sandbox:
    """An isolated environment bound to one resolved classpath.

    Instances are created by :class:`SandboxBuilder` for a single pipeline run
    and must not be shared between runs.
    """

    def __init__(
        self,
        spec: SandboxSpec,
        root: Path,
        classpath: str,
        settings: SandboxConfig,
        *,
        runner: CommandRunner,
        env: Mapping[str, str],
    ) -> None:
        self.spec = spec
        self.root = root
        self.classpath = classpath
        self.settings = settings
        self._runner = runner
        self._env = dict(env)
        self.logger = get_logger("sandbox")

    @property
    def env(self) -> dict[str, str]:
        return dict(self._env)

    def analyze(
        self, namespaces: Optional[Sequence[str]], src_dir: Path, platform: str
    ) -> Any:
        """Run the external analysis routine for ``platform`` and return its doc tree."""
        output = self.root / f"analysis-{platform}.json"
        output.unlink(missing_ok=True)
        request = {
            "namespaces": list(namespaces) if namespaces is not None else None,
            "src": str(src_dir),
            "platform": platform,
            "output": str(output),
        }
        args = [
            self.settings.java_executable,
            "-cp",
            self.classpath,
            "clojure.main",
            "-m",
            self.settings.analysis_main,
            json.dumps(request, sort_keys=True),
        ]
        self.logger.debug("Invoking %s for %s", self.settings.analysis_main, platform)
        try:
            self._runner(args, cwd=self.root, env=self._env)
        except (subprocess.CalledProcessError, OSError) as exc:
            raise PlatformAnalysisError(
                f"analysis process failed ({_describe_failure(exc)})", platform=platform
            ) from exc

        if not output.is_file():
            raise PlatformAnalysisError(
                f"analysis produced no output at {output}", platform=platform
            )
        try:
            return json.loads(output.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PlatformAnalysisError(
                f"analysis output is not valid JSON: {exc}", platform=platform
            ) from exc

    def close(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)

    def __enter__(self) -> "Sandbox":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SandboxBuilder:
    """Resolves the pinned dependency set into a fresh :class:`Sandbox`."""

    def __init__(
        self,
        settings: SandboxConfig | None = None,
        *,
        runner: CommandRunner | None = None,
    ) -> None:
        self.settings = settings or SandboxConfig()
        self._runner = runner or _default_runner
        self.logger = get_logger("sandbox")

    def build(self, spec: SandboxSpec, workdir: Path) -> Sandbox:
        """Resolve ``spec`` inside a new directory under ``workdir``.

        Only dependency resolution happens here; no analysis code is executed.
        """
        workdir.mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix="sandbox-", dir=workdir))
        env = build_sandbox_env(self.settings.env_passthrough)
        try:
            (root / "deps.edn").write_text(render_deps_edn(spec), encoding="utf-8")
            # -Srepro ignores user and system deps.edn files.
            args = [self.settings.clojure_executable, "-Srepro", "-Sforce", "-Spath"]
            self.logger.info("Resolving sandbox dependencies for %s %s", *spec.target)
            try:
                resolved = self._runner(args, cwd=root, env=env, capture_output=True)
            except (subprocess.CalledProcessError, OSError) as exc:
                raise SandboxError(
                    f"dependency resolution failed ({_describe_failure(exc)})"
                ) from exc
            resolved = resolved.strip()
            if not resolved:
                raise SandboxError("dependency resolution returned an empty classpath")
        except BaseException:
            shutil.rmtree(root, ignore_errors=True)
            raise

        entries = [str(path) for path in spec.visible_directories]
        entries.append(resolved)
        classpath = os.pathsep.join(entries)
        self.logger.debug("Sandbox classpath: %s", classpath)
        return Sandbox(spec, root, classpath, self.settings, runner=self._runner, env=env)


__all__ = ["BASE_ENV_PASSTHROUGH", "CommandRunner", "Sandbox", "SandboxBuilder", "build_sandbox_env"]
