"""Pipeline orchestration for a single artifact analysis run."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Mapping, Optional

from .acquire import read_metadata
from .config import AnalysisConfig, default_config
from .dispatch import dispatch_analysis
from .errors import AnalysisPipelineError, PreconditionError
from .identity import make_artifact_ref, result_relpath, working_dir_prefix
from .logging import get_logger, run_logger
from .models import AnalysisOutcome, ArtifactRef, PinnedDependency, ProjectOverride, SandboxSpec
from .persist import export_result, persist_result
from .platforms import DEFAULT_OVERRIDES, merge_overrides, resolve_namespaces, resolve_platforms
from .sandbox import PINNED_DEPENDENCIES, Sandbox, SandboxBuilder
from .schema import assemble_result, validate_result
from .unpack import copy_jar_contents

JAR_CONTENTS_DIR = "jar-contents"


class AnalysisPipeline:
    """Coordinates acquire → unpack → sandbox → analyze → validate → persist."""

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        *,
        sandbox_builder: SandboxBuilder | None = None,
        pinned: Iterable[PinnedDependency] = PINNED_DEPENDENCIES,
        overrides: Mapping[str, ProjectOverride] | None = None,
    ) -> None:
        self.config = config or default_config()
        self.sandbox_builder = sandbox_builder or SandboxBuilder(self.config.sandbox)
        self.pinned = tuple(pinned)
        self.overrides = merge_overrides(DEFAULT_OVERRIDES, self.config.overrides, overrides or {})
        self.logger = get_logger("pipeline")

    def analyze(
        self,
        project: str | None,
        version: str | None,
        jar: str | None,
        pom: str | None,
        *,
        output_dir: Path | None = None,
    ) -> AnalysisOutcome:
        """Analyze one artifact and persist its validated record.

        Raises a subclass of :class:`AnalysisPipelineError` naming the failed
        stage; nothing is persisted in that case.
        """
        ref = make_artifact_ref(project, version, jar, pom)
        try:
            return self._run(ref, output_dir)
        except AnalysisPipelineError as exc:
            raise exc.attach_project(ref.project)

    def copy_jar_contents(self, jar: str, target_dir: Path) -> Path:
        """Unpack ``jar`` into ``target_dir`` without analyzing it."""
        if not (jar or "").strip():
            raise PreconditionError("missing required input(s): jar")
        self.logger.info("Copying contents of %s into %s", jar, target_dir)
        return copy_jar_contents(jar, target_dir, timeout=self.config.download.timeout)

    def _run(self, ref: ArtifactRef, output_dir: Optional[Path]) -> AnalysisOutcome:
        tmp_dir = Path(tempfile.mkdtemp(prefix=working_dir_prefix(ref)))
        jar_contents = tmp_dir / JAR_CONTENTS_DIR
        logger = run_logger("pipeline", ref.project, ref.version)
        logger.info("Starting analysis in %s", tmp_dir)

        sandbox: Sandbox | None = None
        try:
            try:
                copy_jar_contents(
                    ref.archive_location, jar_contents, timeout=self.config.download.timeout
                )
                pom_str = read_metadata(ref.metadata_location, timeout=self.config.download.timeout)

                sandbox = self.sandbox_builder.build(self._sandbox_spec(ref, jar_contents), tmp_dir)

                platforms = resolve_platforms(ref.project, jar_contents, self.overrides)
                namespaces = resolve_namespaces(ref.project, self.overrides)
                if not platforms:
                    logger.warning("No Clojure sources found")
                logger.debug("Platforms %s, namespaces %s", platforms, namespaces or "all")

                codox = dispatch_analysis(
                    sandbox.analyze,
                    platforms,
                    namespaces=namespaces,
                    src_dir=jar_contents,
                    max_workers=self.config.analysis.max_workers,
                )
                record = assemble_result(ref, codox, pom_str, platforms)
                validate_result(record)
            finally:
                if sandbox is not None:
                    sandbox.close()
                shutil.rmtree(jar_contents, ignore_errors=True)

            relpath = result_relpath(ref)
            result_path = persist_result(record, tmp_dir, relpath)
            exported = export_result(result_path, output_dir, relpath) if output_dir else None
        except BaseException:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise

        logger.info("Analysis complete: %s", ", ".join(platforms) or "no platforms")
        return AnalysisOutcome(
            result_path=result_path,
            record=record,
            platforms=platforms,
            exported_path=exported,
            namespaces=namespaces,
        )

    def _sandbox_spec(self, ref: ArtifactRef, jar_contents: Path) -> SandboxSpec:
        extra = tuple(self.config.root / path for path in self.config.sandbox.extra_paths)
        return SandboxSpec(
            pinned=self.pinned,
            target=(ref.project, ref.version),
            visible_directories=(jar_contents,) + extra,
        )


__all__ = ["AnalysisPipeline", "JAR_CONTENTS_DIR"]
