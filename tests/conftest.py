from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.jar_builder import FakeSandboxBuilder, build_jar


@pytest.fixture
def jar_factory(tmp_path: Path):
    """Return a callable that writes a jar with the given entries under tmp_path."""

    def _make(files, name: str = "lib.jar") -> Path:
        return build_jar(tmp_path / "inputs" / name, files)

    return _make


@pytest.fixture
def pom_file(tmp_path: Path) -> Path:
    path = tmp_path / "inputs" / "lib.pom"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def sandbox_builder() -> FakeSandboxBuilder:
    return FakeSandboxBuilder()


@pytest.fixture(autouse=True)
def isolated_tempdir(tmp_path: Path, monkeypatch):
    """Keep pipeline working directories inside the test's tmp_path."""
    work = tmp_path / "system-tmp"
    work.mkdir()
    monkeypatch.setattr("tempfile.tempdir", str(work))
    return work


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by configure_logging (e.g. via the CLI)."""
    yield
    logger = logging.getLogger("cljdoc_analysis")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
