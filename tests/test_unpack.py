"""Tests for cljdoc_analysis.unpack."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from cljdoc_analysis.errors import UnpackError
from cljdoc_analysis.unpack import copy_jar_contents, unpack_archive


def test_unpack_extracts_all_entries(tmp_path: Path, jar_factory) -> None:
    jar = jar_factory({"bidi/bidi.clj": "(ns bidi.bidi)", "META-INF/MANIFEST.MF": "x"})
    target = tmp_path / "out"

    unpack_archive(jar, target)

    assert (target / "bidi" / "bidi.clj").read_text(encoding="utf-8") == "(ns bidi.bidi)"
    assert (target / "META-INF" / "MANIFEST.MF").exists()


def test_unpack_removes_bundled_build_output(tmp_path: Path, jar_factory) -> None:
    jar = jar_factory(
        {
            "app/core.cljs": "(ns app.core)",
            "public/js/out/goog/base.js": "var goog;",
            "public/js/out/app/core.cljs": "(ns app.core)",
        }
    )
    target = tmp_path / "out"

    unpack_archive(jar, target)

    assert not (target / "public").exists()
    assert (target / "app" / "core.cljs").exists()


def test_unpack_removes_top_level_deps_cljs_only(tmp_path: Path, jar_factory) -> None:
    jar = jar_factory(
        {
            "deps.cljs": "{:npm-deps {\"left-pad\" \"1.0.0\"}}",
            "vendor/deps.cljs": "{}",
            "app/core.cljs": "(ns app.core)",
        }
    )
    target = tmp_path / "out"

    unpack_archive(jar, target)

    assert not (target / "deps.cljs").exists()
    assert (target / "vendor" / "deps.cljs").exists()


def test_unpack_drops_sources_of_public_group(tmp_path: Path, jar_factory) -> None:
    # Known limitation: a library whose namespaces live under `public` loses them.
    jar = jar_factory({"public/api.clj": "(ns public.api)"})
    target = tmp_path / "out"

    unpack_archive(jar, target)

    assert not (target / "public" / "api.clj").exists()


def test_unpack_rejects_entries_escaping_target(tmp_path: Path) -> None:
    jar = tmp_path / "evil.jar"
    with zipfile.ZipFile(jar, "w") as zf:
        zf.writestr("../escape.clj", "(ns escape)")

    with pytest.raises(UnpackError):
        unpack_archive(jar, tmp_path / "out")

    assert not (tmp_path / "escape.clj").exists()


def test_unpack_rejects_corrupt_archive(tmp_path: Path) -> None:
    jar = tmp_path / "broken.jar"
    jar.write_bytes(b"definitely not a zip")

    with pytest.raises(UnpackError):
        unpack_archive(jar, tmp_path / "out")


def test_copy_jar_contents_leaves_local_archive(tmp_path: Path, jar_factory) -> None:
    jar = jar_factory({"foo/core.clj": "(ns foo.core)"})
    target = tmp_path / "out"

    copy_jar_contents(str(jar), target)

    assert jar.exists()
    assert (target / "foo" / "core.clj").exists()


def test_copy_jar_contents_deletes_downloaded_archive(tmp_path: Path, monkeypatch) -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("foo/core.clj", "(ns foo.core)")

    class FakeResponse(io.BytesIO):
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(
        "cljdoc_analysis.acquire.urlopen",
        lambda url, timeout=None: FakeResponse(buffer.getvalue()),
    )
    target = tmp_path / "out"

    copy_jar_contents("https://repo.example.org/foo.jar", target)

    assert (target / "foo" / "core.clj").exists()
    assert not (tmp_path / "out-downloaded.jar").exists()


def test_remote_archive_with_entry_named_like_download(tmp_path: Path, monkeypatch) -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("downloaded.jar", "inner")
        zf.writestr("foo/core.clj", "(ns foo.core)")

    class FakeResponse(io.BytesIO):
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(
        "cljdoc_analysis.acquire.urlopen",
        lambda url, timeout=None: FakeResponse(buffer.getvalue()),
    )
    target = tmp_path / "out"

    copy_jar_contents("https://repo.example.org/foo.jar", target)

    assert (target / "downloaded.jar").read_text(encoding="utf-8") == "inner"
    assert (target / "foo" / "core.clj").exists()
    assert not (tmp_path / "out-downloaded.jar").exists()
