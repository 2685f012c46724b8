"""Running the external analysis routine once per platform."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from .errors import AnalysisPipelineError, PlatformAnalysisError
from .logging import get_logger

AnalyzeFn = Callable[[Optional[Sequence[str]], Path, str], Any]

_logger = get_logger("dispatch")


def _run_one(
    analyze: AnalyzeFn,
    namespaces: Optional[Sequence[str]],
    src_dir: Path,
    platform: str,
) -> Any:
    _logger.info("Analyzing %s", platform)
    try:
        return analyze(namespaces, src_dir, platform)
    except AnalysisPipelineError:
        raise
    except Exception as exc:
        raise PlatformAnalysisError(str(exc) or type(exc).__name__, platform=platform) from exc


def dispatch_analysis(
    analyze: AnalyzeFn,
    platforms: Sequence[str],
    *,
    namespaces: Optional[Sequence[str]],
    src_dir: Path,
    max_workers: int = 1,
) -> Dict[str, Any]:
    """Return ``{platform: doc_tree}`` in ``platforms`` order.

    Any failure aborts the whole dispatch; no partial mapping is returned.
    """
    if max_workers <= 1 or len(platforms) <= 1:
        return {
            platform: _run_one(analyze, namespaces, src_dir, platform)
            for platform in platforms
        }

    with ThreadPoolExecutor(max_workers=min(max_workers, len(platforms))) as executor:
        futures: Dict[str, Future[Any]] = {
            platform: executor.submit(_run_one, analyze, namespaces, src_dir, platform)
            for platform in platforms
        }
        done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for platform in platforms:
            future = futures[platform]
            if future in done and future.exception() is not None:
                raise future.exception()  # type: ignore[misc]
        return {platform: futures[platform].result() for platform in platforms}


__all__ = ["AnalyzeFn", "dispatch_analysis"]
