"""CLI entrypoints for cljdoc analysis commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import AnalysisPipelineError
from .logging import configure_logging
from .pipeline import AnalysisPipeline


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cljdoc-analysis",
        description="Analyze a published Clojure artifact and record its public API.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .cljdoc-analysis.yml or the directory containing it.",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Build the analysis record for a project version.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("-p", "--project", help="Project to analyze, e.g. bidi or org.clojure/core.async.")
    analyze_parser.add_argument("--version", dest="version", help="Version of the project to analyze.")
    analyze_parser.add_argument("-j", "--jar", help="Path to the jar (local path or remote URI).")
    analyze_parser.add_argument("--pom", help="Path to the pom (local path or remote URI).")
    analyze_parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory the finished record is copied into.",
    )

    unpack_parser = subparsers.add_parser(
        "unpack",
        help="Copy the contents of a jar into a directory.",
    )
    _add_verbose_option(unpack_parser, suppress_default=True)
    unpack_parser.add_argument("-j", "--jar", required=True, help="Path to the jar (local path or remote URI).")
    unpack_parser.add_argument("-t", "--target", required=True, help="Directory to unpack into.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cljdoc analysis commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    pipeline = AnalysisPipeline(config)

    if args.command == "analyze":
        output_dir = Path(args.output_dir) if args.output_dir else None
        try:
            outcome = pipeline.analyze(
                args.project, args.version, args.jar, args.pom, output_dir=output_dir
            )
        except AnalysisPipelineError as exc:
            parser.exit(1, f"cljdoc-analysis analyze failed: {exc}\nRun with --verbose for more details.\n")
        print(outcome.exported_path or outcome.result_path)
    elif args.command == "unpack":
        try:
            target = pipeline.copy_jar_contents(args.jar, Path(args.target))
        except AnalysisPipelineError as exc:
            parser.exit(1, f"cljdoc-analysis unpack failed: {exc}\n")
        print(f"Unpacked into {target}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
