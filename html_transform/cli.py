"""Command line interface for html-transform."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from . import __version__
from .config import ResolvedOptions, resolve_options
from .constants import DEFAULT_LOG_LEVEL
from .core.exceptions import HtmlTransformError, PathViolationError
from .core.path_guard import validate_path
from .logging_config import configure_logging, format_security_summary, summarize_security_log
from .security.batch_reporter import BatchReporter
from .transformer import Transformer

logger = logging.getLogger("html_transform")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="html-transform",
        description="Transform HTML files with gated Python transform modules",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level",
    )
    sub = parser.add_subparsers(dest="command")

    _register_run_command(sub)
    _register_audit_command(sub)
    _register_log_summary_command(sub)

    return parser


def _register_run_command(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("run", help="Apply a transforms directory to HTML files")
    p.add_argument("-i", "--input", help="Input HTML file pattern (glob)")
    p.add_argument(
        "-t", "--transforms", required=True,
        help="Directory containing transform modules and config",
    )
    p.add_argument("-r", "--reference", help="Reference template HTML file")
    p.add_argument("-o", "--output", help="Output directory path")
    p.add_argument("-c", "--config", help="Configuration file path")
    p.add_argument("--dry-run", action="store_true", default=None, help="Run without writing files")
    p.add_argument("--verbose", action="store_true", default=None, help="Enable verbose logging")
    p.add_argument("--no-format", action="store_true", default=None, help="Skip HTML formatting")
    p.add_argument("--formatter-config", help="JSON or YAML file with formatter options")
    p.add_argument(
        "--skip-security-check", action="store_true", default=None,
        help="Load transform modules without risk analysis",
    )
    p.add_argument("--log-file", help="Write JSON-lines logs to this file")


def _register_audit_command(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("audit", help="Risk-analyze every transform module in a directory")
    p.add_argument("directory", help="Transforms directory")
    p.add_argument("--json", action="store_true", help="Print machine-readable output")


def _register_log_summary_command(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("log-summary", help="Summarize security events in a JSON-lines log")
    p.add_argument("log_file", help="Log file written with --log-file")


def output_path_for(input_file: Path, options: ResolvedOptions) -> Path:
    """Output location preserving the input's path below the glob base.

    Raises:
        PathViolationError: If the target would leave the output directory
    """
    if options.output_dir is None:
        raise PathViolationError("No output directory configured")
    try:
        relative = input_file.resolve().relative_to(options.input_base)
    except ValueError:
        relative = Path(input_file.name)
    return validate_path(relative, base_path=options.output_dir)


async def _run(options: ResolvedOptions) -> int:
    transformer = Transformer(options)
    await transformer.prepare()

    if len(options.input_files) > 1:
        logger.info(f"Processing {len(options.input_files)} HTML files...")

    for input_file in options.input_files:
        result = await transformer.transform(input_file)

        if options.dry_run:
            logger.info(f"Dry run: {input_file} processed, nothing written")
            continue

        if options.output_dir is None:
            print(f"=== {input_file} ===\n{result}")
            continue

        output_path = output_path_for(input_file, options)
        if not output_path.parent.exists():
            output_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created output directory: {output_path.parent}")
        output_path.write_text(result, encoding="utf-8")
        logger.info(f"{input_file} -> {output_path}")

    logger.info(
        f"Transformation completed successfully ({len(options.input_files)} files processed)"
    )
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    level = "DEBUG" if args.verbose else args.log_level
    configure_logging(level=level, log_file=args.log_file)

    logger.info("Starting HTML transformation...")
    options = resolve_options(
        transforms=args.transforms,
        input=args.input,
        output=args.output,
        reference=args.reference,
        config_path=args.config,
        dry_run=args.dry_run,
        verbose=args.verbose,
        no_format=args.no_format,
        formatter_config=args.formatter_config,
        skip_security_check=args.skip_security_check,
    )
    if options.verbose and not args.verbose:
        configure_logging(level="DEBUG", log_file=args.log_file)
    logger.debug(f"Resolved options: {options}")

    return asyncio.run(_run(options))


def cmd_audit(args: argparse.Namespace) -> int:
    configure_logging(level=args.log_level)

    reporter = BatchReporter()
    results, summary = asyncio.run(reporter.audit(args.directory))

    if args.json:
        print(json.dumps(BatchReporter.to_dict(results, summary), indent=2))
    else:
        print(BatchReporter.render(results, summary))

    return 1 if summary.unsafe else 0


def cmd_log_summary(args: argparse.Namespace) -> int:
    configure_logging(level=args.log_level)
    print(format_security_summary(summarize_security_log(args.log_file)))
    return 0


_DISPATCH: dict[str, Callable[[argparse.Namespace], int]] = {
    "run": cmd_run,
    "audit": cmd_audit,
    "log-summary": cmd_log_summary,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    handler = _DISPATCH.get(args.command) if args.command else None
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except HtmlTransformError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
