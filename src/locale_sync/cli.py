"""Command-line entry point for locale-sync.

Loads configuration with unified precedence, runs one sync and prints the
report to stdout. Progress and errors are logged to stderr.
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from . import __version__
from .config import SyncOptions, load_options
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config, to_option_fallbacks
from .errors import SyncError
from .logger import setup_logging
from .sync import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
    sync,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locale-sync",
        description="Synchronise local translation files with the remote translation service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync with settings from .env or .locale_sync/config.yml
  locale-sync

  # Preview what would be pushed without touching anything
  locale-sync --project-id my-project --dry

  # Gettext files under ./i18n/<lng>/<ns>.po, pushing changed values too
  locale-sync --path i18n --format po --update-values

Note: The sync report is written to stdout, progress messages to stderr.
        """,
    )

    parser.add_argument(
        "--project-id",
        help="Remote project id (takes precedence over LOCALE_SYNC_PROJECT_ID env var and config files)",
    )
    parser.add_argument(
        "--api-key",
        help="API key for pushing changes and reading private namespaces"
        " (visible in process list -- prefer LOCALE_SYNC_API_KEY env var)",
    )
    parser.add_argument(
        "--version",
        help="Project version to sync (default: latest)",
    )
    parser.add_argument(
        "--api-path",
        help="API base URL (default: https://api.locize.app)",
    )
    parser.add_argument(
        "--path",
        help="Local root directory holding one folder per language (default: ./locales)",
    )
    parser.add_argument(
        "--reference-language",
        help="Source-of-truth language (default: the remote reference language)",
    )
    parser.add_argument(
        "--format",
        help="File format: json, flat, yaml, yaml-rails, po, gettext, csv, xlsx, "
        "android, strings, xliff2, xliff12, xlf2, xlf12, resx, tmx, fluent (default: json)",
    )
    parser.add_argument(
        "--language-folder-prefix",
        help="Prefix of every language folder name (default: none)",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        help="Seconds to wait between pushing and pulling (default: 5)",
    )
    parser.add_argument(
        "--dry",
        action="store_true",
        help="Compute and log all changes but push, delete and write nothing",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Empty the local root before syncing",
    )
    parser.add_argument(
        "--skip-empty",
        action="store_true",
        help="Do not write namespaces without keys",
    )
    parser.add_argument(
        "--update-values",
        action="store_true",
        help="Push changed values of existing keys, not only new keys",
    )
    parser.add_argument(
        "--omit-reference",
        action="store_true",
        help="Do not pull the reference language back when nothing was pushed",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also append log records to this file",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log record format on stderr and in the log file (default: text)",
    )
    parser.add_argument(
        "-V",
        action="version",
        version=f"locale-sync version {__version__}",
    )
    return parser


def _load_unified_config() -> UnifiedConfig:
    config_files = discover_config_files()
    if not config_files:
        return UnifiedConfig()
    unified = build_config(load_hierarchical_config())
    logger.debug("Configuration file: %s", config_files[0])
    return unified


def _load_options(args: argparse.Namespace, unified: UnifiedConfig) -> SyncOptions:
    return load_options(
        project_id=args.project_id,
        api_key=args.api_key,
        version=args.version,
        api_path=args.api_path,
        path=args.path,
        reference_language=args.reference_language,
        format=args.format,
        language_folder_prefix=args.language_folder_prefix,
        settle_delay=args.settle_delay,
        dry=args.dry,
        clean=args.clean,
        skip_empty=args.skip_empty,
        update_values=args.update_values,
        omit_reference=args.omit_reference,
        yaml_fallbacks=to_option_fallbacks(unified),
    )


def main(argv: list[str] | None = None) -> int:
    """Run one sync and return the process exit code."""
    args = build_parser().parse_args(argv)

    # .env first, so ${VAR} interpolation in YAML can use its values
    load_dotenv()

    try:
        unified = _load_unified_config()
    except Exception as e:
        setup_logging(
            debug=args.debug,
            log_file=args.log_file,
            debug_format=args.log_format,
        )
        logger.error("Configuration error: %s", e)
        return 1

    setup_logging(
        debug=args.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=args.log_format,
        level=unified.logging.level,
    )

    try:
        options = _load_options(args, unified)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 1

    logger.info(
        "Syncing '%s' (%s) in %s as %s",
        options.project_id,
        options.version,
        options.path,
        options.format,
    )

    try:
        report = asyncio.run(sync(options))
    except (SyncError, ValueError) as e:
        logger.error("%s", e)
        return 1

    if args.json:
        output = json.dumps(report_to_json(report), indent=2)
    elif options.dry:
        output = format_dry_run_preview(report)
    else:
        output = format_sync_report(report)
    print(output)
    return 0


def run() -> None:
    """Entry point that handles errors gracefully."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
