import argparse
import sys
from pathlib import Path

from kartka.config.exceptions import ConfigError
from kartka.config.settings import LOG_LEVELS, Settings, load_settings
from kartka.logging.logger import Log
from kartka.processor.exceptions import ProcessorError
from kartka.runner.hydrate_runner import build_hydrate_runner
from kartka.runner.models import BatchReport
from kartka.runner.scan_runner import build_scan_runner
from kartka.search.dispatcher import build_search_dispatcher
from kartka.search.exceptions import SearchError
from kartka.search.models import SearchMatch
from kartka.storage.exceptions import StorageError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
SEARCH_ERROR_EXIT_CODE = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="kartka",
        description="OCR scanned letters into a plain-text index and archive the originals",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Config file (default: $KARTKA_CONFIG or ~/.config/kartka.toml)",
    )
    p.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Override the configured log level",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_scan = sub.add_parser("scan", help="OCR, index and upload every file in scan_dir")
    p_scan.set_defaults(func=cmd_scan)

    p_search = sub.add_parser("search", help="Search the text index")
    p_search.add_argument("query", help="Pattern passed to the search utility")
    p_search.add_argument(
        "--links",
        action="store_true",
        help="Print preview URLs of matching documents (needs preview_url_template)",
    )
    p_search.set_defaults(func=cmd_search)

    p_hydrate = sub.add_parser("hydrate", help="Rebuild the text index from remote storage")
    p_hydrate.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Re-OCR blobs whose index entry already exists",
    )
    p_hydrate.set_defaults(func=cmd_hydrate)

    return p


def cmd_scan(args: argparse.Namespace, settings: Settings) -> int:
    try:
        runner = build_scan_runner(settings)
    except ValueError as exc:
        return _config_error(exc)
    return _batch_exit_code(runner.run())


def cmd_hydrate(args: argparse.Namespace, settings: Settings) -> int:
    try:
        runner = build_hydrate_runner(settings, overwrite=args.overwrite)
    except ValueError as exc:
        return _config_error(exc)
    try:
        report = runner.run()
    except StorageError as exc:
        Log.error(f"Could not list remote storage: {exc}")
        return EXIT_FAILED
    return _batch_exit_code(report)


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    try:
        dispatcher = build_search_dispatcher(settings)
    except ValueError as exc:
        return _config_error(exc)
    if args.links and not settings.preview_url_template:
        Log.error("--links needs preview_url_template in the config")
        return EXIT_CONFIG
    try:
        if args.links:
            result = dispatcher.search(args.query)
            for link in dispatcher.preview_links(result):
                print(link)
        else:
            result = dispatcher.search(args.query, on_match=_print_match)
    except (SearchError, ProcessorError) as exc:
        Log.error(str(exc))
        return SEARCH_ERROR_EXIT_CODE
    return result.exit_code


def _print_match(match: SearchMatch) -> None:
    print(f"{match.path}:{match.line_number}:{match.text}", flush=True)


def _config_error(exc: ValueError) -> int:
    Log.error(f"Invalid configuration: {exc}")
    return EXIT_CONFIG


def _batch_exit_code(report: BatchReport) -> int:
    for failure in report.failures:
        print(f"failed: {failure.name}: {failure.error}", file=sys.stderr)
    return EXIT_FAILED if report.all_failed else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> load config -> dispatch the command."""
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"kartka: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    Log.configure(args.log_level or settings.log_level)

    try:
        return args.func(args, settings)
    except ProcessorError as exc:
        Log.error(str(exc))
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
