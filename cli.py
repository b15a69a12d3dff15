import argparse
import sys
from pathlib import Path
from typing import List, Optional

from volume_forge.config import Settings
from volume_forge.errors import DestinationUnresolvableError
from volume_forge.loaders.spec_loader import parse_spec_token, read_spec_file
from volume_forge.models.specs import FillMode, gb_to_bytes
from volume_forge.pipelines.coordinator import CoordinatorDependencies, RunCoordinator
from volume_forge.sources.content_source import ContentSource
from volume_forge.utils.logging_utils import get_logger, set_log_level

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create a tree of placeholder files that adds up to a target size."
    )
    parser.add_argument("destination", help="Root directory to create files under")
    parser.add_argument(
        "specs",
        nargs="*",
        help='File specs: "path" (size from the budget) or "path:MB" (explicit size in megabytes)',
    )
    parser.add_argument("--total-gb", type=float, default=None, help="Total size budget in gigabytes")
    parser.add_argument("--spec-file", default=None, help="JSON array of specs (strings or {path, size_mb})")
    parser.add_argument(
        "--fill",
        choices=[m.value for m in FillMode],
        default=None,
        help="Fill files with zeros or with repeated fetched text",
    )
    parser.add_argument("--url", action="append", default=None, help="Source URL for text fill (repeatable)")
    parser.add_argument(
        "--source-file",
        default=None,
        help="Local text file to use instead of fetching URLs (implies --fill text)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Files written in parallel (default: 1)")
    parser.add_argument("--dry-run", action="store_true", help="Plan sizes without writing anything")
    parser.add_argument(
        "--report",
        default=None,
        help="Also write the JSON summary to this path (stdout mixes log lines with the summary "
        "unless --log-level WARNING is given)",
    )
    parser.add_argument("--event-log", default=None, help="Append JSONL run events to this path")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.total_gb is not None:
        overrides["total_size_gb"] = args.total_gb
    if args.fill is not None:
        overrides["fill_mode"] = FillMode(args.fill)
    if args.url:
        overrides["source_urls"] = args.url
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.dry_run:
        overrides["dry_run"] = True
    if args.event_log is not None:
        overrides["event_log_path"] = args.event_log
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    settings = Settings(**overrides)
    set_log_level(settings.log_level)

    if settings.total_size_gb < 0:
        logger.error("Total size must be non-negative, got %s GB", settings.total_size_gb)
        return EXIT_FATAL

    raw_specs = [parse_spec_token(token) for token in args.specs]
    if args.spec_file:
        try:
            raw_specs.extend(read_spec_file(args.spec_file))
        except (OSError, ValueError) as exc:
            logger.error("Cannot read spec file %s: %s", args.spec_file, exc)
            return EXIT_FATAL

    dep_overrides = {}
    if args.source_file:
        if settings.fill_mode != FillMode.BUFFERED:
            if args.fill is None:
                settings.fill_mode = FillMode.BUFFERED
            else:
                logger.warning("Ignoring --source-file %s because --fill is %s", args.source_file, args.fill)
        if settings.fill_mode == FillMode.BUFFERED:
            try:
                text = Path(args.source_file).read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Cannot read source file %s, using zero fill. Error=%s", args.source_file, exc)
                text = ""
            # an empty source makes the run fall back to zero fill
            dep_overrides["content_source"] = ContentSource.from_text(text)

    coordinator = RunCoordinator(settings, CoordinatorDependencies.from_settings(settings, **dep_overrides))

    try:
        summary = coordinator.run(
            destination=args.destination,
            specs=raw_specs,
            total_budget_bytes=gb_to_bytes(settings.total_size_gb),
            fill_mode=settings.fill_mode,
            urls=settings.source_urls,
        )
    except DestinationUnresolvableError as exc:
        logger.error("%s", exc)
        return EXIT_FATAL

    payload = summary.model_dump_json(indent=2)
    print(payload)
    if args.report:
        report_path = Path(args.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(payload + "\n", encoding="utf-8")

    if summary.status == "aborted":
        return EXIT_FATAL
    if summary.files_failed:
        return EXIT_PARTIAL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
