"""Command-line entry point for resolving VideoScript exports."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from . import config
from .core.errors import InvalidPackageError, ProjectLoadError, SchemaValidationError, ValidationError
from .core.frame_sampler import compute_sample_frames
from .core.package_loader import LoadedPackage, open_package
from .core.plan_writer import project_summary, write_plan
from .core.remote import fetch_project
from .utils import file_tools, validators

logger = logging.getLogger("videoscript")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=config.LOG_FORMAT,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="videoscript",
        description="Resolve VideoScript project exports into per-frame render plans.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Resolve an export (.zip, .json or URL) into a render plan")
    render.add_argument("input", help="Path to the export file (.zip or .json) or a project JSON URL")
    render.add_argument("-o", "--output", type=Path, help="Output path for the render plan JSON")
    render.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    render.add_argument("--dry-run", action="store_true", help="Validate the export without resolving frames")
    render.add_argument("--keep-temp", action="store_true", help="Keep temporary files after rendering")
    render.add_argument(
        "--max-size",
        type=int,
        metavar="MB",
        help=f"Maximum uncompressed ZIP size in MB (default: {config.MAX_ARCHIVE_BYTES // (1024 * 1024)})",
    )
    render.add_argument("--frames", help="Explicit frames to resolve, e.g. '0,30,45' or '0-90'")
    render.add_argument("--sample", type=int, help="Resolve this many evenly spaced frames")
    render.add_argument("--step", type=int, help="Resolve every Nth frame")
    render.add_argument("--start", type=int, help="First frame of the span (default: 0)")
    render.add_argument("--end", type=int, help="End frame of the span, exclusive (default: project duration)")
    render.add_argument("--max-frames", type=int, help="Resolve at most this many frames of the selection")
    render.add_argument("--assets-base-url", help="Rewrite bundled 'assets/' references against this URL")
    render.add_argument(
        "--workers",
        type=int,
        default=config.RENDER_WORKERS,
        help=f"Worker threads used to resolve frames (default: {config.RENDER_WORKERS})",
    )
    return parser


def _log_project_info(package: LoadedPackage) -> None:
    summary = project_summary(package)
    logger.info("Project Information:")
    logger.info("   Name: %s", summary["name"])
    logger.info("   Resolution: %sx%s", summary["width"], summary["height"])
    logger.info("   FPS: %s", summary["fps"])
    logger.info("   Duration: %s frames (%.2fs)", summary["duration_in_frames"], summary["duration_seconds"])
    logger.info("   Prototypes: %s", summary["prototypes"])
    logger.info("   Compositions: %s", len(summary["compositions"]))
    if summary["media_files"]:
        logger.info("   Media files: %s", summary["media_files"])


def _resolve_and_write(package: LoadedPackage, args: argparse.Namespace, frames: Optional[list[int]]) -> int:
    _log_project_info(package)
    if args.dry_run:
        logger.info("Dry run completed successfully; run without --dry-run to resolve frames")
        return 0

    selected = compute_sample_frames(
        package.project,
        frames=frames,
        sample_count=args.sample,
        step=args.step,
        start_frame=args.start,
        end_frame=args.end,
        max_frames=args.max_frames,
    )
    output_path = args.output or Path.cwd() / file_tools.format_output_filename(
        package.project.name, None, timestamp=int(time.time() * 1000)
    )
    started = time.perf_counter()
    outcome = write_plan(package, selected, output_path, workers=args.workers)
    logger.info(
        "Resolved %s frames in %.1fs (%s warnings)",
        outcome.frame_count,
        time.perf_counter() - started,
        outcome.warning_count,
    )
    logger.info("Output file: %s", outcome.plan_path)
    return 0


def render(args: argparse.Namespace) -> int:
    frames = validators.parse_frame_list(args.frames)
    validators.validate_positive_int(args.sample, "Sample count")
    validators.validate_positive_int(args.step, "Step")
    validators.validate_positive_int(args.max_frames, "Maximum frame count")
    validators.validate_frame_selection(frames, args.sample, args.step)
    validators.validate_frame_range(args.start, args.end)
    max_bytes = validators.validate_max_size(args.max_size) or config.MAX_ARCHIVE_BYTES

    if args.input.startswith(("http://", "https://")):
        package = fetch_project(args.input, assets_base_url=args.assets_base_url)
        return _resolve_and_write(package, args, frames)

    with open_package(
        Path(args.input),
        assets_base_url=args.assets_base_url,
        max_bytes=max_bytes,
        keep_temp=args.keep_temp,
    ) as package:
        return _resolve_and_write(package, args, frames)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return render(args)
    except (InvalidPackageError, SchemaValidationError, ValidationError, ProjectLoadError) as exc:
        logger.error("Render failed: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
