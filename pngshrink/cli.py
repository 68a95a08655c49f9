from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .batch import find_images, process_batch
from .report import build_report, save_report_json
from .results import ProcessOutcome
from .settings import KERNELS, ShrinkSettings


def _positive_int(text: str) -> int:
    try:
        v = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if v < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {v}")
    return v


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pngshrink",
        description="Search a directory tree for PNGs and recompress them in place, optionally downscaling.",
    )

    # Resize
    p.add_argument(
        "-x",
        "--x-max",
        "--max-width",
        dest="max_width",
        type=_positive_int,
        default=None,
        help="Maximum width in pixels; wider images are scaled down (keeps aspect)",
    )
    p.add_argument(
        "-y",
        "--y-max",
        "--max-height",
        dest="max_height",
        type=_positive_int,
        default=None,
        help="Maximum height in pixels; taller images are scaled down (keeps aspect)",
    )
    p.add_argument("--allow-upscale", action="store_true", help="Let a single max dimension enlarge smaller images")
    p.add_argument("-f", "--filter", choices=KERNELS, default="gaussian", help="Resampling kernel (default: gaussian)")

    # Discovery
    p.add_argument("-d", "--dir", default=None, help="Directory to start the recursive search (default: current)")
    p.add_argument("--ext", default="png", help='File extension to match, case-sensitive (default: "png")')

    # Encoder knobs
    p.add_argument(
        "--strategy",
        choices=("default", "filtered", "huffman", "rle", "fixed"),
        default="default",
        help="zlib strategy for the PNG encoder",
    )

    # Execution
    p.add_argument("-j", "--workers", type=_positive_int, default=None, help="Worker threads (default: CPU count + 4, max 32)")
    p.add_argument("--dry-run", action="store_true", help="Report what would change without writing files")
    p.add_argument("--report", default=None, help="Write a JSON report to this path")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    root = Path(args.dir) if args.dir else Path(os.curdir)
    if not root.is_dir():
        print(f"{root}: not a directory", file=sys.stderr)
        return 2

    kwargs = {}
    if args.workers is not None:
        kwargs["workers"] = args.workers

    settings = ShrinkSettings(
        extension=args.ext.lstrip("."),
        max_width=args.max_width,
        max_height=args.max_height,
        allow_upscale=bool(args.allow_upscale),
        filter=args.filter,
        zlib_strategy=args.strategy,
        dry_run=bool(args.dry_run),
        **kwargs,
    )

    paths = find_images(root, settings.extension)

    results, summary = process_batch(
        paths,
        settings,
        progress_callback=_print_progress,
        result_callback=_print_failure,
    )

    if not paths:
        _print_progress(0, 0)

    # Print summary
    print("\n=== Batch Summary ===")
    print("Total found:", summary.total_files)
    print("Replaced   :" if not settings.dry_run else "Would write:", summary.succeeded)
    print("Skipped    :", summary.skipped)
    print("Failed     :", summary.failed)
    print(f"Saved      : {summary.saved_bytes} bytes ({summary.saved_percent:.1f}%)")

    if args.report:
        report = build_report(results, summary, dry_run=settings.dry_run)
        save_report_json(report, Path(args.report))
        print("\nReport written:", args.report)

    # Individual failures were printed above; the run itself succeeded
    return 0


def _print_progress(done: int, total: int) -> None:
    pct = 100.0 if total == 0 else (done / total) * 100.0
    print(f"{pct:06.2f}%", flush=True)


def _print_failure(outcome: ProcessOutcome) -> None:
    if outcome.status == "failed":
        print(f"{outcome.path}:{outcome.error}", flush=True)
