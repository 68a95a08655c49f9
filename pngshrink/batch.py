from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

from .engine import process_image
from .results import BatchSummary, ProcessOutcome, failed
from .settings import ShrinkSettings


logger = logging.getLogger(__name__)


def find_images(root: Path, extension: str = "png") -> Set[Path]:
    """
    Every regular file under `root` whose extension is exactly `extension`
    (case-sensitive, no dot).

    Directories that can't be listed count as empty. Symlinked directories
    are not descended into. The result is unordered.
    """
    found: Set[Path] = set()
    suffix = "." + extension
    stack = [Path(root)]

    while stack:
        d = stack.pop()
        try:
            with os.scandir(d) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("skipping unreadable directory %s: %s", d, e)
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(Path(entry.path))
                elif entry.is_file() and _matches(entry.name, suffix):
                    found.add(Path(entry.path))
            except OSError as e:
                logger.debug("skipping %s: %s", entry.path, e)

    return found


def _matches(name: str, suffix: str) -> bool:
    # Same rule as Path.suffix: a bare ".png" has no extension
    p = Path(name)
    return p.suffix == suffix


def process_batch(
    paths: Iterable[Path],
    settings: ShrinkSettings,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    result_callback: Optional[Callable[[ProcessOutcome], None]] = None,
) -> tuple[List[ProcessOutcome], BatchSummary]:
    """
    Run process_image() over `paths` on a pool of settings.workers threads.

    Results come back in completion order. A file that raises becomes a
    "failed" outcome; nothing one file does stops the others.
    """
    image_list = list(paths)
    total = len(image_list)
    results: List[ProcessOutcome] = []

    with ThreadPoolExecutor(max_workers=max(1, settings.workers)) as executor:
        futures = {executor.submit(_process_one, p, settings): p for p in image_list}

        for done, fut in enumerate(as_completed(futures), start=1):
            outcome = fut.result()
            results.append(outcome)

            if result_callback:
                result_callback(outcome)

            if progress_callback:
                progress_callback(done, total)

    return results, summarize(results)


def _process_one(path: Path, settings: ShrinkSettings) -> ProcessOutcome:
    try:
        return process_image(path, settings)
    except Exception as e:
        logger.debug("%s failed", path, exc_info=True)
        return failed(path, e, src_bytes=_file_size(path))


def summarize(results: List[ProcessOutcome]) -> BatchSummary:
    total_src = 0
    total_out = 0
    succeeded = 0
    skipped = 0
    n_failed = 0

    for r in results:
        total_src += r.src_bytes
        total_out += r.out_bytes

        if r.status == "success":
            succeeded += 1
        elif r.status == "skipped":
            skipped += 1
        else:
            n_failed += 1

    return BatchSummary(
        total_files=len(results),
        succeeded=succeeded,
        skipped=skipped,
        failed=n_failed,
        total_src_bytes=total_src,
        total_out_bytes=total_out,
    )


def _file_size(p: Path) -> int:
    try:
        return p.stat().st_size
    except OSError:
        return 0
