from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Optional


# Resampling kernels accepted by the CLI.
# "gaussian" is the default, matching the behaviour users expect from the tool.
ResampleKernel = Literal["gaussian", "lanczos", "catmull-rom", "nearest", "linear"]

KERNELS: tuple[str, ...] = ("gaussian", "lanczos", "catmull-rom", "nearest", "linear")

# zlib strategies Pillow understands through the PNG "compress_type" option.
ZlibStrategy = Literal["default", "filtered", "huffman", "rle", "fixed"]


def _default_workers() -> int:
    # Same default as concurrent.futures.ThreadPoolExecutor
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class ShrinkSettings:
    """
    All user-configurable knobs for a shrink run.

    Workers only ever read this object, so it is frozen and shared
    between threads without locking.
    """

    # ----- Discovery -----
    extension: str = "png"  # exact, case-sensitive, no leading dot

    # ----- Resize -----
    # If both are None, resizing is skipped.
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    allow_upscale: bool = False
    filter: ResampleKernel = "gaussian"

    # ----- PNG encoding -----
    # Pillow uses "compress_level" (0-9). Higher = smaller but slower.
    png_compress_level: int = 9
    png_optimize: bool = True
    zlib_strategy: ZlibStrategy = "default"

    # ----- Execution -----
    workers: int = field(default_factory=_default_workers)
    dry_run: bool = False
