from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from .results import NOT_SMALLER, ProcessOutcome


logger = logging.getLogger(__name__)

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def safe_replace(encoded: bytes, target: Path, dry_run: bool = False) -> ProcessOutcome:
    """
    Put `encoded` at `target` unless the file already there is smaller.

    The bytes go to a temp file in the target's own directory (so the final
    rename stays on one filesystem) and are renamed over the target in one
    step. Every OSError propagates unchanged; until the rename happens the
    target is untouched and the temp file is removed on the way out.
    """
    target = Path(target)

    if dry_run:
        return _compare_only(encoded, target)

    # Create temp file next to the target so os.replace is atomic
    fd, tmp_name = tempfile.mkstemp(prefix=".pngshrink_", suffix=".tmp", dir=str(target.parent))
    tmp_path = Path(tmp_name)
    renamed = False
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(encoded)
            f.flush()
            os.fsync(f.fileno())

        tmp_bytes = tmp_path.stat().st_size
        src_bytes = 0

        if target.exists():
            src_bytes = target.stat().st_size
            if src_bytes < tmp_bytes:
                logger.debug("%s: keeping original (%d < %d bytes)", target, src_bytes, tmp_bytes)
                return ProcessOutcome(
                    path=target,
                    status="skipped",
                    src_bytes=src_bytes,
                    out_bytes=src_bytes,
                    reason=NOT_SMALLER,
                )

            mode = _clear_readonly(target)
            # mkstemp creates 0600; the replacement keeps the target's permissions
            os.chmod(tmp_path, mode)

        os.replace(tmp_path, target)
        renamed = True
        logger.debug("%s: replaced (%d -> %d bytes)", target, src_bytes, tmp_bytes)

        return ProcessOutcome(
            path=target,
            status="success",
            src_bytes=src_bytes,
            out_bytes=tmp_bytes,
        )
    finally:
        if not renamed:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("could not remove temp file %s: %s", tmp_path, e)


def _clear_readonly(path: Path) -> int:
    """Give the owner write permission if the file has none. Returns the resulting mode bits."""
    mode = stat.S_IMODE(path.stat().st_mode)
    if not mode & _WRITE_BITS:
        mode |= stat.S_IWUSR
        os.chmod(path, mode)
        logger.debug("%s: cleared read-only flag", path)
    return mode


def _compare_only(encoded: bytes, target: Path) -> ProcessOutcome:
    new_bytes = len(encoded)
    if not target.exists():
        return ProcessOutcome(path=target, status="success", src_bytes=0, out_bytes=new_bytes)

    src_bytes = target.stat().st_size
    if src_bytes < new_bytes:
        return ProcessOutcome(
            path=target,
            status="skipped",
            src_bytes=src_bytes,
            out_bytes=src_bytes,
            reason=NOT_SMALLER,
        )
    return ProcessOutcome(path=target, status="success", src_bytes=src_bytes, out_bytes=new_bytes)
