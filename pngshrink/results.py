from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional


Status = Literal["success", "skipped", "failed"]

NOT_SMALLER = "new version not smaller"


@dataclass(frozen=True)
class ProcessOutcome:
    """
    Output of processing a single image.

    Keeping it immutable (frozen=True) makes it easier to reason about,
    and each worker produces its own.
    """
    path: Path
    status: Status
    src_bytes: int = 0
    out_bytes: int = 0
    reason: Optional[str] = None  # set for "skipped"
    error: Optional[BaseException] = None  # set for "failed"
    dimensions: Optional[tuple[int, int]] = None
    mode: Optional[str] = None

    @property
    def saved_bytes(self) -> int:
        if self.status != "success":
            return 0
        return max(0, self.src_bytes - self.out_bytes)

    @property
    def saved_percent(self) -> float:
        if self.src_bytes <= 0:
            return 0.0
        return (self.saved_bytes / self.src_bytes) * 100.0

    def with_details(self, dimensions: tuple[int, int], mode: str) -> "ProcessOutcome":
        return ProcessOutcome(
            path=self.path,
            status=self.status,
            src_bytes=self.src_bytes,
            out_bytes=self.out_bytes,
            reason=self.reason,
            error=self.error,
            dimensions=dimensions,
            mode=mode,
        )


def failed(path: Path, error: BaseException, src_bytes: int = 0) -> ProcessOutcome:
    return ProcessOutcome(path=path, status="failed", src_bytes=src_bytes, out_bytes=src_bytes, error=error)


@dataclass(frozen=True)
class BatchSummary:
    total_files: int
    succeeded: int
    skipped: int
    failed: int
    total_src_bytes: int
    total_out_bytes: int

    @property
    def saved_bytes(self) -> int:
        return max(0, self.total_src_bytes - self.total_out_bytes)

    @property
    def saved_percent(self) -> float:
        if self.total_src_bytes <= 0:
            return 0.0
        return (self.saved_bytes / self.total_src_bytes) * 100.0
