from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .results import BatchSummary, ProcessOutcome


@dataclass(frozen=True)
class FileReport:
    path: str
    status: str
    src_bytes: int
    out_bytes: int
    saved_bytes: int
    saved_percent: float
    width: Optional[int]
    height: Optional[int]
    mode: Optional[str]
    reason: Optional[str]
    error: Optional[str]


@dataclass(frozen=True)
class BatchReport:
    created_utc: str
    dry_run: bool
    summary: dict
    files: List[FileReport]


def build_report(results: List[ProcessOutcome], summary: BatchSummary, dry_run: bool = False) -> BatchReport:
    created_utc = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    files: List[FileReport] = []
    for r in sorted(results, key=lambda r: str(r.path)):
        width, height = r.dimensions if r.dimensions else (None, None)
        files.append(
            FileReport(
                path=str(r.path),
                status=r.status,
                src_bytes=r.src_bytes,
                out_bytes=r.out_bytes,
                saved_bytes=r.saved_bytes,
                saved_percent=round(r.saved_percent, 2),
                width=width,
                height=height,
                mode=r.mode,
                reason=r.reason,
                error=str(r.error) if r.error is not None else None,
            )
        )

    summary_dict = {
        "total_files": summary.total_files,
        "succeeded": summary.succeeded,
        "skipped": summary.skipped,
        "failed": summary.failed,
        "total_src_bytes": summary.total_src_bytes,
        "total_out_bytes": summary.total_out_bytes,
        "saved_bytes": summary.saved_bytes,
        "saved_percent": round(summary.saved_percent, 2),
    }

    return BatchReport(created_utc=created_utc, dry_run=dry_run, summary=summary_dict, files=files)


def save_report_json(report: BatchReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(report), f, indent=2, ensure_ascii=False)
