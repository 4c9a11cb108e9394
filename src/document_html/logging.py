"""Per-run JSONL records and the batch summary CSV.

Each run directory gets one JSON line per conversion attempt. Batches append
one row to a summary CSV under the output root, counting warning codes and
failure codes so broken links can be tracked across a whole document set.
"""

from __future__ import annotations

import csv
import json
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any, Iterable

from .utils import atomic_write

SUMMARY_HEADER = ["batch_id", "timestamp", "total", "successes", "failures", "warnings", "errors"]


@dataclass(slots=True)
class StageTimings:
    read_ms: float = 0.0
    detect_ms: float = 0.0
    render_ms: float = 0.0
    write_ms: float = 0.0

    @property
    def total_ms(self) -> float:
        return self.read_ms + self.detect_ms + self.render_ms + self.write_ms


@dataclass(slots=True)
class RunLogEntry:
    run_id: str
    source: str
    status: str
    source_type: str
    output_path: str
    size_bytes: int
    html_bytes: int = 0
    warnings: list[str] = field(default_factory=list)
    error_code: str | None = None
    timings: StageTimings = field(default_factory=StageTimings)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"]["total_ms"] = round(self.timings.total_ms, 3)
        return payload


class RunLogger:
    """Append-only JSONL log kept in each run directory."""

    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    def append(self, entry: RunLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def read(self) -> list[dict[str, Any]]:
        if not self._log_file.exists():
            return []
        with self._log_file.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]


@dataclass(slots=True)
class BatchSummary:
    timestamp: float = field(default_factory=time.time)
    total: int = 0
    successes: int = 0
    failures: int = 0
    warnings: Counter[str] = field(default_factory=Counter)
    errors: Counter[str] = field(default_factory=Counter)

    def record_success(self, warnings: Iterable[str]) -> None:
        self.successes += 1
        self.warnings.update(warnings)

    def record_failure(self, error_code: str) -> None:
        self.failures += 1
        self.errors[error_code] += 1

    def as_row(self, batch_id: str) -> list[str]:
        return [
            batch_id,
            time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp)),
            str(self.total),
            str(self.successes),
            str(self.failures),
            json.dumps(dict(self.warnings), sort_keys=True),
            json.dumps(dict(self.errors), sort_keys=True),
        ]


def append_summary_row(path: Path, row: list[str]) -> None:
    """Add *row* to the summary CSV, rewriting the file atomically."""

    rows: list[list[str]] = []
    if path.exists():
        with path.open("r", encoding="utf-8", newline="") as handle:
            rows = [existing for existing in csv.reader(handle) if existing][1:]
    rows.append(row)
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(SUMMARY_HEADER)
    writer.writerows(rows)
    atomic_write(path, buffer.getvalue())


__all__ = [
    "BatchSummary",
    "RunLogEntry",
    "RunLogger",
    "SUMMARY_HEADER",
    "StageTimings",
    "append_summary_row",
]
