from __future__ import annotations

import hashlib
import os
import tempfile
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(slots=True)
class RunPaths:
    run_id: str
    base_dir: Path
    output_file: Path
    log_file: Path


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def ensure_run_paths(output_dir: Path, run_id: str, log_file: str) -> RunPaths:
    base = output_dir / run_id
    base.mkdir(parents=True, exist_ok=True)
    return RunPaths(
        run_id=run_id,
        base_dir=base,
        output_file=base / "output.html",
        log_file=base / log_file,
    )


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", delete=False, dir=path.parent, encoding=encoding, newline=""
    ) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def iter_files(paths: Iterable[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_file():
            yield path
        elif path.is_dir():
            for file_path in sorted(path.rglob("*")):
                if file_path.is_file():
                    yield file_path


def size_within_limit(path: Path, max_mb: int) -> bool:
    return path.stat().st_size <= max_mb * 1024 * 1024

