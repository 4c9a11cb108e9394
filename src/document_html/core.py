from __future__ import annotations

import concurrent.futures
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .config import AppConfig
from .detection import DetectionError, DetectionResult, SourceType, detect_source_type
from .logging import BatchSummary, RunLogEntry, RunLogger, StageTimings, append_summary_row
from .models import BatchConversionResult, ConversionResult, Document, RenderResult
from .postprocess import process_exported_html
from .reader import DocumentParseError, parse_document
from .renderer import DocumentRenderer
from .utils import (
    RunPaths,
    atomic_write,
    ensure_run_paths,
    generate_run_id,
    iter_files,
    size_within_limit,
)

ProgressCallback = Callable[[float], None]


class ConversionError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(slots=True)
class _ConversionContext:
    run_id: str
    run_paths: RunPaths
    logger: RunLogger
    callback: ProgressCallback


class ConversionService:
    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._renderer = DocumentRenderer(config.known_documents)

    def render(self, document: Document) -> RenderResult:
        return self._renderer.render(document)

    def postprocess(self, raw_html: str) -> str:
        return process_exported_html(raw_html, self._config.known_documents)

    def convert_file(
        self,
        path: Path,
        *,
        run_id: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> ConversionResult:
        callback = progress or (lambda _: None)
        run_id = run_id or generate_run_id()
        run_paths = ensure_run_paths(self._config.runtime.output_dir, run_id, self._config.runtime.log_file)
        context = _ConversionContext(
            run_id=run_id,
            run_paths=run_paths,
            logger=RunLogger(run_paths.log_file),
            callback=callback,
        )
        start = time.perf_counter()

        callback(0.0)
        try:
            detection, warnings = self._convert_internal(path, context)
        except ConversionError as exc:
            self._log_failure(path, context, exc)
            raise

        elapsed = time.perf_counter() - start
        callback(1.0)
        return ConversionResult(
            run_id=run_id,
            output_path=run_paths.output_file,
            source_type=detection.source_type.value,
            warnings=warnings,
            summary=f"Converted {path.name} -> {run_paths.output_file} in {elapsed:.2f}s",
        )

    def _convert_internal(
        self, path: Path, context: _ConversionContext
    ) -> tuple[DetectionResult, list[str]]:
        size_bytes, read_elapsed = self._validate_source(path)
        context.callback(0.1)

        detection, detect_elapsed = self._detect_source(path)
        context.callback(0.2)

        html, warnings, render_elapsed = self._convert_source(path, detection.source_type)
        context.callback(0.8)

        write_elapsed = self._write_output(context.run_paths.output_file, html)
        context.logger.append(
            RunLogEntry(
                run_id=context.run_id,
                source=str(path),
                status="success",
                source_type=detection.source_type.value,
                output_path=str(context.run_paths.output_file),
                size_bytes=size_bytes,
                html_bytes=len(html.encode("utf-8")),
                warnings=warnings,
                timings=StageTimings(
                    read_ms=read_elapsed,
                    detect_ms=detect_elapsed,
                    render_ms=render_elapsed,
                    write_ms=write_elapsed,
                ),
            )
        )
        return detection, warnings

    def _log_failure(self, path: Path, context: _ConversionContext, exc: ConversionError) -> None:
        context.logger.append(
            RunLogEntry(
                run_id=context.run_id,
                source=str(path),
                status="failure",
                source_type="unknown",
                output_path=str(context.run_paths.output_file),
                size_bytes=path.stat().st_size if path.is_file() else 0,
                error_code=exc.code,
            )
        )

    def _validate_source(self, path: Path) -> tuple[int, float]:
        read_start = time.perf_counter()
        if not path.is_file():
            raise ConversionError("NOT_FOUND", f"Source file does not exist: {path}")
        if not size_within_limit(path, max(1, self._config.runtime.max_file_size_mb)):
            raise ConversionError("SIZE_LIMIT", f"File exceeds configured limit: {path.name}")
        read_elapsed = (time.perf_counter() - read_start) * 1000
        return path.stat().st_size, read_elapsed

    def _detect_source(self, path: Path) -> tuple[DetectionResult, float]:
        detect_start = time.perf_counter()
        try:
            detection = detect_source_type(path)
        except DetectionError as exc:
            raise ConversionError("UNSUPPORTED_TYPE", str(exc)) from exc
        detect_elapsed = (time.perf_counter() - detect_start) * 1000
        return detection, detect_elapsed

    def _convert_source(self, path: Path, source_type: SourceType) -> tuple[str, list[str], float]:
        convert_start = time.perf_counter()
        try:
            payload = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ConversionError("INVALID_DOCUMENT", f"Source is not UTF-8 text: {path.name}") from exc
        if source_type is SourceType.EXPORTED_HTML:
            html, warnings = self.postprocess(payload), []
        else:
            try:
                document = parse_document(payload)
            except DocumentParseError as exc:
                raise ConversionError("INVALID_DOCUMENT", str(exc)) from exc
            result = self.render(document)
            html, warnings = result.html, result.warnings
        convert_elapsed = (time.perf_counter() - convert_start) * 1000
        return html, warnings, convert_elapsed

    def _write_output(self, output_path: Path, html: str) -> float:
        write_start = time.perf_counter()
        atomic_write(output_path, html)
        return (time.perf_counter() - write_start) * 1000

    def batch_convert(
        self,
        inputs: Sequence[Path],
        *,
        parallelism: int | None = None,
    ) -> BatchConversionResult:
        paths = list(iter_files(inputs))
        summary = BatchSummary()
        parallelism = max(1, parallelism or self._config.runtime.batch.default_parallelism)

        if parallelism == 1:
            results = self._run_sequential_batch(paths, summary)
        else:
            results = self._run_parallel_batch(paths, summary, parallelism)

        summary.total = len(paths)
        if paths:
            summary_path = self._config.runtime.output_dir / self._config.runtime.summary_csv
            append_summary_row(summary_path, summary.as_row(generate_run_id("batch")))
        return BatchConversionResult(runs=results, summary=summary)

    def _run_sequential_batch(
        self, paths: Sequence[Path], summary: BatchSummary
    ) -> list[ConversionResult]:
        results: list[ConversionResult] = []
        for path in paths:
            try:
                result = self.convert_file(path)
            except ConversionError as exc:
                summary.record_failure(exc.code)
                continue
            results.append(result)
            summary.record_success(result.warnings)
        return results

    def _run_parallel_batch(
        self, paths: Sequence[Path], summary: BatchSummary, parallelism: int
    ) -> list[ConversionResult]:
        results: list[ConversionResult] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=parallelism) as executor:
            futures = [executor.submit(self.convert_file, path) for path in paths]
            for future in concurrent.futures.as_completed(futures):
                try:
                    result = future.result()
                except ConversionError as exc:
                    summary.record_failure(exc.code)
                    continue
                results.append(result)
                summary.record_success(result.warnings)
        return results


__all__ = [
    "ConversionError",
    "ConversionService",
    "ProgressCallback",
]
