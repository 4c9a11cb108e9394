from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class SourceType(str, Enum):
    DOCUMENT_JSON = "json"
    EXPORTED_HTML = "html"


@dataclass(slots=True)
class DetectionResult:
    source_type: SourceType
    extension: str


EXTENSION_MAP: dict[str, SourceType] = {
    ".json": SourceType.DOCUMENT_JSON,
    ".html": SourceType.EXPORTED_HTML,
    ".htm": SourceType.EXPORTED_HTML,
}

HTML_MARKERS = (b"<html", b"<!doctype html", b"<body")


class DetectionError(RuntimeError):
    """Raised when a source file cannot be identified."""


def sniff_source_type(path: Path) -> SourceType | None:
    with path.open("rb") as handle:
        sample = handle.read(1024)
    stripped = sample.lstrip(b"\xef\xbb\xbf").lstrip()
    if stripped.startswith(b"{"):
        return SourceType.DOCUMENT_JSON
    lowered = sample.lower()
    if any(marker in lowered for marker in HTML_MARKERS):
        return SourceType.EXPORTED_HTML
    return None


def detect_source_type(path: Path) -> DetectionResult:
    extension = path.suffix.lower()
    expected = EXTENSION_MAP.get(extension)
    if not expected:
        raise DetectionError(f"Unsupported file extension: {extension or '<none>'}")
    sniffed = sniff_source_type(path)
    if sniffed is not expected:
        detected = sniffed.value if sniffed else "unknown"
        raise DetectionError(f"Content sniff mismatch: expected {expected.value}, detected {detected}")
    return DetectionResult(source_type=expected, extension=extension)
