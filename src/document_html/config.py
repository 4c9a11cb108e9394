from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .models import KnownDocument, KnownDocumentRegistry, build_registry


CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class BatchConfig:
    default_parallelism: int = 1


@dataclass(slots=True)
class RuntimeConfig:
    output_dir: Path = Path("runs")
    log_file: str = "log.jsonl"
    summary_csv: str = "summary.csv"
    max_file_size_mb: int = 25
    enable_local_api: bool = False
    batch: BatchConfig = field(default_factory=BatchConfig)


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    documents: tuple[KnownDocument, ...] = ()
    api: APIConfig = field(default_factory=APIConfig)

    @property
    def known_documents(self) -> KnownDocumentRegistry:
        return build_registry(self.documents)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_batch(data: Mapping[str, object] | None) -> BatchConfig:
    if not data:
        return BatchConfig()
    return BatchConfig(default_parallelism=int(data.get("default_parallelism", 1)))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    batch = data.get("batch")
    return RuntimeConfig(
        output_dir=Path(str(data.get("output_dir", "runs"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        summary_csv=str(data.get("summary_csv", "summary.csv")),
        max_file_size_mb=int(data.get("max_file_size_mb", 25)),
        enable_local_api=bool(data.get("enable_local_api", False)),
        batch=_build_batch(batch if isinstance(batch, Mapping) else None),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def _build_documents(value: object | None) -> tuple[KnownDocument, ...]:
    if not value:
        return ()
    if not isinstance(value, Iterable) or isinstance(value, (str, Mapping)):
        raise ValueError(f"Unsupported documents configuration: {value!r}")
    documents: list[KnownDocument] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ValueError(f"Unsupported document entry: {entry!r}")
        missing = [key for key in ("name", "document_id", "route") if not entry.get(key)]
        if missing:
            raise ValueError(f"Document entry is missing {', '.join(missing)}: {entry!r}")
        documents.append(
            KnownDocument(
                name=str(entry["name"]),
                document_id=str(entry["document_id"]),
                route=str(entry["route"]),
            )
        )
    return tuple(documents)


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    runtime_data = raw.get("runtime")
    api_data = raw.get("api")
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    documents = _build_documents(raw.get("documents"))
    api = _build_api(api_data if isinstance(api_data, Mapping) else None)
    return AppConfig(runtime=runtime, documents=documents, api=api)


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "output_dir": str(config.runtime.output_dir),
            "log_file": config.runtime.log_file,
            "summary_csv": config.runtime.summary_csv,
            "max_file_size_mb": config.runtime.max_file_size_mb,
            "enable_local_api": config.runtime.enable_local_api,
            "batch": {
                "default_parallelism": config.runtime.batch.default_parallelism,
            },
        },
        "documents": [
            {"name": doc.name, "document_id": doc.document_id, "route": doc.route}
            for doc in config.documents
        ],
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
