from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile

from api.dependencies import get_config, get_service, run_sync
from api.schemas import ConversionResponse, PostprocessRequest, PostprocessResponse, RenderResponse
from document_html.config import AppConfig
from document_html.core import ConversionError, ConversionService
from document_html.reader import DocumentParseError, document_from_dict

router = APIRouter(tags=["conversion"])


@router.post("/convert", summary="Render a document JSON body", response_model=RenderResponse)
async def convert_document(
    payload: dict[str, Any] = Body(...),
    service: ConversionService = Depends(get_service),
) -> RenderResponse:
    try:
        document = document_from_dict(payload)
    except DocumentParseError as exc:
        raise HTTPException(status_code=400, detail="INVALID_DOCUMENT") from exc
    result = await run_sync(service.render, document)
    return RenderResponse(html=result.html, warnings=result.warnings)


@router.post("/convert/file", summary="Convert an uploaded file", response_model=ConversionResponse)
async def convert_file(
    file: UploadFile = File(...),
    service: ConversionService = Depends(get_service),
    config: AppConfig = Depends(get_config),
) -> ConversionResponse:
    suffix = Path(file.filename or "upload").suffix
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        content = await file.read()
        _enforce_size_limit(content, config)
        tmp.write(content)
        tmp.flush()
        tmp_path = Path(tmp.name)
    try:
        result = await run_sync(service.convert_file, tmp_path)
    except ConversionError as exc:
        raise HTTPException(status_code=400, detail=exc.code) from exc
    finally:
        tmp_path.unlink(missing_ok=True)
    return ConversionResponse(
        run_id=result.run_id,
        output_path=str(result.output_path.resolve()),
        source_type=result.source_type,
        warnings=result.warnings,
    )


@router.post("/postprocess", summary="Clean up exported HTML", response_model=PostprocessResponse)
async def postprocess_html(
    request: PostprocessRequest,
    service: ConversionService = Depends(get_service),
) -> PostprocessResponse:
    html = await run_sync(service.postprocess, request.html)
    return PostprocessResponse(html=html)


def _enforce_size_limit(payload: bytes, config: AppConfig) -> None:
    max_bytes = config.runtime.max_file_size_mb * 1024 * 1024
    if len(payload) > max_bytes:
        raise HTTPException(status_code=413, detail="SIZE_LIMIT")


__all__ = [
    "router",
]
