from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_config
from api.schemas import KnownDocumentInfo
from document_html.config import AppConfig

router = APIRouter(tags=["documents"])


@router.get("/documents", summary="List known documents", response_model=list[KnownDocumentInfo])
def list_documents(config: AppConfig = Depends(get_config)) -> list[KnownDocumentInfo]:
    return [
        KnownDocumentInfo(name=doc.name, document_id=doc.document_id, route=doc.route)
        for doc in config.documents
    ]


__all__ = ["router"]
