from __future__ import annotations

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    status: str


class KnownDocumentInfo(BaseModel):
    name: str
    document_id: str
    route: str


class RenderResponse(BaseModel):
    html: str
    warnings: list[str] = Field(default_factory=list)


class ConversionResponse(BaseModel):
    run_id: str
    output_path: str
    source_type: str
    warnings: list[str] = Field(default_factory=list)


class PostprocessRequest(BaseModel):
    html: str


class PostprocessResponse(BaseModel):
    html: str
