"""Render authored league documents to publish-ready HTML."""

from .config import AppConfig, load_config
from .core import ConversionError, ConversionService
from .models import BatchConversionResult, ConversionResult, Document, RenderResult
from .renderer import DocumentRenderer, convert

__all__ = [
    "AppConfig",
    "BatchConversionResult",
    "ConversionError",
    "ConversionResult",
    "ConversionService",
    "Document",
    "DocumentRenderer",
    "RenderResult",
    "convert",
    "load_config",
]
