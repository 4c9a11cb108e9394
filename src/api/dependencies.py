"""FastAPI dependency providers and the worker-thread bridge for the service."""

from __future__ import annotations

import asyncio
from typing import Callable, TypeVar

from fastapi import HTTPException, Request

from document_html.config import AppConfig
from document_html.core import ConversionService

T = TypeVar("T")


def get_config(request: Request) -> AppConfig:
    config = getattr(request.app.state, "config", None)
    if config is None:
        raise HTTPException(status_code=503, detail="CONFIG_UNAVAILABLE")
    return config


def get_service(request: Request) -> ConversionService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="SERVICE_UNAVAILABLE")
    return service


async def run_sync(func: Callable[..., T], *args: object) -> T:
    """Render or convert off the event loop; the service itself is synchronous."""

    return await asyncio.to_thread(func, *args)


__all__ = ["get_config", "get_service", "run_sync"]
