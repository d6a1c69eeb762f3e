"""Dependency injection utilities for FastAPI routes."""

from typing import Annotated

from fastapi import Depends, Request

from snaplink.core.config import Settings, get_settings
from snaplink.services import MemStorage


def get_storage(request: Request) -> MemStorage:
    """Get the storage instance the application was created with."""
    return request.app.state.storage


def get_base_url(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Base for short links: the public domain if configured, else the request host."""
    if settings.public_domain:
        return f"https://{settings.public_domain}"
    return f"{request.url.scheme}://{request.url.netloc}"


# Type aliases for dependency injection
StorageDep = Annotated[MemStorage, Depends(get_storage)]
BaseUrl = Annotated[str, Depends(get_base_url)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
