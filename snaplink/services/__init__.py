"""Storage services."""

from snaplink.services.storage import (
    CodeGenerationError,
    DuplicateCodeError,
    MemStorage,
    StorageError,
    generate_short_code,
    resolve_expiry,
)

__all__ = [
    "CodeGenerationError",
    "DuplicateCodeError",
    "MemStorage",
    "StorageError",
    "generate_short_code",
    "resolve_expiry",
]
