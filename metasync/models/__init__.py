"""Shared typed data models for metasync."""

from .datatypes import (
    COPY_STATUS_FAILED,
    COPY_STATUS_OK,
    COPY_STATUS_SKIPPED,
    CopyResult,
)

__all__ = [
    "COPY_STATUS_FAILED",
    "COPY_STATUS_OK",
    "COPY_STATUS_SKIPPED",
    "CopyResult",
]
