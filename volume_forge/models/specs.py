from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * 1024 * 1024


class FillMode(str, Enum):
    ZERO = "zero"
    BUFFERED = "text"


class FileSpec(BaseModel):
    """One requested file. ``size_mb is None`` means the size comes from the budget."""

    path: str
    size_mb: Optional[float] = None


class ResolvedFile(BaseModel):
    path: str
    size_bytes: int
    explicit: bool = False


def gb_to_bytes(size_gb: float) -> int:
    return int(size_gb * BYTES_PER_GB)
