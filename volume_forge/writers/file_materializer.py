from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional

from volume_forge.models.report import FileOutcome
from volume_forge.models.specs import FillMode
from volume_forge.sources.content_source import ContentSource
from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


class FileMaterializer:
    """
    Writes one placeholder file of an exact length.

    Zero fill sets the length with ``truncate`` and lets the filesystem
    allocate; buffer fill streams the content source chunk by chunk. I/O
    errors are returned as failed outcomes instead of being raised.
    """

    def __init__(self, chunk_size_bytes: int = DEFAULT_CHUNK_SIZE):
        if chunk_size_bytes <= 0:
            raise ValueError(f"chunk size must be positive, got {chunk_size_bytes}")
        self.chunk_size_bytes = chunk_size_bytes

    def create(
        self,
        path: Path,
        size_bytes: int,
        source: ContentSource,
        label: Optional[str] = None,
    ) -> FileOutcome:
        path = Path(path)
        label = label or str(path)

        if size_bytes < 0:
            logger.warning("Refusing negative size for %s: %d", label, size_bytes)
            return FileOutcome.failed(label, size_bytes, f"negative size {size_bytes}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create directory for %s. Error=%s", label, exc)
            return FileOutcome.failed(label, size_bytes, f"directory creation failed: {exc}")

        try:
            with path.open("wb") as fh:
                if source.fill_mode == FillMode.ZERO:
                    fh.truncate(size_bytes)
                else:
                    self._write_buffered(fh, size_bytes, source)
        except OSError as exc:
            on_disk = self._current_size(path)
            logger.warning("Write failed for %s after %d bytes. Error=%s", label, on_disk, exc)
            return FileOutcome.failed(label, size_bytes, f"write failed: {exc}", actual_size=on_disk)

        actual = self._current_size(path)
        if actual != size_bytes:
            logger.warning("Length mismatch for %s: expected %d, found %d", label, size_bytes, actual)
            return FileOutcome.failed(
                label,
                size_bytes,
                f"length mismatch: expected {size_bytes}, found {actual}",
                actual_size=actual,
            )

        logger.info("Created %s (%d bytes, %s fill)", label, actual, source.fill_mode.value)
        return FileOutcome.success(label, size_bytes, actual)

    def _write_buffered(self, fh: BinaryIO, size_bytes: int, source: ContentSource) -> int:
        step = min(source.buffer_length, self.chunk_size_bytes)
        written = 0
        while written < size_bytes:
            chunk = source.next_chunk(written, min(size_bytes - written, step))
            if not chunk:
                raise OSError(f"content source returned no data at offset {written}")
            fh.write(chunk)
            written += len(chunk)
        return written

    @staticmethod
    def _current_size(path: Path) -> int:
        try:
            return path.stat().st_size if path.is_file() else 0
        except OSError:
            return 0
