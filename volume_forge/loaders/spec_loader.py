from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from volume_forge.errors import InvalidSpecError
from volume_forge.models.specs import FileSpec
from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)


def parse_spec_token(token: str) -> FileSpec:
    """
    Parse a command-line spec token.

    "logs/app.log"      -> unspecified size
    "logs/app.log:250"  -> 250 MB

    The size is split on the last ":"; a suffix that is not a number is kept
    as part of the path.
    """
    token = token.strip()
    head, sep, tail = token.rpartition(":")
    if sep and head:
        try:
            return FileSpec(path=head, size_mb=float(tail))
        except ValueError:
            pass
    return FileSpec(path=token)


def read_spec_file(path: str) -> List[Any]:
    """Read a JSON array of raw spec entries (strings or {"path", "size_mb"} objects)."""
    spec_path = Path(path)
    if not spec_path.exists():
        raise FileNotFoundError(f"spec file not found at: {spec_path}")

    with spec_path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"spec file must contain a JSON array: {spec_path}")
    return raw


def load_spec_file(path: str) -> Tuple[List[FileSpec], List[str]]:
    return normalize_specs(read_spec_file(path))


def normalize_specs(entries: Iterable[Any]) -> Tuple[List[FileSpec], List[str]]:
    """
    Turn heterogeneous spec entries into FileSpecs.

    - entries without a usable path are dropped
    - non-positive or non-numeric sizes are demoted to "unspecified"

    Returns the specs in input order plus one warning per demoted/dropped entry.
    """
    specs: List[FileSpec] = []
    warnings: List[str] = []

    for index, entry in enumerate(entries):
        try:
            path, size_mb = _coerce_entry(entry)
        except InvalidSpecError as exc:
            message = f"Dropping spec #{index}: {exc}"
            logger.warning(message)
            warnings.append(message)
            continue

        if size_mb is not None and not _is_positive_size(size_mb):
            message = f"Spec {path!r} has invalid size {size_mb!r}; treating size as unspecified"
            logger.warning(message)
            warnings.append(message)
            size_mb = None

        specs.append(FileSpec(path=path, size_mb=None if size_mb is None else float(size_mb)))

    return specs, warnings


def _coerce_entry(entry: Any) -> Tuple[str, Optional[Any]]:
    if isinstance(entry, FileSpec):
        path, size_mb = entry.path, entry.size_mb
    elif isinstance(entry, str):
        path, size_mb = entry, None
    elif isinstance(entry, dict):
        path = entry.get("path")
        size_mb = entry.get("size_mb", entry.get("sizeMB"))
    else:
        raise InvalidSpecError(f"unsupported entry type {type(entry).__name__}")

    if not isinstance(path, str) or not path.strip():
        raise InvalidSpecError(f"missing path in entry {entry!r}")
    return path.strip(), size_mb


def _is_positive_size(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0
