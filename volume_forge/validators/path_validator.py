from pathlib import Path, PurePath
from typing import List, Set, Tuple

from volume_forge.models.specs import FileSpec
from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)


class PathValidationReport:
    """
    Collects warnings raised while checking spec paths.
    """

    def __init__(self) -> None:
        self.warnings: List[str] = []
        self.rejected: List[str] = []

    def reject(self, path: str, reason: str) -> None:
        message = f"Dropping spec {path!r}: {reason}"
        logger.warning(message)
        self.warnings.append(message)
        self.rejected.append(path)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


class PathValidator:
    """
    Keeps every generated file inside the destination root:

    - absolute paths are rejected
    - paths that resolve outside the root (".." traversal, escaping symlinks) are rejected
    - paths that resolve to the root itself are rejected
    - duplicate paths are kept but reported, since the later write wins
    """

    def __init__(self, destination_root: Path):
        self.root = Path(destination_root).resolve()

    def validate(self, specs: List[FileSpec]) -> Tuple[List[FileSpec], PathValidationReport]:
        report = PathValidationReport()
        valid: List[FileSpec] = []
        seen: Set[Path] = set()

        for spec in specs:
            if PurePath(spec.path).is_absolute():
                report.reject(spec.path, "absolute paths are not allowed")
                continue

            target = (self.root / spec.path).resolve()
            if target == self.root:
                report.reject(spec.path, "path points at the destination root")
                continue
            if not target.is_relative_to(self.root):
                report.reject(spec.path, "path escapes the destination root")
                continue

            if target in seen:
                report.warn(f"Duplicate spec path {spec.path!r}; the later entry overwrites the earlier one")
            seen.add(target)
            valid.append(spec)

        return valid, report
