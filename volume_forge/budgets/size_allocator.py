from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from volume_forge.errors import EmptyInputError
from volume_forge.models.specs import BYTES_PER_MB, FileSpec, ResolvedFile
from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)


class AllocationDecision(str, Enum):
    SPLIT = "SPLIT"
    FLOOR = "FLOOR"


@dataclass
class AllocationPolicy:
    bytes_per_mb: int = BYTES_PER_MB
    # Size given to every unspecified file once explicit sizes use up the budget.
    floor_bytes: int = 1


@dataclass
class AllocationResult:
    files: List[ResolvedFile]
    total_budget_bytes: int
    specified_total: int
    remaining: int
    explicit_count: int = 0
    unspecified_count: int = 0
    per_file: Optional[int] = None
    decision: Optional[AllocationDecision] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)


class SizeBudgetAllocator:
    """
    Resolves file specs against a total byte budget.

    Explicit sizes are taken first; what is left of the budget is split evenly
    (floor division) across specs without a size. The division remainder is
    left unallocated, so a split run lands at most ``count - 1`` bytes under
    budget. Never touches the filesystem.
    """

    def __init__(self, policy: Optional[AllocationPolicy] = None):
        self.policy = policy or AllocationPolicy()

    def allocate(self, specs: List[FileSpec], total_budget_bytes: int) -> AllocationResult:
        if total_budget_bytes < 0:
            raise ValueError(f"total budget must be non-negative, got {total_budget_bytes}")
        if not specs:
            raise EmptyInputError("no valid file specs to allocate")

        warnings: List[str] = []
        explicit_sizes: List[Optional[int]] = []

        for spec in specs:
            if spec.size_mb is not None and math.isfinite(spec.size_mb) and spec.size_mb > 0:
                explicit_sizes.append(self.explicit_bytes(spec))
                continue
            if spec.size_mb is not None:
                message = f"Spec {spec.path!r} has invalid size {spec.size_mb}; treating size as unspecified"
                logger.warning(message)
                warnings.append(message)
            explicit_sizes.append(None)

        specified_total = sum(s for s in explicit_sizes if s is not None)
        unspecified_count = sum(1 for s in explicit_sizes if s is None)
        remaining = total_budget_bytes - specified_total

        per_file: Optional[int] = None
        decision: Optional[AllocationDecision] = None
        if unspecified_count:
            if remaining <= 0:
                decision = AllocationDecision.FLOOR
                per_file = self.policy.floor_bytes
                message = (
                    f"Explicit sizes ({specified_total} bytes) use up the budget "
                    f"({total_budget_bytes} bytes); {unspecified_count} unspecified "
                    f"file(s) get {per_file} byte(s) each"
                )
                logger.warning(message)
                warnings.append(message)
            else:
                decision = AllocationDecision.SPLIT
                per_file = remaining // unspecified_count

        files: List[ResolvedFile] = []
        for spec, size in zip(specs, explicit_sizes):
            if size is None:
                files.append(ResolvedFile(path=spec.path, size_bytes=per_file, explicit=False))
            else:
                files.append(ResolvedFile(path=spec.path, size_bytes=size, explicit=True))

        logger.info(
            "Allocated %d file(s): explicit=%d bytes, remaining=%d bytes, per unspecified file=%s",
            len(files),
            specified_total,
            remaining,
            per_file,
        )

        return AllocationResult(
            files=files,
            total_budget_bytes=total_budget_bytes,
            specified_total=specified_total,
            remaining=remaining,
            explicit_count=len(files) - unspecified_count,
            unspecified_count=unspecified_count,
            per_file=per_file,
            decision=decision,
            warnings=warnings,
        )

    def explicit_bytes(self, spec: FileSpec) -> int:
        size = int(spec.size_mb * self.policy.bytes_per_mb)
        return max(size, self.policy.floor_bytes)
