from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from volume_forge.models.specs import FillMode


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PLANNED = "planned"


class FileOutcome(BaseModel):
    path: str
    requested_size: int
    actual_size: int = 0
    status: OutcomeStatus
    error_detail: Optional[str] = None

    @classmethod
    def success(cls, path: str, requested_size: int, actual_size: int) -> "FileOutcome":
        return cls(
            path=path,
            requested_size=requested_size,
            actual_size=actual_size,
            status=OutcomeStatus.SUCCESS,
        )

    @classmethod
    def failed(cls, path: str, requested_size: int, error: str, actual_size: int = 0) -> "FileOutcome":
        return cls(
            path=path,
            requested_size=requested_size,
            actual_size=actual_size,
            status=OutcomeStatus.FAILED,
            error_detail=error,
        )

    @classmethod
    def planned(cls, path: str, requested_size: int) -> "FileOutcome":
        return cls(path=path, requested_size=requested_size, status=OutcomeStatus.PLANNED)


class RunSummary(BaseModel):
    run_id: Optional[str]
    destination: Optional[str] = None
    fill_mode: FillMode = FillMode.ZERO
    outcomes: List[FileOutcome] = []
    warnings: List[str] = []
    fatal_error: Optional[str] = None
    files_processed: int = 0
    files_succeeded: int = 0
    files_failed: int = 0
    total_requested_bytes: int = 0
    total_actual_bytes: int = 0
    status: str = "running"

    @classmethod
    def start_new(
        cls,
        run_id: Optional[str] = None,
        destination: Optional[str] = None,
        fill_mode: FillMode = FillMode.ZERO,
    ) -> "RunSummary":
        return cls(run_id=run_id, destination=destination, fill_mode=fill_mode)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def abort(self, error: str) -> None:
        self.fatal_error = error
        self.status = "aborted"

    def finalize(self) -> None:
        self.files_processed = len(self.outcomes)
        self.files_succeeded = sum(1 for o in self.outcomes if o.status == OutcomeStatus.SUCCESS)
        self.files_failed = sum(1 for o in self.outcomes if o.status == OutcomeStatus.FAILED)
        self.total_requested_bytes = sum(o.requested_size for o in self.outcomes)
        self.total_actual_bytes = sum(o.actual_size for o in self.outcomes)

        if self.fatal_error:
            self.status = "aborted"
        elif self.files_failed:
            self.status = "completed_with_errors"
        elif self.outcomes and all(o.status == OutcomeStatus.PLANNED for o in self.outcomes):
            self.status = "planned"
        else:
            self.status = "completed"
