from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class RunEvent:
    timestamp: float
    run_id: str
    event_type: str
    path: Optional[str] = None
    url: Optional[str] = None
    size_bytes: Optional[int] = None
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class RunEventLogger:
    """Appends run events as JSON lines. A logger without a path does nothing."""

    def __init__(self, output_path: Optional[str] = None):
        self.path = Path(output_path) if output_path else None

    def emit(self, event: RunEvent) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(asdict(event)) + "\n")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to write run event. Error=%s", exc)

    def emit_allocation(
        self,
        run_id: str,
        total_budget_bytes: int,
        specified_total: int,
        per_file: Optional[int],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emit(
            RunEvent(
                timestamp=time.time(),
                run_id=run_id,
                event_type="allocation",
                size_bytes=total_budget_bytes,
                metadata={"specified_total": specified_total, "per_file": per_file, **(metadata or {})},
            )
        )

    def emit_fetch(self, run_id: str, url: str, ok: bool, chars: int, error: Optional[str] = None) -> None:
        self.emit(
            RunEvent(
                timestamp=time.time(),
                run_id=run_id,
                event_type="fetch",
                url=url,
                status="ok" if ok else "failed",
                metadata={"chars": chars, "error": error},
            )
        )

    def emit_file(
        self,
        run_id: str,
        path: str,
        size_bytes: int,
        status: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emit(
            RunEvent(
                timestamp=time.time(),
                run_id=run_id,
                event_type="file",
                path=path,
                size_bytes=size_bytes,
                status=status,
                metadata=metadata,
            )
        )

    def emit_run_rollup(
        self,
        run_id: str,
        status: str,
        total_actual_bytes: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emit(
            RunEvent(
                timestamp=time.time(),
                run_id=run_id,
                event_type="run_rollup",
                size_bytes=total_actual_bytes,
                status=status,
                metadata=metadata,
            )
        )
