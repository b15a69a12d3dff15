from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import httpx

from volume_forge.budgets.size_allocator import AllocationResult, SizeBudgetAllocator
from volume_forge.config import Settings
from volume_forge.errors import DestinationUnresolvableError, EmptyInputError
from volume_forge.loaders.spec_loader import normalize_specs
from volume_forge.models.report import FileOutcome, RunSummary
from volume_forge.models.specs import FileSpec, FillMode, ResolvedFile
from volume_forge.sources.content_source import ContentSource
from volume_forge.telemetry.event_logger import RunEventLogger
from volume_forge.utils.logging_utils import get_logger
from volume_forge.validators.path_validator import PathValidator
from volume_forge.writers.file_materializer import FileMaterializer

logger = get_logger(__name__)


@dataclass
class CoordinatorDependencies:
    """Container for dependency-injected subsystem instances."""

    allocator: SizeBudgetAllocator = field(default_factory=SizeBudgetAllocator)
    materializer: FileMaterializer = field(default_factory=FileMaterializer)
    event_logger: RunEventLogger = field(default_factory=RunEventLogger)
    http_client: Optional[httpx.Client] = None
    # Local buffer used instead of fetching URLs in buffered mode.
    content_source: Optional[ContentSource] = None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "CoordinatorDependencies":
        values = {
            "materializer": FileMaterializer(chunk_size_bytes=settings.chunk_size_bytes),
            "event_logger": RunEventLogger(settings.event_log_path),
        }
        values.update(overrides)
        return cls(**values)


class RunCoordinator:
    """Coordinates one placeholder-volume run.

    Pipeline:
    - resolve destination -> normalize specs -> validate paths -> allocate sizes
    - build content source (fetch, or downgrade to zero fill) -> materialize files
    - returns a RunSummary with one outcome per resolved file, in input order
    """

    def __init__(self, settings: Settings, deps: Optional[CoordinatorDependencies] = None) -> None:
        self.settings = settings
        self.deps = deps or CoordinatorDependencies.from_settings(settings)

    def run(
        self,
        destination: str | Path,
        specs: Iterable[Any],
        total_budget_bytes: int,
        fill_mode: FillMode = FillMode.ZERO,
        urls: Optional[Sequence[str]] = None,
        run_id: Optional[str] = None,
    ) -> RunSummary:
        run_id = run_id or uuid.uuid4().hex[:12]
        summary = RunSummary.start_new(run_id=run_id, destination=str(destination), fill_mode=fill_mode)
        dry_run = self.settings.dry_run

        # 1. Destination (fatal if unusable; nothing has been written yet)
        root = self._resolve_destination(destination, create=not dry_run)
        summary.destination = str(root)

        # 2. Normalize
        file_specs = self._normalize(specs, summary)

        # 3. Validate paths
        valid_specs, path_report = PathValidator(root).validate(file_specs)
        for message in path_report.warnings:
            summary.add_warning(message)

        # 4. Allocate
        try:
            allocation = self.deps.allocator.allocate(valid_specs, total_budget_bytes)
        except EmptyInputError as exc:
            logger.error("Run %s aborted: %s", run_id, exc)
            summary.abort(str(exc))
            summary.finalize()
            self.deps.event_logger.emit_run_rollup(run_id, summary.status, 0, {"error": str(exc)})
            return summary

        for message in allocation.warnings:
            summary.add_warning(message)
        self._emit_allocation(run_id, allocation)

        if dry_run:
            logger.info("Dry run: planned %d file(s), %d bytes", len(allocation.files), allocation.total_bytes)
            summary.outcomes = [FileOutcome.planned(f.path, f.size_bytes) for f in allocation.files]
            summary.finalize()
            self._emit_rollup(summary)
            return summary

        # 5. Content
        source = self._build_content_source(fill_mode, urls, summary)
        summary.fill_mode = source.fill_mode

        # 6. Materialize
        summary.outcomes = self._materialize_all(root, allocation.files, source)
        for outcome in summary.outcomes:
            self.deps.event_logger.emit_file(
                run_id,
                outcome.path,
                outcome.actual_size,
                outcome.status.value,
                {"requested_size": outcome.requested_size, "error": outcome.error_detail},
            )

        summary.finalize()
        logger.info(
            "Run %s %s: %d file(s), %d succeeded, %d failed, %d bytes written",
            run_id,
            summary.status,
            summary.files_processed,
            summary.files_succeeded,
            summary.files_failed,
            summary.total_actual_bytes,
        )
        self._emit_rollup(summary)
        return summary

    def _resolve_destination(self, destination: str | Path, create: bool = True) -> Path:
        if destination is None or not str(destination).strip():
            raise DestinationUnresolvableError(str(destination), "empty path")

        root = Path(destination).expanduser()
        if create:
            try:
                root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DestinationUnresolvableError(str(destination), str(exc)) from exc

        if root.exists() and not root.is_dir():
            raise DestinationUnresolvableError(str(destination), "not a directory")
        return root.resolve()

    def _normalize(self, specs: Iterable[Any], summary: RunSummary) -> List[FileSpec]:
        file_specs, warnings = normalize_specs(specs or [])
        for message in warnings:
            summary.add_warning(message)

        if not file_specs:
            message = f"No valid file specs given; creating default file {self.settings.default_file_name!r}"
            logger.warning(message)
            summary.add_warning(message)
            file_specs = [FileSpec(path=self.settings.default_file_name)]
        return file_specs

    def _build_content_source(
        self,
        fill_mode: FillMode,
        urls: Optional[Sequence[str]],
        summary: RunSummary,
    ) -> ContentSource:
        if fill_mode != FillMode.BUFFERED:
            return ContentSource.zero()

        if self.deps.content_source is not None:
            source = self.deps.content_source
            fetch_report = list(source.fetch_report)
        else:
            source, fetch_report = ContentSource.fetch_with_report(
                urls if urls is not None else self.settings.source_urls,
                client=self.deps.http_client,
                timeout=self.settings.fetch_timeout_seconds,
                max_workers=self.settings.fetch_workers,
            )

        # failed URLs are reported even when the run falls back to zero fill
        for result in fetch_report:
            self.deps.event_logger.emit_fetch(summary.run_id, result.url, result.ok, result.chars, result.error)
            if not result.ok:
                summary.add_warning(f"Fetch failed for {result.url}: {result.error}")

        if source is None or source.fill_mode == FillMode.ZERO:
            message = "No content fetched from source URLs; falling back to zero fill"
            logger.warning(message)
            summary.add_warning(message)
            return ContentSource.zero()

        logger.info("Using %d-byte text buffer for buffered fill", source.buffer_length)
        return source

    def _materialize_all(
        self,
        root: Path,
        files: List[ResolvedFile],
        source: ContentSource,
    ) -> List[FileOutcome]:
        workers = max(1, self.settings.max_workers)
        if workers == 1 or len(files) <= 1:
            return [self._materialize_one(root, f, source) for f in files]

        # pool.map yields results in submission order, not completion order
        with ThreadPoolExecutor(max_workers=min(workers, len(files))) as pool:
            return list(pool.map(lambda f: self._materialize_one(root, f, source), files))

    def _materialize_one(self, root: Path, resolved: ResolvedFile, source: ContentSource) -> FileOutcome:
        try:
            return self.deps.materializer.create(root / resolved.path, resolved.size_bytes, source, label=resolved.path)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error materializing %s", resolved.path)
            return FileOutcome.failed(resolved.path, resolved.size_bytes, f"unexpected error: {exc}")

    def _emit_allocation(self, run_id: str, allocation: AllocationResult) -> None:
        self.deps.event_logger.emit_allocation(
            run_id=run_id,
            total_budget_bytes=allocation.total_budget_bytes,
            specified_total=allocation.specified_total,
            per_file=allocation.per_file,
            metadata={
                "files": len(allocation.files),
                "unspecified": allocation.unspecified_count,
                "decision": allocation.decision.value if allocation.decision else None,
            },
        )

    def _emit_rollup(self, summary: RunSummary) -> None:
        self.deps.event_logger.emit_run_rollup(
            run_id=summary.run_id,
            status=summary.status,
            total_actual_bytes=summary.total_actual_bytes,
            metadata={
                "files_processed": summary.files_processed,
                "files_failed": summary.files_failed,
                "total_requested_bytes": summary.total_requested_bytes,
                "fill_mode": summary.fill_mode.value,
            },
        )
