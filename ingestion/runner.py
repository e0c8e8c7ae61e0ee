# ============================================================================
# File: ingestion/runner.py
# Description: Train formation planning import orchestrator
# ============================================================================
"""
Planning Import Runner - drives the per-file import loop.

Why this worker exists:
    Dispatch data only covers roughly the next 24 hours. The nightly planning
    export carries the long-range schedule, so it is imported here to offer
    a longer planning horizon. Export files are large, which is why they are
    reconciled in bulk instead of being turned into one message per train.

This module provides:
- Chronological processing of pending export files
- Per-file failure isolation (one bad file never blocks the next)
- Cooperative cancellation at run start and between files
- Processing log entries for every file outcome
"""

import asyncio
import enum
from contextlib import nullcontext
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.sources.base import PlanningFileSource
from ingestion.parsers.formation_parser import FormationParser
from ingestion.transformers.train_mapper import TrainFormationMapper
from ingestion.reconciler import PlanningReconciler
from ingestion.repository import ScheduledTrainRepository
from ingestion.loaders.schedule_loader import ScheduleLoader
from ingestion.progress import FileProgressTracker
from ingestion.publishers.base import EventPublisher
from schemas.planning import PlanningFileRef
from core.metrics import ImportMetrics
from core.exceptions import PipelineError, ProgressTrackingError

logger = logging.getLogger(__name__)

JOB_NAME = "import-trainformation-planning"


class RunState(str, enum.Enum):
    """Where the runner currently is"""
    IDLE = "idle"
    LISTING_FILES = "listing_files"
    DOWNLOADING = "downloading"
    PARSING = "parsing"
    RECONCILING = "reconciling"
    COMMITTING = "committing"
    LOGGING_OUTCOME = "logging_outcome"


class PlanningImportRunner:
    """
    Train formation planning import orchestrator

    Responsibilities:
    - List delivered files and keep only those without a DONE entry
    - Process files oldest first, one at a time
    - Download -> parse -> map -> reconcile -> commit per file
    - Record DONE or FAILED for every file that was started
    """

    def __init__(
        self,
        db_session: AsyncSession,
        file_source: PlanningFileSource,
        publisher: EventPublisher,
        metrics: Optional[ImportMetrics] = None,
        parser: Optional[FormationParser] = None,
        mapper: Optional[TrainFormationMapper] = None,
        reconciler: Optional[PlanningReconciler] = None
    ):
        self.db = db_session
        self.file_source = file_source
        self.metrics = metrics
        self.parser = parser or FormationParser()
        self.mapper = mapper or TrainFormationMapper()
        self.reconciler = reconciler or PlanningReconciler(metrics=metrics)
        self.repository = ScheduledTrainRepository(db_session)
        self.loader = ScheduleLoader(db_session, publisher, metrics=metrics)
        self.progress = FileProgressTracker(db_session)
        self.state = RunState.IDLE

    async def run(self, cancellation_signal: Optional[asyncio.Event] = None) -> None:
        """
        Run one import pass.

        Never raises: failures are logged and the next scheduled run retries.
        """
        if self._cancelled(cancellation_signal):
            logger.info("Cancellation requested, planning import not started")
            return

        logger.info("Starting scheduled execution of planning import")

        try:
            with self._timed("execute"):
                await self._process_pending_files(cancellation_signal)
        except Exception as e:
            context = e.to_dict() if isinstance(e, PipelineError) else {"error": str(e)}
            logger.error(
                f"Execution of planning import failed - will retry later: {e}",
                extra={"error_context": context}
            )
        finally:
            self.state = RunState.IDLE

    async def _process_pending_files(self, cancellation_signal: Optional[asyncio.Event]) -> None:
        self.state = RunState.LISTING_FILES

        files = await self.file_source.list_pending_planning_files()
        pending = await self.progress.filter_pending(files)

        if not pending:
            logger.info("No pending files to process")
            return

        logger.info(f"Processing messages in {len(pending)} new files")

        processed = 0
        for file_ref in pending:
            if self._cancelled(cancellation_signal):
                logger.info(f"Cancellation requested, stopping before {file_ref.name}")
                break

            await self.process_file(file_ref)
            processed += 1

        logger.info(f"Finished processing messages in {processed} of {len(pending)} new files")

    async def process_file(self, file_ref: PlanningFileRef) -> bool:
        """
        Import one file and record its outcome.

        Returns:
            True if the file was imported and marked DONE
        """
        logger.debug(f"Processing messages in {file_ref.name}")

        try:
            with self._timed("process_train_formations"):
                await self._import_file(file_ref)

        except Exception as e:
            self.state = RunState.LOGGING_OUTCOME
            context = e.to_dict() if isinstance(e, PipelineError) else {"error": str(e)}
            context["file_path"] = file_ref.name
            logger.error(
                f"Failed processing planning file {file_ref.name}: {e}",
                extra={"error_context": context}
            )

            await self.db.rollback()
            await self._record_outcome(file_ref, success=False, error_message=str(e))
            return False

        self.state = RunState.LOGGING_OUTCOME
        return await self._record_outcome(file_ref, success=True)

    async def _import_file(self, file_ref: PlanningFileRef) -> None:
        self.state = RunState.DOWNLOADING
        data = await self.file_source.download(file_ref)

        self.state = RunState.PARSING
        records = self.parser.parse(data.content, file_name=data.name)
        planned_trains = self.mapper.map(records, data.name)

        if not planned_trains:
            logger.info(f"No train formations found in {data.name}")
            return

        logger.info(f"Successfully found {len(planned_trains)} train formations")

        self.state = RunState.RECONCILING
        covered_dates = self.reconciler.covered_dates(planned_trains)
        existing = await self.repository.scheduled_trains_for_dates(covered_dates)
        result = self.reconciler.reconcile(planned_trains, existing)

        self.state = RunState.COMMITTING
        await self.loader.commit(result.to_persist, existing, result.to_cancel, source_file=data.name)

    async def _record_outcome(
        self,
        file_ref: PlanningFileRef,
        success: bool,
        error_message: Optional[str] = None
    ) -> bool:
        if self.metrics:
            self.metrics.record_file("done" if success else "failed")

        try:
            if success:
                await self.progress.mark_done(file_ref.name)
            else:
                await self.progress.mark_failed(file_ref.name, error_message)
        except ProgressTrackingError as e:
            # The file is simply offered again on the next run
            logger.error(
                f"Could not record outcome for {file_ref.name}: {e}",
                extra={"error_context": e.to_dict()}
            )
            return False

        return success

    def _timed(self, operation: str):
        if self.metrics:
            return self.metrics.time_job(JOB_NAME, operation)
        return nullcontext()

    @staticmethod
    def _cancelled(cancellation_signal: Optional[asyncio.Event]) -> bool:
        return cancellation_signal is not None and cancellation_signal.is_set()
