"""
Per-file progress tracking on top of the append-only processing log
"""

from datetime import datetime
from typing import Iterable, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.base import JobType, ProcessStatus
from models.processing_log import ProcessingLog
from schemas.planning import PlanningFileRef
from core.exceptions import ProgressTrackingError
import logging

logger = logging.getLogger(__name__)


class FileProgressTracker:
    """
    Decide which files still need importing and record outcomes.

    Responsibilities:
    - A file is pending until a DONE entry exists for it
    - FAILED entries are informational and never block a retry
    - Every outcome is a new row; existing rows are never updated
    """

    def __init__(
        self,
        db_session: AsyncSession,
        job_type: JobType = JobType.PARSE_IVU_TRAIN_FORMATION_PLANNING
    ):
        self.db = db_session
        self.job_type = job_type

    async def done_paths(self, paths: Iterable[str]) -> Set[str]:
        """Subset of paths that already have a DONE entry"""
        paths = list(paths)
        if not paths:
            return set()

        try:
            result = await self.db.execute(
                select(ProcessingLog.path).where(
                    ProcessingLog.path.in_(paths),
                    ProcessingLog.job_type == self.job_type,
                    ProcessingLog.status == ProcessStatus.DONE
                ).distinct()
            )
        except Exception as e:
            raise ProgressTrackingError(
                "Failed to read processing log",
                context={"file_count": len(paths), "operation": "read"},
                original_exception=e
            )

        return set(result.scalars().all())

    async def is_pending(self, path: str) -> bool:
        return path not in await self.done_paths([path])

    async def filter_pending(self, files: Iterable[PlanningFileRef]) -> List[PlanningFileRef]:
        """
        Files without a DONE entry, oldest first.
        """
        files = list(files)
        done = await self.done_paths(f.name for f in files)

        pending = [f for f in files if f.name not in done]
        pending.sort(key=lambda f: f.last_modified)

        if done:
            logger.info(f"Skipping {len(files) - len(pending)} files that were already processed")
        return pending

    async def mark_done(self, path: str) -> ProcessingLog:
        return await self._append(path, ProcessStatus.DONE)

    async def mark_failed(self, path: str, error_message: Optional[str] = None) -> ProcessingLog:
        return await self._append(path, ProcessStatus.FAILED, error_message)

    async def _append(
        self,
        path: str,
        status: ProcessStatus,
        error_message: Optional[str] = None
    ) -> ProcessingLog:
        entry = ProcessingLog(
            path=path,
            job_type=self.job_type,
            status=status,
            error_message=error_message,
            modified=datetime.utcnow()
        )

        try:
            self.db.add(entry)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise ProgressTrackingError(
                f"Failed to write processing log for {path}",
                context={"file_path": path, "status": status.value, "operation": "write"},
                original_exception=e
            )

        logger.debug(f"Processing log: {path} -> {status.value}")
        return entry
