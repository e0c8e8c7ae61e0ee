"""
Planning file source backed by a local or mounted directory
"""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional
from ingestion.sources.base import PlanningFileSource
from schemas.planning import PlanningFileRef, PlanningFileData
from core.config import settings
from core.exceptions import FileListingError, DownloadError
import logging

logger = logging.getLogger(__name__)


class DirectoryFileSource(PlanningFileSource):
    """
    Read planning exports from a directory.

    Supports:
    - Name prefix filtering (nested paths are matched relative to the root)
    - Age filtering on last-modified time, so only the latest deliveries
      are offered to the pipeline
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        prefix: Optional[str] = None,
        max_age_days: Optional[int] = None
    ):
        self.directory = Path(directory or settings.PLANNING_FILE_DIR)
        self.prefix = prefix if prefix is not None else settings.PLANNING_FILE_PREFIX
        self.max_age_days = (
            max_age_days if max_age_days is not None else settings.PLANNING_FILE_MAX_AGE_DAYS
        )

    async def list_pending_planning_files(self) -> List[PlanningFileRef]:
        return await asyncio.to_thread(self._list_files)

    def _list_files(self) -> List[PlanningFileRef]:
        if not self.directory.is_dir():
            raise FileListingError(
                "Planning file directory does not exist",
                context={"location": str(self.directory), "prefix": self.prefix}
            )

        cutoff = datetime.utcnow() - timedelta(days=self.max_age_days)
        files = []

        try:
            for path in self.directory.rglob("*"):
                if not path.is_file():
                    continue

                name = path.relative_to(self.directory).as_posix()
                if not name.startswith(self.prefix):
                    continue

                stat = path.stat()
                last_modified = datetime.utcfromtimestamp(stat.st_mtime)
                if last_modified < cutoff:
                    continue

                files.append(PlanningFileRef(
                    name=name,
                    last_modified=last_modified,
                    size=stat.st_size
                ))
        except OSError as e:
            raise FileListingError(
                "Failed to list planning files",
                context={"location": str(self.directory), "prefix": self.prefix},
                original_exception=e
            )

        logger.info(f"Found {len(files)} planning files in {self.directory}")
        return files

    async def download(self, file_ref: PlanningFileRef) -> PlanningFileData:
        path = self.directory / file_ref.name

        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise DownloadError(
                f"Failed to read planning file {file_ref.name}",
                context={"file_name": file_ref.name, "location": str(self.directory)},
                original_exception=e
            )

        logger.debug(f"Read {len(content)} bytes from {file_ref.name}")
        return PlanningFileData(name=file_ref.name, content=content)
