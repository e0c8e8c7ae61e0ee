"""
Abstract file source for planning export files
"""

from abc import ABC, abstractmethod
from typing import List
from schemas.planning import PlanningFileRef, PlanningFileData


class PlanningFileSource(ABC):
    """
    Where planning export files are delivered.

    Implementations only enumerate and fetch; deciding which files still
    need processing is the progress tracker's job.
    """

    @abstractmethod
    async def list_pending_planning_files(self) -> List[PlanningFileRef]:
        """
        List recently delivered planning files.

        Raises:
            FileListingError: If the location cannot be enumerated
        """
        pass

    @abstractmethod
    async def download(self, file_ref: PlanningFileRef) -> PlanningFileData:
        """
        Fetch the contents of one file.

        Raises:
            DownloadError: If the file cannot be read
        """
        pass
