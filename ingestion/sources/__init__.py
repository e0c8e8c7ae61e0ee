from ingestion.sources.base import PlanningFileSource
from ingestion.sources.directory_source import DirectoryFileSource

__all__ = ["PlanningFileSource", "DirectoryFileSource"]
