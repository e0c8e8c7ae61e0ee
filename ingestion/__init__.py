"""
Train formation planning import pipeline.

This package contains all components that turn planning export files into
scheduled train rows and domain events:

Modules:
    runner: Orchestrator that drives the per-file import loop
    reconciler: Diffing policy between planned and stored trains
    progress: Per-file progress tracking on the processing log
    repository: Snapshot queries on the scheduled train store
    scheduler: APScheduler integration for periodic runs

Subpackages:
    sources: Where export files are listed and downloaded from
    parsers: XML export parsing
    transformers: Mapping parsed records to planned trains
    loaders: Transactional commit of reconciliation results
    publishers: Message bus boundary for domain events

Architecture:
    Each file passes through the same stages:

    1. Download - Fetch the file from the file source
    2. Parse/Map - Turn XML into PlannedTrain candidates
    3. Reconcile - Compare candidates with the stored trains for their dates
    4. Commit - Upsert in one transaction, cancel in a second, publish events
    5. Log outcome - Append DONE or FAILED to the processing log

    A failing file is marked FAILED and the next file proceeds.

Usage:
    from ingestion.runner import PlanningImportRunner
    from ingestion.sources import DirectoryFileSource
    from ingestion.publishers import build_publisher

Example:
    runner = PlanningImportRunner(
        session,
        file_source=DirectoryFileSource("/data/ivu"),
        publisher=build_publisher()
    )
    await runner.run(cancellation_event)
"""

__all__ = [
    "PlanningImportRunner",
    "PlanningReconciler",
    "FileProgressTracker",
    "ScheduledTrainRepository",
    "PlanningImportScheduler",
    "DirectoryFileSource",
    "FormationParser",
    "TrainFormationMapper",
    "ScheduleLoader",
    "HttpEventPublisher",
    "LoggingEventPublisher",
]
