"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (SourceType, ProcessStatus, JobType)
    scheduled_train: Scheduled trains from dispatch, manual entry and planning
    processing_log: Append-only outcome per imported planning file

Usage:
    from models.scheduled_train import ScheduledTrain
    from models.processing_log import ProcessingLog
    from models.base import SourceType, ProcessStatus

Example:
    train = ScheduledTrain(
        train_number="101",
        scheduled_date=date(2024, 5, 1),
        operator_id=101,
        source_type=SourceType.PLANNING,
    )
    session.add(train)
    await session.commit()
"""

from models.base import Base, SourceType, ProcessStatus, JobType
from models.scheduled_train import ScheduledTrain
from models.processing_log import ProcessingLog

__all__ = [
    "Base",
    "SourceType",
    "ProcessStatus",
    "JobType",
    "ScheduledTrain",
    "ProcessingLog",
]
