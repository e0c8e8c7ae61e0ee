"""
Domain events emitted after scheduled train changes are committed
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4
from models.base import SourceType
import enum


class EventType(str, enum.Enum):
    TRAIN_CREATED = "TrainCreated"
    TRAIN_UPDATED = "TrainUpdated"
    TRAIN_CANCELLED = "TrainCancelled"


class DomainEvent(BaseModel):
    """One state change of a scheduled train"""
    event_id: UUID = Field(default_factory=uuid4)
    event_type: EventType
    train_number: str
    scheduled_date: date
    operator_id: int
    source_type: SourceType
    source: Optional[str] = None
    is_canceled: bool = False
    occurred_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def for_train(cls, event_type: EventType, train, **overrides) -> "DomainEvent":
        """Build an event from a ScheduledTrain row or a ScheduledTrainCreate"""
        fields = {
            "train_number": train.train_number,
            "scheduled_date": train.scheduled_date,
            "operator_id": train.operator_id,
            "source_type": train.source_type,
            "source": train.source,
            "is_canceled": bool(train.is_canceled),
        }
        fields.update(overrides)
        return cls(event_type=event_type, **fields)
