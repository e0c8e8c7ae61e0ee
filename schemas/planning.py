"""
Pydantic schemas for planned trains extracted from the planning export
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Set, Tuple
from datetime import date, datetime
from models.base import SourceType

PASSENGER_TRIP = "PassengerTrip"


class TrainSection(BaseModel):
    """One formation section of a trip, tagged with the owning division"""
    division: str = Field(..., min_length=1, max_length=20)
    position: Optional[int] = None

    @validator("division", pre=True)
    def clean_division(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class PlannedTrip(BaseModel):
    """
    One trip record inside an exported train formation.

    sections is None when the export carries no formation for the trip,
    which is different from an explicitly empty formation.
    """
    train_number: str = Field(..., min_length=1, max_length=20)
    start_date: date
    trip_type: Optional[str] = None
    is_canceled: bool = False
    sections: Optional[List[TrainSection]] = None

    origin: Optional[str] = Field(None, max_length=20)
    destination: Optional[str] = Field(None, max_length=20)
    departure: Optional[datetime] = None
    arrival: Optional[datetime] = None

    @validator("train_number", pre=True)
    def clean_train_number(cls, v):
        if v is None:
            return v
        return str(v).strip()

    @property
    def is_passenger_trip(self) -> bool:
        return self.trip_type == PASSENGER_TRIP


class PlannedTrain(BaseModel):
    """
    Candidate train extracted from one planning file.

    Ephemeral: only lives for the duration of one pipeline run.
    """
    train_number: str = Field(..., min_length=1, max_length=20)
    start_date: date
    source_file: str = Field(..., min_length=1, max_length=500)
    trips: List[PlannedTrip] = Field(..., min_length=1)

    @validator("train_number", pre=True)
    def clean_train_number(cls, v):
        if v is None:
            return v
        return str(v).strip()

    def start_dates(self) -> Set[date]:
        """Service dates of the trips this candidate carries"""
        return {trip.start_date for trip in self.trips}

    def log_label(self) -> str:
        return f"train={self.train_number} date={self.start_date:%Y-%m-%d} file={self.source_file}"


class ScheduledTrainCreate(BaseModel):
    """
    Schema for a scheduled train row produced from planning data.

    Ensures:
    - Required key fields are present
    - Rows are always tagged as planning rows
    """
    train_number: str = Field(..., min_length=1, max_length=20)
    scheduled_date: date
    operator_id: int
    source_type: SourceType = SourceType.PLANNING
    source: Optional[str] = Field(None, max_length=500)

    trip_type: Optional[str] = Field(None, max_length=50)
    origin: Optional[str] = Field(None, max_length=20)
    destination: Optional[str] = Field(None, max_length=20)
    planned_departure: Optional[datetime] = None
    planned_arrival: Optional[datetime] = None

    is_canceled: bool = False

    @property
    def key(self) -> Tuple[str, date, int]:
        return (self.train_number, self.scheduled_date, self.operator_id)

    def log_label(self) -> str:
        return (
            f"train={self.train_number} date={self.scheduled_date:%Y-%m-%d} "
            f"operator={self.operator_id}"
        )


class PlanningFileRef(BaseModel):
    """A planning export file available at the file source"""
    name: str = Field(..., min_length=1)
    last_modified: datetime
    size: Optional[int] = None


class PlanningFileData(BaseModel):
    """Downloaded contents of a planning export file"""
    name: str
    content: bytes
