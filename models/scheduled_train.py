from sqlalchemy import Column, BigInteger, Integer, String, Date, DateTime, Boolean, Enum, Index
from datetime import datetime
from models.base import Base, SourceType


class ScheduledTrain(Base):
    """
    Durable schedule record for one train on one date.

    Purpose:
    - Single schedule view shared by dispatch, manual and planning data
    - Planning rows are created, updated and cancelled by the import;
      dispatch and manual rows are owned elsewhere and only read here

    Design:
    - Natural key (train_number, scheduled_date, operator_id) is unique
    - is_deleted is a soft delete set by the owning system
    - is_canceled marks a train that will not run (announced in the export
      or withdrawn because it left the export)
    """
    __tablename__ = "scheduled_trains"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    # Natural key
    train_number = Column(String(20), nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    operator_id = Column(Integer, nullable=False)

    # Ownership
    source_type = Column(Enum(SourceType), nullable=False, index=True)
    source = Column(String(500), nullable=True)  # Source file for planning rows

    # Schedule details
    trip_type = Column(String(50), nullable=True)
    origin = Column(String(20), nullable=True)
    destination = Column(String(20), nullable=True)
    planned_departure = Column(DateTime, nullable=True)
    planned_arrival = Column(DateTime, nullable=True)

    # Lifecycle
    is_canceled = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    modified = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_scheduled_train_key", "train_number", "scheduled_date", "operator_id", unique=True),
        Index("idx_scheduled_train_source_date", "source_type", "scheduled_date"),
    )

    @property
    def key(self):
        return (self.train_number, self.scheduled_date, self.operator_id)

    def log_label(self) -> str:
        source_type = self.source_type.value if self.source_type else None
        return (
            f"train={self.train_number} date={self.scheduled_date} "
            f"operator={self.operator_id} source_type={source_type}"
        )

    def __repr__(self) -> str:
        return f"<ScheduledTrain {self.log_label()}>"
