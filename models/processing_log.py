from sqlalchemy import Column, BigInteger, String, Enum, DateTime, Text, Index
from datetime import datetime
from models.base import Base, JobType, ProcessStatus


class ProcessingLog(Base):
    """
    Outcome of processing one source file.

    Purpose:
    - Skip files that were already imported
    - Audit trail of failed attempts

    Design:
    - Append-only: a retry adds a new row, history is never rewritten
    - A file is done once any row with status DONE exists for its path
    """
    __tablename__ = "processing_logs"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    path = Column(String(500), nullable=False)
    job_type = Column(Enum(JobType), nullable=False)
    status = Column(Enum(ProcessStatus), nullable=False)
    error_message = Column(Text, nullable=True)

    modified = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("idx_processing_log_path_job_status", "path", "job_type", "status"),
    )

    def __repr__(self) -> str:
        return f"<ProcessingLog path={self.path} status={self.status}>"
