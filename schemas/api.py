"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date, datetime
from models.base import SourceType, ProcessStatus, JobType

# ============================================================================
# Health Check Schemas
# ============================================================================

class ProcessingLogInfo(BaseModel):
    """One processing log entry"""
    path: str
    job_type: JobType
    status: ProcessStatus
    modified: datetime
    error_message: Optional[str] = None
    
    class Config:
        from_attributes = True
        use_enum_values = True


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    last_processed_file: Optional[ProcessingLogInfo] = None
    
    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-05-01T06:30:00Z",
                "database_connected": True,
                "last_processed_file": {
                    "path": "train-formation-planning/2024-05-01.xml",
                    "job_type": "parse_ivu_train_formation_planning",
                    "status": "done",
                    "modified": "2024-05-01T06:10:00Z"
                }
            }
        }

# ============================================================================
# Scheduled Train Schemas
# ============================================================================

class ScheduledTrainResponse(BaseModel):
    """Response model for a scheduled train"""
    id: int
    train_number: str
    scheduled_date: date
    operator_id: int
    source_type: SourceType
    source: Optional[str] = None
    trip_type: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    planned_departure: Optional[datetime] = None
    planned_arrival: Optional[datetime] = None
    is_canceled: bool
    is_deleted: bool
    modified: datetime
    
    class Config:
        from_attributes = True
        use_enum_values = True


class PaginationMetadata(BaseModel):
    """Pagination metadata"""
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_previous: bool


class TrainsResponse(BaseModel):
    """Paginated scheduled trains"""
    items: List[ScheduledTrainResponse]
    pagination: PaginationMetadata

# ============================================================================
# Statistics Schemas
# ============================================================================

class StatsResponse(BaseModel):
    """Import statistics"""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    
    files_done: int
    files_failed: int
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None
    
    trains_by_source_type: Dict[str, int] = Field(default_factory=dict)
    cancelled_planning_trains: int = 0
    
    recent_files: List[ProcessingLogInfo] = Field(default_factory=list)
