"""
Import statistics endpoint
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from api.dependencies import get_db
from schemas.api import StatsResponse, ProcessingLogInfo
from models.base import ProcessStatus, SourceType
from models.processing_log import ProcessingLog
from models.scheduled_train import ScheduledTrain
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Statistics"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    limit: int = Query(10, ge=1, le=100, description="Number of recent files to return"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get planning import statistics.
    
    Returns:
    - Processed file counts by outcome
    - Last success and failure times
    - Scheduled trains by source type
    - Recent processing log entries
    """
    request_id = f"req_{uuid.uuid4().hex[:12]}"
    
    logger.info(f"[{request_id}] GET /stats")
    
    # ========== File outcomes ==========
    
    outcome_result = await db.execute(
        select(
            ProcessingLog.status,
            func.count(),
            func.max(ProcessingLog.modified)
        ).group_by(ProcessingLog.status)
    )
    outcomes = {status: (count, last) for status, count, last in outcome_result.all()}
    
    files_done, last_success = outcomes.get(ProcessStatus.DONE, (0, None))
    files_failed, last_failure = outcomes.get(ProcessStatus.FAILED, (0, None))
    
    # ========== Scheduled trains ==========
    
    trains_result = await db.execute(
        select(ScheduledTrain.source_type, func.count())
        .where(ScheduledTrain.is_deleted.is_(False))
        .group_by(ScheduledTrain.source_type)
    )
    trains_by_source_type = {
        source_type.value: count for source_type, count in trains_result.all()
    }
    
    cancelled_result = await db.execute(
        select(func.count()).select_from(ScheduledTrain).where(
            and_(
                ScheduledTrain.source_type == SourceType.PLANNING,
                ScheduledTrain.is_canceled.is_(True)
            )
        )
    )
    cancelled_planning_trains = cancelled_result.scalar() or 0
    
    # ========== Recent files ==========
    
    recent_result = await db.execute(
        select(ProcessingLog).order_by(ProcessingLog.modified.desc()).limit(limit)
    )
    recent_files = [
        ProcessingLogInfo.model_validate(entry) for entry in recent_result.scalars().all()
    ]
    
    return StatsResponse(
        files_done=files_done,
        files_failed=files_failed,
        last_success=last_success,
        last_failure=last_failure,
        trains_by_source_type=trains_by_source_type,
        cancelled_planning_trains=cancelled_planning_trains,
        recent_files=recent_files
    )
