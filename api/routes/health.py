"""
Health check endpoint with database and import status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, ProcessingLogInfo
from models.base import ProcessStatus
from models.processing_log import ProcessingLog
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.
    
    Returns:
    - Database connectivity status
    - Outcome of the most recently processed planning file
    """
    
    db_connected = False
    
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
    
    last_processed = None
    
    if db_connected:
        try:
            result = await db.execute(
                select(ProcessingLog).order_by(ProcessingLog.modified.desc()).limit(1)
            )
            entry = result.scalar_one_or_none()
            if entry is not None:
                last_processed = ProcessingLogInfo.model_validate(entry)
        except Exception as e:
            logger.error(f"Failed to fetch processing log: {str(e)}")
    
    if not db_connected:
        status = "unhealthy"
    elif last_processed is not None and last_processed.status == ProcessStatus.FAILED.value:
        status = "degraded"
    else:
        status = "healthy"
    
    return HealthCheckResponse(
        status=status,
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        last_processed_file=last_processed
    )
