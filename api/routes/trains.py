"""
Scheduled train retrieval endpoint with pagination and filtering
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from api.dependencies import get_db
from schemas.api import TrainsResponse, ScheduledTrainResponse, PaginationMetadata
from models.base import SourceType
from models.scheduled_train import ScheduledTrain
from typing import Optional
from datetime import date
import uuid
import math
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Trains"])


@router.get("/trains", response_model=TrainsResponse)
async def get_trains(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    scheduled_date: Optional[date] = Query(None, description="Filter by scheduled date"),
    source_type: Optional[SourceType] = Query(None, description="Filter by source type"),
    train_number: Optional[str] = Query(None, description="Filter by train number"),
    include_deleted: bool = Query(False, description="Include soft-deleted trains"),
    db: AsyncSession = Depends(get_db)
):
    """
    Retrieve scheduled trains.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    
    logger.info(
        f"[{request_id}] GET /trains - page={page}, page_size={page_size}, "
        f"filters: scheduled_date={scheduled_date}, source_type={source_type}, train_number={train_number}"
    )
    
    filters = []
    
    if scheduled_date:
        filters.append(ScheduledTrain.scheduled_date == scheduled_date)
    
    if source_type:
        filters.append(ScheduledTrain.source_type == source_type)
    
    if train_number:
        filters.append(ScheduledTrain.train_number == train_number)
    
    if not include_deleted:
        filters.append(ScheduledTrain.is_deleted.is_(False))
    
    count_query = select(func.count()).select_from(ScheduledTrain)
    query = select(ScheduledTrain)
    if filters:
        count_query = count_query.where(and_(*filters))
        query = query.where(and_(*filters))
    
    count_result = await db.execute(count_query)
    total_items = count_result.scalar() or 0
    
    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0
    offset = (page - 1) * page_size
    
    query = query.order_by(ScheduledTrain.scheduled_date, ScheduledTrain.train_number)
    query = query.offset(offset).limit(page_size)
    
    result = await db.execute(query)
    items = [ScheduledTrainResponse.model_validate(train) for train in result.scalars().all()]
    
    logger.info(f"[{request_id}] Returned {len(items)} trains")
    
    return TrainsResponse(
        items=items,
        pagination=PaginationMetadata(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )
    )
