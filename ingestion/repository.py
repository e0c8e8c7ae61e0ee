"""
Read access to the scheduled train store
"""

from datetime import date
from typing import Iterable, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.scheduled_train import ScheduledTrain
import logging

logger = logging.getLogger(__name__)


class ScheduledTrainRepository:
    """Snapshot queries used by reconciliation"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def scheduled_trains_for_dates(self, dates: Iterable[date]) -> List[ScheduledTrain]:
        """
        All scheduled trains, of every source type, on the given dates.

        Soft-deleted rows are included; the reconciler decides what they mean.
        """
        dates = sorted(set(dates))
        if not dates:
            return []

        result = await self.db.execute(
            select(ScheduledTrain)
            .where(ScheduledTrain.scheduled_date.in_(dates))
            .order_by(ScheduledTrain.scheduled_date, ScheduledTrain.train_number)
        )
        trains = list(result.scalars().all())

        logger.info(f"Loaded {len(trains)} scheduled trains for {len(dates)} dates")
        return trains
