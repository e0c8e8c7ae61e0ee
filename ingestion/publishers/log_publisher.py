"""
Event publisher that writes events to the application log
"""

from typing import List
from ingestion.publishers.base import EventPublisher
from schemas.events import DomainEvent
import logging

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):
    """Used when no message bus endpoint is configured"""

    async def publish(self, events: List[DomainEvent]) -> None:
        for event in events:
            logger.info(
                f"{event.event_type.value} train={event.train_number} "
                f"date={event.scheduled_date} operator={event.operator_id}",
                extra={"event": event.model_dump(mode="json")}
            )
