"""
Event publisher posting batches to an HTTP message bus endpoint
"""

import httpx
from typing import List, Optional
from ingestion.publishers.base import EventPublisher
from schemas.events import DomainEvent
from core.config import settings
from core.exceptions import EventPublishError
import logging

logger = logging.getLogger(__name__)


class HttpEventPublisher(EventPublisher):
    """
    POST each batch as one JSON document.

    Body:
        {"events": [<DomainEvent>, ...]}  in the order they were produced

    Any transport error or non-2xx response fails the whole batch.
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.EVENT_PUBLISH_URL
        self.timeout = timeout if timeout is not None else settings.EVENT_PUBLISH_TIMEOUT

        if not self.url:
            raise ValueError("HttpEventPublisher requires an endpoint URL")

    async def publish(self, events: List[DomainEvent]) -> None:
        if not events:
            return

        payload = {"events": [event.model_dump(mode="json") for event in events]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EventPublishError(
                f"Message bus rejected {len(events)} events",
                context={
                    "endpoint": self.url,
                    "event_count": len(events),
                    "status_code": e.response.status_code,
                    "response_body": e.response.text[:500]
                },
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise EventPublishError(
                f"Failed to deliver {len(events)} events",
                context={"endpoint": self.url, "event_count": len(events)},
                original_exception=e
            )

        logger.debug(f"Published {len(events)} events to {self.url}")
