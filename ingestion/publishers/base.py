"""
Message bus boundary for domain events
"""

from abc import ABC, abstractmethod
from typing import List
from schemas.events import DomainEvent


class EventPublisher(ABC):
    """
    Hand committed changes to downstream consumers.

    Delivery is at-least-once. Events of one call keep their order.
    """

    @abstractmethod
    async def publish(self, events: List[DomainEvent]) -> None:
        """
        Publish a batch of events.

        Raises:
            EventPublishError: If the batch could not be delivered
        """
        pass
