from ingestion.publishers.base import EventPublisher
from ingestion.publishers.http_publisher import HttpEventPublisher
from ingestion.publishers.log_publisher import LoggingEventPublisher
from core.config import settings


def build_publisher() -> EventPublisher:
    """Publisher for the configured message bus, falling back to the log"""
    if settings.EVENT_PUBLISH_URL:
        return HttpEventPublisher(settings.EVENT_PUBLISH_URL)
    return LoggingEventPublisher()


__all__ = ["EventPublisher", "HttpEventPublisher", "LoggingEventPublisher", "build_publisher"]
