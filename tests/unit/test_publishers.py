"""
Unit tests for event publishers
"""

import httpx
import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch
from ingestion.publishers import HttpEventPublisher, LoggingEventPublisher, build_publisher
from schemas.events import DomainEvent, EventType
from models.base import SourceType
from core.exceptions import EventPublishError

BUS_URL = "http://bus.local/events"


def event(train_number="101", event_type=EventType.TRAIN_CREATED):
    return DomainEvent(
        event_type=event_type,
        train_number=train_number,
        scheduled_date=date(2024, 5, 1),
        operator_id=101,
        source_type=SourceType.PLANNING
    )


def mock_client(response=None, post_error=None):
    """Patchable stand-in for httpx.AsyncClient used as an async context manager"""
    client = MagicMock()
    client.post = AsyncMock(return_value=response, side_effect=post_error)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def response(status_code):
    return httpx.Response(status_code, request=httpx.Request("POST", BUS_URL), text="nope")


class TestHttpEventPublisher:
    """Test posting events to the message bus"""

    @pytest.mark.asyncio
    async def test_publish_posts_batch_in_order(self):
        client = mock_client(response(202))
        publisher = HttpEventPublisher(BUS_URL, timeout=5)

        with patch("ingestion.publishers.http_publisher.httpx.AsyncClient", return_value=client):
            await publisher.publish([event("101"), event("102", EventType.TRAIN_CANCELLED)])

        client.post.assert_awaited_once()
        payload = client.post.await_args.kwargs["json"]
        assert [e["train_number"] for e in payload["events"]] == ["101", "102"]
        assert payload["events"][1]["event_type"] == "TrainCancelled"
        assert payload["events"][0]["scheduled_date"] == "2024-05-01"

    @pytest.mark.asyncio
    async def test_rejected_batch_raises(self):
        client = mock_client(response(503))
        publisher = HttpEventPublisher(BUS_URL)

        with patch("ingestion.publishers.http_publisher.httpx.AsyncClient", return_value=client):
            with pytest.raises(EventPublishError) as exc_info:
                await publisher.publish([event()])

        assert exc_info.value.context["status_code"] == 503

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        client = mock_client(post_error=httpx.ConnectError("connection refused"))
        publisher = HttpEventPublisher(BUS_URL)

        with patch("ingestion.publishers.http_publisher.httpx.AsyncClient", return_value=client):
            with pytest.raises(EventPublishError):
                await publisher.publish([event()])

    @pytest.mark.asyncio
    async def test_empty_batch_is_not_sent(self):
        publisher = HttpEventPublisher(BUS_URL)

        with patch("ingestion.publishers.http_publisher.httpx.AsyncClient") as client_cls:
            await publisher.publish([])

        client_cls.assert_not_called()

    def test_requires_url(self):
        with patch("ingestion.publishers.http_publisher.settings") as mock_settings:
            mock_settings.EVENT_PUBLISH_URL = None
            with pytest.raises(ValueError):
                HttpEventPublisher()


class TestLoggingEventPublisher:
    @pytest.mark.asyncio
    async def test_logs_each_event(self, caplog):
        caplog.set_level("INFO")

        await LoggingEventPublisher().publish([event("101"), event("102")])

        assert "TrainCreated train=101" in caplog.text
        assert "TrainCreated train=102" in caplog.text


class TestBuildPublisher:
    def test_http_when_url_configured(self):
        with patch("ingestion.publishers.settings") as mock_settings:
            mock_settings.EVENT_PUBLISH_URL = BUS_URL
            assert isinstance(build_publisher(), HttpEventPublisher)

    def test_log_fallback(self):
        with patch("ingestion.publishers.settings") as mock_settings:
            mock_settings.EVENT_PUBLISH_URL = None
            assert isinstance(build_publisher(), LoggingEventPublisher)
