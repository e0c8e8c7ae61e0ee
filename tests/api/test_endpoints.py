"""
API endpoint tests
"""

import pytest
from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from api.main import app
from api.dependencies import get_db
from models.base import JobType, ProcessStatus, SourceType
from models.processing_log import ProcessingLog
from tests.factories import build_scheduled_train


def log_entry(status=ProcessStatus.DONE, error_message=None):
    return ProcessingLog(
        id=1,
        path="train-formation-planning/2024-05-01.xml",
        job_type=JobType.PARSE_IVU_TRAIN_FORMATION_PLANNING,
        status=status,
        error_message=error_message,
        modified=datetime(2024, 5, 1, 6, 10)
    )


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = value
    return result


def rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    result.scalars.return_value.all.return_value = rows
    return result


@pytest.fixture
def db_session():
    return AsyncMock()


@pytest.fixture
def client(db_session):
    """Test client with database override; the scheduler is not started"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["trains"] == "/trains"


def test_health_healthy(client, db_session):
    db_session.execute = AsyncMock(side_effect=[MagicMock(), scalar_result(log_entry())])

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database_connected"] is True
    assert data["last_processed_file"]["status"] == "done"


def test_health_degraded_after_failed_file(client, db_session):
    entry = log_entry(ProcessStatus.FAILED, "ParseError: Planning export is not well-formed XML")
    db_session.execute = AsyncMock(side_effect=[MagicMock(), scalar_result(entry)])

    data = client.get("/health").json()

    assert data["status"] == "degraded"
    assert data["last_processed_file"]["error_message"].startswith("ParseError")


def test_health_unhealthy_without_database(client, db_session):
    db_session.execute = AsyncMock(side_effect=Exception("connection refused"))

    data = client.get("/health").json()

    assert data["status"] == "unhealthy"
    assert data["database_connected"] is False
    assert data["last_processed_file"] is None


def test_trains_pagination(client, db_session):
    trains = [build_scheduled_train("101", date(2024, 5, 1), id=1)]
    db_session.execute = AsyncMock(side_effect=[scalar_result(3), rows_result(trains)])

    response = client.get("/trains?page=1&page_size=1&source_type=planning")

    assert response.status_code == 200
    data = response.json()
    assert data["items"][0]["train_number"] == "101"
    assert data["items"][0]["source_type"] == "planning"
    assert data["pagination"]["total_pages"] == 3
    assert data["pagination"]["has_next"] is True
    assert data["pagination"]["has_previous"] is False


def test_trains_rejects_invalid_page(client):
    response = client.get("/trains?page=0")

    assert response.status_code == 422


def test_stats(client, db_session):
    db_session.execute = AsyncMock(side_effect=[
        rows_result([
            (ProcessStatus.DONE, 4, datetime(2024, 5, 1, 6, 10)),
            (ProcessStatus.FAILED, 1, datetime(2024, 4, 30, 6, 10)),
        ]),
        rows_result([(SourceType.PLANNING, 120), (SourceType.DISPATCH, 35)]),
        scalar_result(6),
        rows_result([log_entry()]),
    ])

    response = client.get("/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["files_done"] == 4
    assert data["files_failed"] == 1
    assert data["trains_by_source_type"] == {"planning": 120, "dispatch": 35}
    assert data["cancelled_planning_trains"] == 6
    assert len(data["recent_files"]) == 1
