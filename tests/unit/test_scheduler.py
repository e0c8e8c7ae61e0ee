"""
Unit tests for the planning import scheduler
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from ingestion.scheduler import PlanningImportScheduler
from ingestion.publishers import LoggingEventPublisher


@pytest.fixture
def scheduler(metrics):
    return PlanningImportScheduler(
        metrics=metrics,
        file_source=MagicMock(),
        publisher=LoggingEventPublisher()
    )


class TestPlanningImportScheduler:
    """Test job registration and lifecycle"""

    def test_job_never_overlaps(self, scheduler):
        with patch.object(scheduler.scheduler, "start"):
            scheduler.start()

        job = scheduler.scheduler.get_job("planning_import_job")
        assert job is not None
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_stop_sets_cancellation(self, scheduler):
        scheduler.stop()

        assert scheduler.cancellation.is_set()

    def test_start_clears_previous_cancellation(self, scheduler):
        scheduler.cancellation.set()

        with patch.object(scheduler.scheduler, "start"):
            scheduler.start()

        assert not scheduler.cancellation.is_set()

    @pytest.mark.asyncio
    async def test_run_import_job_passes_cancellation(self, scheduler):
        session = AsyncMock()
        scheduler.SessionLocal = MagicMock()
        scheduler.SessionLocal.return_value.__aenter__ = AsyncMock(return_value=session)
        scheduler.SessionLocal.return_value.__aexit__ = AsyncMock(return_value=False)

        with patch("ingestion.scheduler.PlanningImportRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock()
            await scheduler.run_import_job()

        runner_cls.assert_called_once()
        assert runner_cls.call_args.args[0] is session
        assert runner_cls.call_args.kwargs["metrics"] is scheduler.metrics
        runner_cls.return_value.run.assert_awaited_once_with(scheduler.cancellation)

    @pytest.mark.asyncio
    async def test_run_import_job_survives_runner_error(self, scheduler):
        scheduler.SessionLocal = MagicMock()
        scheduler.SessionLocal.return_value.__aenter__ = AsyncMock(return_value=AsyncMock())
        scheduler.SessionLocal.return_value.__aexit__ = AsyncMock(return_value=False)

        with patch("ingestion.scheduler.PlanningImportRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock(side_effect=RuntimeError("boom"))
            await scheduler.run_import_job()
