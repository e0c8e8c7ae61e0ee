"""
Unit tests for file progress tracking
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from ingestion.progress import FileProgressTracker
from models.base import ProcessStatus, JobType
from core.exceptions import ProgressTrackingError
from tests.factories import build_file_ref


def done_result(paths):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(paths)
    return result


class TestFileProgressTracker:
    """Test pending file selection and outcome logging"""

    @pytest.mark.asyncio
    async def test_done_file_is_excluded(self, mock_session):
        mock_session.execute = AsyncMock(return_value=done_result(["a.xml"]))
        tracker = FileProgressTracker(mock_session)

        pending = await tracker.filter_pending([build_file_ref("a.xml"), build_file_ref("b.xml")])

        assert [f.name for f in pending] == ["b.xml"]

    @pytest.mark.asyncio
    async def test_pending_files_sorted_oldest_first(self, mock_session):
        mock_session.execute = AsyncMock(return_value=done_result([]))
        tracker = FileProgressTracker(mock_session)
        files = [
            build_file_ref("c.xml", datetime(2024, 5, 3)),
            build_file_ref("a.xml", datetime(2024, 5, 1)),
            build_file_ref("b.xml", datetime(2024, 5, 2)),
        ]

        pending = await tracker.filter_pending(files)

        assert [f.name for f in pending] == ["a.xml", "b.xml", "c.xml"]

    @pytest.mark.asyncio
    async def test_failed_file_stays_pending(self, mock_session):
        """Only DONE entries are looked up; FAILED never blocks a retry"""
        mock_session.execute = AsyncMock(return_value=done_result([]))
        tracker = FileProgressTracker(mock_session)

        assert await tracker.is_pending("a.xml") is True

        statement = str(mock_session.execute.await_args.args[0])
        assert "processing_logs.status" in statement

    @pytest.mark.asyncio
    async def test_no_files_skips_query(self, mock_session):
        tracker = FileProgressTracker(mock_session)

        assert await tracker.filter_pending([]) == []
        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_failure_raises(self, mock_session):
        mock_session.execute = AsyncMock(side_effect=Exception("connection refused"))
        tracker = FileProgressTracker(mock_session)

        with pytest.raises(ProgressTrackingError):
            await tracker.filter_pending([build_file_ref("a.xml")])

    @pytest.mark.asyncio
    async def test_mark_done_appends_entry(self, mock_session):
        tracker = FileProgressTracker(mock_session)

        entry = await tracker.mark_done("a.xml")

        mock_session.add.assert_called_once_with(entry)
        mock_session.commit.assert_awaited_once()
        assert entry.status == ProcessStatus.DONE
        assert entry.job_type == JobType.PARSE_IVU_TRAIN_FORMATION_PLANNING
        assert entry.error_message is None

    @pytest.mark.asyncio
    async def test_mark_failed_keeps_error(self, mock_session):
        tracker = FileProgressTracker(mock_session)

        entry = await tracker.mark_failed("a.xml", "Planning export is not well-formed XML")

        assert entry.status == ProcessStatus.FAILED
        assert entry.error_message == "Planning export is not well-formed XML"

    @pytest.mark.asyncio
    async def test_write_failure_rolls_back(self, mock_session):
        mock_session.commit = AsyncMock(side_effect=Exception("disk full"))
        tracker = FileProgressTracker(mock_session)

        with pytest.raises(ProgressTrackingError) as exc_info:
            await tracker.mark_done("a.xml")

        assert exc_info.value.context["file_path"] == "a.xml"
        mock_session.rollback.assert_awaited_once()
