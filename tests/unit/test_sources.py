"""
Unit tests for the directory file source
"""

import os
import time
import pytest
from ingestion.sources.directory_source import DirectoryFileSource
from core.exceptions import FileListingError, DownloadError
from tests.factories import build_file_ref

PREFIX = "train-formation-planning"


@pytest.fixture
def export_dir(tmp_path):
    (tmp_path / PREFIX).mkdir()
    (tmp_path / PREFIX / "2024-05-01.xml").write_bytes(b"<TrainFormationPlanning/>")
    (tmp_path / "dispatch-2024-05-01.xml").write_bytes(b"<Dispatch/>")
    (tmp_path / f"{PREFIX}-extra.xml").write_bytes(b"<TrainFormationPlanning/>")
    return tmp_path


class TestDirectoryFileSource:
    """Test listing and reading planning exports"""

    @pytest.mark.asyncio
    async def test_lists_files_matching_prefix(self, export_dir):
        source = DirectoryFileSource(str(export_dir), prefix=PREFIX, max_age_days=1)

        files = await source.list_pending_planning_files()

        assert sorted(f.name for f in files) == [f"{PREFIX}-extra.xml", f"{PREFIX}/2024-05-01.xml"]
        assert all(f.size == len(b"<TrainFormationPlanning/>") for f in files)

    @pytest.mark.asyncio
    async def test_old_files_are_not_listed(self, export_dir):
        old = export_dir / f"{PREFIX}-old.xml"
        old.write_bytes(b"<TrainFormationPlanning/>")
        three_days_ago = time.time() - 3 * 24 * 3600
        os.utime(old, (three_days_ago, three_days_ago))

        source = DirectoryFileSource(str(export_dir), prefix=PREFIX, max_age_days=1)
        files = await source.list_pending_planning_files()

        assert f"{PREFIX}-old.xml" not in [f.name for f in files]

    @pytest.mark.asyncio
    async def test_missing_directory_raises(self, tmp_path):
        source = DirectoryFileSource(str(tmp_path / "missing"), prefix=PREFIX)

        with pytest.raises(FileListingError):
            await source.list_pending_planning_files()

    @pytest.mark.asyncio
    async def test_download_reads_content(self, export_dir):
        source = DirectoryFileSource(str(export_dir), prefix=PREFIX)

        data = await source.download(build_file_ref(f"{PREFIX}/2024-05-01.xml"))

        assert data.name == f"{PREFIX}/2024-05-01.xml"
        assert data.content == b"<TrainFormationPlanning/>"

    @pytest.mark.asyncio
    async def test_download_missing_file_raises(self, export_dir):
        source = DirectoryFileSource(str(export_dir), prefix=PREFIX)

        with pytest.raises(DownloadError):
            await source.download(build_file_ref(f"{PREFIX}/gone.xml"))
