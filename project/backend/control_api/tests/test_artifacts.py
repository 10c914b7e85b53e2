"""
Tests for artifact downloads.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from shared.errors import ValidationError
from control_api.services.artifacts import ArtifactDownloader


@pytest.fixture
def downloader(test_settings):
    render_client = MagicMock()
    render_client.fetch_artifact = AsyncMock(return_value=b"video-bytes")
    return ArtifactDownloader(render_client, test_settings)


@pytest.mark.asyncio
async def test_saves_under_project_folder(downloader, tmp_path):
    target = await downloader.download("/output/reel_1/final_video.mp4")

    assert target == tmp_path / "downloads" / "reel_1" / "final_video.mp4"
    assert target.read_bytes() == b"video-bytes"


@pytest.mark.asyncio
async def test_name_cannot_climb_out(downloader, tmp_path):
    """Directory parts of a server-supplied name are dropped."""
    target = await downloader.download("/output/reel_1/final_video.mp4", "../../escaped.mp4")

    assert target == tmp_path / "downloads" / "reel_1" / "escaped.mp4"
    assert target.exists()
    assert not (tmp_path / "escaped.mp4").exists()


@pytest.mark.asyncio
async def test_absolute_name_stays_inside(downloader, tmp_path):
    target = await downloader.download("/output/reel_1/final_video.mp4", "/etc/cron.d/job")

    assert target == tmp_path / "downloads" / "reel_1" / "job"


@pytest.mark.asyncio
@pytest.mark.parametrize("path,name", [
    ("/output/reel_1/final_video.mp4", ".."),
    ("/output/../final_video.mp4", None),
    ("/output/.hidden/final_video.mp4", None),
])
async def test_unsafe_targets_rejected(downloader, tmp_path, path, name):
    with pytest.raises(ValidationError):
        await downloader.download(path, name)

    downloader.render_client.fetch_artifact.assert_not_awaited()
    assert not (tmp_path / "final_video.mp4").exists()


@pytest.mark.asyncio
async def test_retry_validates_folder(downloader):
    with pytest.raises(ValidationError):
        await downloader.retry_final_video("../etc")


@pytest.mark.asyncio
async def test_retry_downloads_final_video(downloader, tmp_path):
    target = await downloader.retry_final_video("reel_2")

    downloader.render_client.fetch_artifact.assert_awaited_once_with("/output/reel_2/final_video.mp4")
    assert target == tmp_path / "downloads" / "reel_2" / "final_video.mp4"
