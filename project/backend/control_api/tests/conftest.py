"""
Pytest configuration and fixtures for control API tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from shared.config import Settings
from shared.models.config import PipelineConfig
from shared.models.scene import Scene
from modules.script_writer.writer import ScriptResult
from modules.visual_sync.sync import SyncOutcome
from control_api.services.operator_log import OperatorLog
from control_api.services.sse_manager import SSEManager


@pytest.fixture
def test_settings(tmp_path):
    """Settings with instant retries and a temporary download directory."""
    return Settings(
        environment="test",
        render_server_url="http://render.test",
        generation_retry_cooldown_seconds=0,
        stream_reconnect_delay_seconds=3.0,
        script_timeout_seconds=5.0,
        measure_audio_duration=False,
        download_dir=str(tmp_path / "downloads"),
    )


@pytest.fixture
def operator_log():
    return OperatorLog(manager=SSEManager())


@pytest.fixture
def pipeline_config():
    return PipelineConfig(topic="The Lighthouse at Dusk", niche="horror", voiceStyle="Deep male narrator")


def make_script(scene_count: int = 4) -> ScriptResult:
    return ScriptResult(
        title="the_lighthouse",
        scenes=[
            Scene(index=i, voiceover=f"Narration for scene {i}.", visual_prompts=[f"shot {i}"])
            for i in range(1, scene_count + 1)
        ],
    )


@pytest.fixture
def script_writer():
    writer = MagicMock()
    writer.generate = AsyncMock(return_value=make_script())
    return writer


@pytest.fixture
def sync_engine():
    engine = MagicMock()
    engine.reconcile = AsyncMock(return_value=SyncOutcome.UNCHANGED)
    return engine


@pytest.fixture
def render_client():
    """Render client double with every network call mocked."""
    client = MagicMock()
    client.cancel = AsyncMock(return_value=None)
    client.generate_voiceover = AsyncMock(
        side_effect=lambda text, voice_id, scene_num: f"/output/the_lighthouse/scene_{scene_num}.wav"
    )
    client.fetch_artifact = AsyncMock(return_value=b"")
    client.submit_job = AsyncMock(return_value={"folder": "the_lighthouse_123"})
    client.artifact_url = MagicMock(side_effect=lambda path: f"http://render.test{path}")
    client.send_cancel_beacon = MagicMock()
    client.aclose = AsyncMock()
    return client
