"""
Pytest configuration and fixtures.
"""

import pytest

from shared.models.config import PipelineConfig
from shared.models.scene import Scene


@pytest.fixture
def test_env_file(tmp_path):
    """Create a temporary .env file for testing."""
    env_file = tmp_path / ".env"
    env_content = """
RENDER_SERVER_URL=http://director.local:3001/
GENERATION_API_KEY=test-key
PREFERRED_MODEL=gemini-2.0-flash
FALLBACK_MODELS=["gemini-1.5-pro"]
CLIP_LENGTH_SECONDS=6
ENVIRONMENT=test
LOG_LEVEL=DEBUG
"""
    env_file.write_text(env_content)
    return env_file


@pytest.fixture
def pipeline_config():
    return PipelineConfig(topic="Secrets of the deep sea", niche="Documentary", aspectRatio="9:16")


@pytest.fixture
def scenes():
    return [
        Scene(index=1, voiceover="Opening line.", duration=6.0),
        Scene(index=2, voiceover="Second line.", duration=4.5),
        Scene(index=3, voiceover="Third line."),
    ]
