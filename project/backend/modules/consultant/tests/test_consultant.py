"""
Unit tests for the consultant turn.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from modules.consultant.consultant import (
    OFFLINE_MESSAGE,
    build_consultant_prompt,
    consult_with_user,
)
from shared.errors import GenerationError


@pytest.fixture
def history():
    return [
        {"role": "user", "content": "I want a horror short about a lighthouse"},
        {"role": "assistant", "content": "Great, what length?"},
        {"role": "user", "content": "60 seconds, 9:16"},
    ]


class TestConsultWithUser:
    """Test conversation handling."""

    def test_prompt_includes_history(self, history):
        prompt = build_consultant_prompt(history)
        assert "USER: 60 seconds, 9:16" in prompt
        assert "ASSISTANT: Great, what length?" in prompt

    @pytest.mark.asyncio
    async def test_reply_with_inline_config(self, history):
        """Text replies route through the extractor."""
        client = Mock()
        client.generate = AsyncMock(
            return_value='Locked in. {"ready": true, "topic": "Lighthouse", "niche": "horror", "aspectRatio": "9:16"}'
        )

        reply = await consult_with_user(history, client)

        assert reply.message == "Locked in."
        assert reply.ready
        assert reply.config["aspectRatio"] == "9:16"
        assert reply.config["voiceId"] == "en_US-ryan-medium"

    @pytest.mark.asyncio
    async def test_reply_already_parsed(self, history):
        """A reply that was nothing but JSON arrives as a dict."""
        client = Mock()
        client.generate = AsyncMock(return_value={"ready": True, "topic": "Lighthouse", "niche": "gaming"})

        reply = await consult_with_user(history, client)

        assert reply.message == ""
        assert reply.config["voiceId"] == "en_US-bryce-medium"

    @pytest.mark.asyncio
    async def test_plain_question(self, history):
        client = Mock()
        client.generate = AsyncMock(return_value="Which platform?")

        reply = await consult_with_user(history, client)

        assert reply.message == "Which platform?"
        assert reply.config is None
        assert not reply.ready

    @pytest.mark.asyncio
    async def test_generation_failure_is_offline_message(self, history):
        client = Mock()
        client.generate = AsyncMock(side_effect=GenerationError("all models failed"))

        reply = await consult_with_user(history, client)

        assert reply.message == OFFLINE_MESSAGE
        assert reply.config is None
