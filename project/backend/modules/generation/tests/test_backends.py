"""
Tests for the OpenAI-compatible backend error mapping.
"""

import json

import httpx
import pytest
from openai import AsyncOpenAI

from shared.errors import BudgetExceededError, GenerationError, RateLimitError
from modules.generation.backends import OpenAICompatibleBackend

COMPLETION = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "created": 0,
    "model": "gemini-2.0-flash",
    "choices": [
        {"index": 0, "message": {"role": "assistant", "content": "hello"}, "finish_reason": "stop"}
    ],
}


def make_backend(handler) -> OpenAICompatibleBackend:
    client = AsyncOpenAI(
        api_key="test-key",
        base_url="http://llm.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    return OpenAICompatibleBackend(api_key="test-key", client=client)


@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json=COMPLETION)

    text = await make_backend(handler).complete("gemini-2.0-flash", "Be brief.", "Say hi")

    assert text == "hello"
    assert seen["model"] == "gemini-2.0-flash"
    assert seen["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "USER REQUEST: Say hi"},
    ]


@pytest.mark.asyncio
async def test_quota_exhaustion_is_budget_error():
    def handler(request):
        return httpx.Response(429, json={"error": {
            "message": "You exceeded your current quota",
            "type": "insufficient_quota",
            "code": "insufficient_quota",
        }})

    with pytest.raises(BudgetExceededError):
        await make_backend(handler).complete("m", "s", "q")


@pytest.mark.asyncio
async def test_plain_429_is_rate_limit():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "Too many requests", "code": "rate_limit"}})

    with pytest.raises(RateLimitError):
        await make_backend(handler).complete("m", "s", "q")


@pytest.mark.asyncio
async def test_503_is_rate_limit():
    def handler(request):
        return httpx.Response(503, json={"error": {"message": "The model is overloaded"}})

    with pytest.raises(RateLimitError) as exc_info:
        await make_backend(handler).complete("m", "s", "q")
    assert exc_info.value.code == "SERVICE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_other_status_is_generation_error():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "bad model"}})

    with pytest.raises(GenerationError) as exc_info:
        await make_backend(handler).complete("m", "s", "q")
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_connection_failure_is_generation_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GenerationError) as exc_info:
        await make_backend(handler).complete("m", "s", "q")
    assert exc_info.value.code == "CONNECTION"
