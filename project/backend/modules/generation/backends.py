"""
Text generation backends.

Adapters that turn (model, system prompt, user query) into raw text and
translate provider failures into the shared error taxonomy.
"""

from typing import Optional, Protocol

import openai
from openai import AsyncOpenAI

from shared.errors import BudgetExceededError, GenerationError, RateLimitError
from shared.logging import get_logger

logger = get_logger("generation")

_BUDGET_CODES = ("insufficient_quota", "billing_hard_limit_reached", "budget_exceeded")
_TRANSIENT_STATUS = (429, 503)


class TextBackend(Protocol):
    """Anything that can answer a single-turn prompt."""

    async def complete(self, model: str, system_prompt: str, user_query: str) -> str:
        ...


def _is_budget_error(error: Exception) -> bool:
    code = (getattr(error, "code", None) or "").lower()
    message = str(error).lower()
    return code in _BUDGET_CODES or any(c in message for c in _BUDGET_CODES)


class OpenAICompatibleBackend:
    """
    Backend for any OpenAI-compatible chat completions endpoint.

    The default endpoint is Gemini's OpenAI-compatible surface, so the model
    ids from settings are Gemini model names.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self._client = client or AsyncOpenAI(
            api_key=api_key or "missing-key",
            base_url=base_url,
            timeout=timeout,
            max_retries=0  # retry policy lives in GenerationClient
        )

    async def complete(self, model: str, system_prompt: str, user_query: str) -> str:
        """
        Run one chat completion.

        Raises:
            BudgetExceededError: Provider reported quota exhaustion
            RateLimitError: 429/503 from the provider
            GenerationError: Any other provider failure
        """
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": f"USER REQUEST: {user_query}"},
                ]
            )
        except openai.RateLimitError as e:
            if _is_budget_error(e):
                raise BudgetExceededError(f"{model}: quota exhausted ({e})", code="BUDGET_EXCEEDED") from e
            raise RateLimitError(f"{model}: rate limited (429): {e}", code="RATE_LIMITED") from e
        except openai.APIStatusError as e:
            if _is_budget_error(e):
                raise BudgetExceededError(f"{model}: quota exhausted ({e})", code="BUDGET_EXCEEDED") from e
            if e.status_code in _TRANSIENT_STATUS:
                raise RateLimitError(
                    f"{model}: service unavailable ({e.status_code}): {e}",
                    code="SERVICE_UNAVAILABLE"
                ) from e
            raise GenerationError(
                f"{model}: provider error ({e.status_code}): {e}",
                status_code=e.status_code
            ) from e
        except openai.APITimeoutError as e:
            raise GenerationError(f"{model}: request timed out", code="TIMEOUT") from e
        except openai.APIConnectionError as e:
            raise GenerationError(f"{model}: connection failed: {e}", code="CONNECTION") from e

        if not response.choices:
            raise GenerationError(f"{model}: empty response")

        text = response.choices[0].message.content or ""
        logger.debug(f"Backend returned {len(text)} chars", extra={"model": model})
        return text
