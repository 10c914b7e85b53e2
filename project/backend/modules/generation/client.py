"""
Generation client.

One logical "generate text for this prompt" call over an ordered list of
models: retry the same model once after a cooldown on transient errors, then
advance to the next model.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, List, Optional, Union

from shared.config import Settings, settings as default_settings
from shared.errors import BudgetExceededError, GenerationError, RetryableError
from shared.logging import get_logger
from modules.generation.backends import OpenAICompatibleBackend, TextBackend

logger = get_logger("generation")

GeneratedOutput = Union[dict, list, str]

MAX_RETRIES = 1
RETRY_COOLDOWN_SECONDS = 30.0

_TRANSIENT_MARKERS = ("429", "503", "quota", "rate limit", "unavailable")
_BUDGET_MARKERS = ("insufficient_quota", "budget", "billing")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences from model output."""
    return text.replace("```json", "").replace("```", "").strip()


def parse_generated_text(text: str) -> GeneratedOutput:
    """
    Parse cleaned model output as JSON, falling back to the text itself.

    Args:
        text: Raw model output

    Returns:
        Parsed JSON value, or the cleaned text when it is not JSON
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        return cleaned


def classify_provider_error(error: Exception) -> str:
    """
    Classify a generation failure.

    Returns:
        "budget" for quota exhaustion, "transient" for rate limits and
        unavailability, "fatal" for everything else
    """
    if isinstance(error, BudgetExceededError):
        return "budget"
    message = str(error).lower()
    if any(marker in message for marker in _BUDGET_MARKERS):
        return "budget"
    if isinstance(error, RetryableError):
        return "transient"
    if isinstance(error, GenerationError) and error.status_code in (429, 503):
        return "transient"
    if any(marker in message for marker in _TRANSIENT_MARKERS):
        return "transient"
    return "fatal"


class GenerationClient:
    """Multi-model generation with ordered fallback and bounded retry."""

    def __init__(
        self,
        backend: TextBackend,
        default_model: str,
        fallback_models: Optional[List[str]] = None,
        max_retries: int = MAX_RETRIES,
        retry_cooldown: float = RETRY_COOLDOWN_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.backend = backend
        self.default_model = default_model
        self.fallback_models = list(fallback_models or [])
        self.max_retries = max_retries
        self.retry_cooldown = retry_cooldown
        self._sleep = sleep

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "GenerationClient":
        config = config or default_settings
        backend = OpenAICompatibleBackend(
            api_key=config.generation_api_key,
            base_url=config.generation_base_url,
            timeout=config.script_timeout_seconds
        )
        return cls(
            backend=backend,
            default_model=config.preferred_model,
            fallback_models=config.fallback_models,
            max_retries=config.generation_max_retries,
            retry_cooldown=config.generation_retry_cooldown_seconds
        )

    def candidate_models(self, preferred_model: Optional[str] = None) -> List[str]:
        """Preferred model first, then the fallbacks without duplicates."""
        preferred = preferred_model or self.default_model
        candidates = [preferred]
        for model in self.fallback_models:
            if model not in candidates:
                candidates.append(model)
        return candidates

    async def generate(
        self,
        system_prompt: str,
        user_query: str,
        preferred_model: Optional[str] = None
    ) -> GeneratedOutput:
        """
        Generate text, parsed as JSON when possible.

        Args:
            system_prompt: System instructions
            user_query: User request
            preferred_model: Model to try first (defaults to the configured one)

        Returns:
            Parsed JSON (dict or list) or the cleaned raw text

        Raises:
            BudgetExceededError: Immediately, without trying other models
            Exception: The last observed error once every model failed
        """
        last_error: Optional[Exception] = None

        for model in self.candidate_models(preferred_model):
            retries = 0
            while retries <= self.max_retries:
                label = f" (retry {retries}/{self.max_retries})" if retries else ""
                logger.info(f"Attempting generation with {model}{label}", extra={"model": model})
                try:
                    text = await self.backend.complete(model, system_prompt, user_query)
                except Exception as e:
                    last_error = e
                    kind = classify_provider_error(e)
                    logger.warning(
                        f"Generation failed with {model}: {str(e)[:100]}",
                        extra={"model": model, "error_kind": kind}
                    )
                    if kind == "budget":
                        if isinstance(e, BudgetExceededError):
                            raise
                        raise BudgetExceededError(
                            f"Provider quota exhausted on {model}: {e}",
                            code="BUDGET_EXCEEDED"
                        ) from e
                    if kind == "transient" and retries < self.max_retries:
                        logger.warning(
                            f"High traffic on {model}, waiting {self.retry_cooldown:.0f}s before retry",
                            extra={"model": model}
                        )
                        await self._sleep(self.retry_cooldown)
                        retries += 1
                        continue
                    break

                logger.info(
                    f"Generation succeeded with {model}",
                    extra={"model": model, "response_length": len(text)}
                )
                result = parse_generated_text(text)
                if isinstance(result, str):
                    logger.warning(f"Output from {model} is not JSON, returning raw text")
                return result

        logger.error("All generation models failed")
        if last_error is None:
            raise GenerationError("No generation models configured")
        raise last_error
