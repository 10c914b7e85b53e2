"""
Error handling.

Custom exception classes for consistent error handling across the pipeline.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        job_id: Optional[str] = None,
        code: Optional[str] = None
    ):
        """
        Initialize pipeline error.

        Args:
            message: Error message
            job_id: Optional job ID associated with the error
            code: Optional error code for categorization
        """
        self.message = message
        self.job_id = job_id
        self.code = code
        super().__init__(self.message)


class ConfigError(PipelineError):
    """Configuration errors (missing env vars, invalid settings)."""
    pass


class ValidationError(PipelineError):
    """Input validation errors."""
    pass


class RetryableError(PipelineError):
    """Error that can be retried."""
    pass


class RateLimitError(RetryableError):
    """Provider rate limit, quota window or temporary unavailability."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        job_id: Optional[str] = None,
        code: Optional[str] = None
    ):
        """
        Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds until retry is allowed
            job_id: Optional job ID associated with the error
            code: Optional error code for categorization
        """
        self.retry_after = retry_after
        super().__init__(message, job_id, code)


class GenerationError(PipelineError):
    """Non-transient generation backend failures."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        job_id: Optional[str] = None,
        code: Optional[str] = None
    ):
        self.status_code = status_code
        super().__init__(message, job_id, code)


class GenerationTimeoutError(GenerationError):
    """Generation call exceeded its time ceiling."""
    pass


class BudgetExceededError(PipelineError):
    """Provider reported quota exhaustion. Never retried."""
    pass


class StructuralError(PipelineError):
    """Generation result is missing required fields."""
    pass


class AudioGenerationError(PipelineError):
    """Voiceover synthesis failed for a scene."""
    pass


class HandoffError(PipelineError):
    """Render collaborator rejected the job descriptor."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        job_id: Optional[str] = None,
        code: Optional[str] = None
    ):
        self.status_code = status_code
        super().__init__(message, job_id, code)


class DataQualityError(PipelineError):
    """Inconsistent upstream data (e.g. unknown subject id). Logged, not raised to the operator."""
    pass


class ArtifactNotFoundError(PipelineError):
    """Artifact is missing at the expected path."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        job_id: Optional[str] = None,
        code: Optional[str] = None
    ):
        self.path = path
        super().__init__(message, job_id, code)


__all__ = [
    "PipelineError",
    "ConfigError",
    "ValidationError",
    "RetryableError",
    "RateLimitError",
    "GenerationError",
    "GenerationTimeoutError",
    "BudgetExceededError",
    "StructuralError",
    "AudioGenerationError",
    "HandoffError",
    "DataQualityError",
    "ArtifactNotFoundError",
]
