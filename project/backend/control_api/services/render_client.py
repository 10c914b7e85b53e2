"""
Render collaborator client.

HTTP calls to the director server: cancel, voiceover synthesis, job handoff,
artifact fetch and the progress stream.
"""

import threading
from typing import Any, Dict, Optional

import httpx

from shared.config import Settings, settings as default_settings
from shared.errors import (
    ArtifactNotFoundError,
    AudioGenerationError,
    HandoffError,
    PipelineError,
    RateLimitError,
    RetryableError,
)
from shared.logging import get_logger
from shared.models.events import FINAL_VIDEO_NAME
from shared.retry import retry_with_backoff

logger = get_logger(__name__)

CANCEL_BEACON_TIMEOUT_SECONDS = 2.0
VOICEOVER_MAX_ATTEMPTS = 2


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text[:200]


class RenderClient:
    """Async client for the render collaborator."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        config = config or default_settings
        self.base_url = config.render_server_url
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.render_request_timeout_seconds
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def artifact_url(self, path: str) -> str:
        """Absolute download URL for an artifact path."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def final_video_path(folder: str) -> str:
        return f"/output/{folder}/{FINAL_VIDEO_NAME}"

    async def cancel(self) -> None:
        """
        Ask the collaborator to cancel whatever it is rendering.

        Raises:
            PipelineError: If the request fails
        """
        try:
            response = await self._client.post("/control", json={"action": "cancel"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PipelineError(f"Cancel request failed: {str(e)}", code="CANCEL_FAILED") from e
        logger.info("Cancel signal sent to render server")

    def send_cancel_beacon(self, timeout: float = CANCEL_BEACON_TIMEOUT_SECONDS) -> threading.Thread:
        """
        Fire-and-forget cancel used at process teardown.

        Runs on a daemon thread so shutdown never waits on the network.
        """
        url = f"{self.base_url}/control"

        def _send():
            try:
                httpx.post(url, json={"action": "cancel"}, timeout=timeout)
            except httpx.HTTPError as e:
                logger.debug(f"Cancel beacon failed: {str(e)}")

        thread = threading.Thread(target=_send, name="cancel-beacon", daemon=True)
        thread.start()
        return thread

    async def submit_job(self, descriptor: Dict[str, Any]) -> Dict[str, Any]:
        """
        Hand the finished job descriptor to the collaborator.

        Returns:
            Response body (may carry the project folder)

        Raises:
            HandoffError: Non-2xx response or transport failure
        """
        try:
            response = await self._client.post("/generate-video", json={"scriptData": descriptor})
        except httpx.HTTPError as e:
            raise HandoffError(f"Render server unreachable: {str(e)}", job_id=descriptor.get("jobId")) from e

        if not response.is_success:
            raise HandoffError(
                f"Render server rejected job ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code,
                job_id=descriptor.get("jobId")
            )

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @retry_with_backoff(max_attempts=VOICEOVER_MAX_ATTEMPTS, base_delay=2.0)
    async def generate_voiceover(self, text: str, voice_id: str, scene_num: int) -> str:
        """
        Synthesize narration for one scene.

        Returns:
            Artifact path of the audio file

        Raises:
            RateLimitError: 429/503 after the retry budget
            AudioGenerationError: Any other failure
        """
        try:
            response = await self._client.post(
                "/generate-voiceover",
                json={"text": text, "voiceId": voice_id, "sceneNum": scene_num}
            )
        except httpx.TransportError as e:
            raise RetryableError(f"Voiceover request failed: {str(e)}", code="TRANSPORT") from e
        except httpx.HTTPError as e:
            raise AudioGenerationError(f"Voiceover request failed for scene {scene_num}: {str(e)}") from e

        if response.status_code in (429, 503):
            raise RateLimitError(
                f"Voiceover service busy ({response.status_code})",
                code="VOICEOVER_BUSY"
            )
        if not response.is_success:
            raise AudioGenerationError(
                f"Voiceover failed for scene {scene_num}: {_error_detail(response)}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise AudioGenerationError(
                f"Voiceover failed for scene {scene_num}: response is not JSON: {response.text[:100]}"
            ) from e

        if not isinstance(body, dict):
            raise AudioGenerationError(f"Voiceover failed for scene {scene_num}: bad response")
        path = body.get("path")
        if not path:
            detail = body.get("error") or "no path returned"
            raise AudioGenerationError(f"Voiceover failed for scene {scene_num}: {detail}")
        logger.info(f"Server generated audio: {path}", extra={"scene_index": scene_num, "voice_id": voice_id})
        return str(path)

    async def fetch_artifact(self, path: str) -> bytes:
        """
        Download an artifact.

        Raises:
            ArtifactNotFoundError: 404 at the expected path
            PipelineError: Any other failure
        """
        try:
            response = await self._client.get(self.artifact_url(path))
        except httpx.HTTPError as e:
            raise PipelineError(f"Artifact download failed: {str(e)}", code="DOWNLOAD_FAILED") from e

        if response.status_code == 404:
            raise ArtifactNotFoundError(f"Artifact not found: {path}", path=path)
        if not response.is_success:
            raise PipelineError(
                f"Artifact download failed ({response.status_code})",
                code="DOWNLOAD_FAILED"
            )
        return response.content

    def stream_events(self):
        """Open the progress channel. Use as ``async with``."""
        return self._client.stream(
            "GET",
            "/events",
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(10.0, read=None)
        )
