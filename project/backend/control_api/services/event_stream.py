"""
Progress channel client.

Listens to the render collaborator's event stream for the whole process
lifetime, relays log lines to the operator, downloads the final artifact on
completion and reconnects forever on transport errors.
"""

import asyncio
import re
from typing import Any, Awaitable, Callable, Optional

import httpx

from shared.config import Settings, settings as default_settings
from shared.errors import PipelineError
from shared.logging import get_logger
from shared.models.events import CompletedEvent, LogEvent, parse_progress_event
from control_api.services.artifacts import ArtifactDownloader
from control_api.services.operator_log import OperatorLog
from control_api.services.render_client import RenderClient

logger = get_logger(__name__)

CONNECTED_MESSAGE = "--- Connected to Director ---"
DISCONNECTED_MESSAGE = "Connection to Director lost, reconnecting..."

_OUTPUT_FOLDER = re.compile(r"Output folder:\s*(\S+)")


def folder_from_log_line(message: str) -> Optional[str]:
    """Extract the project folder name from an 'Output folder:' line."""
    match = _OUTPUT_FOLDER.search(message)
    if not match:
        return None
    return match.group(1).rstrip("/").replace("\\", "/").split("/")[-1] or None


class EventStreamClient:
    """Supervised reader of the progress channel."""

    def __init__(
        self,
        render_client: RenderClient,
        operator_log: OperatorLog,
        config: Optional[Settings] = None,
        downloader: Optional[ArtifactDownloader] = None,
        on_completed: Optional[Callable[[CompletedEvent], Awaitable[Any]]] = None,
        on_folder: Optional[Callable[[str], Awaitable[Any]]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        config = config or default_settings
        self.render_client = render_client
        self.operator_log = operator_log
        self.downloader = downloader or ArtifactDownloader(render_client, config)
        self.reconnect_delay = config.stream_reconnect_delay_seconds
        self.on_completed = on_completed
        self.on_folder = on_folder
        self._sleep = sleep

        self.reconnect_attempts = 0
        self.warned = False
        self.connected = False
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        """Run the client in a background task."""
        if self._task is None or self._task.done():
            self._stopped = False
            self._task = asyncio.create_task(self.run(), name="event-stream")
        return self._task

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def request_stop(self) -> None:
        """Stop after the event being handled."""
        self._stopped = True

    async def run(self) -> None:
        """Connect, consume and reconnect until stopped."""
        while not self._stopped:
            try:
                await self._consume()
                if self._stopped:
                    break
                await self._on_disconnect("stream ended")
            except httpx.HTTPError as e:
                await self._on_disconnect(str(e) or type(e).__name__)
            except Exception as e:
                logger.error("Progress channel reader failed", exc_info=e)
                await self._on_disconnect(str(e) or type(e).__name__)
            if self._stopped:
                break
            self.reconnect_attempts += 1
            await self._sleep(self.reconnect_delay)

    async def _on_disconnect(self, reason: str) -> None:
        self.connected = False
        if not self.warned:
            logger.warning(f"Progress channel closed: {reason}", extra={"attempt": self.reconnect_attempts})
            self.warned = True
            await self.operator_log.warning(DISCONNECTED_MESSAGE)
        else:
            logger.debug(f"Progress channel still down: {reason}", extra={"attempt": self.reconnect_attempts})

    async def _consume(self) -> None:
        async with self.render_client.stream_events() as response:
            response.raise_for_status()
            self.connected = True
            self.warned = False
            await self.operator_log.info(CONNECTED_MESSAGE)

            async for line in response.aiter_lines():
                if not line.startswith("data:"):
                    continue
                payload = line[len("data:"):].strip()
                try:
                    await self.handle_message(payload)
                except Exception as e:
                    logger.error(
                        "Progress event handler failed",
                        exc_info=e,
                        extra={"payload": payload[:100]}
                    )
                if self._stopped:
                    return

    async def handle_message(self, raw: str) -> None:
        """Dispatch one progress channel payload."""
        try:
            event = parse_progress_event(raw)
        except ValueError as e:
            logger.warning(f"Malformed progress event: {str(e)[:100]}")
            return

        if event is None:
            logger.debug("Ignoring progress event", extra={"payload": raw[:100]})
        elif isinstance(event, LogEvent):
            await self._handle_log(event)
        elif isinstance(event, CompletedEvent):
            await self.handle_completed(event)
        else:
            raise TypeError(f"Unhandled progress event {type(event).__name__}")

    async def _handle_log(self, event: LogEvent) -> None:
        await self.operator_log.info(event.message)
        folder = folder_from_log_line(event.message)
        if folder and self.on_folder is not None:
            await self.on_folder(folder)

    async def handle_completed(self, event: CompletedEvent) -> None:
        await self.operator_log.info(f"🎉 {event.message}")

        artifact = event.final_artifact()
        if artifact is not None:
            url = self.render_client.artifact_url(artifact.path)
            await self.operator_log.info(f"⬇️ Auto-downloading from: {url}")
            try:
                await self.downloader.download(artifact.path, artifact.name or None)
                await self.operator_log.info("✅ Download saved to disk.")
            except (PipelineError, OSError) as e:
                logger.warning(f"Auto-download failed: {str(e)}", exc_info=e)
                await self.operator_log.error(
                    "❌ Download failed... Retry manually with the project folder name."
                )
        else:
            logger.warning("Completed event carried no final artifact")

        if self.on_completed is not None:
            await self.on_completed(event)
