"""
Artifact downloads.

Saves finished render artifacts into the local download directory.
"""

from pathlib import Path
from typing import Optional

from shared.config import Settings, settings as default_settings
from shared.errors import ValidationError
from shared.logging import get_logger
from shared.models.events import FINAL_VIDEO_NAME
from shared.validation import validate_folder_name
from control_api.services.render_client import RenderClient

logger = get_logger(__name__)


def _folder_from_path(path: str) -> Optional[str]:
    """'/output/<folder>/final_video.mp4' -> '<folder>'."""
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 3 and parts[-3] == "output":
        return parts[-2]
    return None


class ArtifactDownloader:
    def __init__(self, render_client: RenderClient, config: Optional[Settings] = None):
        self.render_client = render_client
        self.download_dir = Path((config or default_settings).download_dir)

    async def download(self, path: str, name: Optional[str] = None) -> Path:
        """
        Fetch an artifact and write it under the download directory.

        Raises:
            ArtifactNotFoundError: Nothing at ``path``
            ValidationError: Name or folder would land outside the download directory
            PipelineError: Transport or server failure
            OSError: Local write failure
        """
        target = self._target_for(path, name)
        data = await self.render_client.fetch_artifact(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"Saved artifact to {target}", extra={"bytes": len(data), "artifact_path": path})
        return target

    def _target_for(self, path: str, name: Optional[str]) -> Path:
        # Only the last component of a server-supplied name is used
        filename = Path(name).name if name else ""
        filename = filename or Path(path).name or FINAL_VIDEO_NAME
        if filename in (".", ".."):
            raise ValidationError(f"Invalid artifact name: {name}")

        folder = _folder_from_path(path)
        target_dir = self.download_dir / validate_folder_name(folder) if folder else self.download_dir
        target = target_dir / filename

        root = self.download_dir.resolve()
        if root not in target.resolve().parents:
            raise ValidationError(f"Artifact path escapes the download directory: {path}")
        return target

    async def retry_final_video(self, folder: str) -> Path:
        """
        Manual retry of the final video download by project folder name.

        Raises:
            ValidationError: Unsafe folder name
        """
        folder = validate_folder_name(folder)
        return await self.download(RenderClient.final_video_path(folder), FINAL_VIDEO_NAME)
