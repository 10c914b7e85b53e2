"""
Artifact endpoints.

Manual retry of the final video download by project folder name.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.logging import get_logger
from control_api.dependencies import get_downloader, get_operator_log
from control_api.services.artifacts import ArtifactDownloader
from control_api.services.operator_log import OperatorLog

logger = get_logger(__name__)

router = APIRouter()


class RetryRequest(BaseModel):
    folder: str


@router.post("/artifacts/retry")
async def retry_download(
    request: RetryRequest,
    downloader: ArtifactDownloader = Depends(get_downloader),
    operator_log: OperatorLog = Depends(get_operator_log)
):
    """
    Download ``/output/<folder>/final_video.mp4`` again.

    Errors propagate to the exception handlers (404 for a missing artifact).
    """
    await operator_log.info(f"⬇️ Retrying download for folder: {request.folder}")
    target = await downloader.retry_final_video(request.folder)
    await operator_log.info("✅ Download saved to disk.")
    return {"saved_to": str(target)}
