"""
Pipeline endpoints.

Start a job and read the active job's status.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError
from shared.logging import get_logger
from shared.models.config import PipelineConfig
from shared.validation import validate_aspect_ratio, validate_topic
from control_api.dependencies import get_controller
from control_api.orchestrator import PipelineController

logger = get_logger(__name__)

router = APIRouter()


@router.post("/pipeline/start", status_code=status.HTTP_202_ACCEPTED)
async def start_pipeline(
    payload: dict,
    background_tasks: BackgroundTasks,
    controller: PipelineController = Depends(get_controller)
):
    """
    Start a new job from a configuration object.

    Accepts the consultant's camelCase keys. The job runs in the background;
    poll /pipeline/status or stream /logs/stream for progress.
    """
    try:
        config = PipelineConfig.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid pipeline config: {e.error_count()} errors") from e

    validate_topic(config.topic)
    validate_aspect_ratio(config.aspect_ratio)

    job = controller.create_job(config)
    background_tasks.add_task(controller.run, job)
    logger.info("Pipeline queued", extra={"job_id": job.job_id})
    return {"job_id": job.job_id, "state": job.state.value}


@router.get("/pipeline/status")
async def pipeline_status(controller: PipelineController = Depends(get_controller)):
    """State and per-scene report of the active job."""
    job = controller.active_job
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No job has been started")
    return {
        "job_id": job.job_id,
        "state": job.state.value,
        "title": job.title,
        "folder": job.folder,
        "error": job.error,
        "scenes": len(job.scenes),
        "report": [outcome.model_dump() for outcome in job.report],
    }
