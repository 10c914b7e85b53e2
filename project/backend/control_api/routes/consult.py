"""
Consultant endpoint.
"""

from typing import Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.models.config import PipelineConfig
from modules.consultant.consultant import consult_with_user
from modules.generation.client import GenerationClient
from control_api.dependencies import get_controller, get_generation_client
from control_api.orchestrator import PipelineController

logger = get_logger(__name__)

router = APIRouter()


class ConsultRequest(BaseModel):
    history: List[Dict[str, str]]
    auto_start: bool = True


@router.post("/consult")
async def consult(
    request: ConsultRequest,
    background_tasks: BackgroundTasks,
    client: GenerationClient = Depends(get_generation_client),
    controller: PipelineController = Depends(get_controller)
):
    """
    One consultant turn.

    A config marked ready starts the pipeline unless auto_start is false.
    """
    reply = await consult_with_user(request.history, client)
    job_id = None

    if reply.ready and request.auto_start:
        try:
            config = PipelineConfig.model_validate(reply.config)
        except PydanticValidationError as e:
            logger.warning(f"Consultant config rejected: {e.error_count()} errors")
        else:
            job = controller.create_job(config)
            background_tasks.add_task(controller.run, job)
            job_id = job.job_id

    return {"message": reply.message, "config": reply.config, "job_id": job_id}
