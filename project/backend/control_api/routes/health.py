"""
Health check endpoint.

Reports progress channel connectivity and the active job state.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from control_api.dependencies import get_controller, get_event_stream
from control_api.orchestrator import PipelineController
from control_api.services.event_stream import EventStreamClient

router = APIRouter()


@router.get("/health")
async def health_check(
    controller: PipelineController = Depends(get_controller),
    event_stream: EventStreamClient = Depends(get_event_stream)
):
    """
    Health check.

    The service is healthy while the process runs; a disconnected progress
    channel is reported as degraded since it reconnects by itself.
    """
    job = controller.active_job
    return {
        "status": "healthy" if event_stream.connected else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "director": {
            "connected": event_stream.connected,
            "reconnect_attempts": event_stream.reconnect_attempts,
        },
        "active_job": {"job_id": job.job_id, "state": job.state.value} if job else None,
    }
