"""
Operator log endpoints.

Log snapshot, live SSE relay and notification dismissal.
"""

import asyncio
import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from shared.logging import get_logger
from control_api.dependencies import get_operator_log
from control_api.services.operator_log import OperatorLog
from control_api.services.sse_manager import OPERATOR_CHANNEL

logger = get_logger(__name__)

router = APIRouter()

HEARTBEAT_INTERVAL_SECONDS = 30


@router.get("/logs")
async def get_logs(
    limit: int = Query(200, ge=1, le=1000),
    operator_log: OperatorLog = Depends(get_operator_log)
):
    lines = operator_log.lines[-limit:]
    return {
        "lines": [line.model_dump() for line in lines],
        "notification": operator_log.notification,
    }


async def event_generator(operator_log: OperatorLog):
    """
    Relay operator log events as SSE.

    Yields:
        SSE formatted event strings
    """
    manager = operator_log.manager
    queue = asyncio.Queue(maxsize=1000)
    await manager.add_connection(OPERATOR_CHANNEL, queue)
    try:
        snapshot = {
            "lines": [line.model_dump() for line in operator_log.lines[-50:]],
            "notification": operator_log.notification,
        }
        yield f"event: snapshot\ndata: {json.dumps(snapshot)}\n\n"

        while True:
            try:
                message = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_INTERVAL_SECONDS)
                yield message
                manager.touch(queue)
            except asyncio.TimeoutError:
                heartbeat = {"timestamp": datetime.now(timezone.utc).isoformat()}
                yield f"event: heartbeat\ndata: {json.dumps(heartbeat)}\n\n"
                manager.touch(queue)
    except asyncio.CancelledError:
        logger.info("Log stream cancelled")
        raise
    finally:
        await manager.remove_connection(OPERATOR_CHANNEL, queue)
        logger.info("Log stream ended")


@router.get("/logs/stream")
async def stream_logs(operator_log: OperatorLog = Depends(get_operator_log)):
    if await operator_log.manager.connection_count(OPERATOR_CHANNEL) >= operator_log.manager.max_connections:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Too many log stream connections"
        )
    return StreamingResponse(
        event_generator(operator_log),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )


@router.post("/notifications/dismiss")
async def dismiss_notification(operator_log: OperatorLog = Depends(get_operator_log)):
    dismissed = operator_log.dismiss_notification()
    return {"dismissed": dismissed}
