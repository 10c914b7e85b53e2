"""
FastAPI dependencies.

Accessors for the process-wide services stored on the application state.
"""

from fastapi import Request

from modules.generation.client import GenerationClient
from control_api.orchestrator import PipelineController
from control_api.services.artifacts import ArtifactDownloader
from control_api.services.event_stream import EventStreamClient
from control_api.services.operator_log import OperatorLog


def get_controller(request: Request) -> PipelineController:
    return request.app.state.controller


def get_operator_log(request: Request) -> OperatorLog:
    return request.app.state.operator_log


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def get_downloader(request: Request) -> ArtifactDownloader:
    return request.app.state.downloader


def get_event_stream(request: Request) -> EventStreamClient:
    return request.app.state.event_stream
