"""
Dependencies for the relay endpoint.
Resolves the settings, upstream client and task tracker held on application state.
"""
import httpx
from fastapi import Depends, Request

from relay.config.settings import Settings
from relay.controllers.relay_controller import RelayController
from relay.services.tasks import BackgroundTaskTracker


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client created in the application lifespan."""
    return request.app.state.http_client


def get_task_tracker(request: Request) -> BackgroundTaskTracker:
    """Tracker owning the background relay tasks."""
    return request.app.state.tasks


def get_relay_controller(
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
    tasks: BackgroundTaskTracker = Depends(get_task_tracker),
) -> RelayController:
    """Dependency injection for RelayController."""
    return RelayController(settings=settings, client=client, tasks=tasks)
