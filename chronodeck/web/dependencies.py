"""Request dependencies shared by the API routes."""

from fastapi import Request

from chronodeck.core.service import TimerStopwatchService


def get_service(request: Request) -> TimerStopwatchService:
    """Get the service owned by the running app."""
    return request.app.state.service
