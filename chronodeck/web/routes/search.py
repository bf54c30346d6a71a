"""Search API Routes - Launcher-style suggestions and command execution.

Endpoints:
- GET  /api/search?q=5m&tag=timer  - Ranked suggestions for search text
- POST /api/search/handle          - Execute a suggestion's command
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from chronodeck.core.commands import Command, CommandAction
from chronodeck.core.service import TimerStopwatchService
from chronodeck.web.dependencies import get_service

logger = logging.getLogger(__name__)

router = APIRouter()


class SuggestionOut(BaseModel):
    """A ranked suggestion."""

    id: str
    label: str
    detail: str
    action: CommandAction
    duration: float
    score: float
    tag: str


class CommandRequest(BaseModel):
    """Request body for executing a command."""

    action: CommandAction
    duration: float = 0.0


class HandleResponse(BaseModel):
    """Result of executing a command."""

    handled: bool
    keep_open: bool


@router.get("")
async def search(
    q: str = "",
    tag: list[str] = Query(default=[]),
    service: TimerStopwatchService = Depends(get_service),
) -> list[SuggestionOut]:
    """Get ranked suggestions.

    Args:
        q: Search text, e.g. "5m", "1:30", "cancel", "reset".
        tag: Search tags ("timer", "stopwatch"). Repeatable.

    Returns:
        Suggestions, most relevant first. Empty without a known tag.
    """
    return [SuggestionOut(**s.to_dict()) for s in service.search(q, tag)]


@router.post("/handle")
async def handle_command(
    body: CommandRequest, service: TimerStopwatchService = Depends(get_service)
) -> HandleResponse:
    """Execute a command picked from the suggestions."""
    result = service.handle(Command(body.action, body.duration))
    logger.info("Command %s handled=%s", body.action.value, result.handled)
    return HandleResponse(handled=result.handled, keep_open=result.keep_open)
