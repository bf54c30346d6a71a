"""Stopwatch API Routes.

Endpoints:
- GET  /api/stopwatch        - Stopwatch status
- POST /api/stopwatch/start  - Start (no-op if running)
- POST /api/stopwatch/stop   - Stop (no-op if stopped)
- POST /api/stopwatch/reset  - Reset to zero (keeps running if running)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chronodeck.core.service import TimerStopwatchService
from chronodeck.web.dependencies import get_service

router = APIRouter()


class StopwatchStatus(BaseModel):
    """Stopwatch status."""

    running: bool
    elapsed: float
    display: str


@router.get("")
async def get_stopwatch(
    service: TimerStopwatchService = Depends(get_service),
) -> StopwatchStatus:
    return StopwatchStatus(**service.stopwatch_status())


@router.post("/start")
async def start_stopwatch(
    service: TimerStopwatchService = Depends(get_service),
) -> StopwatchStatus:
    service.start_stopwatch()
    return StopwatchStatus(**service.stopwatch_status())


@router.post("/stop")
async def stop_stopwatch(
    service: TimerStopwatchService = Depends(get_service),
) -> StopwatchStatus:
    service.stop_stopwatch()
    return StopwatchStatus(**service.stopwatch_status())


@router.post("/reset")
async def reset_stopwatch(
    service: TimerStopwatchService = Depends(get_service),
) -> StopwatchStatus:
    service.reset_stopwatch()
    return StopwatchStatus(**service.stopwatch_status())
