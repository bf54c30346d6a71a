"""Countdown Timer API Routes.

Endpoints:
- GET    /api/timer  - Timer status
- POST   /api/timer  - Start a timer from seconds or free text
- DELETE /api/timer  - Cancel the pending timer
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from chronodeck.core.durations import parse_duration
from chronodeck.core.service import TimerStopwatchService
from chronodeck.web.dependencies import get_service

logger = logging.getLogger(__name__)

router = APIRouter()


class TimerStart(BaseModel):
    """Request body for starting a timer. Give seconds or text."""

    seconds: float | None = None
    text: str | None = None


class TimerStatus(BaseModel):
    """Timer status."""

    pending: bool
    duration: float | None
    remaining: float | None
    display: str | None
    generation: int


@router.get("")
async def get_timer(service: TimerStopwatchService = Depends(get_service)) -> TimerStatus:
    """Get timer status."""
    return TimerStatus(**service.timer_status())


@router.post("")
async def start_timer(
    body: TimerStart, service: TimerStopwatchService = Depends(get_service)
) -> TimerStatus:
    """Start (or restart) the countdown timer.

    Raises:
        HTTPException: 400 if the duration is missing, unparsable or not positive.
    """
    if body.text is not None:
        seconds = parse_duration(body.text)
        if seconds is None:
            raise HTTPException(
                status_code=400, detail=f"Could not parse duration: {body.text!r}"
            )
    elif body.seconds is not None:
        seconds = body.seconds
    else:
        raise HTTPException(status_code=400, detail="Provide 'seconds' or 'text'")

    if not service.start_timer(seconds):
        raise HTTPException(
            status_code=400, detail=f"Invalid timer duration: {seconds}"
        )

    return TimerStatus(**service.timer_status())


@router.delete("")
async def cancel_timer(
    service: TimerStopwatchService = Depends(get_service),
) -> dict[str, bool | str]:
    """Cancel the pending timer. Succeeds when idle too."""
    cancelled = service.cancel_pending_timer()
    return {"message": "Timer cancelled", "cancelled": cancelled}
