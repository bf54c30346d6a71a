"""FastAPI Web Server - Chrono Deck API.

Provides REST and WebSocket endpoints for the timer and stopwatch.
Listens only on localhost (127.0.0.1) by default.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from chronodeck import __version__
from chronodeck.core.commands import Command, CommandAction, HandleResult
from chronodeck.core.service import TimerStopwatchService
from chronodeck.core.settings import Settings
from chronodeck.core.ticker import StopwatchTicker
from chronodeck.web.dependencies import get_service
from chronodeck.web.routes import search, stopwatch, timer
from chronodeck.web.websocket.manager import (
    EventType,
    broadcast_state_change,
    broadcast_stopwatch_tick,
    get_connection_manager,
    reset_connection_manager,
    send_state,
    set_server_loop,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Register server's event loop for thread-safe WebSocket broadcasts
    - Forward service state changes to WebSocket clients
    - Start the stopwatch ticker

    Shutdown:
    - Stop the ticker and cancel any pending timer
    """
    service: TimerStopwatchService = app.state.service
    ticker: StopwatchTicker = app.state.ticker

    logger.info("Chrono Deck API starting...")
    reset_connection_manager()
    set_server_loop(asyncio.get_running_loop())
    service.register_callback(broadcast_state_change)
    ticker.start()

    yield

    ticker.stop()
    service.unregister_callback(broadcast_state_change)
    service.shutdown()
    set_server_loop(None)
    logger.info("Chrono Deck API stopped")


def create_app(
    settings: Settings | None = None,
    service: TimerStopwatchService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Loaded settings (default: built-in defaults).
        service: Service to expose. Built from settings if omitted.

    Returns:
        Configured FastAPI app instance.
    """
    settings = settings or Settings()
    service = service or TimerStopwatchService(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        description="Countdown timer and stopwatch API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.state.ticker = StopwatchTicker(
        service.stopwatch,
        broadcast_stopwatch_tick,
        interval=settings.tick_interval,
    )

    # CORS - allow any localhost port
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(timer.router, prefix="/api/timer", tags=["timer"])
    app.include_router(stopwatch.router, prefix="/api/stopwatch", tags=["stopwatch"])
    app.include_router(search.router, prefix="/api/search", tags=["search"])

    @app.get("/api/status", tags=["status"])
    async def get_status(svc: TimerStopwatchService = Depends(get_service)) -> dict:
        """Get timer and stopwatch status."""
        return svc.status()

    @app.websocket("/ws/events")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """WebSocket endpoint for real-time events.

        Sends:
        - state: full status on connect and after each command
        - timer_started / timer_cancelled / timer_finished
        - stopwatch_changed / stopwatch_tick

        Receives:
        - run_command: {"action": "...", "duration": seconds}
        """
        manager = get_connection_manager()
        await manager.connect(websocket)
        svc: TimerStopwatchService = websocket.app.state.service

        try:
            await send_state(websocket, svc.status())

            while True:
                data = await websocket.receive_json()
                if handle_client_message(data, svc) is not None:
                    await send_state(websocket, svc.status())

        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error("WebSocket error: %s", e)
        finally:
            await manager.disconnect(websocket)

    return app


def handle_client_message(data: dict, service: TimerStopwatchService) -> HandleResult | None:
    """Handle incoming WebSocket message from client.

    Args:
        data: Parsed JSON message.
        service: Service to run commands against.

    Returns:
        HandleResult for a run_command message, None otherwise.
    """
    if not isinstance(data, dict):
        logger.warning("WebSocket: Ignoring non-object message")
        return None

    event_type = data.get("type")
    event_data = data.get("data") or {}
    if not isinstance(event_data, dict):
        logger.warning("WebSocket: Ignoring message with non-object data")
        return None

    if event_type != EventType.RUN_COMMAND.value:
        logger.warning("WebSocket: Unknown message type: %s", event_type)
        return None

    try:
        command = Command(
            CommandAction(event_data.get("action")),
            float(event_data.get("duration", 0.0)),
        )
    except (TypeError, ValueError) as e:
        logger.warning("WebSocket: Invalid command %r: %s", event_data, e)
        return None

    result = service.handle(command)
    logger.info("WebSocket: Ran %s (handled=%s)", command.action.value, result.handled)
    return result


def run_server(settings: Settings | None = None) -> None:
    """Run the web server (blocking).

    Args:
        settings: Settings with host and port (default: built-in defaults).
    """
    import uvicorn

    settings = settings or Settings()
    app = create_app(settings)

    logger.info("Starting Chrono Deck on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")
