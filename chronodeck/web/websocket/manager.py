"""WebSocket Connection Manager - Real-time event broadcast.

Manages WebSocket connections and broadcasts timer and stopwatch events
to all connected clients. Events can be raised from any thread (timer
threads, the stopwatch ticker); they are marshalled onto the server loop.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """WebSocket event types."""

    # Server -> Client events
    TIMER_STARTED = "timer_started"
    TIMER_CANCELLED = "timer_cancelled"
    TIMER_FINISHED = "timer_finished"
    STOPWATCH_CHANGED = "stopwatch_changed"
    STOPWATCH_TICK = "stopwatch_tick"
    STATE = "state"

    # Client -> Server commands
    RUN_COMMAND = "run_command"


@dataclass
class WebSocketEvent:
    """A WebSocket event to broadcast."""

    type: EventType
    data: dict[str, Any]

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps({"type": self.type.value, "data": self.data})


@dataclass
class ConnectionManager:
    """Tracks WebSocket connections and broadcasts to all of them."""

    active_connections: list[WebSocket] = field(default_factory=list)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self.active_connections.append(websocket)
        logger.info(
            "WebSocket client connected. Total: %d", len(self.active_connections)
        )

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection."""
        async with self._lock:
            if websocket in self.active_connections:
                self.active_connections.remove(websocket)
        logger.info(
            "WebSocket client disconnected. Total: %d", len(self.active_connections)
        )

    async def broadcast(self, event: WebSocketEvent) -> None:
        """Broadcast an event to all connected clients.

        Clients that fail to receive are dropped.
        """
        if not self.active_connections:
            return

        message = event.to_json()
        disconnected: list[WebSocket] = []

        async with self._lock:
            for connection in self.active_connections:
                try:
                    await connection.send_text(message)
                except Exception as e:
                    logger.warning("Failed to send to client: %s", e)
                    disconnected.append(connection)

            for conn in disconnected:
                if conn in self.active_connections:
                    self.active_connections.remove(conn)

    async def send_personal(self, websocket: WebSocket, event: WebSocketEvent) -> None:
        """Send an event to a specific client."""
        try:
            await websocket.send_text(event.to_json())
        except Exception as e:
            logger.warning("Failed to send personal message: %s", e)

    @property
    def connection_count(self) -> int:
        """Get number of active connections."""
        return len(self.active_connections)


# Global connection manager instance
_manager: ConnectionManager | None = None
# Server's event loop (set during startup for thread-safe broadcasting)
_server_loop: asyncio.AbstractEventLoop | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global connection manager."""
    global _manager
    if _manager is None:
        _manager = ConnectionManager()
    return _manager


def reset_connection_manager() -> ConnectionManager:
    """Replace the global connection manager with a fresh one.

    Called on server startup so the manager's lock belongs to the running loop.
    """
    global _manager
    _manager = ConnectionManager()
    return _manager


def set_server_loop(loop: asyncio.AbstractEventLoop | None) -> None:
    """Store the server's event loop for thread-safe broadcasting.

    Called during server startup (and with None on shutdown).
    """
    global _server_loop
    _server_loop = loop
    logger.debug("Server event loop %s", "registered" if loop else "cleared")


# ============================================================================
# Event Helper Functions (for use from non-async code)
# ============================================================================


def broadcast_sync(event: WebSocketEvent) -> None:
    """Broadcast an event from synchronous code (thread-safe).

    Safe to call from any thread. Dropped silently before the server
    loop is running.
    """
    if _server_loop is None or not _server_loop.is_running():
        logger.debug("WebSocket broadcast skipped: server loop not running")
        return

    manager = get_connection_manager()
    if manager.connection_count == 0:
        return

    try:
        future = asyncio.run_coroutine_threadsafe(
            manager.broadcast(event), _server_loop
        )
        future.add_done_callback(_broadcast_error_handler)
    except Exception as e:
        logger.warning("Failed to schedule WebSocket broadcast: %s", e)


def _broadcast_error_handler(future) -> None:
    """Log errors from async broadcast operations."""
    try:
        future.result()
    except Exception as e:
        logger.warning("WebSocket broadcast failed: %s", e)


def broadcast_state_change(event_name: str, data: dict[str, Any]) -> None:
    """Broadcast a service state change.

    Args:
        event_name: Service event name (e.g. "timer_started").
        data: Event payload.
    """
    try:
        event_type = EventType(event_name)
    except ValueError:
        logger.warning("Unknown state event: %s", event_name)
        return
    broadcast_sync(WebSocketEvent(type=event_type, data=data))


def broadcast_stopwatch_tick(elapsed: float, display: str) -> None:
    """Broadcast a live stopwatch sample."""
    broadcast_sync(
        WebSocketEvent(
            type=EventType.STOPWATCH_TICK,
            data={"elapsed": elapsed, "display": display},
        )
    )


async def send_state(websocket: WebSocket, status: dict[str, Any]) -> None:
    """Send the full timer/stopwatch status to a newly connected client."""
    manager = get_connection_manager()
    await manager.send_personal(websocket, WebSocketEvent(type=EventType.STATE, data=status))
