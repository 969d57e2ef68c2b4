"""
Websocket fan-out for push updates.

Every message is a JSON object {"event": name, "payload": data}. Delivery
is best-effort: a connection whose send fails is logged and dropped, and
nothing is replayed. A new connection only receives the latest display
snapshot.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class BroadcastHub:
    """Tracks connected viewers and pushes events to all of them."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []
        self.latest_snapshot: Optional[Dict] = None

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a viewer and send it the latest display snapshot."""
        await websocket.accept()
        self.active_connections.append(websocket)

        logger.info(f"Viewer connected ({len(self.active_connections)} connected)")

        if self.latest_snapshot is not None:
            await websocket.send_json({'event': 'displayUpdate', 'payload': self.latest_snapshot})

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"Viewer disconnected ({len(self.active_connections)} connected)")

    async def broadcast(self, event: str, payload: Any) -> int:
        """
        Push one event to every connected viewer.

        Args:
            event: Event name (e.g. 'displayUpdate')
            payload: JSON-serializable payload

        Returns:
            Number of viewers the event was delivered to
        """
        if not self.active_connections:
            return 0

        message = {'event': event, 'payload': payload}
        connections = list(self.active_connections)

        results = await asyncio.gather(
            *(ws.send_json(message) for ws in connections),
            return_exceptions=True
        )

        delivered = 0
        for websocket, result in zip(connections, results):
            if isinstance(result, Exception):
                logger.warning(f"Dropping viewer after failed {event} send: {result}")
                self.disconnect(websocket)
            else:
                delivered += 1

        logger.debug(f"Broadcast {event} to {delivered}/{len(connections)} viewers")
        return delivered

    async def publish_state(self, snapshot: Dict, teams: List[Dict]) -> None:
        """Push the full display snapshot, then the sorted team list."""
        self.latest_snapshot = snapshot
        await self.broadcast('displayUpdate', snapshot)
        await self.broadcast('teamsUpdate', teams)
