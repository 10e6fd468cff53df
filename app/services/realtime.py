"""WebSocket change feeds for the chat tables"""

from collections import defaultdict
from typing import Dict, List
from uuid import UUID

from fastapi import WebSocket
import structlog

logger = structlog.get_logger()

ADMIN_CHAT_CHANNEL = "chat:admins"


def order_channel(order_id: UUID) -> str:
    return f"order:{order_id}"


def chat_channel(user_id: UUID) -> str:
    return f"chat:{user_id}"


class ConnectionManager:
    """Tracks sockets per channel and fans events out to them"""

    def __init__(self):
        self.channels: Dict[str, List[WebSocket]] = defaultdict(list)

    async def connect(self, channel: str, websocket: WebSocket):
        await websocket.accept()
        self.channels[channel].append(websocket)
        logger.info("WS client connected", channel=channel, active=len(self.channels[channel]))

    def disconnect(self, channel: str, websocket: WebSocket):
        connections = self.channels.get(channel, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            self.channels.pop(channel, None)
        logger.info("WS client disconnected", channel=channel, active=len(connections))

    def active(self, channel: str) -> int:
        return len(self.channels.get(channel, []))

    async def broadcast(self, channel: str, message: dict):
        """Send a JSON event to every socket on the channel; drop dead sockets"""
        dead = []
        for websocket in list(self.channels.get(channel, [])):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning("WS send failed", channel=channel, error=str(e))
                dead.append(websocket)

        for websocket in dead:
            self.disconnect(channel, websocket)


def change_event(event: str, table: str, record: dict) -> dict:
    """Envelope for a row change ("insert" or "update")"""
    return {"event": event, "table": table, "record": record}


manager = ConnectionManager()
