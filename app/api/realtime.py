"""WebSocket change feeds for order chat and account chat.

A client connects with ``?token=<access token>`` and optionally
``&after=<last message id it holds>``. Missed rows are replayed first, then
live insert/update events follow.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.order import Order
from app.api.auth import get_user_from_token
from app.api.chat import (
    load_order_messages,
    load_chat_messages,
    order_message_event,
    chat_message_event,
)
from app.services.realtime import manager, order_channel, chat_channel, ADMIN_CHAT_CHANNEL

router = APIRouter()
logger = structlog.get_logger()


async def _listen(channel: str, websocket: WebSocket):
    """Keep the socket open until the client leaves; answer pings"""
    try:
        while True:
            text = await websocket.receive_text()
            if text == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(channel, websocket)


@router.websocket("/ws/orders/{order_id}/messages")
async def order_messages_feed(
    websocket: WebSocket,
    order_id: UUID,
    token: Optional[str] = None,
    after: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_from_token(token, db) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()
    if not order or (order.user_id != user.id and not user.is_admin):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    channel = order_channel(order.id)
    await manager.connect(channel, websocket)

    for message in await load_order_messages(db, order.id, after):
        await websocket.send_json(order_message_event("insert", message))

    # Hand the connection back to the pool before the long-lived listen
    await db.close()
    await _listen(channel, websocket)


@router.websocket("/ws/chat")
async def chat_feed(
    websocket: WebSocket,
    token: Optional[str] = None,
    after: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    """Customers follow their own thread; admins follow every thread"""
    user = await get_user_from_token(token, db) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if user.is_admin:
        channel = ADMIN_CHAT_CHANNEL
        thread_owner_id = None
    else:
        channel = chat_channel(user.id)
        thread_owner_id = user.id

    await manager.connect(channel, websocket)

    # Admins only get a backlog when resuming; a full replay of every thread is too much
    if thread_owner_id is not None or after is not None:
        for message in await load_chat_messages(db, thread_owner_id, after):
            await websocket.send_json(chat_message_event("insert", message))

    await db.close()
    await _listen(channel, websocket)
