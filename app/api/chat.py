"""Order chat and account chat endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from sqlalchemy import select, func, case, and_
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.message import OrderMessage, ChatMessage
from app.models.user import User, UserRole
from app.schemas.chat import (
    MessageCreate,
    ChatMessageCreate,
    OrderMessageResponse,
    ChatMessageResponse,
    ChatThreadResponse,
    MarkReadResponse,
    UnreadCountResponse,
    AttachmentResponse,
)
from app.api.auth import get_current_active_user, require_role
from app.api.orders import get_order_for_user
from app.services.notifications import notify_user, notify_admins
from app.services.realtime import (
    manager,
    change_event,
    order_channel,
    chat_channel,
    ADMIN_CHAT_CHANNEL,
)
from app.services.storage import save_upload, StorageError, CHAT_ATTACHMENTS

router = APIRouter()
logger = structlog.get_logger()


def sender_role_for(user: User) -> str:
    return "admin" if user.is_admin else "customer"


def order_message_event(event: str, message: OrderMessage) -> dict:
    record = OrderMessageResponse.model_validate(message).model_dump(mode="json")
    return change_event(event, "order_messages", record)


def chat_message_event(event: str, message: ChatMessage) -> dict:
    record = ChatMessageResponse.model_validate(message).model_dump(mode="json")
    return change_event(event, "chat_messages", record)


async def publish_chat_message(event: str, message: ChatMessage):
    """Fan a chat row change out to the thread owner and the back office"""
    payload = chat_message_event(event, message)
    await manager.broadcast(chat_channel(message.user_id), payload)
    await manager.broadcast(ADMIN_CHAT_CHANNEL, payload)


async def load_order_messages(db: AsyncSession, order_id: UUID, after: Optional[int] = None):
    query = select(OrderMessage).where(OrderMessage.order_id == order_id)
    if after is not None:
        query = query.where(OrderMessage.id > after)
    result = await db.execute(query.order_by(OrderMessage.id))
    return result.scalars().all()


async def load_chat_messages(db: AsyncSession, user_id: Optional[UUID], after: Optional[int] = None):
    query = select(ChatMessage)
    if user_id is not None:
        query = query.where(ChatMessage.user_id == user_id)
    if after is not None:
        query = query.where(ChatMessage.id > after)
    result = await db.execute(query.order_by(ChatMessage.id))
    return result.scalars().all()


# Order chat

@router.get("/orders/{order_id}/messages", response_model=List[OrderMessageResponse])
async def list_order_messages(
    order_id: UUID,
    after: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Messages of an order, oldest first; ``after`` returns only newer ones"""
    order = await get_order_for_user(order_id, current_user, db)
    return await load_order_messages(db, order.id, after)


@router.post(
    "/orders/{order_id}/messages",
    response_model=OrderMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_order_message(
    order_id: UUID,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Post a message on an order"""
    order = await get_order_for_user(order_id, current_user, db)
    sender_role = sender_role_for(current_user)

    message = OrderMessage(
        order_id=order.id,
        sender_id=current_user.id,
        sender_role=sender_role,
        message=message_data.message,
        image_url=message_data.image_url,
    )
    db.add(message)

    if sender_role == "admin":
        notify_user(
            db,
            order.user_id,
            "New Message",
            f"You have a new message about your {order.package_name} order.",
            order_id=order.id,
        )
    else:
        await notify_admins(
            db,
            "New Customer Message",
            f"{order.customer_name} sent a message about {order.custom_order_id or order.package_name}.",
            order_id=order.id,
        )

    await db.commit()
    await db.refresh(message)

    logger.info("Order message sent", order_id=str(order.id), message_id=message.id, sender_role=sender_role)
    await manager.broadcast(order_channel(order.id), order_message_event("insert", message))
    return message


@router.post("/orders/{order_id}/messages/read", response_model=MarkReadResponse)
async def mark_order_messages_read(
    order_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark the other side's unread messages on an order as read"""
    order = await get_order_for_user(order_id, current_user, db)

    result = await db.execute(
        select(OrderMessage).where(
            OrderMessage.order_id == order.id,
            OrderMessage.is_read == False,
            OrderMessage.sender_role != sender_role_for(current_user),
        )
    )
    messages = result.scalars().all()
    for message in messages:
        message.is_read = True
    await db.commit()

    for message in messages:
        await manager.broadcast(order_channel(order.id), order_message_event("update", message))

    return MarkReadResponse(marked=len(messages), ids=[message.id for message in messages])


# Account chat

@router.get("/chat/messages", response_model=List[ChatMessageResponse])
async def list_chat_messages(
    user_id: Optional[UUID] = None,
    after: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """A customer's own thread; admins pass ``user_id`` to open a thread"""
    if not current_user.is_admin:
        user_id = current_user.id
    elif user_id is None:
        raise HTTPException(status_code=400, detail="user_id is required")

    return await load_chat_messages(db, user_id, after)


@router.post("/chat/messages", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_chat_message(
    message_data: ChatMessageCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Post into an account thread"""
    sender_role = sender_role_for(current_user)

    if sender_role == "admin":
        if message_data.user_id is None:
            raise HTTPException(status_code=400, detail="user_id is required")
        result = await db.execute(select(User).where(User.id == message_data.user_id))
        owner = result.scalar_one_or_none()
        if not owner:
            raise HTTPException(status_code=404, detail="User not found")
        thread_owner_id = owner.id
    else:
        thread_owner_id = current_user.id

    message = ChatMessage(
        user_id=thread_owner_id,
        sender_id=current_user.id,
        sender_role=sender_role,
        message=message_data.message,
        image_url=message_data.image_url,
    )
    db.add(message)

    if sender_role == "admin":
        notify_user(db, thread_owner_id, "New Message", "Mabba support replied to your message.")

    await db.commit()
    await db.refresh(message)

    logger.info("Chat message sent", thread=str(thread_owner_id), message_id=message.id, sender_role=sender_role)
    await publish_chat_message("insert", message)
    return message


@router.get("/chat/threads", response_model=List[ChatThreadResponse])
async def list_chat_threads(
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Customer threads with their latest activity and unread counts"""
    unread = func.sum(
        case((and_(ChatMessage.is_read == False, ChatMessage.sender_role == "customer"), 1), else_=0)
    )
    result = await db.execute(
        select(
            User.id,
            User.full_name,
            User.email,
            func.max(ChatMessage.created_at).label("last_message_at"),
            unread.label("unread_count"),
        )
        .join(ChatMessage, ChatMessage.user_id == User.id)
        .group_by(User.id, User.full_name, User.email)
        .order_by(func.max(ChatMessage.created_at).desc())
    )

    return [
        ChatThreadResponse(
            user_id=row.id,
            full_name=row.full_name,
            email=row.email,
            last_message_at=row.last_message_at,
            unread_count=row.unread_count or 0,
        )
        for row in result.all()
    ]


@router.post("/chat/messages/read", response_model=MarkReadResponse)
async def mark_chat_messages_read(
    user_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark the other side's unread messages in a thread as read"""
    sender_role = sender_role_for(current_user)
    if sender_role == "customer":
        user_id = current_user.id
    elif user_id is None:
        raise HTTPException(status_code=400, detail="user_id is required")

    result = await db.execute(
        select(ChatMessage).where(
            ChatMessage.user_id == user_id,
            ChatMessage.is_read == False,
            ChatMessage.sender_role != sender_role,
        )
    )
    messages = result.scalars().all()
    for message in messages:
        message.is_read = True
    await db.commit()

    for message in messages:
        await publish_chat_message("update", message)

    return MarkReadResponse(marked=len(messages), ids=[message.id for message in messages])


@router.get("/chat/unread-count", response_model=UnreadCountResponse)
async def chat_unread_count(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Unread messages from the other side (all threads for admins)"""
    query = select(func.count(ChatMessage.id)).where(ChatMessage.is_read == False)
    if current_user.is_admin:
        query = query.where(ChatMessage.sender_role == "customer")
    else:
        query = query.where(
            ChatMessage.user_id == current_user.id,
            ChatMessage.sender_role == "admin",
        )

    result = await db.execute(query)
    return UnreadCountResponse(unread=result.scalar() or 0)


@router.post("/chat/attachments", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_chat_attachment(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
):
    """Upload an image or video to reference from a chat message"""
    try:
        stored = await save_upload(CHAT_ATTACHMENTS, str(current_user.id), file)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AttachmentResponse(url=stored.url, media_type=stored.media_type)
