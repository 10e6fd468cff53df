"""Back-office orders, deliveries, customers and dashboard"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.delivery import Delivery
from app.models.message import ChatMessage, OrderMessage
from app.models.order import Order, OrderStatus, PaymentStatus, can_transition
from app.models.user import User, UserRole
from app.schemas.admin import (
    DeliveryUpdate,
    DeliveryResponse,
    CustomerSummary,
    DashboardStats,
)
from app.schemas.chat import AttachmentResponse
from app.schemas.order import AdminOrderResponseUpdate, OrderResponse, OrderListResponse
from app.api.auth import require_role
from app.services.audit import log_action
from app.services.deliveries import ensure_delivery, DELIVERY_TRIGGER_STATUSES
from app.services.notifications import notify_user
from app.services.payments import apply_payment_confirmation
from app.services.storage import save_upload, StorageError, CATALOG_IMAGES

router = APIRouter()
logger = structlog.get_logger()

# Statuses that count as revenue
PAID_STATUSES = [
    OrderStatus.PAID.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.READY_FOR_DELIVERY.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
]


async def load_order(order_id: UUID, db: AsyncSession) -> Order:
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return order


def _status_label(value: str) -> str:
    return value.replace("_", " ").title()


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List all orders with search, status filter and pagination"""
    query = select(Order)
    count_query = select(func.count(Order.id))

    if status:
        query = query.where(Order.status == status.value)
        count_query = count_query.where(Order.status == status.value)

    if search:
        pattern = f"%{search.strip()}%"
        condition = or_(
            Order.custom_order_id.ilike(pattern),
            Order.customer_name.ilike(pattern),
            Order.customer_email.ilike(pattern),
            Order.package_name.ilike(pattern),
        )
        query = query.where(condition)
        count_query = count_query.where(condition)

    # Get total
    total_result = await db.execute(count_query)
    total = total_result.scalar()

    # Get paginated results
    offset = (page - 1) * page_size
    query = query.order_by(Order.created_at.desc()).offset(offset).limit(page_size)

    result = await db.execute(query)
    orders = result.scalars().all()

    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await load_order(order_id, db)


@router.put("/orders/{order_id}/response", response_model=OrderResponse)
async def respond_to_order(
    order_id: UUID,
    update: AdminOrderResponseUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Set status, price and a message in one write.

    There is no version check: two admins saving the same order both
    succeed and the later write wins. A status is always checked against
    the order as stored, so a second save whose status is not a legal move
    from the first save's result (e.g. processing after cancelled) gets 400
    and the first status stays.
    """
    order = await load_order(order_id, db)
    previous_status = order.status

    target_status = update.status.value if update.status else order.status
    if (
        update.admin_set_price is not None
        and update.status is None
        and order.status == OrderStatus.WAITING_FOR_PRICE.value
    ):
        target_status = OrderStatus.PRICE_SENT.value

    if not can_transition(order.status, target_status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change status from {order.status} to {target_status}",
        )

    changes = []
    if update.admin_set_price is not None:
        order.admin_set_price = update.admin_set_price
        order.final_price = update.admin_set_price
        if order.payment_status is None:
            order.payment_status = PaymentStatus.PENDING_PAYMENT.value
        changes.append(f"price={update.admin_set_price}")

    if update.admin_response is not None:
        order.admin_response = update.admin_response
        changes.append("response")

    if target_status != previous_status:
        order.status = target_status
        changes.append(f"status={previous_status}->{target_status}")

    if order.status in DELIVERY_TRIGGER_STATUSES:
        await ensure_delivery(db, order)

    if update.admin_set_price is not None:
        title = "Price Ready"
        message = f"Your {order.package_name} order has been priced at ₦{order.amount_due:,}."
    elif target_status != previous_status:
        title = "Order Update"
        message = f"Your {order.package_name} order is now {_status_label(target_status)}."
    else:
        title = "New Response"
        message = f"Mabba replied about your {order.package_name} order."
    if update.admin_response:
        message = f"{message} {update.admin_response}"
    notify_user(db, order.user_id, title, message, order_id=order.id)

    await log_action(db, current_user, "update_order", "order", order.id, ", ".join(changes))
    await db.commit()
    await db.refresh(order)

    logger.info(
        "Order updated by admin",
        order_id=str(order.id),
        admin_id=str(current_user.id),
        status=order.status,
        admin_set_price=order.admin_set_price,
    )
    return order


@router.post("/orders/{order_id}/verify-payment", response_model=OrderResponse)
async def verify_order_payment(
    order_id: UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Confirm a bank transfer after checking the uploaded proof"""
    order = await load_order(order_id, db)

    if order.payment_status == PaymentStatus.PAID.value:
        raise HTTPException(status_code=400, detail="Payment already verified")

    await apply_payment_confirmation(db, [order.id], order.payment_reference, verified_by=current_user)
    await log_action(db, current_user, "verify_payment", "order", order.id, order.custom_order_id)
    await db.commit()
    await db.refresh(order)

    return order


@router.get("/deliveries", response_model=List[DeliveryResponse])
async def list_deliveries(
    status: Optional[str] = None,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List deliveries, newest first"""
    query = select(Delivery)
    if status:
        query = query.where(Delivery.status == status)

    result = await db.execute(query.order_by(Delivery.created_at.desc()))
    return result.scalars().all()


@router.put("/deliveries/{delivery_id}", response_model=DeliveryResponse)
async def update_delivery(
    delivery_id: UUID,
    delivery_data: DeliveryUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Update delivery details or progress"""
    result = await db.execute(select(Delivery).where(Delivery.id == delivery_id))
    delivery = result.scalar_one_or_none()

    if not delivery:
        raise HTTPException(status_code=404, detail="Delivery not found")

    changes = delivery_data.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = changes["status"].value
    for field, value in changes.items():
        setattr(delivery, field, value)

    await log_action(
        db,
        current_user,
        "update_delivery",
        "delivery",
        delivery.id,
        ", ".join(f"{field}={value}" for field, value in changes.items()),
    )
    await db.commit()
    await db.refresh(delivery)

    return delivery


@router.get("/customers", response_model=List[CustomerSummary])
async def list_customers(
    search: Optional[str] = None,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Customers with their order counts and paid spend"""
    spent = func.coalesce(
        func.sum(func.coalesce(Order.admin_set_price, Order.final_price)).filter(
            Order.status.in_(PAID_STATUSES)
        ),
        0,
    )
    query = (
        select(User, func.count(Order.id).label("order_count"), spent.label("total_spent"))
        .outerjoin(Order, Order.user_id == User.id)
        .where(User.role == UserRole.CUSTOMER)
        .group_by(User.id)
        .order_by(User.created_at.desc())
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(User.email.ilike(pattern), User.full_name.ilike(pattern)))

    result = await db.execute(query)
    return [
        CustomerSummary(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            is_suspended=user.is_suspended,
            order_count=order_count,
            total_spent=total_spent or 0,
            created_at=user.created_at,
        )
        for user, order_count, total_spent in result.all()
    ]


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Order counts per board column and unread customer messages"""
    result = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
    by_status = {row[0]: row[1] for row in result.all()}

    order_unread = await db.execute(
        select(func.count(OrderMessage.id)).where(
            OrderMessage.is_read == False,
            OrderMessage.sender_role == "customer",
        )
    )
    chat_unread = await db.execute(
        select(func.count(ChatMessage.id)).where(
            ChatMessage.is_read == False,
            ChatMessage.sender_role == "customer",
        )
    )

    return DashboardStats(
        total_orders=sum(by_status.values()),
        pending_payment=by_status.get(OrderStatus.PENDING_PAYMENT.value, 0)
        + by_status.get(OrderStatus.PENDING.value, 0),
        waiting_for_price=by_status.get(OrderStatus.WAITING_FOR_PRICE.value, 0),
        processing=by_status.get(OrderStatus.PAID.value, 0)
        + by_status.get(OrderStatus.PROCESSING.value, 0),
        delivered=by_status.get(OrderStatus.DELIVERED.value, 0),
        unread_messages=(order_unread.scalar() or 0) + (chat_unread.scalar() or 0),
    )


@router.post("/uploads/catalog-images", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_catalog_image(
    file: UploadFile = File(...),
    current_user: User = Depends(require_role(UserRole.ADMIN)),
):
    """Upload a catalog image and return its public URL"""
    try:
        stored = await save_upload(CATALOG_IMAGES, "catalog", file, allow_video=False)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AttachmentResponse(url=stored.url, media_type=stored.media_type)
