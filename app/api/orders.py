"""Customer order endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.database import get_db
from app.models.catalog import Package
from app.models.order import Order, OrderStatus, PaymentStatus, PaymentMethod
from app.models.user import User
from app.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    CustomRequestCreate,
    OrderResponse,
)
from app.api.auth import get_current_active_user
from app.services.notifications import notify_admins
from app.services.order_ids import generate_order_id
from app.services.paystack import (
    PaystackClient,
    PaystackError,
    build_reference,
    get_paystack_client,
)
from app.services.pricing import price_line, to_minor_units, PricingError
from app.services.storage import save_upload, StorageError, PAYMENT_PROOFS

router = APIRouter()
logger = structlog.get_logger()


async def get_order_for_user(order_id: UUID, user: User, db: AsyncSession) -> Order:
    """Load an order the user owns, or any order for admins"""
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()

    if not order or (order.user_id != user.id and not user.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")

    return order


def _seed_status(is_custom_quote: bool, payment_method: PaymentMethod):
    """(status, payment_status) for a freshly created order"""
    if is_custom_quote:
        return OrderStatus.WAITING_FOR_PRICE.value, None
    if payment_method == PaymentMethod.PAYSTACK:
        return OrderStatus.PENDING_PAYMENT.value, PaymentStatus.PENDING_PAYMENT.value
    return OrderStatus.PENDING.value, PaymentStatus.PENDING_PAYMENT.value


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    paystack: PaystackClient = Depends(get_paystack_client),
):
    """Turn cart lines into orders and hand payable ones to the gateway.

    Each line becomes one order. All lines are written in one transaction.
    """
    if request.payment_plan and request.payment_method != PaymentMethod.BANK_TRANSFER:
        raise HTTPException(
            status_code=400,
            detail="Payment plans are only available for bank transfer",
        )

    package_ids = {line.package_id for line in request.items}
    result = await db.execute(
        select(Package)
        .where(Package.id.in_(package_ids), Package.is_hidden == False)
        .options(selectinload(Package.classes), selectinload(Package.category))
    )
    packages = {package.id: package for package in result.scalars().all()}

    priced = []
    for line in request.items:
        package = packages.get(line.package_id)
        if package is None:
            raise HTTPException(status_code=404, detail=f"Package {line.package_id} not found")
        if package.category is not None and package.category.coming_soon:
            raise HTTPException(status_code=400, detail=f"'{package.name}' is not available yet")

        package_class = None
        if line.class_id is not None:
            package_class = next((c for c in package.classes if c.id == line.class_id), None)
            if package_class is None:
                raise HTTPException(status_code=400, detail=f"Class {line.class_id} not found for '{package.name}'")

        try:
            pricing = price_line(package, package_class, line.quantity, request.payment_plan)
        except PricingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        priced.append((line, package, pricing))

    orders = []
    try:
        for line, package, pricing in priced:
            order_status, payment_status = _seed_status(pricing.is_custom_quote, request.payment_method)
            order = Order(
                custom_order_id=await generate_order_id(db),
                user_id=current_user.id,
                package_name=package.name,
                package_class=pricing.package_class,
                quantity=line.quantity,
                notes=line.notes,
                custom_request=line.custom_request,
                total_price=pricing.total_price,
                discount_amount=pricing.discount_amount,
                final_price=pricing.final_price,
                payment_method=request.payment_method.value,
                installment_plan=(
                    request.payment_plan
                    if request.payment_plan and request.payment_plan != "one-time"
                    else None
                ),
                payment_status=payment_status,
                status=order_status,
                delivery_date=request.delivery_date,
                delivery_time=request.delivery_time,
                delivery_address=request.delivery_address,
                delivery_notes=request.delivery_notes,
                customer_name=request.customer.full_name,
                customer_email=request.customer.email,
                customer_whatsapp=request.customer.whatsapp_number,
            )
            db.add(order)
            orders.append(order)

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Checkout failed", user_id=str(current_user.id), error=str(e))
        raise HTTPException(status_code=500, detail=f"Error submitting order: {e}")

    for order in orders:
        await db.refresh(order)

    logger.info(
        "Checkout completed",
        user_id=str(current_user.id),
        order_ids=[str(order.id) for order in orders],
        payment_method=request.payment_method.value,
    )

    payable = [order for order in orders if order.status != OrderStatus.WAITING_FOR_PRICE.value]
    amount_payable = sum(order.amount_due for order in payable)
    response = CheckoutResponse(
        orders=[OrderResponse.model_validate(order) for order in orders],
        amount_payable=amount_payable,
    )

    if request.payment_method != PaymentMethod.PAYSTACK or amount_payable <= 0:
        return response

    lead = payable[0]
    try:
        data = await paystack.initialize_transaction(
            email=request.customer.email,
            amount_kobo=to_minor_units(amount_payable),
            reference=build_reference(lead.id),
            callback_url=request.callback_url,
            metadata={
                "order_id": str(lead.id),
                "order_ids": [str(order.id) for order in payable],
                "customer_name": request.customer.full_name,
                "package_name": ", ".join(order.package_name for order in payable),
            },
        )
    except PaystackError as e:
        logger.error("Payment initialization failed", order_id=str(lead.id), error=str(e))
        response.payment_error = str(e)
        return response

    for order in payable:
        order.payment_reference = data["reference"]
    await db.commit()
    for order in payable:
        await db.refresh(order)

    response.orders = [OrderResponse.model_validate(order) for order in orders]
    response.authorization_url = data["authorization_url"]
    response.access_code = data.get("access_code")
    response.reference = data["reference"]
    return response


@router.post("/custom-request", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def submit_custom_request(
    request: CustomRequestCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a bespoke request; an admin prices it later"""
    order = Order(
        custom_order_id=await generate_order_id(db),
        user_id=current_user.id,
        package_name=request.package_name,
        quantity=request.quantity,
        notes=request.notes,
        custom_request=request.custom_request,
        total_price=0,
        discount_amount=0,
        final_price=0,
        payment_method=PaymentMethod.PAYSTACK.value,
        status=OrderStatus.WAITING_FOR_PRICE.value,
        delivery_date=request.delivery_date,
        delivery_time=request.delivery_time,
        delivery_address=request.delivery_address,
        delivery_notes=request.delivery_notes,
        customer_name=request.customer.full_name,
        customer_email=request.customer.email,
        customer_whatsapp=request.customer.whatsapp_number,
    )
    db.add(order)
    await db.flush()

    await notify_admins(
        db,
        "New Custom Request",
        f"{order.customer_name} requested a custom {order.package_name}. Please send a price.",
        order_id=order.id,
    )
    await db.commit()
    await db.refresh(order)

    logger.info("Custom request submitted", order_id=str(order.id), user_id=str(current_user.id))
    return order


@router.get("", response_model=List[OrderResponse])
async def list_my_orders(
    status: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's orders, newest first"""
    query = select(Order).where(Order.user_id == current_user.id)
    if status:
        query = query.where(Order.status == status)

    result = await db.execute(query.order_by(Order.created_at.desc()))
    return result.scalars().all()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get order details"""
    return await get_order_for_user(order_id, current_user, db)


@router.post("/{order_id}/payment-proof", response_model=OrderResponse)
async def upload_payment_proof(
    order_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Attach a bank-transfer receipt (image or video) to an order"""
    order = await get_order_for_user(order_id, current_user, db)

    if order.payment_status == PaymentStatus.PAID.value:
        raise HTTPException(status_code=400, detail="Order is already paid")

    try:
        stored = await save_upload(PAYMENT_PROOFS, str(current_user.id), file)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    order.payment_proof_url = stored.url
    order.payment_proof_type = stored.media_type
    order.payment_status = PaymentStatus.PROOF_UPLOADED.value

    await notify_admins(
        db,
        "Payment Proof Uploaded",
        "Customer has uploaded payment proof for order. Please verify.",
        order_id=order.id,
    )
    await db.commit()
    await db.refresh(order)

    logger.info("Payment proof uploaded", order_id=str(order.id), media_type=stored.media_type)
    return order
