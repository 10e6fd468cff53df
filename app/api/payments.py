"""Payment gateway proxy and bank transfer details"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.order import Order, PaymentStatus
from app.models.settings import PaymentSettings
from app.models.user import User
from app.schemas.payment import (
    PaymentAction,
    InitializeResponse,
    VerifyResponse,
    VirtualAccountResponse,
    PaymentSettingsResponse,
)
from app.api.auth import get_current_active_user
from app.api.orders import get_order_for_user
from app.services.payments import apply_payment_confirmation, order_ids_from_metadata, paid_amount_kobo
from app.services.paystack import (
    PaystackClient,
    PaystackError,
    PaystackNotConfiguredError,
    build_reference,
    get_paystack_client,
)
from app.services.pricing import to_minor_units, from_minor_units

router = APIRouter()
logger = structlog.get_logger()


async def initialize_payment(
    request: PaymentAction,
    current_user: User,
    db: AsyncSession,
    paystack: PaystackClient,
) -> InitializeResponse:
    if not request.email or not request.amount or not request.order_id:
        raise HTTPException(status_code=400, detail="email, amount and order_id are required")

    order_ids = [request.order_id] + [i for i in request.order_ids if i != request.order_id]
    orders = [await get_order_for_user(order_id, current_user, db) for order_id in order_ids]

    owed = sum(order.amount_due for order in orders if order.payment_status != PaymentStatus.PAID.value)
    if owed <= 0:
        raise HTTPException(status_code=400, detail="Nothing to pay for these orders")
    if to_minor_units(request.amount) != to_minor_units(owed):
        logger.warning(
            "Payment amount does not match amount due",
            order_ids=[str(order_id) for order_id in order_ids],
            amount=request.amount,
            amount_due=owed,
        )
        raise HTTPException(status_code=400, detail=f"Amount does not match the amount due (₦{owed:,})")

    data = await paystack.initialize_transaction(
        email=request.email,
        amount_kobo=to_minor_units(owed),
        reference=build_reference(request.order_id),
        callback_url=request.callback_url,
        metadata={
            **request.metadata,
            "order_id": str(request.order_id),
            "order_ids": [str(order_id) for order_id in order_ids],
        },
    )

    for order in orders:
        order.payment_reference = data["reference"]
    await db.commit()

    logger.info(
        "Payment initialized",
        order_ids=[str(order_id) for order_id in order_ids],
        reference=data["reference"],
        amount=owed,
    )
    return InitializeResponse(
        authorization_url=data["authorization_url"],
        access_code=data["access_code"],
        reference=data["reference"],
    )


async def verify_payment(
    request: PaymentAction,
    db: AsyncSession,
    paystack: PaystackClient,
) -> VerifyResponse:
    if not request.reference:
        raise HTTPException(status_code=400, detail="reference is required")

    data = await paystack.verify_transaction(request.reference)

    if data.get("status") == "success":
        order_ids = order_ids_from_metadata(data.get("metadata"))
        await apply_payment_confirmation(
            db,
            order_ids,
            request.reference,
            amount_paid_kobo=paid_amount_kobo(data),
        )
        await db.commit()

    logger.info("Payment verified", reference=request.reference, status=data.get("status"))
    return VerifyResponse(
        status=data.get("status", "unknown"),
        amount=from_minor_units(paid_amount_kobo(data)),
        reference=data.get("reference", request.reference),
    )


async def create_virtual_account(
    request: PaymentAction,
    paystack: PaystackClient,
) -> VirtualAccountResponse:
    if not request.email:
        raise HTTPException(status_code=400, detail="email is required")

    customer = await paystack.create_customer(
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )

    try:
        account = await paystack.create_dedicated_account(customer["customer_code"])
    except PaystackError as e:
        # Dedicated accounts are not enabled on every Paystack business
        logger.warning("Virtual account unavailable", email=request.email, error=str(e))
        return VirtualAccountResponse(
            use_fallback=True,
            message="Virtual accounts not available. Please use manual bank transfer.",
        )

    return VirtualAccountResponse(
        account_number=account.get("account_number"),
        account_name=account.get("account_name"),
        bank_name=(account.get("bank") or {}).get("name"),
    )


@router.post("/payments")
async def payment_action(
    request: PaymentAction,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    paystack: PaystackClient = Depends(get_paystack_client),
):
    """Dispatch a gateway action: initialize, verify or create_virtual_account"""
    if not paystack.is_configured:
        raise HTTPException(status_code=400, detail="Paystack not configured")

    try:
        if request.action == "initialize":
            return await initialize_payment(request, current_user, db, paystack)
        if request.action == "verify":
            return await verify_payment(request, db, paystack)
        if request.action == "create_virtual_account":
            return await create_virtual_account(request, paystack)
    except PaystackNotConfiguredError:
        raise HTTPException(status_code=400, detail="Paystack not configured")
    except PaystackError as e:
        logger.error("Payment error", action=request.action, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))

    raise HTTPException(status_code=400, detail="Invalid action")


@router.get("/payment-settings", response_model=PaymentSettingsResponse)
async def get_payment_settings(db: AsyncSession = Depends(get_db)):
    """Bank account details for manual transfers"""
    result = await db.execute(select(PaymentSettings).limit(1))
    payment_settings = result.scalar_one_or_none()

    if not payment_settings:
        raise HTTPException(status_code=404, detail="Payment settings not configured")

    return payment_settings
