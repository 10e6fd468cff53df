"""Order schemas"""

from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.order import OrderStatus, PaymentMethod

PaymentPlan = Literal["one-time", "3-months", "6-months", "12-months"]


class CustomerInfo(BaseModel):
    """Contact details captured with every order"""
    full_name: str = Field(
        min_length=1,
        max_length=100,
        pattern=r"^[a-zA-Z\s\-'.]+$",
    )
    email: EmailStr
    whatsapp_number: str = Field(
        min_length=1,
        max_length=20,
        pattern=r"^[\d\s+\-()]+$",
    )

    @field_validator("full_name", "whatsapp_number", mode="before")
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class DeliveryPreferences(BaseModel):
    delivery_date: Optional[str] = Field(default=None, max_length=50)
    delivery_time: Optional[str] = Field(default=None, max_length=100)
    delivery_address: Optional[str] = Field(default=None, max_length=1000)
    delivery_notes: Optional[str] = Field(default=None, max_length=1000)


class CheckoutLine(BaseModel):
    """One cart line"""
    package_id: UUID
    class_id: Optional[UUID] = None
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(default=None, max_length=1000)
    custom_request: Optional[str] = Field(default=None, max_length=2000)


class CheckoutRequest(DeliveryPreferences):
    """Cart checkout or single-item purchase"""
    customer: CustomerInfo
    items: List[CheckoutLine] = Field(min_length=1)
    payment_method: PaymentMethod = PaymentMethod.PAYSTACK
    payment_plan: Optional[PaymentPlan] = None
    callback_url: Optional[str] = None


class CustomRequestCreate(DeliveryPreferences):
    """Bespoke request with no price yet"""
    customer: CustomerInfo
    package_name: str = Field(min_length=1, max_length=255)
    custom_request: str = Field(min_length=1, max_length=2000)
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(default=None, max_length=1000)


class AdminOrderResponseUpdate(BaseModel):
    """Admin status change, price override and message in one write"""
    status: Optional[OrderStatus] = None
    admin_set_price: Optional[int] = Field(default=None, ge=0)
    admin_response: Optional[str] = Field(default=None, max_length=2000)


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    custom_order_id: Optional[str]
    user_id: UUID
    package_name: str
    package_class: Optional[str]
    quantity: int
    notes: Optional[str]
    custom_request: Optional[str]
    total_price: int
    discount_amount: Optional[int]
    final_price: int
    admin_set_price: Optional[int]
    amount_due: int
    payment_method: str
    installment_plan: Optional[str]
    payment_status: Optional[str]
    payment_proof_url: Optional[str]
    payment_proof_type: Optional[str]
    payment_reference: Optional[str]
    payment_verified_at: Optional[datetime]
    payment_verified_by: Optional[UUID]
    delivery_date: Optional[str]
    delivery_time: Optional[str]
    delivery_address: Optional[str]
    delivery_notes: Optional[str]
    status: str
    admin_response: Optional[str]
    customer_name: str
    customer_email: str
    customer_whatsapp: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Paginated order list"""
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


class CheckoutResponse(BaseModel):
    """Orders created by a checkout plus the hosted payment page, if any"""
    orders: List[OrderResponse]
    amount_payable: int
    authorization_url: Optional[str] = None
    access_code: Optional[str] = None
    reference: Optional[str] = None
    payment_error: Optional[str] = None
