"""Back-office schemas"""

from datetime import datetime
from typing import Optional, List, Dict
from uuid import UUID
from pydantic import BaseModel

from app.models.delivery import DeliveryStatus


class AuditLogResponse(BaseModel):
    id: UUID
    actor_id: Optional[UUID]
    actor_email: Optional[str]
    actor_role: Optional[str]
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    details: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    items: List[AuditLogResponse]
    total: int
    page: int
    page_size: int


class DeliveryUpdate(BaseModel):
    status: Optional[DeliveryStatus] = None
    delivery_address: Optional[str] = None
    delivery_date: Optional[str] = None
    delivery_time: Optional[str] = None
    delivery_notes: Optional[str] = None


class DeliveryResponse(BaseModel):
    id: UUID
    order_id: UUID
    custom_order_id: Optional[str]
    package_name: str
    customer_name: str
    customer_whatsapp: str
    delivery_address: Optional[str]
    delivery_date: Optional[str]
    delivery_time: Optional[str]
    delivery_notes: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerSummary(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    is_suspended: bool
    order_count: int
    total_spent: int
    created_at: datetime


class DashboardStats(BaseModel):
    total_orders: int
    pending_payment: int
    waiting_for_price: int
    processing: int
    delivered: int
    unread_messages: int


class AnalyticsResponse(BaseModel):
    revenue: int
    orders_by_status: Dict[str, int]
    revenue_by_package: Dict[str, int]
    orders_by_package: Dict[str, int]
    customer_count: int
