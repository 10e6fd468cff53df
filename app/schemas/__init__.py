"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    TokenPayload,
    RefreshRequest,
    RegisterRequest,
    ProfileUpdate,
    UserCreate,
    UserResponse,
)
from app.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    PackageCreate,
    PackageUpdate,
    PackageResponse,
    PackageClassCreate,
)
from app.schemas.order import (
    CustomerInfo,
    CheckoutLine,
    CheckoutRequest,
    CheckoutResponse,
    CustomRequestCreate,
    AdminOrderResponseUpdate,
    OrderResponse,
    OrderListResponse,
)
from app.schemas.chat import (
    MessageCreate,
    ChatMessageCreate,
    OrderMessageResponse,
    ChatMessageResponse,
)
from app.schemas.notification import NotificationResponse
from app.schemas.payment import (
    PaymentAction,
    InitializeResponse,
    VerifyResponse,
    VirtualAccountResponse,
    PaymentSettingsUpdate,
    PaymentSettingsResponse,
)
from app.schemas.admin import (
    AuditLogResponse,
    DeliveryUpdate,
    DeliveryResponse,
    CustomerSummary,
    DashboardStats,
    AnalyticsResponse,
)

__all__ = [
    "Token",
    "TokenPayload",
    "RefreshRequest",
    "RegisterRequest",
    "ProfileUpdate",
    "UserCreate",
    "UserResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "PackageCreate",
    "PackageUpdate",
    "PackageResponse",
    "PackageClassCreate",
    "CustomerInfo",
    "CheckoutLine",
    "CheckoutRequest",
    "CheckoutResponse",
    "CustomRequestCreate",
    "AdminOrderResponseUpdate",
    "OrderResponse",
    "OrderListResponse",
    "MessageCreate",
    "ChatMessageCreate",
    "OrderMessageResponse",
    "ChatMessageResponse",
    "NotificationResponse",
    "PaymentAction",
    "InitializeResponse",
    "VerifyResponse",
    "VirtualAccountResponse",
    "PaymentSettingsUpdate",
    "PaymentSettingsResponse",
    "AuditLogResponse",
    "DeliveryUpdate",
    "DeliveryResponse",
    "CustomerSummary",
    "DashboardStats",
    "AnalyticsResponse",
]
