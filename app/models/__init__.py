"""Database models"""

from app.models.user import User, UserRole
from app.models.catalog import Category, Package, PackageClass
from app.models.order import Order, OrderSerial, OrderStatus, PaymentStatus, PaymentMethod
from app.models.message import OrderMessage, ChatMessage
from app.models.notification import Notification
from app.models.audit import AuditLog
from app.models.settings import PaymentSettings
from app.models.delivery import Delivery, DeliveryStatus

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Package",
    "PackageClass",
    "Order",
    "OrderSerial",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "OrderMessage",
    "ChatMessage",
    "Notification",
    "AuditLog",
    "PaymentSettings",
    "Delivery",
    "DeliveryStatus",
]
