"""Order pricing"""

from dataclasses import dataclass
from typing import Optional

from app.models.catalog import Package, PackageClass

# Discount by payment plan for bank-transfer checkouts
PLAN_DISCOUNTS = {
    "one-time": 0.10,
    "3-months": 0.06,
    "6-months": 0.02,
    "12-months": 0.0,
}


class PricingError(ValueError):
    """Raised when a cart line cannot be priced"""


@dataclass
class LinePrice:
    package_class: Optional[str]
    unit_price: Optional[int]  # None for custom-quote lines
    total_price: int
    discount_amount: int
    final_price: int

    @property
    def is_custom_quote(self) -> bool:
        return self.unit_price is None


def resolve_unit_price(package: Package, package_class: Optional[PackageClass]) -> Optional[int]:
    """Class price, else the package base price, else None (quote on request)"""
    if package_class is not None:
        if package_class.package_id != package.id:
            raise PricingError(f"Class {package_class.id} does not belong to package {package.id}")
        return package_class.price
    if package.has_classes and package.classes:
        raise PricingError(f"Package '{package.name}' requires a class selection")
    return package.base_price


def plan_discount(total_price: int, payment_plan: Optional[str]) -> int:
    """Discount in whole naira for a payment plan"""
    if not payment_plan:
        return 0
    return round(total_price * PLAN_DISCOUNTS[payment_plan])


def price_line(
    package: Package,
    package_class: Optional[PackageClass],
    quantity: int,
    payment_plan: Optional[str] = None,
) -> LinePrice:
    """Price one cart line"""
    unit_price = resolve_unit_price(package, package_class)
    class_name = package_class.name if package_class is not None else None

    if unit_price is None:
        return LinePrice(
            package_class=class_name,
            unit_price=None,
            total_price=0,
            discount_amount=0,
            final_price=0,
        )

    total_price = unit_price * quantity
    discount = plan_discount(total_price, payment_plan)
    return LinePrice(
        package_class=class_name,
        unit_price=unit_price,
        total_price=total_price,
        discount_amount=discount,
        final_price=total_price - discount,
    )


def to_minor_units(amount: float) -> int:
    """Naira to kobo"""
    return int(round(amount * 100))


def from_minor_units(amount: int) -> float:
    """Kobo to naira"""
    return amount / 100
