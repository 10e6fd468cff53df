"""Tests for pricing, status transitions and order ids"""

import json

import pytest
from uuid import uuid4

from app.models.catalog import Package, PackageClass
from app.models.order import OrderStatus, can_transition
from app.services.order_ids import format_order_id, fallback_order_id
from app.services.payments import order_ids_from_metadata
from app.services.paystack import build_reference, compute_signature, verify_signature
from app.services.pricing import (
    PricingError,
    plan_discount,
    price_line,
    to_minor_units,
    from_minor_units,
)


def _package(**kwargs):
    return Package(id=uuid4(), name="Bridal Complete", **kwargs)


def test_fixed_price_line():
    package = _package(base_price=500000)

    line = price_line(package, None, quantity=2)

    assert line.unit_price == 500000
    assert line.total_price == 1000000
    assert line.discount_amount == 0
    assert line.final_price == 1000000
    assert not line.is_custom_quote


def test_class_price_wins_over_base_price():
    package = _package(base_price=100000, has_classes=True)
    vip = PackageClass(id=uuid4(), package_id=package.id, name="VIP", price=150000)

    line = price_line(package, vip, quantity=1)

    assert line.unit_price == 150000
    assert line.package_class == "VIP"


def test_class_from_another_package_is_rejected():
    package = _package(has_classes=True)
    stray = PackageClass(id=uuid4(), package_id=uuid4(), name="VIP", price=150000)

    with pytest.raises(PricingError):
        price_line(package, stray, quantity=1)


def test_package_with_classes_requires_a_class():
    package = _package(has_classes=True)
    package.classes = [PackageClass(id=uuid4(), package_id=package.id, name="VIP", price=1)]

    with pytest.raises(PricingError):
        price_line(package, None, quantity=1)


def test_unpriced_package_is_custom_quote():
    line = price_line(_package(), None, quantity=3)

    assert line.is_custom_quote
    assert line.total_price == 0
    assert line.final_price == 0


@pytest.mark.parametrize(
    "plan,discount",
    [
        (None, 0),
        ("one-time", 100000),
        ("3-months", 60000),
        ("6-months", 20000),
        ("12-months", 0),
    ],
)
def test_plan_discounts(plan, discount):
    assert plan_discount(1000000, plan) == discount


def test_plan_discount_is_rounded_to_whole_naira():
    line = price_line(_package(base_price=33333), None, quantity=1, payment_plan="3-months")

    assert line.discount_amount == 2000
    assert line.final_price == 31333


def test_minor_units():
    assert to_minor_units(1000000) == 100000000
    assert to_minor_units(1234.56) == 123456
    assert from_minor_units(150000) == 1500.0


def test_same_status_is_always_allowed():
    for status in OrderStatus:
        assert can_transition(status.value, status.value)


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        ("waiting_for_price", "price_sent", True),
        ("waiting_for_price", "paid", False),
        ("pending_payment", "paid", True),
        ("paid", "processing", True),
        ("processing", "delivered", True),
        ("delivered", "paid", False),
        ("cancelled", "processing", False),
        ("out_for_delivery", "pending", False),
    ],
)
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_branded_order_id_format():
    assert format_order_id(42, 2025) == "MAB-2025-00042"
    assert fallback_order_id().startswith("MAB-")


def test_reference_embeds_order_id():
    order_id = uuid4()

    reference = build_reference(order_id)

    assert reference.startswith(f"MAB-{order_id}-")
    assert reference.rsplit("-", 1)[1].isdigit()


def test_signature_check():
    body = b'{"event":"charge.success"}'
    signature = compute_signature("sk_test", body)

    assert verify_signature("sk_test", body, signature)
    assert not verify_signature("sk_test", body + b" ", signature)
    assert not verify_signature("sk_other", body, signature)
    assert not verify_signature("sk_test", body, None)
    assert not verify_signature("", body, signature)


def test_order_ids_from_metadata_deduplicates_and_skips_garbage():
    first, second = uuid4(), uuid4()

    order_ids = order_ids_from_metadata({
        "order_id": str(first),
        "order_ids": [str(first), "not-a-uuid", str(second)],
    })

    assert order_ids == [first, second]
    assert order_ids_from_metadata(None) == []


def test_order_ids_from_metadata_accepts_json_string():
    first = uuid4()

    assert order_ids_from_metadata(json.dumps({"order_id": str(first)})) == [first]
    assert order_ids_from_metadata("abc") == []
    assert order_ids_from_metadata([1, 2]) == []
    assert order_ids_from_metadata({"order_ids": "not-a-list"}) == []
