"""Test configuration and fixtures"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.config import settings
from app.database import Base, get_db
from app.models.catalog import Category, Package, PackageClass
from app.models.user import User, UserRole
from app.api.auth import get_password_hash, create_access_token
from app.services.paystack import PaystackError, get_paystack_client


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PAYSTACK_SECRET = "sk_test_mabba"


class FakePaystack:
    """Stands in for the gateway; records every call"""

    def __init__(self):
        self.is_configured = True
        self.calls = []
        self.transactions = {}
        self.initialize_error = None
        self.dedicated_account_error = None

    async def initialize_transaction(self, email, amount_kobo, reference, callback_url=None, metadata=None):
        self.calls.append(("initialize", {
            "email": email,
            "amount": amount_kobo,
            "reference": reference,
            "metadata": metadata,
        }))
        if self.initialize_error:
            raise self.initialize_error
        return {
            "authorization_url": f"https://checkout.paystack.com/{reference}",
            "access_code": "ac_test",
            "reference": reference,
        }

    async def verify_transaction(self, reference):
        self.calls.append(("verify", {"reference": reference}))
        if reference not in self.transactions:
            raise PaystackError("Transaction reference not found")
        return self.transactions[reference]

    async def create_customer(self, email, first_name=None, last_name=None, phone=None):
        self.calls.append(("create_customer", {"email": email}))
        return {"customer_code": "CUS_test", "email": email}

    async def create_dedicated_account(self, customer_code):
        self.calls.append(("create_dedicated_account", {"customer": customer_code}))
        if self.dedicated_account_error:
            raise self.dedicated_account_error
        return {
            "account_number": "9930000001",
            "account_name": "MABBA/ADA OKAFOR",
            "bank": {"name": "Wema Bank"},
        }


@pytest.fixture(autouse=True)
def test_settings(monkeypatch, tmp_path):
    """Gateway secret and upload directory for every test"""
    monkeypatch.setattr(settings, "paystack_secret_key", TEST_PAYSTACK_SECRET)
    monkeypatch.setattr(settings, "storage_path", str(tmp_path / "storage"))
    return settings


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


async def _create_user(db, email, role, full_name):
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=get_password_hash("testpass123"),
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def test_customer(test_db):
    """Create a customer"""
    return await _create_user(test_db, "ada@example.com", UserRole.CUSTOMER, "Ada Okafor")


@pytest.fixture
async def other_customer(test_db):
    """Create a second customer"""
    return await _create_user(test_db, "bala@example.com", UserRole.CUSTOMER, "Bala Musa")


@pytest.fixture
async def test_admin_user(test_db):
    """Create an admin"""
    return await _create_user(test_db, "admin@mabba.ng", UserRole.ADMIN, "Store Admin")


@pytest.fixture
async def test_super_admin(test_db):
    """Create a super admin"""
    return await _create_user(test_db, "owner@mabba.ng", UserRole.SUPER_ADMIN, "Store Owner")


@pytest.fixture
async def test_catalog(test_db):
    """One package of each pricing kind, a hidden one and a coming-soon category"""
    weddings = Category(slug="kayan-lefe", name="Kayan Lefe", sort_order=1)
    seasonal = Category(slug="seasonal", name="Seasonal Packages", sort_order=2, coming_soon=True)
    test_db.add_all([weddings, seasonal])
    await test_db.flush()

    fixed = Package(category_id=weddings.id, name="Wedding Celebration", base_price=500000)
    tiered = Package(category_id=weddings.id, name="Bridal Complete", has_classes=True)
    custom = Package(category_id=weddings.id, name="Bespoke Lefe")
    hidden = Package(category_id=weddings.id, name="Retired Bundle", base_price=10000, is_hidden=True)
    upcoming = Package(category_id=seasonal.id, name="Ramadan Special", base_price=75000)
    test_db.add_all([fixed, tiered, custom, hidden, upcoming])
    await test_db.flush()

    vip = PackageClass(package_id=tiered.id, name="VIP", price=500000, sort_order=0)
    standard = PackageClass(package_id=tiered.id, name="Standard", price=250000, sort_order=1)
    test_db.add_all([vip, standard])
    await test_db.commit()

    return {
        "weddings": weddings,
        "seasonal": seasonal,
        "fixed": fixed,
        "tiered": tiered,
        "custom": custom,
        "hidden": hidden,
        "upcoming": upcoming,
        "vip": vip,
        "standard": standard,
    }


@pytest.fixture
def fake_paystack():
    return FakePaystack()


@pytest.fixture
async def app_overrides(test_db, fake_paystack):
    """Point the app at the test database and the fake gateway"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_paystack_client] = lambda: fake_paystack

    yield

    app.dependency_overrides.clear()


def _make_client(user=None):
    headers = {}
    if user is not None:
        headers["Authorization"] = f"Bearer {create_access_token(user)}"
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)


@pytest.fixture
async def client(app_overrides):
    """Anonymous test client"""
    async with _make_client() as client:
        yield client


@pytest.fixture
async def customer_client(app_overrides, test_customer):
    """Client authenticated as the customer"""
    async with _make_client(test_customer) as client:
        yield client


@pytest.fixture
async def other_customer_client(app_overrides, other_customer):
    async with _make_client(other_customer) as client:
        yield client


@pytest.fixture
async def admin_client(app_overrides, test_admin_user):
    """Client authenticated as an admin"""
    async with _make_client(test_admin_user) as client:
        yield client


@pytest.fixture
async def super_admin_client(app_overrides, test_super_admin):
    """Client authenticated as the super admin"""
    async with _make_client(test_super_admin) as client:
        yield client


CUSTOMER_INFO = {
    "full_name": "Ada Okafor",
    "email": "ada@example.com",
    "whatsapp_number": "+234 803 000 0000",
}


@pytest.fixture
def customer_info():
    return dict(CUSTOMER_INFO)
