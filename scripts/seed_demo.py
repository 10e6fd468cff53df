#!/usr/bin/env python3
"""
Seed script to create demo staff accounts, catalog and payment settings
"""

import asyncio

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CATEGORIES = [
    {
        "slug": "kayan-sallah",
        "name": "Kayan Sallah",
        "description": "Premium Eid celebration packages with everything you need for a memorable Sallah",
        "sort_order": 1,
        "packages": [
            {
                "name": "Sallah Essentials",
                "description": "Everything the household needs for Eid",
                "classes": [
                    ("VIP", 150000, "Premium quality with luxury items"),
                    ("Special", 100000, "High quality with selected items"),
                    ("Standard", 75000, "Quality items for the family"),
                    ("Regular", 50000, "Essential items package"),
                ],
            },
            {
                "name": "Family Sallah Bundle",
                "description": "Gifts and groceries for the whole family",
                "classes": [
                    ("VIP", 300000, "Luxury family package"),
                    ("Special", 200000, "Premium family selection"),
                    ("Standard", 150000, "Quality family bundle"),
                ],
            },
        ],
    },
    {
        "slug": "kayan-lefe",
        "name": "Kayan Lefe",
        "description": "Complete wedding packages for the perfect celebration of love",
        "sort_order": 2,
        "packages": [
            {
                "name": "Bridal Complete",
                "description": "The full bridal gift set",
                "classes": [
                    ("VIP", 500000, "Ultimate luxury bridal package"),
                    ("Special", 350000, "Premium bridal collection"),
                    ("Standard", 250000, "Beautiful bridal essentials"),
                ],
            },
            {
                "name": "Wedding Celebration",
                "description": "Party supplies and decoration package for the ceremony",
                "base_price": 180000,
            },
            {
                "name": "Bespoke Lefe",
                "description": "Tell us what you have in mind and we will send a price",
            },
        ],
    },
    {
        "slug": "haihuwa",
        "name": "Haihuwa",
        "description": "Beautiful baby shower and naming ceremony packages",
        "sort_order": 3,
        "packages": [
            {
                "name": "Baby Welcome",
                "description": "Complete naming ceremony package with all essentials",
                "classes": [
                    ("VIP", 120000, "Premium baby welcome set"),
                    ("Special", 80000, "Special baby collection"),
                    ("Regular", 50000, "Essential baby items"),
                ],
            },
            {
                "name": "Mother & Baby Care",
                "description": "Care package for new mother and baby",
                "base_price": 95000,
            },
        ],
    },
    {
        "slug": "seasonal",
        "name": "Seasonal Packages",
        "description": "Special limited-time packages for various occasions throughout the year",
        "sort_order": 4,
        "coming_soon": True,
        "packages": [
            {
                "name": "Ramadan Special",
                "description": "Special Ramadan package with prayer essentials and more",
                "classes": [
                    ("VIP", 200000, "Complete Ramadan luxury set"),
                    ("Standard", 100000, "Essential Ramadan package"),
                ],
            },
            {
                "name": "Year-End Bundle",
                "description": "Special end of year celebration package",
                "base_price": 75000,
            },
        ],
    },
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.database import SessionLocal, engine, Base
    from app.models.catalog import Category, Package, PackageClass
    from app.models.settings import PaymentSettings
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo data already exists
        result = await db.execute(select(Category).where(Category.slug == "kayan-sallah"))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating staff accounts...")

        db.add(User(
            email="owner@mabba.ng",
            hashed_password=pwd_context.hash("owner12345"),
            full_name="Mabba Owner",
            role=UserRole.SUPER_ADMIN,
        ))
        db.add(User(
            email="admin@mabba.ng",
            hashed_password=pwd_context.hash("admin12345"),
            full_name="Mabba Admin",
            role=UserRole.ADMIN,
        ))

        print("Creating catalog...")

        package_count = 0
        for category_data in CATEGORIES:
            category = Category(
                slug=category_data["slug"],
                name=category_data["name"],
                description=category_data["description"],
                sort_order=category_data["sort_order"],
                coming_soon=category_data.get("coming_soon", False),
            )
            db.add(category)
            await db.flush()

            for package_data in category_data["packages"]:
                classes = package_data.get("classes", [])
                package = Package(
                    category_id=category.id,
                    name=package_data["name"],
                    description=package_data["description"],
                    base_price=package_data.get("base_price"),
                    starting_price=min(price for _, price, _ in classes) if classes else None,
                    has_classes=bool(classes),
                )
                db.add(package)
                await db.flush()
                package_count += 1

                for sort_order, (name, price, description) in enumerate(classes):
                    db.add(PackageClass(
                        package_id=package.id,
                        name=name,
                        price=price,
                        description=description,
                        sort_order=sort_order,
                    ))

        db.add(PaymentSettings(
            bank_name="Moniepoint MFB",
            account_name="Mabba Gifts Ltd",
            account_number="0123456789",
            additional_note="Use your order ID as the transfer narration.",
        ))

        await db.commit()

        print(f"""
Demo data created successfully!

Users:
  Super Admin:
    Email: owner@mabba.ng
    Password: owner12345

  Admin:
    Email: admin@mabba.ng
    Password: admin12345

Catalog: {len(CATEGORIES)} categories, {package_count} packages created
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
