"""
Database seeding script for the demo dataset.

Creates the demo users (u1-u5) and parcels (p1-p4) in the configured
database. Every demo account uses the password "password".
Run this script after the database is set up but before first use.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from backend.app.db.session import AsyncSessionLocal, Base, engine
from backend.app.models.user import User
from backend.app.repositories.demo_data import DEMO_PASSWORD, build_demo_parcels, build_demo_users


async def seed_demo_data():
    """
    Seed the demo dataset.

    Skips seeding if the demo admin account already exists.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting demo data seeding...")

        result = await db.execute(select(User).where(User.email == "admin@eparcel.com"))
        if result.scalar_one_or_none():
            print("ℹ️  Demo users already exist, skipping seeding")
            return

        users = build_demo_users()
        db.add_all(users)
        await db.flush()
        for user in users:
            print(f"✅ Created {user.role.value:<6} {user.email} ({'active' if user.is_active else 'inactive'})")

        parcels = build_demo_parcels()
        db.add_all(parcels)
        for parcel in parcels:
            print(f"📦 Created parcel {parcel.tracking_number} for {parcel.client_id} [{parcel.status.value}]")

        await db.commit()

        print("\n🎉 Demo data seeding completed successfully!")
        print(f"\nAll demo accounts use the password: {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
