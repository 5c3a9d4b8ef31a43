"""
Database seeding script for demo wallet accounts.

Creates two funded accounts so transfers can be tried from the frontend
right away. Run this script after the database is set up.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.core.config import settings
from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.domain.wallet.account_service import AccountService
from backend.app.domain.wallet import account_store

DEMO_ACCOUNTS = [
    ("Demo Sender", "9000000001", "sender123"),
    ("Demo Recipient", "9000000002", "recipient123"),
]


async def seed_accounts():
    """
    Seed demo accounts, each with the configured opening balance.
    
    Existing mobiles are skipped, so the script can be re-run safely.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    async with AsyncSessionLocal() as db:
        print("🌱 Starting account seeding...")
        
        for name, mobile, password in DEMO_ACCOUNTS:
            if await account_store.find_by_key(db, mobile):
                print(f"ℹ️  Account {mobile} already exists, skipping")
                continue
            
            await AccountService.register(db, name=name, mobile=mobile, password=password)
            print(f"✅ Created account {mobile} (password: {password}, balance: {settings.opening_balance})")
    
    await engine.dispose()
    print("\n🎉 Account seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_accounts())
