#!/usr/bin/env python3
"""
Seed the configured store with a settings singleton and a few demo users.

Users and the settings record are normally created by onboarding and
bootstrap outside this service; this script stands in for them in
development.

Usage:
    python scripts/seed_store.py
"""
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from tutor_admin.core.config import settings
from tutor_admin.core.timeutils import to_iso, utc_now
from tutor_admin.schemas.settings import AiLimits, SystemSettings
from tutor_admin.schemas.user import User
from tutor_admin.store.base import StoreClient, live_path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("seed_store")

DEMO_USERS = [
    User(id="u-1", name="Asha", email="asha@example.com", role="STUDENT", credits=120),
    User(id="u-2", name="Ravi", email="ravi@example.com", role="STUDENT", credits=40,
         is_premium=True, subscription_tier="MONTHLY", subscription_level="BASIC"),
    User(id="u-3", name="Meera", email="meera@example.com", role="STUDENT", credits=0),
]


async def seed(store: StoreClient) -> None:
    now = to_iso(utc_now())

    system = SystemSettings(ai_limits=AiLimits(free=5, basic=50, ultra=99999))
    await store.live.set_value(settings.LIVE_SETTINGS_PATH, system.model_dump(by_alias=True))

    for user in DEMO_USERS:
        record = user.model_dump(by_alias=True)
        # u-3 never logged in, so it shows up as INACTIVE
        if user.id != "u-3":
            record["lastActiveTime"] = now
        await store.live.set_value(live_path(settings.LIVE_USERS_PATH, user.id), record)
        await store.documents.set_document(settings.USERS_COLLECTION, user.id, record)

    logger.info(f"Seeded settings and {len(DEMO_USERS)} users")


if __name__ == "__main__":
    if settings.STORE_BACKEND == "sql":
        from tutor_admin.db.session import init_db
        init_db()

    from tutor_admin.deps import get_store
    asyncio.run(seed(get_store()))
