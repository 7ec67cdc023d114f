"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- A pinned clock (every handler sees the same "now")
- A fresh in-memory store per test, optionally seeded with users + settings
- AdminActions / Dispatcher wired to that store
- SQLite in-memory session factory for the SQL store backend
"""

from datetime import datetime, timezone
from typing import Any, Dict

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutor_admin.ai.actions.dispatcher import Dispatcher
from tutor_admin.ai.actions.handlers import AdminActions
from tutor_admin.ai.actions.registry import build_registry
from tutor_admin.ai.monitoring.logger import ActionLogger
from tutor_admin.ai.monitoring.metrics import ActionMetrics
from tutor_admin.core.config import Settings
from tutor_admin.db.base import Base
from tutor_admin.models import record  # noqa: F401  (registers the tables)
from tutor_admin.store.base import StoreClient, live_path
from tutor_admin.store.memory import create_memory_store


# Fixed "now" for every clock-dependent test
NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# SAMPLE RECORDS
# ---------------------------------------------------------------------------

def make_user(user_id: str, **fields: Any) -> Dict[str, Any]:
    """A stored user record (camelCase keys) with sensible defaults."""
    record = {
        "id": user_id,
        "name": f"User {user_id}",
        "email": f"{user_id}@example.com",
        "role": "STUDENT",
        "credits": 100,
        "isPremium": False,
        "isLocked": False,
        "inbox": [],
        "subscriptionHistory": [],
        "lastActiveTime": "2026-03-10T08:00:00.000Z",
    }
    record.update(fields)
    return record


def make_settings(**fields: Any) -> Dict[str, Any]:
    record = {
        "noticeText": "",
        "isAiEnabled": True,
        "aiLimits": {"free": 5, "basic": 50, "ultra": 99999},
        "weeklyTests": [],
        "themeColor": "#3366ff",
        "maintenanceMode": False,
    }
    record.update(fields)
    return record


async def put_user(store: StoreClient, config: Settings, user: Dict[str, Any]) -> None:
    """Write a user to both stores, the way onboarding does."""
    await store.live.set_value(live_path(config.LIVE_USERS_PATH, user["id"]), user)
    await store.documents.set_document(config.USERS_COLLECTION, user["id"], user)


# ---------------------------------------------------------------------------
# CORE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Settings:
    return Settings(STORE_BACKEND="memory")


@pytest.fixture
def store() -> StoreClient:
    return create_memory_store()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def actions(store: StoreClient, config: Settings, clock) -> AdminActions:
    return AdminActions(store, config, clock=clock)


@pytest.fixture
def metrics() -> ActionMetrics:
    return ActionMetrics()


@pytest.fixture
def dispatcher(actions: AdminActions, metrics: ActionMetrics) -> Dispatcher:
    return Dispatcher(build_registry(actions), logger=ActionLogger(), metrics=metrics)


@pytest_asyncio.fixture
async def seeded_store(store: StoreClient, config: Settings) -> StoreClient:
    """
    Store with the settings singleton and four users:

    - u-1: free, active last week
    - u-2: premium BASIC, active last week
    - u-3: free, never active
    - u-4: premium ULTRA, last active two months ago
    """
    await store.live.set_value(config.LIVE_SETTINGS_PATH, make_settings())
    await put_user(store, config, make_user("u-1", name="Asha"))
    await put_user(store, config, make_user(
        "u-2", name="Ravi", isPremium=True, subscriptionTier="MONTHLY", subscriptionLevel="BASIC",
    ))
    u3 = make_user("u-3", name="Meera")
    del u3["lastActiveTime"]
    await put_user(store, config, u3)
    await put_user(store, config, make_user(
        "u-4", name="Kiran", isPremium=True, subscriptionTier="YEARLY", subscriptionLevel="ULTRA",
        lastActiveTime="2026-01-10T08:00:00.000Z",
    ))
    return store


# ---------------------------------------------------------------------------
# SQL FIXTURES
# ---------------------------------------------------------------------------
# SQLite in-memory; StaticPool keeps one connection so every session sees
# the same database

@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
