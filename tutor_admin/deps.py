"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Provides the store client, the dispatcher and the usage service. All three
are process-wide singletons built lazily on first use; tests replace them
through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from tutor_admin.ai.actions.dispatcher import Dispatcher
from tutor_admin.ai.actions.handlers import AdminActions
from tutor_admin.ai.actions.registry import build_registry
from tutor_admin.core.config import settings
from tutor_admin.services.usage_service import UsageService
from tutor_admin.store.base import StoreClient
from tutor_admin.store.memory import create_memory_store


logger = logging.getLogger("tutor_admin.deps")


@lru_cache(maxsize=1)
def get_store() -> StoreClient:
    """
    Build the store client selected by STORE_BACKEND.

    The SQL backend is imported lazily so the memory backend needs no
    database driver.
    """
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return create_memory_store()
    if backend == "sql":
        from tutor_admin.db.session import SessionLocal
        from tutor_admin.store.sql import create_sql_store

        logger.info("Using SQL store backend")
        return create_sql_store(SessionLocal)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")


@lru_cache(maxsize=1)
def get_dispatcher() -> Dispatcher:
    return Dispatcher(build_registry(AdminActions(get_store(), settings)))


@lru_cache(maxsize=1)
def get_usage_service() -> UsageService:
    return UsageService(get_store(), settings)
