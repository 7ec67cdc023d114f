"""
Usage Service - daily AI query quota and interaction logging.

The student-facing assistant asks this service before every AI query:

1. If system settings switch AI off        → AiDisabled
2. Effective count = dailyAiCount when dailyAiDate is today, else 0
3. Limit by tier:
     not premium           → free
     premium, BASIC level  → basic
     premium, other level  → ultra
   each taken from settings.aiLimits when set (and non-zero), else the
   configured default
4. count >= limit                           → QuotaExceeded
5. otherwise write back dailyAiDate = today, dailyAiCount = count + 1

The registry never resets dailyAiCount itself; a stale dailyAiDate is how a
new day shows up, and this service is the reader that applies it.

Completed exchanges are stored with record_interaction, which is what the
getRecentLogs action lists.

Usage:
    service = UsageService(store)

    status = await service.get_status("u-1")
    status = await service.consume("u-1")          # raises QuotaExceeded at the limit
    await service.record_interaction(user_id="u-1", user_name="Asha",
                                     query="What is osmosis?", response="...")
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from tutor_admin.core.config import Settings, settings as default_settings
from tutor_admin.core.exceptions import AiDisabled, NotFound, QuotaExceeded
from tutor_admin.core.timeutils import to_iso, utc_now
from tutor_admin.schemas.interaction import AiInteraction
from tutor_admin.store.base import StoreClient, live_path


logger = logging.getLogger("tutor_admin.services.usage")


@dataclass
class UsageStatus:
    """A user's AI quota for today."""
    user_id: str
    date: str
    used: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "date": self.date,
            "used": self.used,
            "limit": self.limit,
            "remaining": self.remaining,
        }


class UsageService:
    """
    Daily AI quota checks and interaction recording.

    Like the action handlers, every call re-reads the user and settings
    records and writes the user back whole; two concurrent consumes for the
    same user can both pass the check (last write wins).
    """

    def __init__(
        self,
        store: StoreClient,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.config = config or default_settings
        self.clock = clock

    def _today(self) -> str:
        return self.clock().date().isoformat()

    # -------------------------------------------------------------------------
    # QUOTA RULES
    # -------------------------------------------------------------------------

    def effective_count(self, user: Dict[str, Any]) -> int:
        """dailyAiCount if it belongs to today, otherwise 0."""
        if user.get("dailyAiDate") != self._today():
            return 0
        return int(user.get("dailyAiCount") or 0)

    def daily_limit(self, user: Dict[str, Any], system: Optional[Dict[str, Any]]) -> int:
        limits = (system or {}).get("aiLimits") or {}

        if not user.get("isPremium"):
            return limits.get("free") or self.config.AI_LIMIT_FREE
        if user.get("subscriptionLevel") == "BASIC":
            return limits.get("basic") or self.config.AI_LIMIT_BASIC
        return limits.get("ultra") or self.config.AI_LIMIT_ULTRA

    # -------------------------------------------------------------------------
    # OPERATIONS
    # -------------------------------------------------------------------------

    async def _load(self, user_id: str) -> tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        user = await self.store.live.get_value(live_path(self.config.LIVE_USERS_PATH, user_id))
        if not isinstance(user, dict):
            raise NotFound(f"User {user_id} not found")
        system = await self.store.live.get_value(self.config.LIVE_SETTINGS_PATH)
        return user, system if isinstance(system, dict) else None

    async def get_status(self, user_id: str) -> UsageStatus:
        user, system = await self._load(user_id)
        return UsageStatus(
            user_id=user_id,
            date=self._today(),
            used=self.effective_count(user),
            limit=self.daily_limit(user, system),
        )

    async def consume(self, user_id: str) -> UsageStatus:
        """
        Count one AI query against today's quota.

        Raises:
            NotFound: user does not exist
            AiDisabled: AI switched off in system settings
            QuotaExceeded: today's limit already reached (nothing is written)
        """
        user, system = await self._load(user_id)

        if system is not None and system.get("isAiEnabled") is False:
            raise AiDisabled("AI Tutor is currently disabled by Admin.")

        used = self.effective_count(user)
        limit = self.daily_limit(user, system)
        if used >= limit:
            logger.info(f"User {user_id} hit daily AI limit ({limit})")
            raise QuotaExceeded(f"Daily Limit Reached ({limit}/{limit}).", limit=limit)

        today = self._today()
        updated = {**user, "dailyAiDate": today, "dailyAiCount": used + 1}
        await self.store.live.set_value(live_path(self.config.LIVE_USERS_PATH, user_id), updated)
        await self.store.documents.set_document(self.config.USERS_COLLECTION, user_id, updated)

        return UsageStatus(user_id=user_id, date=today, used=used + 1, limit=limit)

    async def record_interaction(
        self,
        user_id: str,
        query: str,
        response: str,
        user_name: Optional[str] = None,
        type: str = "STUDENT_CHAT",
    ) -> AiInteraction:
        now = self.clock()
        interaction = AiInteraction(
            id=f"chat-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}",
            user_id=user_id,
            user_name=user_name,
            type=type,
            query=query,
            response=response,
            timestamp=to_iso(now),
        )
        await self.store.documents.set_document(
            self.config.INTERACTIONS_COLLECTION,
            interaction.id,
            interaction.model_dump(by_alias=True),
        )
        logger.debug(f"Recorded interaction {interaction.id} for user {user_id}")
        return interaction
