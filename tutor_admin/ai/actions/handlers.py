"""
Admin action handlers - the administrative mutations the agent can run.

Every handler follows the same shape:

1. read the current record(s) from the store (never from a cache),
2. compute the new state,
3. write the whole record back,
4. return a short confirmation string.

Whole-record writes are deliberate: neither store offers an atomic partial
update with conflict detection, so two concurrent handlers touching the same
user or the settings singleton race and the last write wins.

User records live at users/{id} in the live tree and are mirrored to the
users collection on every write. scanUsers reads the collection; every other
user handler reads the live record.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from tutor_admin.ai.actions.catalog import SubscriptionPlan, UserFilter
from tutor_admin.core.config import Settings, settings as default_settings
from tutor_admin.core.exceptions import NotFound, StoreError
from tutor_admin.core.timeutils import one_month_before, parse_timestamp, to_iso, utc_now
from tutor_admin.schemas.patch import validate_patch
from tutor_admin.schemas.settings import SystemSettings, WeeklyTest
from tutor_admin.schemas.user import (
    LIFETIME_END,
    InboxMessage,
    SubscriptionHistoryEntry,
    User,
    UserSummary,
)
from tutor_admin.store.base import StoreClient, live_path


logger = logging.getLogger("tutor_admin.ai.actions.handlers")

# updateUser may never patch these: the id is the key, and the history and
# inbox lists are append-only (written only by grantSubscription and
# sendInboxMessage)
USER_IMMUTABLE_FIELDS = frozenset({"id", "subscriptionHistory", "inbox"})

# Returned by broadcastMessage when the settings record cannot be read
BROADCAST_FAILED = "Failed to fetch settings."

PLAN_DURATIONS: Dict[str, Optional[timedelta]] = {
    SubscriptionPlan.WEEKLY.value: timedelta(days=7),
    SubscriptionPlan.MONTHLY.value: timedelta(days=30),
    SubscriptionPlan.YEARLY.value: timedelta(days=365),
    SubscriptionPlan.LIFETIME.value: None,
}


def is_inactive(record: Dict[str, Any], cutoff: datetime) -> bool:
    """No lastActiveTime at all, or one strictly older than cutoff."""
    raw = record.get("lastActiveTime")
    if not raw:
        return True
    last_active = parse_timestamp(raw)
    return last_active is not None and last_active < cutoff


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------

class AdminActions:
    """
    Handlers for every operation in the admin catalog.

    Args:
        store: Document + live stores
        config: Application settings (collection names, defaults, policies)
        clock: Returns the current UTC time; injected so tests can pin it
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

    # -------------------------------------------------------------------------
    # RECORD ACCESS
    # -------------------------------------------------------------------------

    def _user_path(self, user_id: str) -> str:
        return live_path(self.config.LIVE_USERS_PATH, user_id)

    def _new_id(self, prefix: str) -> str:
        millis = int(self.clock().timestamp() * 1000)
        return f"{prefix}-{millis}-{uuid.uuid4().hex[:6]}"

    async def _read_user(self, user_id: str) -> Dict[str, Any]:
        user = await self.store.live.get_value(self._user_path(user_id))
        if not isinstance(user, dict):
            raise NotFound(f"User {user_id} not found")
        return user

    async def _write_user(self, user_id: str, record: Dict[str, Any]) -> None:
        await self.store.live.set_value(self._user_path(user_id), record)
        await self.store.documents.set_document(self.config.USERS_COLLECTION, user_id, record)

    async def _read_settings(self) -> Dict[str, Any]:
        current = await self.store.live.get_value(self.config.LIVE_SETTINGS_PATH)
        if not isinstance(current, dict):
            raise NotFound("Settings not found")
        return current

    async def _write_settings(self, record: Dict[str, Any]) -> None:
        await self.store.live.set_value(self.config.LIVE_SETTINGS_PATH, record)

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    async def delete_user(self, user_id: str) -> str:
        """Remove the durable and the live record, attempting both."""
        live = await self.store.live.get_value(self._user_path(user_id))
        durable = await self.store.documents.get_document(self.config.USERS_COLLECTION, user_id)
        if live is None and durable is None:
            raise NotFound(f"User {user_id} not found")

        failures: List[str] = []
        try:
            await self.store.documents.delete_document(self.config.USERS_COLLECTION, user_id)
        except StoreError as e:
            failures.append(f"document store: {e.message}")
        try:
            await self.store.live.remove_value(self._user_path(user_id))
        except StoreError as e:
            failures.append(f"live store: {e.message}")

        if failures:
            raise StoreError(f"Failed to delete user {user_id}: {'; '.join(failures)}")

        logger.info(f"Deleted user {user_id}")
        return f"User {user_id} deleted successfully from both stores."

    async def update_user(self, user_id: str, updates: Dict[str, Any]) -> str:
        """Shallow-merge allowed fields over the live record and write it back whole."""
        patch = validate_patch(User, updates, forbidden=USER_IMMUTABLE_FIELDS)
        current = await self._read_user(user_id)
        await self._write_user(user_id, {**current, **patch})
        logger.info(f"Updated user {user_id}: {sorted(patch)}")
        return f"User {user_id} updated."

    async def ban_user(self, user_id: str, reason: Optional[str] = None) -> str:
        logger.info(f"Banning user {user_id}, reason: {reason or 'not given'}")
        await self.update_user(user_id, {"isLocked": True})
        return f"User {user_id} banned."

    async def unban_user(self, user_id: str) -> str:
        await self.update_user(user_id, {"isLocked": False})
        return f"User {user_id} unbanned."

    # -------------------------------------------------------------------------
    # SUBSCRIPTIONS
    # -------------------------------------------------------------------------

    async def grant_subscription(self, user_id: str, plan: str, level: str) -> str:
        """
        Grant a subscription as an administrative, zero-cost entry.

        WEEKLY / MONTHLY / YEARLY end 7 / 30 / 365 days from now. LIFETIME has
        no end date: subscriptionEndDate is cleared and the history entry's
        endDate is the LIFETIME sentinel.
        """
        now = self.clock()
        duration = PLAN_DURATIONS[plan]
        end_date = to_iso(now + duration) if duration is not None else None

        entry = SubscriptionHistoryEntry(
            id=self._new_id("grant"),
            tier=plan,
            level=level,
            start_date=to_iso(now),
            end_date=end_date or LIFETIME_END,
            duration_hours=0,
            price=0,
            original_price=0,
            is_free=True,
            grant_source="ADMIN",
            granted_by=self.config.AGENT_ACTOR_ID,
        )

        user = await self._read_user(user_id)
        history = [entry.model_dump(by_alias=True)] + list(user.get("subscriptionHistory") or [])

        updated = {
            **user,
            "subscriptionTier": plan,
            "subscriptionLevel": level,
            "subscriptionEndDate": end_date,
            "isPremium": True,
            "subscriptionHistory": history,
            "grantedByAdmin": True,
        }
        if end_date is None:
            updated.pop("subscriptionEndDate")

        await self._write_user(user_id, updated)
        logger.info(f"Granted {plan}/{level} to user {user_id} (ends {end_date or LIFETIME_END})")
        return f"Granted {plan} {level} subscription to user {user_id}."

    # -------------------------------------------------------------------------
    # MESSAGING
    # -------------------------------------------------------------------------

    async def broadcast_message(
        self,
        message: str,
        type: str = "TEXT",
        gift_value: Optional[float] = None,
    ) -> str:
        """
        Set the global banner text.

        Only the text is persisted; type and gift_value are accepted and
        logged. Returns BROADCAST_FAILED instead of raising when the settings
        record cannot be read.
        """
        try:
            current = await self.store.live.get_value(self.config.LIVE_SETTINGS_PATH)
        except StoreError as e:
            logger.warning(f"Broadcast could not read settings: {e.message}")
            return BROADCAST_FAILED
        if not isinstance(current, dict):
            return BROADCAST_FAILED

        await self._write_settings({**current, "noticeText": message})
        logger.info(f"Broadcast banner set (type={type}, gift_value={gift_value})")
        return "Broadcast banner updated successfully."

    async def send_inbox_message(self, user_id: str, text: str) -> str:
        user = await self._read_user(user_id)

        msg = InboxMessage(
            id=self._new_id("msg"),
            text=text,
            date=to_iso(self.clock()),
            read=False,
            type="TEXT",
        )
        inbox = [msg.model_dump(by_alias=True)] + list(user.get("inbox") or [])

        await self._write_user(user_id, {**user, "inbox": inbox})
        return f"Message sent to {user.get('name') or user_id}."

    # -------------------------------------------------------------------------
    # CONTENT
    # -------------------------------------------------------------------------

    async def create_weekly_test(self, name: str, subject: str, question_count: int) -> str:
        """Append an empty-bodied weekly test; questions are filled in elsewhere."""
        current = await self._read_settings()

        test = WeeklyTest(
            id=self._new_id("test"),
            name=name,
            description=f"Subject: {subject}",
            is_active=True,
            class_level=self.config.WEEKLY_TEST_CLASS_LEVEL,
            questions=[],
            total_questions=int(question_count),
            passing_score=self.config.WEEKLY_TEST_PASSING_SCORE,
            created_at=to_iso(self.clock()),
            duration_minutes=self.config.WEEKLY_TEST_DURATION_MINUTES,
            selected_subjects=[subject],
        )
        tests = list(current.get("weeklyTests") or []) + [test.model_dump(by_alias=True)]

        await self._write_settings({**current, "weeklyTests": tests})
        return f'Weekly Test "{name}" created (Empty Questions).'

    # -------------------------------------------------------------------------
    # SETTINGS
    # -------------------------------------------------------------------------

    async def update_system_settings(self, updates: Dict[str, Any]) -> str:
        patch = validate_patch(SystemSettings, updates)
        current = await self._read_settings()
        await self._write_settings({**current, **patch})
        logger.info(f"Updated system settings: {sorted(patch)}")
        return "System Settings updated successfully."

    # -------------------------------------------------------------------------
    # REPORTS
    # -------------------------------------------------------------------------

    async def scan_users(self, filter: str) -> List[Dict[str, Any]]:
        """
        List users matching one filter, as redacted summaries.

        Store failures yield an empty list while LISTING_FAILS_OPEN is set.
        """
        try:
            users = await self.store.documents.query_documents(self.config.USERS_COLLECTION)
        except StoreError:
            if not self.config.LISTING_FAILS_OPEN:
                raise
            logger.exception("scanUsers could not read users")
            return []

        if filter == UserFilter.PREMIUM.value:
            users = [u for u in users if u.get("isPremium")]
        elif filter == UserFilter.FREE.value:
            users = [u for u in users if not u.get("isPremium")]
        elif filter == UserFilter.INACTIVE.value:
            cutoff = one_month_before(self.clock())
            users = [u for u in users if is_inactive(u, cutoff)]

        return [UserSummary.from_record(u).model_dump() for u in users]

    async def get_recent_logs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent AI interaction logs, newest first."""
        limit = int(limit or self.config.RECENT_LOGS_DEFAULT_LIMIT)
        limit = min(limit, self.config.RECENT_LOGS_MAX_LIMIT)
        try:
            return await self.store.documents.query_documents(
                self.config.INTERACTIONS_COLLECTION,
                order_by="timestamp",
                limit=limit,
                descending=True,
            )
        except StoreError:
            if not self.config.LISTING_FAILS_OPEN:
                raise
            logger.exception("getRecentLogs could not read interaction logs")
            return []
