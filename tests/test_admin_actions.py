"""
Tests for the admin action handlers.

These tests verify:
- Whole-record merge semantics of updateUser / updateSystemSettings
- Subscription grants (end dates, history entries, LIFETIME sentinel)
- Inbox prepend and banner broadcast
- Weekly test creation
- scanUsers filters (including the INACTIVE boundary) and redaction
- getRecentLogs ordering and limits
- NotFound with no write for missing users / settings
- Listing failure policy
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from tutor_admin.ai.actions.handlers import BROADCAST_FAILED, AdminActions
from tutor_admin.core.exceptions import InvalidArguments, NotFound, StoreError
from tutor_admin.core.timeutils import one_month_before, to_iso
from tutor_admin.store.base import live_path

from conftest import NOW, make_user, put_user


async def live_user(store, config, user_id):
    return await store.live.get_value(live_path(config.LIVE_USERS_PATH, user_id))


# ---------------------------------------------------------------------------
# UPDATE / BAN / UNBAN
# ---------------------------------------------------------------------------

class TestUpdateUser:
    """Tests for updateUser, banUser and unbanUser."""

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, actions, seeded_store, config):
        """Should set credits and keep every other field."""
        before = await live_user(seeded_store, config, "u-1")

        result = await actions.update_user("u-1", {"credits": 500})

        after = await live_user(seeded_store, config, "u-1")
        assert result == "User u-1 updated."
        assert after["credits"] == 500
        assert {k: v for k, v in after.items() if k != "credits"} == \
               {k: v for k, v in before.items() if k != "credits"}

    @pytest.mark.asyncio
    async def test_update_mirrors_to_document_store(self, actions, seeded_store, config):
        """Should write the merged record to the users collection too."""
        await actions.update_user("u-1", {"name": "Asha K"})

        doc = await seeded_store.documents.get_document(config.USERS_COLLECTION, "u-1")
        assert doc["name"] == "Asha K"

    @pytest.mark.asyncio
    async def test_update_preserves_unknown_stored_fields(self, actions, store, config):
        """Fields the schema does not know about survive the merge."""
        await put_user(store, config, make_user("u-9", favouriteSubject="Physics"))

        await actions.update_user("u-9", {"credits": 1})

        assert (await live_user(store, config, "u-9"))["favouriteSubject"] == "Physics"

    @pytest.mark.asyncio
    async def test_update_accepts_snake_case_keys(self, actions, seeded_store, config):
        await actions.update_user("u-1", {"is_premium": True})

        assert (await live_user(seeded_store, config, "u-1"))["isPremium"] is True

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_field(self, actions, seeded_store, config):
        with pytest.raises(InvalidArguments, match="hackerField"):
            await actions.update_user("u-1", {"hackerField": 1})

    @pytest.mark.asyncio
    async def test_update_rejects_id_change(self, actions, seeded_store):
        with pytest.raises(InvalidArguments, match="id"):
            await actions.update_user("u-1", {"id": "u-2"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("updates", [
        {"subscriptionHistory": []},
        {"subscription_history": []},
        {"inbox": []},
        {"credits": 5, "inbox": []},
    ])
    async def test_update_cannot_rewrite_append_only_lists(self, actions, seeded_store, config, updates):
        """History and inbox are append-only; updateUser must not touch them."""
        await actions.grant_subscription("u-1", "WEEKLY", "BASIC")
        await actions.send_inbox_message("u-1", "welcome")
        before = await live_user(seeded_store, config, "u-1")
        seeded_store.live.set_value = AsyncMock()
        seeded_store.documents.set_document = AsyncMock()

        with pytest.raises(InvalidArguments, match="cannot be updated"):
            await actions.update_user("u-1", updates)

        seeded_store.live.set_value.assert_not_called()
        seeded_store.documents.set_document.assert_not_called()
        after = await live_user(seeded_store, config, "u-1")
        assert after == before
        assert len(after["subscriptionHistory"]) == 1
        assert len(after["inbox"]) == 1

    @pytest.mark.asyncio
    async def test_update_rejects_bad_value(self, actions, seeded_store):
        with pytest.raises(InvalidArguments, match="credits"):
            await actions.update_user("u-1", {"credits": "lots"})

    @pytest.mark.asyncio
    async def test_update_missing_user(self, actions, store, config):
        """Should raise NotFound and write nothing."""
        store.live.set_value = AsyncMock()
        store.documents.set_document = AsyncMock()

        with pytest.raises(NotFound):
            await actions.update_user("ghost", {"credits": 1})

        store.live.set_value.assert_not_called()
        store.documents.set_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_ban_and_unban(self, actions, seeded_store, config):
        assert await actions.ban_user("u-1", reason="spam") == "User u-1 banned."
        assert (await live_user(seeded_store, config, "u-1"))["isLocked"] is True

        assert await actions.unban_user("u-1") == "User u-1 unbanned."
        assert (await live_user(seeded_store, config, "u-1"))["isLocked"] is False

    @pytest.mark.asyncio
    async def test_ban_missing_user(self, actions, store):
        with pytest.raises(NotFound):
            await actions.ban_user("ghost")


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------

class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_removes_both_records(self, actions, seeded_store, config):
        result = await actions.delete_user("u-1")

        assert "u-1" in result
        assert await live_user(seeded_store, config, "u-1") is None
        assert await seeded_store.documents.get_document(config.USERS_COLLECTION, "u-1") is None

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, actions, store):
        store.documents.delete_document = AsyncMock()
        store.live.remove_value = AsyncMock()

        with pytest.raises(NotFound):
            await actions.delete_user("ghost")

        store.documents.delete_document.assert_not_called()
        store.live.remove_value.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_attempts_live_after_document_failure(self, actions, seeded_store, config):
        """A failing document delete must not stop the live delete."""
        seeded_store.documents.delete_document = AsyncMock(side_effect=StoreError("disk full"))

        with pytest.raises(StoreError, match="disk full"):
            await actions.delete_user("u-1")

        assert await live_user(seeded_store, config, "u-1") is None


# ---------------------------------------------------------------------------
# SUBSCRIPTIONS
# ---------------------------------------------------------------------------

class TestGrantSubscription:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("plan,days", [("WEEKLY", 7), ("MONTHLY", 30), ("YEARLY", 365)])
    async def test_timed_plans(self, actions, seeded_store, config, plan, days):
        await actions.grant_subscription("u-1", plan, "BASIC")

        user = await live_user(seeded_store, config, "u-1")
        assert user["subscriptionEndDate"] == to_iso(NOW + timedelta(days=days))
        assert user["subscriptionTier"] == plan
        assert user["subscriptionLevel"] == "BASIC"
        assert user["isPremium"] is True
        assert user["grantedByAdmin"] is True

    @pytest.mark.asyncio
    async def test_weekly_history_entry(self, actions, seeded_store, config):
        """Should prepend exactly one admin, zero-cost entry."""
        await put_user(seeded_store, config, make_user(
            "u-5", subscriptionHistory=[{"id": "old", "tier": "MONTHLY", "level": "BASIC"}],
        ))

        await actions.grant_subscription("u-5", "WEEKLY", "BASIC")

        history = (await live_user(seeded_store, config, "u-5"))["subscriptionHistory"]
        assert len(history) == 2
        entry = history[0]
        assert entry["tier"] == "WEEKLY"
        assert entry["level"] == "BASIC"
        assert entry["isFree"] is True
        assert entry["grantSource"] == "ADMIN"
        assert entry["grantedBy"] == config.AGENT_ACTOR_ID
        assert entry["price"] == 0
        assert entry["originalPrice"] == 0
        assert entry["startDate"] == to_iso(NOW)
        assert entry["endDate"] == to_iso(NOW + timedelta(days=7))
        assert entry["id"].startswith("grant-")
        # Existing entries are untouched
        assert history[1] == {"id": "old", "tier": "MONTHLY", "level": "BASIC"}

    @pytest.mark.asyncio
    async def test_lifetime_has_no_end_date(self, actions, seeded_store, config):
        """LIFETIME clears subscriptionEndDate and uses the sentinel in history."""
        await actions.grant_subscription("u-2", "LIFETIME", "ULTRA")

        user = await live_user(seeded_store, config, "u-2")
        assert user.get("subscriptionEndDate") is None
        assert user["subscriptionHistory"][0]["endDate"] == "LIFETIME"

    @pytest.mark.asyncio
    async def test_grant_missing_user(self, actions, store):
        store.live.set_value = AsyncMock()

        with pytest.raises(NotFound):
            await actions.grant_subscription("ghost", "WEEKLY", "BASIC")

        store.live.set_value.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_grants_to_different_users(self, actions, seeded_store, config):
        """Each grant mutates only its own user."""
        await asyncio.gather(
            actions.grant_subscription("u-1", "WEEKLY", "BASIC"),
            actions.grant_subscription("u-3", "YEARLY", "ULTRA"),
        )

        u1 = await live_user(seeded_store, config, "u-1")
        u3 = await live_user(seeded_store, config, "u-3")
        assert u1["subscriptionTier"] == "WEEKLY"
        assert len(u1["subscriptionHistory"]) == 1
        assert u3["subscriptionTier"] == "YEARLY"
        assert len(u3["subscriptionHistory"]) == 1


# ---------------------------------------------------------------------------
# MESSAGING
# ---------------------------------------------------------------------------

class TestMessaging:

    @pytest.mark.asyncio
    async def test_inbox_message_is_prepended(self, actions, seeded_store, config):
        await put_user(seeded_store, config, make_user(
            "u-6", name="Dev", inbox=[{"id": "m0", "text": "old", "date": "x", "read": True, "type": "TEXT"}],
        ))

        result = await actions.send_inbox_message("u-6", "hi")

        inbox = (await live_user(seeded_store, config, "u-6"))["inbox"]
        assert result == "Message sent to Dev."
        assert len(inbox) == 2
        assert inbox[0]["text"] == "hi"
        assert inbox[0]["read"] is False
        assert inbox[0]["type"] == "TEXT"
        assert inbox[0]["date"] == to_iso(NOW)
        assert inbox[1]["id"] == "m0"

    @pytest.mark.asyncio
    async def test_inbox_missing_user(self, actions, store):
        with pytest.raises(NotFound):
            await actions.send_inbox_message("ghost", "hi")

    @pytest.mark.asyncio
    async def test_broadcast_sets_notice(self, actions, seeded_store, config):
        result = await actions.broadcast_message("Exams on Monday")

        system = await seeded_store.live.get_value(config.LIVE_SETTINGS_PATH)
        assert result == "Broadcast banner updated successfully."
        assert system["noticeText"] == "Exams on Monday"
        assert system["themeColor"] == "#3366ff"

    @pytest.mark.asyncio
    async def test_broadcast_without_settings_returns_failure(self, actions, store):
        assert await actions.broadcast_message("hello") == BROADCAST_FAILED

    @pytest.mark.asyncio
    async def test_broadcast_read_error_returns_failure(self, actions, store):
        store.live.get_value = AsyncMock(side_effect=StoreError("offline"))

        assert await actions.broadcast_message("hello") == BROADCAST_FAILED


# ---------------------------------------------------------------------------
# CONTENT / SETTINGS
# ---------------------------------------------------------------------------

class TestSettingsActions:

    @pytest.mark.asyncio
    async def test_create_weekly_test(self, actions, seeded_store, config):
        result = await actions.create_weekly_test("Week 5", "Physics", 20)

        tests = (await seeded_store.live.get_value(config.LIVE_SETTINGS_PATH))["weeklyTests"]
        assert result == 'Weekly Test "Week 5" created (Empty Questions).'
        assert len(tests) == 1
        test = tests[0]
        assert test["name"] == "Week 5"
        assert test["description"] == "Subject: Physics"
        assert test["questions"] == []
        assert test["totalQuestions"] == 20
        assert test["selectedSubjects"] == ["Physics"]
        assert test["isActive"] is True
        assert test["passingScore"] == config.WEEKLY_TEST_PASSING_SCORE
        assert test["createdAt"] == to_iso(NOW)

    @pytest.mark.asyncio
    async def test_create_weekly_test_appends(self, actions, seeded_store, config):
        await actions.create_weekly_test("A", "Maths", 5)
        await actions.create_weekly_test("B", "Maths", 5)

        tests = (await seeded_store.live.get_value(config.LIVE_SETTINGS_PATH))["weeklyTests"]
        assert [t["name"] for t in tests] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_create_weekly_test_without_settings(self, actions, store):
        with pytest.raises(NotFound, match="Settings"):
            await actions.create_weekly_test("A", "Maths", 5)

    @pytest.mark.asyncio
    async def test_update_settings_merges(self, actions, seeded_store, config):
        await actions.update_system_settings({"maintenanceMode": True, "aiLimits": {"free": 10}})

        system = await seeded_store.live.get_value(config.LIVE_SETTINGS_PATH)
        assert system["maintenanceMode"] is True
        assert system["aiLimits"]["free"] == 10
        assert system["themeColor"] == "#3366ff"

    @pytest.mark.asyncio
    async def test_update_settings_unknown_field(self, actions, seeded_store):
        with pytest.raises(InvalidArguments):
            await actions.update_system_settings({"rootPassword": "x"})

    @pytest.mark.asyncio
    async def test_update_settings_missing(self, actions, store):
        with pytest.raises(NotFound):
            await actions.update_system_settings({"maintenanceMode": True})


# ---------------------------------------------------------------------------
# REPORTS
# ---------------------------------------------------------------------------

class TestScanUsers:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("filter_,expected", [
        ("ALL", {"u-1", "u-2", "u-3", "u-4"}),
        ("PREMIUM", {"u-2", "u-4"}),
        ("FREE", {"u-1", "u-3"}),
        ("INACTIVE", {"u-3", "u-4"}),
    ])
    async def test_filters(self, actions, seeded_store, filter_, expected):
        result = await actions.scan_users(filter_)

        assert {u["id"] for u in result} == expected

    @pytest.mark.asyncio
    async def test_summaries_are_redacted(self, actions, seeded_store):
        result = await actions.scan_users("PREMIUM")

        ravi = next(u for u in result if u["id"] == "u-2")
        assert set(ravi) == {"id", "name", "email", "role", "credits", "tier"}
        assert ravi["tier"] == "MONTHLY"

    @pytest.mark.asyncio
    async def test_fractional_credits_do_not_break_listing(self, actions, seeded_store, config):
        await put_user(seeded_store, config, make_user("u-8", credits=12.5))

        result = await actions.scan_users("ALL")

        by_id = {u["id"]: u for u in result}
        assert len(by_id) == 5
        assert by_id["u-8"]["credits"] == 12.5
        assert by_id["u-1"]["credits"] == 100
        assert isinstance(by_id["u-1"]["credits"], int)

    @pytest.mark.asyncio
    async def test_inactive_boundary(self, actions, store, config):
        """Exactly one month ago is not inactive; a millisecond earlier is."""
        cutoff = one_month_before(NOW)
        await put_user(store, config, make_user("edge", lastActiveTime=to_iso(cutoff)))
        await put_user(store, config, make_user(
            "older", lastActiveTime=to_iso(cutoff - timedelta(milliseconds=1)),
        ))
        await put_user(store, config, make_user("epoch-ms", lastActiveTime=int(NOW.timestamp() * 1000)))

        result = await actions.scan_users("INACTIVE")

        assert {u["id"] for u in result} == {"older"}

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self, actions, store):
        store.documents.query_documents = AsyncMock(side_effect=StoreError("offline"))

        assert await actions.scan_users("ALL") == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates_when_fail_closed(self, store, config, clock):
        config.LISTING_FAILS_OPEN = False
        actions = AdminActions(store, config, clock=clock)
        store.documents.query_documents = AsyncMock(side_effect=StoreError("offline"))

        with pytest.raises(StoreError):
            await actions.scan_users("ALL")


class TestRecentLogs:

    @pytest.fixture
    def logs(self):
        return [
            {"id": f"chat-{i}", "userId": "u-1", "query": "q", "response": "r",
             "timestamp": f"2026-03-{i:02d}T10:00:00.000Z"}
            for i in range(1, 26)
        ]

    @pytest.mark.asyncio
    async def test_newest_first_with_default_limit(self, actions, store, config, logs):
        for log in logs:
            await store.documents.set_document(config.INTERACTIONS_COLLECTION, log["id"], log)

        result = await actions.get_recent_logs()

        assert len(result) == 20
        assert result[0]["id"] == "chat-25"
        assert result[-1]["id"] == "chat-6"

    @pytest.mark.asyncio
    async def test_explicit_limit(self, actions, store, config, logs):
        for log in logs:
            await store.documents.set_document(config.INTERACTIONS_COLLECTION, log["id"], log)

        result = await actions.get_recent_logs(3)

        assert [r["id"] for r in result] == ["chat-25", "chat-24", "chat-23"]

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self, actions, store):
        store.documents.query_documents = AsyncMock(side_effect=StoreError("offline"))

        assert await actions.get_recent_logs(5) == []
