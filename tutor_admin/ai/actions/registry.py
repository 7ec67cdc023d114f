"""
Action Registry - maps every catalog operation to its handler.

This module binds the static Schema Catalog (tutor_admin.ai.actions.catalog)
to the coroutines in AdminActions, so that for every advertised operation
there is exactly one executable handler and vice versa.

Purpose:
========
1. Single source of truth for what the admin agent may call
2. Lookup of descriptor + handler by operation name
3. Tool definitions for the chat-completion backend

Usage:
======
```python
from tutor_admin.ai.actions.registry import build_registry

registry = build_registry(AdminActions(store))

if registry.has_action("grantSubscription"):
    descriptor = registry.get_action("grantSubscription")
    handler = registry.get_handler("grantSubscription")

tools = registry.to_tool_schemas()
```
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from tutor_admin.ai.actions.catalog import (
    ADMIN_OPERATIONS,
    ActionCategory,
    OperationDescriptor,
)
from tutor_admin.ai.actions.handlers import AdminActions


logger = logging.getLogger("tutor_admin.ai.actions.registry")

Handler = Callable[..., Awaitable[Any]]


class ActionRegistry:
    """
    Registry of all operations the admin agent can execute.

    Operation names are matched exactly (they are camelCase identifiers
    handed to the agent verbatim). Registration order is preserved and is
    the order tools are advertised in.
    """

    def __init__(self):
        self._actions: Dict[str, OperationDescriptor] = {}
        self._handlers: Dict[str, Handler] = {}

    def register(self, descriptor: OperationDescriptor, handler: Handler) -> None:
        """
        Register an operation and its handler.

        Raises:
            ValueError: if the name is already registered
        """
        if descriptor.name in self._actions:
            raise ValueError(f"Operation already registered: {descriptor.name}")

        self._actions[descriptor.name] = descriptor
        self._handlers[descriptor.name] = handler
        logger.debug(f"Registered operation: {descriptor.name}")

    def get_action(self, name: str) -> Optional[OperationDescriptor]:
        return self._actions.get(name)

    def get_handler(self, name: str) -> Optional[Handler]:
        return self._handlers.get(name)

    def has_action(self, name: str) -> bool:
        return name in self._actions

    def list_actions(self, category: Optional[ActionCategory] = None) -> List[OperationDescriptor]:
        """
        List registered operations in registration order, optionally filtered by category.
        """
        if category:
            return [a for a in self._actions.values() if a.category == category]
        return list(self._actions.values())

    def list_action_names(self) -> List[str]:
        return list(self._actions.keys())

    def get_actions_by_category(self) -> Dict[ActionCategory, List[OperationDescriptor]]:
        result: Dict[ActionCategory, List[OperationDescriptor]] = {}
        for action in self._actions.values():
            result.setdefault(action.category, []).append(action)
        return result

    def to_tool_schemas(self) -> List[Dict[str, Any]]:
        """All operations in chat-completion function tool format."""
        return [a.to_tool_schema() for a in self._actions.values()]


# ---------------------------------------------------------------------------
# CATALOG BINDING
# ---------------------------------------------------------------------------

def build_registry(actions: AdminActions) -> ActionRegistry:
    """
    Build the registry for the admin catalog, bound to one AdminActions instance.
    """
    handlers: Dict[str, Handler] = {
        "deleteUser": actions.delete_user,
        "updateUser": actions.update_user,
        "banUser": actions.ban_user,
        "unbanUser": actions.unban_user,
        "grantSubscription": actions.grant_subscription,
        "broadcastMessage": actions.broadcast_message,
        "sendInboxMessage": actions.send_inbox_message,
        "createWeeklyTest": actions.create_weekly_test,
        "scanUsers": actions.scan_users,
        "getRecentLogs": actions.get_recent_logs,
        "updateSystemSettings": actions.update_system_settings,
    }

    registry = ActionRegistry()
    for descriptor in ADMIN_OPERATIONS:
        registry.register(descriptor, handlers.pop(descriptor.name))

    if handlers:
        raise ValueError(f"Handlers without a catalog entry: {sorted(handlers)}")

    logger.info(f"Action registry initialized with {len(registry.list_action_names())} operations")
    return registry
