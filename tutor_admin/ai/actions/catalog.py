"""
Schema Catalog - the fixed list of operations the admin agent may call.

Each OperationDescriptor declares a name, a human description and a typed
parameter list. The catalog serves two purposes:

1. Advertisement: to_tool_schema() renders a descriptor in the
   chat-completion "function tool" format handed to the LLM.
2. Validation: validate() checks an incoming argument mapping before any
   handler runs (missing required parameter, wrong JSON type, value outside
   an enum, number below its minimum).

Usage:
======
```python
from tutor_admin.ai.actions.catalog import ADMIN_OPERATIONS

tools = [op.to_tool_schema() for op in ADMIN_OPERATIONS]

op = ADMIN_OPERATIONS[0]
is_valid, error = op.validate({"userId": "u-1"})
```
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set


# ---------------------------------------------------------------------------
# ENUMERATED VALUES
# ---------------------------------------------------------------------------

class SubscriptionPlan(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    LIFETIME = "LIFETIME"


class SubscriptionLevel(str, Enum):
    BASIC = "BASIC"
    ULTRA = "ULTRA"


class UserFilter(str, Enum):
    ALL = "ALL"
    PREMIUM = "PREMIUM"
    FREE = "FREE"
    INACTIVE = "INACTIVE"


class BroadcastType(str, Enum):
    TEXT = "TEXT"
    GIFT = "GIFT"


class ActionCategory(str, Enum):
    """Categories of operations for organization and listing."""
    USERS = "users"                   # Account lifecycle and moderation
    SUBSCRIPTIONS = "subscriptions"   # Premium grants
    MESSAGING = "messaging"           # Banner and inbox messages
    CONTENT = "content"               # Weekly tests
    SETTINGS = "settings"             # Global system settings
    REPORTS = "reports"               # Read-only listings


# ---------------------------------------------------------------------------
# PARAMETER SPEC
# ---------------------------------------------------------------------------

# JSON schema type -> Python types accepted for it
_JSON_TYPES = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


@dataclass(frozen=True)
class ParameterSpec:
    """
    One parameter of an operation.

    Attributes:
        name: Wire name (camelCase, as the agent sends it)
        type: JSON schema type (string, number, integer, boolean, object, array)
        description: Shown to the agent
        required: Whether the parameter must be present
        enum: Admissible values for enum-typed parameters
        minimum: Lower bound for numeric parameters
    """
    name: str
    type: str
    description: str = ""
    required: bool = False
    enum: Optional[Sequence[str]] = None
    minimum: Optional[float] = None

    def check(self, value: Any) -> Optional[str]:
        """Return an error message if value does not fit this parameter, else None."""
        expected = _JSON_TYPES[self.type]

        # bool is an int subclass; only "boolean" accepts it
        if isinstance(value, bool) and self.type != "boolean":
            return f"Parameter '{self.name}' must be of type {self.type}, got boolean"

        if self.type == "integer" and isinstance(value, float) and value.is_integer():
            value = int(value)

        if not isinstance(value, expected):
            return (
                f"Parameter '{self.name}' must be of type {self.type}, "
                f"got {type(value).__name__}"
            )

        if self.enum is not None and value not in self.enum:
            return (
                f"Parameter '{self.name}' must be one of "
                f"{', '.join(self.enum)}; got '{value}'"
            )

        if self.minimum is not None and value < self.minimum:
            return f"Parameter '{self.name}' must be >= {self.minimum:g}, got {value}"

        return None

    def to_json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        return schema


# ---------------------------------------------------------------------------
# OPERATION DESCRIPTOR
# ---------------------------------------------------------------------------

@dataclass
class OperationDescriptor:
    """
    Definition of an operation the admin agent can call.

    Attributes:
        name: Unique operation identifier (e.g., "grantSubscription")
        category: Operation category for listing
        description: Human-readable description advertised to the agent
        parameters: Ordered parameter specs
        examples: Example requests that map to this operation
    """
    name: str
    category: ActionCategory
    description: str
    parameters: List[ParameterSpec] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)

    @property
    def required_params(self) -> Set[str]:
        return {p.name for p in self.parameters if p.required}

    @property
    def optional_params(self) -> Set[str]:
        return {p.name for p in self.parameters if not p.required}

    def get_parameter(self, name: str) -> Optional[ParameterSpec]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def validate(self, arguments: Dict[str, Any]) -> tuple[bool, Optional[str]]:
        """
        Validate arguments for this operation.

        A parameter whose value is None counts as absent.

        Args:
            arguments: Argument mapping as sent by the caller

        Returns:
            (is_valid, error_message) tuple
        """
        for param in self.parameters:
            value = arguments.get(param.name)
            if value is None:
                if param.required:
                    return False, f"Missing required parameter: {param.name}"
                continue

            error = param.check(value)
            if error:
                return False, error

        return True, None

    def tool_description(self) -> str:
        """Description as advertised to the agent, with example requests appended."""
        if not self.examples:
            return self.description
        quoted = "; ".join(f'"{example}"' for example in self.examples)
        return f"{self.description} Example requests: {quoted}"

    def to_tool_schema(self) -> Dict[str, Any]:
        """Render as a chat-completion function tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.tool_description(),
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.to_json_schema() for p in self.parameters},
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }


# ---------------------------------------------------------------------------
# THE CATALOG
# ---------------------------------------------------------------------------

def _user_id(description: str = "The ID of the user") -> ParameterSpec:
    return ParameterSpec("userId", "string", description, required=True)


ADMIN_OPERATIONS: List[OperationDescriptor] = [
    OperationDescriptor(
        name="deleteUser",
        category=ActionCategory.USERS,
        description="Delete a user permanently from the system.",
        parameters=[_user_id("The ID of the user to delete")],
        examples=["Delete user u-42"],
    ),
    OperationDescriptor(
        name="updateUser",
        category=ActionCategory.USERS,
        description="Update user details like credits.",
        parameters=[
            _user_id(),
            ParameterSpec(
                "updates", "object",
                "JSON object of fields to update (e.g., { credits: 500 })",
                required=True,
            ),
        ],
        examples=["Set credits of user u-42 to 500"],
    ),
    OperationDescriptor(
        name="grantSubscription",
        category=ActionCategory.SUBSCRIPTIONS,
        description="Give a premium subscription to a user.",
        parameters=[
            _user_id(),
            ParameterSpec(
                "plan", "string", "Subscription duration",
                required=True, enum=[p.value for p in SubscriptionPlan],
            ),
            ParameterSpec(
                "level", "string", "Subscription level",
                required=True, enum=[lv.value for lv in SubscriptionLevel],
            ),
        ],
        examples=["Give u-42 a monthly ultra subscription"],
    ),
    OperationDescriptor(
        name="banUser",
        category=ActionCategory.USERS,
        description="Lock/Ban a user account.",
        parameters=[
            _user_id(),
            ParameterSpec("reason", "string", "Reason for banning"),
        ],
        examples=["Ban u-42 for spamming"],
    ),
    OperationDescriptor(
        name="unbanUser",
        category=ActionCategory.USERS,
        description="Unlock/Unban a user account.",
        parameters=[_user_id()],
        examples=["Unban u-42"],
    ),
    OperationDescriptor(
        name="broadcastMessage",
        category=ActionCategory.MESSAGING,
        description="Set a global notice/banner text for all users.",
        parameters=[
            ParameterSpec("message", "string", "The message text to display", required=True),
            ParameterSpec(
                "type", "string", "Kind of broadcast",
                enum=[t.value for t in BroadcastType],
            ),
            ParameterSpec("giftValue", "number", "Credits attached to a GIFT broadcast", minimum=0),
        ],
        examples=["Tell everyone the exam schedule is out"],
    ),
    OperationDescriptor(
        name="sendInboxMessage",
        category=ActionCategory.MESSAGING,
        description="Send a personal message to a specific user's inbox.",
        parameters=[
            _user_id(),
            ParameterSpec("text", "string", "The message content", required=True),
        ],
        examples=["Message u-42 that their refund is processed"],
    ),
    OperationDescriptor(
        name="createWeeklyTest",
        category=ActionCategory.CONTENT,
        description="Create a new Weekly Test (structure only).",
        parameters=[
            ParameterSpec("name", "string", "Name of the test", required=True),
            ParameterSpec("subject", "string", "Subject of the test", required=True),
            ParameterSpec("questionCount", "integer", "Total questions", required=True, minimum=1),
        ],
        examples=["Create a 20 question physics test called Week 5"],
    ),
    OperationDescriptor(
        name="scanUsers",
        category=ActionCategory.REPORTS,
        description="List users based on a filter.",
        parameters=[
            ParameterSpec(
                "filter", "string", "Which users to list",
                required=True, enum=[f.value for f in UserFilter],
            ),
        ],
        examples=["Which users have been inactive for a month?"],
    ),
    OperationDescriptor(
        name="getRecentLogs",
        category=ActionCategory.REPORTS,
        description="Fetch the most recent AI interaction logs, newest first.",
        parameters=[
            ParameterSpec("limit", "integer", "Maximum number of entries (default 20)", minimum=1),
        ],
        examples=["Show me the last 10 AI chats"],
    ),
    OperationDescriptor(
        name="updateSystemSettings",
        category=ActionCategory.SETTINGS,
        description="Update global system settings (Theme, AI Limits, Maintenance).",
        parameters=[
            ParameterSpec(
                "updates", "object",
                "JSON object of settings to update (e.g. {themeColor: '#000000', "
                "maintenanceMode: true, aiLimits: {free: 10}})",
                required=True,
            ),
        ],
        examples=["Turn on maintenance mode"],
    ),
]
