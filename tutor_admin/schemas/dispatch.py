"""
Dispatch API schemas - request and response bodies for the /admin and /ai routers.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class DispatchRequest(BaseModel):
    """
    Execute one catalog operation.

    Example:
    ```json
    {"name": "grantSubscription", "arguments": {"userId": "u-1", "plan": "WEEKLY", "level": "BASIC"}}
    ```
    """
    name: str = Field(description="Operation name, e.g. banUser")
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolCallRequest(BaseModel):
    """
    A tool call exactly as a chat-completion backend emits it: the arguments
    are the JSON text of an object.
    """
    name: str
    arguments: str = Field(default="{}", description="JSON-encoded arguments object")


class DispatchResponse(BaseModel):
    operation: str
    # Confirmation string for write operations, list of records for listings
    result: Any


class InteractionCreate(BaseModel):
    user_id: str
    user_name: Optional[str] = None
    type: str = "STUDENT_CHAT"
    query: str
    response: str
