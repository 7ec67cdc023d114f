"""
Admin router - exposes the action catalog and dispatch over HTTP.

Endpoints:
- GET  /admin/tools      Tool definitions to hand to the chat-completion backend
- POST /admin/dispatch   Execute one operation with a JSON arguments object
- POST /admin/tool-call  Execute a raw tool call (arguments as JSON text)
- GET  /admin/stats      Per-operation dispatch metrics

Callers are assumed to be authorized already; this router does no auth.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from tutor_admin.ai.actions.dispatcher import Dispatcher
from tutor_admin.core.exceptions import (
    ActionError,
    AiDisabled,
    InvalidArguments,
    NotFound,
    QuotaExceeded,
    StoreError,
    UnknownOperation,
)
from tutor_admin.deps import get_dispatcher
from tutor_admin.schemas.dispatch import DispatchRequest, DispatchResponse, ToolCallRequest

logger = logging.getLogger("tutor_admin.routers.admin")

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# ERROR MAPPING
# ---------------------------------------------------------------------------
# Typed action errors -> HTTP status. The body keeps the error type, the
# operation name and the message so the caller sees the real cause.
_STATUS_BY_ERROR = {
    UnknownOperation: status.HTTP_404_NOT_FOUND,
    InvalidArguments: 422,
    NotFound: status.HTTP_404_NOT_FOUND,
    StoreError: status.HTTP_502_BAD_GATEWAY,
    AiDisabled: status.HTTP_403_FORBIDDEN,
    QuotaExceeded: status.HTTP_429_TOO_MANY_REQUESTS,
}


def to_http_error(error: ActionError) -> HTTPException:
    code = _STATUS_BY_ERROR.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=error.to_dict())


# ---------------------------------------------------------------------------
# GET /admin/tools
# ---------------------------------------------------------------------------
@router.get("/tools")
def list_tools(dispatcher: Dispatcher = Depends(get_dispatcher)) -> List[Dict[str, Any]]:
    """Every catalog operation as a function tool definition, in catalog order."""
    return dispatcher.tool_schemas()


# ---------------------------------------------------------------------------
# POST /admin/dispatch
# ---------------------------------------------------------------------------
@router.post("/dispatch", response_model=DispatchResponse)
async def dispatch_action(
    request: DispatchRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """
    Execute one operation.

    Returns the handler's confirmation string (or listing) as `result`.
    Unknown operations and bad arguments are rejected before any store access.
    """
    try:
        result = await dispatcher.dispatch(request.name, request.arguments)
    except ActionError as e:
        raise to_http_error(e)
    return DispatchResponse(operation=request.name, result=result)


# ---------------------------------------------------------------------------
# POST /admin/tool-call
# ---------------------------------------------------------------------------
@router.post("/tool-call", response_model=DispatchResponse)
async def execute_tool_call(
    request: ToolCallRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Execute a tool call whose arguments are still JSON text."""
    try:
        result = await dispatcher.execute_tool_call(request.name, request.arguments)
    except ActionError as e:
        raise to_http_error(e)
    return DispatchResponse(operation=request.name, result=result)


# ---------------------------------------------------------------------------
# GET /admin/stats
# ---------------------------------------------------------------------------
@router.get("/stats")
def get_stats(dispatcher: Dispatcher = Depends(get_dispatcher)) -> Dict[str, Any]:
    return dispatcher.metrics.get_stats()
