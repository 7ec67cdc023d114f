"""
AI usage router - daily quota checks and interaction logging for the student assistant.

Endpoints:
- GET  /ai/usage/{user_id}          Today's used / limit / remaining
- POST /ai/usage/{user_id}/consume  Count one query (403 if AI disabled, 429 at the limit)
- POST /ai/interactions             Store one finished exchange
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from tutor_admin.core.exceptions import ActionError
from tutor_admin.deps import get_usage_service
from tutor_admin.routers.admin import to_http_error
from tutor_admin.schemas.dispatch import InteractionCreate
from tutor_admin.services.usage_service import UsageService

router = APIRouter(prefix="/ai", tags=["ai-usage"])


@router.get("/usage/{user_id}")
async def read_usage(
    user_id: str,
    service: UsageService = Depends(get_usage_service),
) -> Dict[str, Any]:
    try:
        usage = await service.get_status(user_id)
    except ActionError as e:
        raise to_http_error(e)
    return usage.to_dict()


@router.post("/usage/{user_id}/consume")
async def consume_usage(
    user_id: str,
    service: UsageService = Depends(get_usage_service),
) -> Dict[str, Any]:
    try:
        usage = await service.consume(user_id)
    except ActionError as e:
        raise to_http_error(e)
    return usage.to_dict()


@router.post("/interactions", status_code=status.HTTP_201_CREATED)
async def create_interaction(
    request: InteractionCreate,
    service: UsageService = Depends(get_usage_service),
) -> Dict[str, Any]:
    try:
        interaction = await service.record_interaction(
            user_id=request.user_id,
            user_name=request.user_name,
            type=request.type,
            query=request.query,
            response=request.response,
        )
    except ActionError as e:
        raise to_http_error(e)
    return interaction.model_dump(by_alias=True)
