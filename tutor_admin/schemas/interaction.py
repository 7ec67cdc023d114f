"""
AI interaction log schema - one entry per student/assistant exchange.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AiInteraction(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    user_id: str
    user_name: Optional[str] = None
    type: str = "STUDENT_CHAT"
    query: str
    response: str
    # ISO timestamp; getRecentLogs orders on this field
    timestamp: str
