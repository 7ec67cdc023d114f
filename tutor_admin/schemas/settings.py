"""
System settings schemas - the global singleton and the weekly tests it holds.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AiLimits(BaseModel):
    """Daily AI query limits per tier. A missing or zero value falls back to the configured default."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    free: Optional[int] = None
    basic: Optional[int] = None
    ultra: Optional[int] = None


class WeeklyTest(BaseModel):
    """
    A weekly test definition.

    Tests created by the agent carry an empty question list; totalQuestions
    is the requested count, kept as a placeholder until questions are added
    elsewhere.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    is_active: bool = True
    class_level: str = "10"
    questions: List[Dict[str, Any]] = Field(default_factory=list)
    total_questions: int = 0
    passing_score: int = 40
    created_at: str
    duration_minutes: int = 60
    selected_subjects: List[str] = Field(default_factory=list)


class SystemSettings(BaseModel):
    """
    The single global settings record (live path "system_settings").

    Read-modify-write as a whole; concurrent writers race and the last
    write wins.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    # Banner shown to every user
    notice_text: Optional[str] = None

    # AI feature toggles
    is_ai_enabled: bool = True
    ai_limits: Optional[AiLimits] = None
    ai_model: Optional[str] = None

    # Content
    weekly_tests: List[WeeklyTest] = Field(default_factory=list)

    # Theme / operations
    app_name: Optional[str] = None
    theme_color: Optional[str] = None
    maintenance_mode: bool = False
