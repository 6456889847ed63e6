from __future__ import annotations

from pydantic import BaseModel, Field


class RecordAssistance(BaseModel):
    """Per-record writing help: organised insights and an optional action plan."""

    learning_insights: str = Field(..., description="Structured take on the learning")
    action_plan: str | None = Field(
        default=None, description="Concrete steps for the action, when one was given"
    )
    is_fallback: bool = Field(default=False, description="True when templated text was used")
