from __future__ import annotations

import enum

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class DraftMode(str, enum.Enum):
    """Style of the generated draft."""

    FACT = "fact"
    ESSAY = "essay"


class PromptTemplate(Base, TimestampMixin):
    """A user's override of the built-in draft prompt for one mode."""

    __tablename__ = "prompt_templates"
    __table_args__ = (UniqueConstraint("user_id", "mode"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    mode: Mapped[str] = mapped_column(String(20))
    template_text: Mapped[str] = mapped_column(Text)
