from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class UserSettings(Base, TimestampMixin):
    __tablename__ = "user_settings"
    __table_args__ = (
        CheckConstraint("draft_threshold BETWEEN 1 AND 100", name="draft_threshold_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )
    hide_spoilers: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    draft_threshold: Mapped[int] = mapped_column(Integer, default=5, server_default="5")

    user = relationship("User", back_populates="settings")
