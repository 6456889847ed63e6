from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class WritingTheme(Base, TimestampMixin):
    __tablename__ = "writing_themes"
    __table_args__ = (UniqueConstraint("user_id", "theme_name"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    theme_name: Mapped[str] = mapped_column(String(100))

    user = relationship("User", back_populates="writing_themes")
    reading_records = relationship("ReadingRecord", back_populates="theme")
