from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("reading_record_id", "session_id"),
        UniqueConstraint("reading_record_id", "user_id"),
        CheckConstraint(
            "(session_id IS NULL) <> (user_id IS NULL)", name="exactly_one_liker"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    reading_record_id: Mapped[int] = mapped_column(
        ForeignKey("reading_records.id", ondelete="CASCADE"), index=True
    )
    session_id: Mapped[str | None] = mapped_column(String(128))
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    reading_record = relationship("ReadingRecord", back_populates="likes")
