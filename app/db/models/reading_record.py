from __future__ import annotations

import enum

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class ReadingAmount(str, enum.Enum):
    """How much was read in one sitting."""

    ONE_SENTENCE = "1文だけ"
    ONE_PARAGRAPH = "1段落"
    ONE_CHAPTER = "1章"
    WHOLE_BOOK = "1冊・全文"


_AMOUNT_VALUES = ", ".join(f"'{amount.value}'" for amount in ReadingAmount)


class ReadingRecord(Base, TimestampMixin):
    __tablename__ = "reading_records"
    __table_args__ = (
        CheckConstraint(f"reading_amount IN ({_AMOUNT_VALUES})", name="reading_amount_valid"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # Anonymous posts have no owner.
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    theme_id: Mapped[int | None] = mapped_column(
        ForeignKey("writing_themes.id", ondelete="SET NULL"), index=True
    )

    title: Mapped[str] = mapped_column(String(500), index=True)
    link: Mapped[str | None] = mapped_column(String(2048))
    reading_amount: Mapped[str] = mapped_column(String(20))
    learning: Mapped[str] = mapped_column(Text)
    action: Mapped[str] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    is_not_book: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    custom_link: Mapped[str | None] = mapped_column(String(2048))
    contains_spoiler: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )

    user = relationship("User", back_populates="reading_records")
    theme = relationship("WritingTheme", back_populates="reading_records")
    likes = relationship("Like", back_populates="reading_record", passive_deletes=True)
