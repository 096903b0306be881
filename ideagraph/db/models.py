"""SQLAlchemy ORM models for scraped interests and pins."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests and local runs)
JsonType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class InterestRow(Base):
    """Latest known state of one interest page."""

    __tablename__ = "interests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str | None] = mapped_column(String(8), nullable=True)
    search_volume: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    breadcrumbs: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    related_edges: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    pivot_edges: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    top_annotations: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    last_update: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_scrape: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    history: Mapped[list["InterestHistoryRow"]] = relationship(
        back_populates="interest", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_interests_last_scrape", "last_scrape"),)


class InterestHistoryRow(Base):
    """Search volume snapshot, written when an interest is new or its volume moved."""

    __tablename__ = "interest_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    interest_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("interests.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    search_volume: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    related_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pivot_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    interest: Mapped["InterestRow"] = relationship(back_populates="history")

    __table_args__ = (Index("ix_interest_history_interest_id", "interest_id", "recorded_at"),)


class PinRow(Base):
    __tablename__ = "pins"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)
    article_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    repin_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    save_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pin_created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    tags: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    source_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    board_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_scrape: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class InterestPinRow(Base):
    """Ordered association between an interest page and the pins it showed."""

    __tablename__ = "interest_pins"

    interest_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("interests.id", ondelete="CASCADE"), primary_key=True
    )
    pin_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("pins.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (Index("ix_interest_pins_position", "interest_id", "position"),)
