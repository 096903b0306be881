"""Idempotent persistence for interest records and their pins."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideagraph.crawler.base import Annotation, Edge, Engagement, InterestRecord, PinRecord

from .engine import get_session_factory
from .models import InterestHistoryRow, InterestPinRow, InterestRow, PinRow

logger = logging.getLogger(__name__)


class UpsertResult(BaseModel):
    interest_id: str
    is_new: bool
    history_written: bool


class HistoryEntry(BaseModel):
    name: str
    search_volume: int
    related_count: int
    pivot_count: int
    recorded_at: datetime


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InterestRepository:
    """Reads and writes interests, pins and search volume history.

    Each public method runs in its own transaction. Pass a session factory
    to use a database other than the configured one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory or get_session_factory()

    # ──────────────────────────────────────────────
    # Writes
    # ──────────────────────────────────────────────

    async def upsert_interest(self, record: InterestRecord) -> UpsertResult:
        """Insert or update ``record``.

        A history row is written when the interest is new or its search
        volume differs from the stored value, so re-saving an unchanged
        record is a no-op apart from ``last_scrape``.
        """
        async with self._session_factory.begin() as session:
            row = await session.get(InterestRow, record.id)
            is_new = row is None
            volume_changed = not is_new and row.search_volume != record.search_volume

            if is_new:
                row = InterestRow(id=record.id)
                session.add(row)

            row.name = record.name
            row.url = record.url
            row.language = record.language_hint
            row.search_volume = record.search_volume
            row.breadcrumbs = list(record.breadcrumbs)
            row.related_edges = [e.model_dump() for e in record.related_edges]
            row.pivot_edges = [e.model_dump() for e in record.pivot_edges]
            row.top_annotations = [a.model_dump() for a in record.top_annotations]
            row.last_update = record.last_update
            row.last_scrape = record.last_scrape

            history_written = is_new or volume_changed
            if history_written:
                session.add(
                    InterestHistoryRow(
                        interest_id=record.id,
                        name=record.name,
                        search_volume=record.search_volume,
                        related_count=len(record.related_edges),
                        pivot_count=len(record.pivot_edges),
                        recorded_at=record.last_scrape,
                    )
                )

        if is_new:
            logger.info("Saved new interest %s (%s)", record.id, record.name)
        elif volume_changed:
            logger.info("Interest %s search volume changed to %d", record.id, record.search_volume)
        return UpsertResult(interest_id=record.id, is_new=is_new, history_written=history_written)

    async def upsert_pins(self, interest_id: str, pins: list[PinRecord]) -> int:
        """Upsert ``pins`` and replace the interest's pin list with them.

        Pins tagged with the name of another stored interest are linked to
        that interest as well. Runs as one transaction: either every pin and
        association is stored or none is. Returns the number of pins stored
        for ``interest_id``.
        """
        unique: dict[str, PinRecord] = {}
        for pin in pins:
            unique.setdefault(pin.id, pin)

        async with self._session_factory.begin() as session:
            for pin in unique.values():
                row = await session.get(PinRow, pin.id)
                if row is None:
                    row = PinRow(id=pin.id)
                    session.add(row)
                row.title = pin.title
                row.description = pin.description
                row.image_url = pin.image_url
                row.thumbnail_url = pin.thumbnail_url
                row.link = pin.link
                row.article_url = pin.article_url
                row.repin_count = pin.engagement.repin_count
                row.save_count = pin.engagement.save_count
                row.comment_count = pin.engagement.comment_count
                row.pin_created_at = pin.created_at
                row.tags = list(pin.tags)
                row.source_domain = pin.source_domain
                row.board_name = pin.board_name
                row.last_scrape = datetime.now(timezone.utc)

            await session.execute(delete(InterestPinRow).where(InterestPinRow.interest_id == interest_id))
            for position, pin_id in enumerate(unique):
                session.add(InterestPinRow(interest_id=interest_id, pin_id=pin_id, position=position))

            linked = await self._link_tagged_interests(session, interest_id, list(unique.values()))

        logger.debug("Stored %d pins for interest %s, %d tag links", len(unique), interest_id, linked)
        return len(unique)

    async def _link_tagged_interests(self, session: AsyncSession, interest_id: str, pins: list[PinRecord]) -> int:
        """Append pins to other stored interests whose name matches one of their tags.

        Matching ignores case. Existing associations of those interests are
        kept; new ones go after their current last position.
        """
        pins_by_tag: dict[str, list[str]] = {}
        for pin in pins:
            for tag in pin.tags:
                pin_ids = pins_by_tag.setdefault(tag.lower(), [])
                if pin.id not in pin_ids:
                    pin_ids.append(pin.id)
        if not pins_by_tag:
            return 0

        result = await session.execute(select(InterestRow.id, InterestRow.name).where(InterestRow.id != interest_id))
        matches = [(row.id, row.name) for row in result if row.name.lower() in pins_by_tag]

        linked = 0
        for other_id, name in matches:
            existing = (
                await session.execute(
                    select(InterestPinRow.pin_id, InterestPinRow.position).where(InterestPinRow.interest_id == other_id)
                )
            ).all()
            known = {row.pin_id for row in existing}
            position = max((row.position for row in existing), default=-1) + 1
            for pin_id in pins_by_tag[name.lower()]:
                if pin_id in known:
                    continue
                session.add(InterestPinRow(interest_id=other_id, pin_id=pin_id, position=position))
                known.add(pin_id)
                position += 1
                linked += 1
        return linked

    # ──────────────────────────────────────────────
    # Reads
    # ──────────────────────────────────────────────

    async def get_interest(self, interest_id: str) -> InterestRecord | None:
        async with self._session_factory() as session:
            row = await session.get(InterestRow, interest_id)
            if row is None:
                return None
            return InterestRecord(
                id=row.id,
                name=row.name,
                url=row.url,
                search_volume=row.search_volume,
                breadcrumbs=list(row.breadcrumbs or []),
                related_edges=[Edge.model_validate(e) for e in row.related_edges or []],
                pivot_edges=[Edge.model_validate(e) for e in row.pivot_edges or []],
                top_annotations=[Annotation.model_validate(a) for a in row.top_annotations or []],
                language_hint=row.language,
                last_update=row.last_update,
                last_scrape=_aware(row.last_scrape),
            )

    async def get_pins(self, interest_id: str) -> list[PinRecord]:
        """Pins shown on the interest page, in page order."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(PinRow)
                .join(InterestPinRow, InterestPinRow.pin_id == PinRow.id)
                .where(InterestPinRow.interest_id == interest_id)
                .order_by(InterestPinRow.position)
            )
            return [
                PinRecord(
                    id=row.id,
                    title=row.title,
                    description=row.description,
                    image_url=row.image_url,
                    thumbnail_url=row.thumbnail_url,
                    link=row.link,
                    article_url=row.article_url,
                    engagement=Engagement(
                        repin_count=row.repin_count,
                        save_count=row.save_count,
                        comment_count=row.comment_count,
                    ),
                    created_at=_aware(row.pin_created_at),
                    tags=list(row.tags or []),
                    source_domain=row.source_domain,
                    board_name=row.board_name,
                )
                for row in result.scalars()
            ]

    async def get_history(self, interest_id: str) -> list[HistoryEntry]:
        """Search volume snapshots, oldest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(InterestHistoryRow)
                .where(InterestHistoryRow.interest_id == interest_id)
                .order_by(InterestHistoryRow.recorded_at, InterestHistoryRow.id)
            )
            return [
                HistoryEntry(
                    name=row.name,
                    search_volume=row.search_volume,
                    related_count=row.related_count,
                    pivot_count=row.pivot_count,
                    recorded_at=_aware(row.recorded_at),
                )
                for row in result.scalars()
            ]
