"""Tests for interest persistence against a throwaway SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from ideagraph.crawler import Annotation, Edge, Engagement, PinRecord
from ideagraph.db import InterestRepository, build_engine, create_tables

from .factories import make_record


@pytest_asyncio.fixture
async def repository(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ideagraph.db'}")
    await create_tables(engine)
    yield InterestRepository(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


def pin(pin_id: str, **kwargs) -> PinRecord:
    kwargs.setdefault("title", f"Pin {pin_id}")
    return PinRecord(id=pin_id, **kwargs)


class TestInterests:
    @pytest.mark.asyncio
    async def test_new_interest_writes_history(self, repository):
        result = await repository.upsert_interest(make_record("1", ["2"]))

        assert result.is_new
        assert result.history_written
        history = await repository.get_history("1")
        assert [h.search_volume for h in history] == [10]
        assert history[0].pivot_count == 1

    @pytest.mark.asyncio
    async def test_resave_is_idempotent(self, repository):
        record = make_record("1", ["2"])
        await repository.upsert_interest(record)

        result = await repository.upsert_interest(record)

        assert not result.is_new
        assert not result.history_written
        assert len(await repository.get_history("1")) == 1

    @pytest.mark.asyncio
    async def test_volume_change_adds_history(self, repository):
        record = make_record("1")
        await repository.upsert_interest(record)

        changed = record.model_copy(
            update={"search_volume": 999, "last_scrape": record.last_scrape + timedelta(days=1)}
        )
        await repository.upsert_interest(changed)

        assert [h.search_volume for h in await repository.get_history("1")] == [10, 999]
        assert (await repository.get_interest("1")).search_volume == 999

    @pytest.mark.asyncio
    async def test_round_trip(self, repository):
        record = make_record("1", ["2", "3"]).model_copy(
            update={
                "breadcrumbs": ["Home", "Kitchen"],
                "related_edges": [Edge(name="Pantry", url="https://www.pinterest.com/ideas/pantry/", id="55")],
                "top_annotations": [
                    Annotation(tag="kitchen", occurrence_count=2, representative_url="https://www.pinterest.com/ideas/kitchen/9183/")
                ],
                "last_update": "2024-01-02T03:04:05",
            }
        )
        await repository.upsert_interest(record)

        stored = await repository.get_interest("1")

        assert stored.model_dump(exclude={"last_scrape"}) == record.model_dump(exclude={"last_scrape"})
        assert stored.last_scrape.tzinfo is not None
        assert abs(stored.last_scrape - record.last_scrape) < timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_missing_interest(self, repository):
        assert await repository.get_interest("404") is None
        assert await repository.get_history("404") == []


class TestPins:
    @pytest.mark.asyncio
    async def test_pins_stored_in_page_order(self, repository):
        await repository.upsert_interest(make_record("1"))
        created = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

        count = await repository.upsert_pins(
            "1",
            [
                pin("b", engagement=Engagement(save_count=5), created_at=created, tags=["kitchen"]),
                pin("a"),
                pin("b"),
            ],
        )

        pins = await repository.get_pins("1")
        assert count == 2
        assert [p.id for p in pins] == ["b", "a"]
        assert pins[0].engagement.save_count == 5
        assert pins[0].created_at == created
        assert pins[0].tags == ["kitchen"]

    @pytest.mark.asyncio
    async def test_associations_replaced(self, repository):
        await repository.upsert_interest(make_record("1"))
        await repository.upsert_pins("1", [pin("a"), pin("b")])

        await repository.upsert_pins("1", [pin("c"), pin("a", title="Renamed")])

        pins = await repository.get_pins("1")
        assert [p.id for p in pins] == ["c", "a"]
        assert pins[1].title == "Renamed"

    @pytest.mark.asyncio
    async def test_pins_shared_between_interests(self, repository):
        await repository.upsert_interest(make_record("1"))
        await repository.upsert_interest(make_record("2"))

        await repository.upsert_pins("1", [pin("a")])
        await repository.upsert_pins("2", [pin("a"), pin("b")])

        assert [p.id for p in await repository.get_pins("1")] == ["a"]
        assert [p.id for p in await repository.get_pins("2")] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_tagged_pins_linked_to_matching_interests(self, repository):
        await repository.upsert_interest(make_record("1", name="Kitchen"))
        await repository.upsert_interest(make_record("2", name="Kitchen"))
        await repository.upsert_interest(make_record("3", name="Pantry"))
        await repository.upsert_pins("2", [pin("z")])

        await repository.upsert_pins("1", [pin("a", tags=["KITCHEN"]), pin("b"), pin("c", tags=["kitchen", "tile"])])
        await repository.upsert_pins("1", [pin("a", tags=["kitchen"])])

        assert [p.id for p in await repository.get_pins("1")] == ["a"]
        assert [p.id for p in await repository.get_pins("2")] == ["z", "a", "c"]
        assert await repository.get_pins("3") == []
