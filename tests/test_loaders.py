import asyncio
from datetime import date
from types import SimpleNamespace

import pytest

from reitql.errors import InconsistentKeyState
from reitql.loaders import BuildingCorporationKey, RequestLoaders, align, group_rows
from reitql.sql import SQLStorage


class CountingStorage(SQLStorage):
    """SQLStorage that records every keyed fetch it performs."""

    def __init__(self, session):
        super().__init__(session)
        self.calls: list[tuple] = []

    async def fetch_by_keys(self, model, key_column, keys, order_by=()):
        self.calls.append((model.__tablename__, key_column, tuple(keys)))
        return await super().fetch_by_keys(model, key_column, keys, order_by)

    async def fetch_where(self, model, clause=None, order_by=(), limit=None, offset=None):
        self.calls.append((model.__tablename__, 'where', None))
        return await super().fetch_where(model, clause, order_by, limit, offset)

    def tables(self) -> list[str]:
        return [call[0] for call in self.calls]


def test_align_fills_missing_keys():
    found = {"a": 1}
    assert align(["a", "b", "a"], found, many=False) == [1, None, 1]
    assert align(["x"], {"y": [1]}, many=True) == [[]]


def test_group_rows_keeps_fetch_order():
    rows = [SimpleNamespace(k=1, v="a"), SimpleNamespace(k=2, v="b"), SimpleNamespace(k=1, v="c")]
    grouped = group_rows(rows, lambda r: r.k)
    assert [r.v for r in grouped[1]] == ["a", "c"]


@pytest.mark.asyncio
async def test_same_key_twice_is_fetched_once(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    first, second, other = await asyncio.gather(
        loaders.buildings.load("b1"),
        loaders.buildings.load("b1"),
        loaders.buildings.load("b2"),
    )
    assert first is second
    assert other.id == "b2"
    assert storage.calls == [("j_reit_buildings", "id", ("b1", "b2"))]


@pytest.mark.asyncio
async def test_every_key_is_answered(db_session, populated_db):
    loaders = RequestLoaders(SQLStorage(db_session))
    buildings = await loaders.buildings.load_many(["b3", "missing", "b1"])
    assert [b.id if b else None for b in buildings] == ["b3", None, "b1"]

    histories = await loaders.cap_rate_histories.load_many(["dh-2", "dh-unknown"])
    assert [len(h) for h in histories] == [1, 0]


@pytest.mark.asyncio
async def test_history_lists_are_ascending(db_session, populated_db):
    loaders = RequestLoaders(SQLStorage(db_session))
    cap_rates = await loaders.cap_rate_histories.load("dh-1")
    assert [h.closing_date for h in cap_rates] == [date(2020, 1, 1), date(2021, 6, 30), date(2023, 1, 1)]

    appraisals = await loaders.appraisal_histories.load("dh-1")
    assert [h.appraisal_date for h in appraisals] == [date(2020, 1, 1), date(2023, 1, 1)]

    financials = await loaders.financials.load("dh-1")
    assert [f.fiscal_period_end_date for f in financials] == [
        date(2022, 6, 30), date(2022, 12, 31), date(2023, 6, 30),
    ]

    releases = await loaders.press_releases.load("dh-1")
    assert [r.release_date for r in releases] == [date(2020, 3, 15), date(2023, 5, 20)]


@pytest.mark.asyncio
async def test_transactions_per_holding(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    held_a, held_b, none = await loaders.transactions_by_building_and_corporation.load_many([
        BuildingCorporationKey("b1", "corp-a"),
        BuildingCorporationKey("b1", "corp-b"),
        BuildingCorporationKey("b2", "corp-a"),
    ])
    assert [t.id for t in held_a] == ["t1", "t2"]
    assert [t.id for t in held_b] == ["t7"]
    assert none == []
    assert storage.tables() == ["j_reit_transactions"]

    by_building = await loaders.transactions_by_building.load("b1")
    assert [t.id for t in by_building] == ["t1", "t7", "t2"]


@pytest.mark.asyncio
async def test_buildings_per_corporation_reuses_building_loader(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    held = await loaders.buildings_per_corporation.load_many([
        BuildingCorporationKey("b1", "corp-b"),
        BuildingCorporationKey("b1", "corp-a"),
        BuildingCorporationKey("b2", "corp-a"),
    ])
    assert held[0].building.id == "b1" and held[0].corporation_id == "corp-b"
    assert held[1].building is held[0].building
    assert held[2] is None
    assert storage.tables() == ["j_reit_transactions", "j_reit_buildings"]

    # Already resolved through the primary loader
    await loaders.buildings.load("b1")
    assert storage.tables() == ["j_reit_transactions", "j_reit_buildings"]


@pytest.mark.asyncio
async def test_buildings_by_office_building_id(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    found, retail, unknown = await loaders.buildings_by_office_building_id.load_many([5001, 5002, 9999])
    assert found.id == "b1"
    # b4 carries an office building id but is not an office asset
    assert retail is None
    assert unknown is None
    assert storage.tables() == ["j_reit_buildings", "j_reit_buildings"]


@pytest.mark.asyncio
async def test_data_hub_ids_in_one_query(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    ids = await loaders.data_hub_building_ids.load_many([
        BuildingCorporationKey("b1", "corp-a"),
        BuildingCorporationKey("b1", "corp-b"),
        BuildingCorporationKey("b3", "corp-b"),
    ])
    assert ids == ["dh-1", None, "dh-3"]
    assert storage.calls == [("j_reit_data_hub_id_mappings", "where", None)]


@pytest.mark.asyncio
async def test_keys_after_dispatch_wait_for_next_round(db_session, populated_db):
    storage = CountingStorage(db_session)
    loaders = RequestLoaders(storage)
    await loaders.corporations.load("corp-a")
    await asyncio.gather(loaders.corporations.load("corp-a"), loaders.corporations.load("corp-b"))
    assert storage.calls == [
        ("j_reit_corporations", "id", ("corp-a",)),
        ("j_reit_corporations", "id", ("corp-b",)),
    ]


@pytest.mark.asyncio
async def test_no_cache_across_requests(db_session, populated_db):
    storage = CountingStorage(db_session)
    await RequestLoaders(storage).appraisals.load("ap1")
    await RequestLoaders(storage).appraisals.load("ap1")
    assert storage.tables() == ["j_reit_appraisals", "j_reit_appraisals"]


class _BrokenOfficeStorage:
    """Returns an office row whose office_building_id vanished between the two lookups."""

    def __init__(self):
        self.row = SimpleNamespace(id="bx", office_building_id=None, is_office=1)

    async def fetch_where(self, model, clause=None, order_by=(), limit=None, offset=None):
        return [SimpleNamespace(id="bx")]

    async def fetch_by_keys(self, model, key_column, keys, order_by=()):
        return [self.row]


@pytest.mark.asyncio
async def test_missing_derived_key_field_fails_the_batch():
    loaders = RequestLoaders(_BrokenOfficeStorage())
    results = await asyncio.gather(
        loaders.buildings_by_office_building_id.load(1),
        loaders.buildings_by_office_building_id.load(2),
        return_exceptions=True,
    )
    assert all(isinstance(r, InconsistentKeyState) for r in results)
    assert results[0].loader == "buildings_by_office_building_id"
