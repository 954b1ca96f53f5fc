"""
Unit tests for the wine repository with a recording pool stand-in.

SQL text is checked at integration level; here we check parameters,
argument validation and result mapping.
"""

from datetime import datetime, timezone

import pytest
from psycopg import sql
from psycopg.errors import UndefinedFunction

from winequality.core.models import WinePatch, WineRecord
from winequality.warehouse import StoredProcedureMissing, WineRepository, build_update

pytestmark = pytest.mark.unit

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def stored_row(wine_id, quality=5, wine_type="red"):
    return {
        "id": wine_id,
        "wine_type": wine_type,
        "quality": quality,
        "alcohol": 9.4,
        "created_at": NOW,
        "updated_at": NOW,
    }


class RecordingPool:
    """Returns queued results and records every call."""

    def __init__(self, fetch_one=None, fetch_all=None, rowcount=0, error=None):
        self.fetch_one_results = list(fetch_one or [])
        self.fetch_all_results = list(fetch_all or [])
        self.rowcount = rowcount
        self.error = error
        self.calls = []

    async def fetch_one(self, query, params=None):
        self.calls.append(("fetch_one", query, params))
        if self.error:
            raise self.error
        return self.fetch_one_results.pop(0) if self.fetch_one_results else None

    async def fetch_all(self, query, params=None):
        self.calls.append(("fetch_all", query, params))
        return self.fetch_all_results.pop(0) if self.fetch_all_results else []

    async def execute_command(self, command, params=None):
        self.calls.append(("execute_command", command, params))
        return self.rowcount


class TestBuildUpdate:
    """Tests for the partial UPDATE builder"""

    def test_params_follow_set_fields_then_id(self):
        statement, params = build_update(12, WinePatch(quality=7, alcohol=10.5))

        assert isinstance(statement, sql.Composed)
        assert params == [10.5, 7, 12]

    def test_clearing_a_measurement(self):
        _, params = build_update(3, WinePatch(ph=None))
        assert params == [None, 3]

    def test_enum_value_passed_as_text(self):
        _, params = build_update(3, WinePatch(wine_type="white"))
        assert params == ["white", 3]

    def test_empty_patch_rejected(self):
        with pytest.raises(ValueError, match="No fields provided for update."):
            build_update(1, WinePatch())


class TestWineRepository:
    """Tests for WineRepository operations"""

    @pytest.mark.asyncio
    async def test_list_wines_pagination(self):
        pool = RecordingPool(
            fetch_one=[{"total": 250}],
            fetch_all=[[stored_row(101), stored_row(102)]],
        )

        page = await WineRepository(pool).list_wines(page=2, limit=100)

        assert [w.id for w in page.data] == [101, 102]
        assert page.pagination.current_page == 2
        assert page.pagination.total_pages == 3
        assert page.pagination.total_items == 250
        assert pool.calls[1][2] == (100, 100)

    @pytest.mark.asyncio
    async def test_list_wines_defaults(self):
        pool = RecordingPool(fetch_one=[{"total": 0}])

        page = await WineRepository(pool).list_wines()

        assert page.data == []
        assert page.pagination.limit == 100
        assert page.pagination.total_pages == 0
        assert pool.calls[1][2] == (100, 0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    async def test_list_wines_rejects_bad_paging(self, page, limit):
        pool = RecordingPool()

        with pytest.raises(ValueError):
            await WineRepository(pool).list_wines(page=page, limit=limit)

        assert pool.calls == []

    @pytest.mark.asyncio
    async def test_get_wine(self):
        pool = RecordingPool(fetch_one=[stored_row(7, quality=8)])

        wine = await WineRepository(pool).get_wine(7)

        assert wine.id == 7
        assert wine.quality == 8
        assert pool.calls[0][2] == (7,)

    @pytest.mark.asyncio
    async def test_get_missing_wine(self):
        assert await WineRepository(RecordingPool()).get_wine(99) is None

    @pytest.mark.asyncio
    async def test_create_wine(self):
        pool = RecordingPool(fetch_one=[stored_row(1, quality=6, wine_type="white")])
        record = WineRecord(wine_type="white", alcohol=9.4, quality=6)

        wine = await WineRepository(pool).create_wine(record)

        assert wine.id == 1
        assert pool.calls[0][2] == record.as_params()

    @pytest.mark.asyncio
    async def test_update_wine(self):
        pool = RecordingPool(fetch_one=[stored_row(4, quality=9)])

        wine = await WineRepository(pool).update_wine(4, WinePatch(quality=9))

        assert wine.quality == 9
        assert pool.calls[0][2] == [9, 4]

    @pytest.mark.asyncio
    async def test_update_missing_wine(self):
        assert await WineRepository(RecordingPool()).update_wine(4, WinePatch(quality=9)) is None

    @pytest.mark.asyncio
    async def test_update_without_fields(self):
        pool = RecordingPool()

        with pytest.raises(ValueError):
            await WineRepository(pool).update_wine(4, WinePatch())

        assert pool.calls == []

    @pytest.mark.asyncio
    async def test_delete_wine(self):
        assert await WineRepository(RecordingPool(rowcount=1)).delete_wine(4) is True
        assert await WineRepository(RecordingPool(rowcount=0)).delete_wine(4) is False

    @pytest.mark.asyncio
    async def test_average_quality_rounded(self):
        pool = RecordingPool(fetch_one=[{"average_quality": 6.142857}])

        assert await WineRepository(pool).average_quality(12) == 6.14
        assert pool.calls[0][2] == (12,)

    @pytest.mark.asyncio
    async def test_average_quality_no_match(self):
        pool = RecordingPool(fetch_one=[{"average_quality": None}])
        assert await WineRepository(pool).average_quality(99) is None

    @pytest.mark.asyncio
    async def test_average_quality_missing_function(self):
        pool = RecordingPool(error=UndefinedFunction("function calculate_average_quality(real) does not exist"))

        with pytest.raises(StoredProcedureMissing):
            await WineRepository(pool).average_quality()
