"""
Unit tests for Pydantic models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from winequality.core.models import (
    WINE_COLUMNS,
    LoadResult,
    Pagination,
    StoredWine,
    ValidationResult,
    WinePage,
    WinePatch,
    WineRecord,
    WineType,
)

pytestmark = pytest.mark.unit


class TestWineRecord:
    """Tests for WineRecord model"""

    def test_valid_record(self):
        record = WineRecord(wine_type=WineType.RED, alcohol=9.4, quality=5)

        assert record.wine_type == "red"
        assert record.citric_acid is None
        assert record.quality == 5

    def test_whole_float_quality_accepted(self):
        assert WineRecord(wine_type="white", quality=6.0).quality == 6

    @pytest.mark.parametrize("quality", [-1, 11])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(ValidationError):
            WineRecord(wine_type="red", quality=quality)

    def test_fractional_quality_rejected(self):
        with pytest.raises(ValidationError):
            WineRecord(wine_type="red", quality=6.5)

    def test_quality_required(self):
        with pytest.raises(ValidationError):
            WineRecord(wine_type="red")

    def test_unknown_wine_type(self):
        with pytest.raises(ValidationError):
            WineRecord(wine_type="rose", quality=5)

    def test_as_params_follows_column_order(self):
        record = WineRecord(wine_type="white", fixed_acidity=7.0, ph=3.0, quality=6)

        params = record.as_params()

        assert len(params) == len(WINE_COLUMNS)
        assert params[0] == "white"
        assert params[WINE_COLUMNS.index("fixed_acidity")] == 7.0
        assert params[WINE_COLUMNS.index("ph")] == 3.0
        assert params[-1] == 6

    def test_stored_wine_from_row(self):
        now = datetime.now(timezone.utc)
        row = {"id": 3, "wine_type": "red", "quality": 7, "created_at": now, "updated_at": now}

        wine = StoredWine.model_validate(row)

        assert wine.id == 3
        assert wine.updated_at == now


class TestWinePatch:
    """Tests for WinePatch model"""

    def test_only_set_fields_in_changes(self):
        patch = WinePatch(quality=7, alcohol=10.5)

        assert patch.changes() == {"alcohol": 10.5, "quality": 7}

    def test_changes_follow_declaration_order(self):
        patch = WinePatch.model_validate({"quality": 3, "wine_type": "white", "ph": 3.2})

        assert list(patch.changes()) == ["wine_type", "ph", "quality"]
        assert patch.changes()["wine_type"] == "white"

    def test_measurement_can_be_cleared(self):
        patch = WinePatch(alcohol=None)

        assert patch.changes() == {"alcohol": None}
        assert not patch.is_empty()

    def test_empty_patch(self):
        patch = WinePatch()

        assert patch.is_empty()
        assert patch.changes() == {}

    @pytest.mark.parametrize("field", ["wine_type", "quality"])
    def test_required_columns_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError):
            WinePatch.model_validate({field: None})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            WinePatch.model_validate({"id": 5})

    def test_quality_range_enforced(self):
        with pytest.raises(ValidationError):
            WinePatch(quality=11)


class TestPagination:
    """Tests for pagination metadata"""

    @pytest.mark.parametrize(
        "total,limit,expected_pages",
        [(0, 100, 0), (1, 100, 1), (100, 100, 1), (101, 100, 2), (6497, 20, 325)],
    )
    def test_total_pages_is_ceiling(self, total, limit, expected_pages):
        pagination = Pagination.compute(page=1, limit=limit, total_items=total)

        assert pagination.total_pages == expected_pages
        assert pagination.total_items == total

    @pytest.mark.parametrize("page,limit,offset", [(1, 100, 0), (2, 100, 100), (3, 20, 40)])
    def test_offset(self, page, limit, offset):
        assert Pagination.offset(page, limit) == offset

    def test_page_past_end_is_allowed(self):
        pagination = Pagination.compute(page=9, limit=10, total_items=5)

        assert pagination.current_page == 9
        assert pagination.total_pages == 1

    def test_empty_page(self):
        page = WinePage(pagination=Pagination.compute(1, 100, 0))
        assert page.data == []


class TestValidationResult:
    """Tests for ValidationResult model"""

    def test_passed_with_failures_rejected(self):
        with pytest.raises(ValidationError):
            ValidationResult(record_id="red:2", passed=True, failed_rules=["quality_range"])

    def test_failed_result(self):
        result = ValidationResult(record_id="red:2", passed=False, failed_rules=["quality_range"])
        assert result.failed_rules == ["quality_range"]


class TestLoadResult:
    """Tests for LoadResult model"""

    def test_accepted_total(self):
        result = LoadResult(status="committed", accepted_by_type={"red": 4, "white": 3}, inserted=7)
        assert result.accepted == 7

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            LoadResult(status="failed")
