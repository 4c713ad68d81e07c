"""Tests for the data export."""

import json
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from shoppinglist import database
from shoppinglist.transfer import ENTITY_KEYS, EXPORT_VERSION, export_all_data
from shoppinglist.transfer import export as export_module
from shoppinglist.transfer.export import compute_plan_date_range, to_json_value


class TestExportAllData:
    """Tests for building the export document."""

    def test_metadata_totals(self, seeded_session):
        """Test plan, list and item totals, counting pantry items as items."""
        export = export_all_data(seeded_session)

        assert export.version == EXPORT_VERSION
        assert export.metadata.total_plans == 2
        assert export.metadata.total_lists == 1
        assert export.metadata.total_items == 6

    def test_plan_date_range(self, seeded_session):
        """Test that the date range spans the plan weeks."""
        export = export_all_data(seeded_session)

        assert export.metadata.plan_date_range.earliest == "2026-02-01"
        assert export.metadata.plan_date_range.latest == "2026-02-08"

    def test_plans_newest_first(self, seeded_session):
        """Test that plans are ordered by week, newest first."""
        export = export_all_data(seeded_session)
        weeks = [plan["week_start_date"] for plan in export.data.weekly_meal_plans]
        assert weeks == ["2026-02-08", "2026-02-01"]

    def test_meals_ordered_by_plan_and_day(self, seeded_session):
        """Test that meals come out grouped by plan and sorted by day."""
        export = export_all_data(seeded_session)
        keys = [(meal["plan_id"], meal["day_of_week"]) for meal in export.data.meals]
        assert keys == sorted(keys)

    def test_document_is_json_serializable(self, seeded_session):
        """Test that the rendered document survives json.dumps."""
        document = export_all_data(seeded_session).to_document()
        decoded = json.loads(json.dumps(document))

        assert set(decoded) == {"version", "exportedAt", "data", "metadata"}
        assert list(decoded["data"]) == list(ENTITY_KEYS)
        assert decoded["metadata"]["planDateRange"] == {
            "earliest": "2026-02-01",
            "latest": "2026-02-08",
        }
        assert decoded["data"]["pantryItems"][0]["estimated_price"] == 0.0

    def test_empty_database(self, db_session):
        """Test that an empty database exports zero totals and no date range."""
        export = export_all_data(db_session)
        document = export.to_document()

        assert document["metadata"] == {"totalPlans": 0, "totalLists": 0, "totalItems": 0}
        assert "planDateRange" not in document["metadata"]
        assert all(document["data"][key] == [] for key in ENTITY_KEYS)

    def test_repeated_exports_identical(self, seeded_session):
        """Test that exporting unchanged data twice gives the same data."""
        first = export_all_data(seeded_session).to_document()
        second = export_all_data(seeded_session).to_document()
        assert first["data"] == second["data"]
        assert first["metadata"] == second["metadata"]

    def test_failure_propagates(self, seeded_session, monkeypatch):
        """Test that a failing read raises instead of returning a partial export."""
        calls = []
        original = export_module._read_rows

        def failing_read(session, model, ordering):
            calls.append(model)
            if len(calls) == 3:
                raise OperationalError("SELECT", {}, Exception("connection reset"))
            return original(session, model, ordering)

        monkeypatch.setattr(export_module, "_read_rows", failing_read)

        with pytest.raises(OperationalError):
            export_all_data(seeded_session)

    def test_own_session_closed_on_failure(self, monkeypatch):
        """Test that a session opened for the export is closed even on failure."""
        session = MagicMock()
        session.in_transaction.return_value = False
        monkeypatch.setattr(database, "SyncSessionLocal", lambda: session)
        monkeypatch.setattr(
            export_module,
            "_read_rows",
            MagicMock(side_effect=OperationalError("SELECT", {}, Exception("down"))),
        )

        with pytest.raises(OperationalError):
            export_all_data()

        session.begin.assert_called_once()
        session.close.assert_called_once()


class TestComputePlanDateRange:
    """Tests for the plan date range."""

    def test_min_and_max(self):
        """Test that earliest and latest are found regardless of order."""
        plans = [
            {"week_start_date": "2026-03-01"},
            {"week_start_date": "2026-01-04"},
            {"week_start_date": "2026-02-01"},
        ]
        date_range = compute_plan_date_range(plans)
        assert (date_range.earliest, date_range.latest) == ("2026-01-04", "2026-03-01")

    def test_invalid_dates_ignored(self):
        """Test that missing or unreadable dates are skipped."""
        plans = [{"week_start_date": "soon"}, {}, {"week_start_date": "2026-02-08"}]
        date_range = compute_plan_date_range(plans)
        assert (date_range.earliest, date_range.latest) == ("2026-02-08", "2026-02-08")

    def test_no_plans(self):
        """Test that no plans means no range."""
        assert compute_plan_date_range([]) is None


class TestToJsonValue:
    """Tests for column value conversion."""

    def test_conversions(self):
        """Test dates, datetimes and decimals."""
        assert to_json_value(date(2026, 2, 1)) == "2026-02-01"
        assert to_json_value(datetime(2026, 2, 1, 8, 30)) == "2026-02-01T08:30:00"
        assert to_json_value(Decimal("3.50")) == 3.5
        assert to_json_value("text") == "text"
        assert to_json_value(None) is None
