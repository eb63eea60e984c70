"""
Cash report tests.

Verifies:
- A report snapshots totals at generation time
- Later transactions do not change an existing report
- Date-ranged reports only count transactions inside the range
- Deleted reports disappear from reads
"""

from datetime import date

import pytest

from app.services import ledger_service, report_service
from app.validation import NotFoundError, ValidationError


@pytest.fixture(scope='function')
def period(db_session):
    period = ledger_service.create_period("FY2026", opening_balance="1000")
    for on, kind, amount in (
        (date(2026, 1, 10), "inflow", "500"),
        (date(2026, 2, 10), "outflow", "200"),
        (date(2026, 3, 10), "inflow", "50"),
    ):
        ledger_service.record_transaction(period.id, kind, amount, on, "seed")
    return period


class TestGenerate:

    def test_snapshot(self, period, treasurer):
        report = report_service.generate_report(period.id, "Full year", generated_by=treasurer.id)
        body = report.to_dict()

        assert body["opening_balance"] == "1000.00"
        assert body["total_inflow"] == "550.00"
        assert body["total_outflow"] == "200.00"
        assert body["closing_balance"] == "1350.00"
        assert body["generated_by_name"] == treasurer.name
        assert body["start_date"] is None

    def test_immutable_after_new_transactions(self, period):
        report = report_service.generate_report(period.id, "Before")
        report_id = report.id

        ledger_service.record_transaction(period.id, "outflow", "999", date(2026, 3, 20), "late bill")

        again = report_service.get_report(report_id)
        assert again.to_dict()["closing_balance"] == "1350.00"
        assert ledger_service.get_period(period.id).to_dict()["closing_balance"] == "351.00"

    def test_date_range(self, period):
        report = report_service.generate_report(period.id, "Feb", start_date="2026-02-01", end_date="2026-02-28")
        body = report.to_dict()

        assert body["start_date"] == "2026-02-01"
        assert body["end_date"] == "2026-02-28"
        assert body["total_inflow"] == "0.00"
        assert body["total_outflow"] == "200.00"
        assert body["closing_balance"] == "800.00"

    def test_inverted_range(self, period):
        with pytest.raises(ValidationError):
            report_service.generate_report(period.id, "Bad", start_date="2026-03-01", end_date="2026-01-01")

    def test_blank_label(self, period):
        with pytest.raises(ValidationError):
            report_service.generate_report(period.id, " ")

    def test_unknown_period(self, db_session):
        with pytest.raises(NotFoundError):
            report_service.generate_report(404, "Nope")


class TestReadAndDelete:

    def test_list_by_period(self, period):
        other = ledger_service.create_period("Other")
        report_service.generate_report(period.id, "One")
        report_service.generate_report(period.id, "Two")
        report_service.generate_report(other.id, "Three")

        result = report_service.list_reports(cash_period_id=period.id)
        assert result["total"] == 2
        assert {item["label"] for item in result["items"]} == {"One", "Two"}

    def test_soft_delete(self, period):
        report = report_service.generate_report(period.id, "Temp")
        report_id = report.id
        report_service.delete_report(report_id)

        with pytest.raises(NotFoundError):
            report_service.get_report(report_id)
        assert report_service.list_reports()["total"] == 0
