"""
Cash ledger tests.

Verifies:
- closing_balance follows every insert, update and delete
- Only one period is active at a time
- Balance queries honor inclusive date ranges
- Amount, kind and date validation
"""

from datetime import date
from decimal import Decimal

import pytest

from app.extensions import db
from app.models import CashPeriod
from app.services import ledger_service
from app.validation import ConflictError, NotFoundError, ValidationError


def _txn(period, kind, amount, on=date(2026, 3, 1), description="entry", **kwargs):
    return ledger_service.record_transaction(
        cash_period_id=period.id,
        kind=kind,
        amount=amount,
        date=on,
        description=description,
        **kwargs,
    )


@pytest.fixture(scope='function')
def period(db_session):
    return ledger_service.create_period("2026 Q1", opening_balance="5000000")


class TestClosingBalance:

    def test_insert_then_delete(self, period):
        _txn(period, "inflow", 1000000, description="Sponsorship")
        outflow = _txn(period, "outflow", 250000, description="Venue")

        assert period.closing_balance == Decimal("5750000.00")

        ledger_service.delete_transaction(outflow.id)

        refreshed = ledger_service.get_period(period.id)
        assert refreshed.closing_balance == Decimal("6000000.00")

    def test_update_amount_and_kind(self, period):
        txn = _txn(period, "inflow", "100.50")
        assert ledger_service.get_period(period.id).closing_balance == Decimal("5000100.50")

        ledger_service.update_transaction(txn.id, {"amount": "40"})
        assert ledger_service.get_period(period.id).closing_balance == Decimal("5000040.00")

        ledger_service.update_transaction(txn.id, {"kind": "outflow"})
        assert ledger_service.get_period(period.id).closing_balance == Decimal("4999960.00")

    def test_opening_balance_change_recomputes(self, period):
        _txn(period, "outflow", 1000)
        updated = ledger_service.update_period(period.id, {"opening_balance": "2000"})

        assert updated.opening_balance == Decimal("2000.00")
        assert updated.closing_balance == Decimal("1000.00")

    def test_closing_balance_not_writable(self, period):
        with pytest.raises(ValidationError):
            ledger_service.update_period(period.id, {"closing_balance": "1"})

    def test_balance_matches_stored_closing(self, period):
        _txn(period, "inflow", 300)
        _txn(period, "outflow", 120)

        totals = ledger_service.get_balance(period.id)
        assert totals.opening_balance == Decimal("5000000.00")
        assert totals.total_inflow == Decimal("300.00")
        assert totals.total_outflow == Decimal("120.00")
        assert totals.closing_balance == ledger_service.get_period(period.id).closing_balance
        assert totals.to_dict()["closing_balance"] == "5000180.00"


class TestActivePeriod:

    def test_new_period_takes_over(self, period):
        second = ledger_service.create_period("2026 Q2")

        assert ledger_service.get_active_period().id == second.id
        assert db.session.get(CashPeriod, period.id).is_active is False

    def test_inactive_creation_keeps_current(self, period):
        ledger_service.create_period("Draft", is_active=False)
        assert ledger_service.get_active_period().id == period.id

    def test_set_active(self, period):
        second = ledger_service.create_period("2026 Q2")
        ledger_service.set_active_period(period.id)

        active = db.session.query(CashPeriod).filter(CashPeriod.is_active.is_(True)).all()
        assert [p.id for p in active] == [period.id]
        assert db.session.get(CashPeriod, second.id).is_active is False

    def test_set_active_idempotent(self, period):
        ledger_service.set_active_period(period.id)
        ledger_service.set_active_period(period.id)
        assert ledger_service.get_active_period().id == period.id

    def test_activate_via_update(self, period):
        second = ledger_service.create_period("Draft", is_active=False)
        ledger_service.update_period(second.id, {"is_active": True})

        assert ledger_service.get_active_period().id == second.id
        assert db.session.get(CashPeriod, period.id).is_active is False

    def test_concurrent_activation_conflicts(self, period, monkeypatch):
        second = ledger_service.create_period("Draft", is_active=False)
        # the other writer's active row is invisible to our deactivation
        monkeypatch.setattr(ledger_service, "_deactivate_all", lambda: None)

        with pytest.raises(ConflictError):
            ledger_service.set_active_period(second.id)

        assert ledger_service.get_active_period().id == period.id
        assert db.session.get(CashPeriod, second.id).is_active is False

    def test_deleted_period_not_active(self, period):
        ledger_service.delete_period(period.id)

        assert ledger_service.get_active_period() is None
        with pytest.raises(NotFoundError):
            ledger_service.get_period(period.id)
        with pytest.raises(NotFoundError):
            _txn(period, "inflow", 10)


class TestRanges:

    def test_inclusive_bounds(self, period):
        _txn(period, "inflow", 100, on=date(2026, 1, 1))
        _txn(period, "inflow", 200, on=date(2026, 1, 15))
        _txn(period, "outflow", 50, on=date(2026, 1, 31))
        _txn(period, "outflow", 25, on=date(2026, 2, 1))

        totals = ledger_service.get_balance(period.id, "2026-01-01", "2026-01-31")
        assert totals.total_inflow == Decimal("300.00")
        assert totals.total_outflow == Decimal("50.00")
        assert totals.closing_balance == Decimal("5000250.00")

    def test_start_after_end(self, period):
        with pytest.raises(ValidationError):
            ledger_service.get_balance(period.id, date(2026, 2, 1), date(2026, 1, 1))

    def test_list_totals_cover_filtered_set(self, period):
        for day in range(1, 6):
            _txn(period, "inflow", 10, on=date(2026, 1, day), description=f"dues {day}")
        _txn(period, "outflow", 7, on=date(2026, 1, 3), description="snacks")

        result = ledger_service.list_transactions(cash_period_id=period.id, limit=2)
        assert result["total"] == 6
        assert len(result["items"]) == 2
        assert result["total_inflow"] == "50.00"
        assert result["total_outflow"] == "7.00"

        dues = ledger_service.list_transactions(cash_period_id=period.id, search="dues")
        assert dues["total"] == 5


class TestValidation:

    @pytest.mark.parametrize("amount", [-1, "abc", None, True])
    def test_bad_amount(self, period, amount):
        with pytest.raises(ValidationError):
            _txn(period, "inflow", amount)

    def test_bad_kind(self, period):
        with pytest.raises(ValidationError):
            _txn(period, "refund", 10)

    def test_unhashable_kind(self, period):
        with pytest.raises(ValidationError):
            _txn(period, ["inflow"], 10)

    def test_missing_date(self, period):
        with pytest.raises(ValidationError):
            _txn(period, "inflow", 10, on=None)

    def test_blank_description(self, period):
        with pytest.raises(ValidationError):
            _txn(period, "inflow", 10, description="  ")

    def test_blank_label(self, db_session):
        with pytest.raises(ValidationError):
            ledger_service.create_period("   ")

    def test_failed_write_leaves_balance(self, period):
        _txn(period, "inflow", 10)
        with pytest.raises(ValidationError):
            _txn(period, "outflow", -5)
        assert ledger_service.get_period(period.id).closing_balance == Decimal("5000010.00")
